"""
Processing backend webhook client.

Tells the external processing pipeline that a document was stored:
POST {base}/upload-document with {file_name, file_path, user_id}. Only the
HTTP status is relied upon.

Dependencies: httpx
System role: Processing pipeline notification adapter
"""

import httpx

from docchat.core.exceptions import NotificationError


class ProcessingWebhookClient:
    """Client for the document processing webhook."""

    def __init__(
        self,
        url: str,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            url: Full upload-document webhook URL
            timeout: Request timeout in seconds
            client: Optional shared httpx client (for testing with mocks)
        """
        self.url = url
        self.timeout = timeout
        self._client = client

    async def notify_uploaded(self, file_name: str, file_path: str, user_id: str) -> int:
        """
        Notify the processing backend about a stored document.

        Args:
            file_name: Original display name
            file_path: Object store key
            user_id: Owner identity

        Returns:
            int: HTTP status code of the accepted notification

        Raises:
            NotificationError: On transport failure, timeout or non-2xx status
        """
        payload = {"file_name": file_name, "file_path": file_path, "user_id": user_id}

        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout)
            close_client = True

        try:
            response = await client.post(self.url, json=payload, timeout=self.timeout)
        except httpx.HTTPError as e:
            raise NotificationError(
                f"Processing webhook unreachable: {type(e).__name__}",
                details={"url": self.url},
            ) from e
        finally:
            if close_client:
                await client.aclose()

        if not response.is_success:
            raise NotificationError(
                f"Processing webhook returned {response.status_code} {response.reason_phrase}",
                status_code=response.status_code,
                details={"url": self.url},
            )
        return response.status_code
