"""
Inference backend client.

POST {base}/chat with {query, user_id}; the JSON reply carries the answer in
"response" or, failing that, "message". Anything else is an InferenceError.

Dependencies: httpx
System role: Inference backend adapter
"""

from typing import Any

import httpx

from docchat.core.exceptions import InferenceError

ANSWER_FIELDS = ("response", "message")


def extract_answer(body: Any) -> str | None:
    """
    Pick the answer text out of a decoded response body.

    The first field in ANSWER_FIELDS holding a non-empty string wins.
    """
    if not isinstance(body, dict):
        return None
    for name in ANSWER_FIELDS:
        value = body.get(name)
        if isinstance(value, str) and value:
            return value
    return None


class InferenceClient:
    """Client for the chat inference endpoint."""

    def __init__(
        self,
        url: str,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Args:
            url: Full chat endpoint URL
            timeout: Request timeout in seconds
            client: Optional shared httpx client (for testing with mocks)
        """
        self.url = url
        self.timeout = timeout
        self._client = client

    async def chat(self, query: str, user_id: str) -> str:
        """
        Ask the inference backend one question.

        Args:
            query: User question
            user_id: Owner identity, lets the backend scope retrieval

        Returns:
            str: Answer text, verbatim

        Raises:
            InferenceError: On timeout, transport failure, non-2xx status or
                a body without a usable answer
        """
        close_client = False
        client = self._client
        if client is None:
            client = httpx.AsyncClient(timeout=self.timeout)
            close_client = True

        try:
            response = await client.post(
                self.url,
                json={"query": query, "user_id": user_id},
                timeout=self.timeout,
            )
        except httpx.TimeoutException as e:
            raise InferenceError(
                "Inference backend timed out", details={"url": self.url}
            ) from e
        except httpx.HTTPError as e:
            raise InferenceError(
                f"Inference backend unreachable: {type(e).__name__}",
                details={"url": self.url},
            ) from e
        finally:
            if close_client:
                await client.aclose()

        if not response.is_success:
            raise InferenceError(
                f"Inference backend returned HTTP {response.status_code}",
                status_code=response.status_code,
                details={"url": self.url},
            )

        try:
            body = response.json()
        except ValueError as e:
            raise InferenceError(
                "Inference backend returned a non-JSON body",
                status_code=response.status_code,
            ) from e

        answer = extract_answer(body)
        if answer is None:
            raise InferenceError(
                "Inference backend response has no answer field",
                status_code=response.status_code,
                details={"fields": sorted(body) if isinstance(body, dict) else type(body).__name__},
            )
        return answer
