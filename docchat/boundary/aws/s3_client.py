"""
S3 client for document bucket operations.

Thin synchronous wrapper over boto3 for the raw document bucket: write
and batch removal. Works against AWS S3 or any S3-compatible endpoint. Errors surface as botocore exceptions; callers
translate them.

Dependencies: boto3
System role: Object store adapter
"""

import boto3


class S3DocumentClient:
    """S3 client for document bucket operations."""

    def __init__(
        self,
        bucket: str,
        region: str = "ap-southeast-2",
        endpoint_url: str | None = None,
        client=None,
    ) -> None:
        """
        Initialize S3 client for document bucket.

        Args:
            bucket: S3 bucket name for document storage
            region: AWS region for S3 bucket
            endpoint_url: Optional S3-compatible endpoint
            client: Pre-built boto3 S3 client (tests, custom sessions)
        """
        self._bucket = bucket
        self._region = region
        self._s3_client = client or boto3.client(
            "s3", region_name=region, endpoint_url=endpoint_url
        )

    @property
    def bucket(self) -> str:
        return self._bucket

    def put_object(
        self,
        s3_key: str,
        data: bytes,
        content_type: str = "application/octet-stream",
        metadata: dict[str, str] | None = None,
    ) -> None:
        """
        Write bytes at a key, replacing any existing object.

        Args:
            s3_key: S3 object key (path in bucket)
            data: Object body
            content_type: MIME type stored with the object
            metadata: Optional user metadata

        Raises:
            ClientError, BotoCoreError: If the write fails
        """
        self._s3_client.put_object(
            Bucket=self._bucket,
            Key=s3_key,
            Body=data,
            ContentType=content_type,
            Metadata=metadata or {},
        )

    def remove(self, s3_keys: list[str]) -> list[str]:
        """
        Delete objects in one batch request.

        Deleting a missing key is not an error.

        Args:
            s3_keys: Keys to delete

        Returns:
            list[str]: Keys the store reported as not deleted (empty on success)

        Raises:
            ClientError, BotoCoreError: If the request itself fails
        """
        if not s3_keys:
            return []
        response = self._s3_client.delete_objects(
            Bucket=self._bucket,
            Delete={"Objects": [{"Key": key} for key in s3_keys], "Quiet": True},
        )
        return [error.get("Key", "") for error in response.get("Errors", [])]

