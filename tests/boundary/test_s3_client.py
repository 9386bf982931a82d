"""
Test suite for S3DocumentClient.

Uses a MagicMock boto3 client to check the request shapes sent to S3.

System role: Verification of the object store adapter
"""

from unittest.mock import MagicMock

import pytest

from docchat.boundary.aws.s3_client import S3DocumentClient


@pytest.fixture
def boto_client() -> MagicMock:
    return MagicMock()


@pytest.fixture
def s3(boto_client: MagicMock) -> S3DocumentClient:
    return S3DocumentClient(bucket="docs", client=boto_client)


class TestS3DocumentClient:
    def test_put_object_sends_body_and_metadata(self, s3, boto_client) -> None:
        s3.put_object("u/1_a.pdf", b"%PDF", "application/pdf", {"owner_id": "u"})

        boto_client.put_object.assert_called_once_with(
            Bucket="docs",
            Key="u/1_a.pdf",
            Body=b"%PDF",
            ContentType="application/pdf",
            Metadata={"owner_id": "u"},
        )

    def test_remove_uses_quiet_batch_delete(self, s3, boto_client) -> None:
        boto_client.delete_objects.return_value = {}

        failed = s3.remove(["k1", "k2"])

        assert failed == []
        boto_client.delete_objects.assert_called_once_with(
            Bucket="docs",
            Delete={"Objects": [{"Key": "k1"}, {"Key": "k2"}], "Quiet": True},
        )

    def test_remove_returns_keys_reported_as_errors(self, s3, boto_client) -> None:
        boto_client.delete_objects.return_value = {"Errors": [{"Key": "k2", "Code": "AccessDenied"}]}

        assert s3.remove(["k1", "k2"]) == ["k2"]

    def test_remove_nothing_skips_request(self, s3, boto_client) -> None:
        assert s3.remove([]) == []
        boto_client.delete_objects.assert_not_called()

    def test_bucket_property(self, s3) -> None:
        assert s3.bucket == "docs"
