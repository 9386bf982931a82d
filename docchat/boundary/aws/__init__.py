"""AWS boundary: S3 document object store client."""

from docchat.boundary.aws.s3_client import S3DocumentClient

__all__ = ["S3DocumentClient"]
