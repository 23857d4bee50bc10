import logging
import re
import uuid

import boto3

from ..config import AWS_ACCESS_KEY, AWS_SECRET_KEY, S3_REGION, S3_BUCKET_NAME

logger = logging.getLogger(__name__)

_UNSAFE_FILENAME_CHARS = re.compile(r"[^a-zA-Z0-9._-]")


def sanitize_filename(filename: str) -> str:
    return _UNSAFE_FILENAME_CHARS.sub("_", filename)


def attachment_key(submission_id: int, filename: str) -> str:
    # uuid prefix so re-uploading a name never overwrites a live object
    return f"submissions/{submission_id}/{uuid.uuid4().hex[:8]}-{sanitize_filename(filename)}"


class AttachmentStorage:
    """Object storage for attachment bytes, backed by S3."""

    def __init__(self, client=None, bucket: str = S3_BUCKET_NAME):
        self.client = client or boto3.client(
            "s3",
            aws_access_key_id=AWS_ACCESS_KEY,
            aws_secret_access_key=AWS_SECRET_KEY,
            region_name=S3_REGION,
        )
        self.bucket = bucket

    def upload(self, key: str, data: bytes, content_type: str) -> str:
        self.client.put_object(
            Bucket=self.bucket,
            Key=key,
            Body=data,
            ContentType=content_type,
            CacheControl="max-age=3600",
        )
        return key

    def sign(self, key: str, ttl_seconds: int) -> str:
        return self.client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket, "Key": key},
            ExpiresIn=ttl_seconds,
        )

    def delete(self, key: str) -> None:
        self.client.delete_object(Bucket=self.bucket, Key=key)

    def delete_quietly(self, keys) -> None:
        # Used after the database change is committed; leftovers are only orphans
        for key in keys:
            try:
                self.delete(key)
            except Exception:
                logger.warning("Failed to delete storage object %s", key, exc_info=True)


_storage = None


def get_storage() -> AttachmentStorage:
    global _storage
    if _storage is None:
        _storage = AttachmentStorage()
    return _storage
