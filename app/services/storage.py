from __future__ import annotations

import logging
from urllib.parse import quote

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from app.config import Settings
from app.errors import StoreError
from app.utils.hash import content_key

logger = logging.getLogger(__name__)

CONTENT_KINDS: dict[str, tuple[str, str]] = {
    "pdf": ("application/pdf", ".pdf"),
    "raw": ("application/octet-stream", ""),
}


def _s3_client(settings: Settings):
    session = boto3.session.Session(
        aws_access_key_id=settings.S3_ACCESS_KEY_ID,
        aws_secret_access_key=settings.S3_SECRET_ACCESS_KEY,
        region_name=settings.S3_REGION or None,
    )

    # For S3-compatible endpoints, boto3 expects endpoint_url.
    endpoint_url = settings.S3_ENDPOINT or None
    return session.client("s3", endpoint_url=endpoint_url)


def public_url(settings: Settings, key: str) -> str:
    quoted = quote(key, safe="/")
    if settings.S3_PUBLIC_BASE_URL:
        return f"{settings.S3_PUBLIC_BASE_URL.rstrip('/')}/{quoted}"
    if settings.S3_ENDPOINT:
        return f"{settings.S3_ENDPOINT.rstrip('/')}/{settings.S3_BUCKET}/{quoted}"
    return f"https://{settings.S3_BUCKET}.s3.{settings.S3_REGION}.amazonaws.com/{quoted}"


class S3ArtifactStore:
    """Persists finished artifacts to the configured bucket and returns their public URL."""

    def __init__(self, settings: Settings, client=None) -> None:
        self.settings = settings
        self._client = client

    @property
    def client(self):
        if self._client is None:
            self._client = _s3_client(self.settings)
        return self._client

    def store(self, data: bytes, content_kind: str) -> str:
        try:
            content_type, suffix = CONTENT_KINDS[content_kind]
        except KeyError as e:
            raise StoreError(f"unsupported content kind: {content_kind}") from e
        if not data:
            raise StoreError("refusing to store an empty artifact")

        key = content_key(prefix=self.settings.S3_KEY_PREFIX, data=data, suffix=suffix)
        try:
            self.client.put_object(
                Bucket=self.settings.S3_BUCKET,
                Key=key,
                Body=bytes(data),
                ContentType=content_type,
            )
        except (BotoCoreError, ClientError) as e:
            logger.warning("ARTIFACT_STORE_FAILED", extra={"key": key, "reason": str(e)})
            raise StoreError(f"upload of {key} failed") from e

        url = public_url(self.settings, key)
        logger.info("ARTIFACT_STORED", extra={"key": key, "bytes": len(data), "content_type": content_type})
        return url
