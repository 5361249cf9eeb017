"""S3 object storage client for file uploads.

Clients upload and download directly against S3 with presigned URLs; the API
only signs URLs, records metadata and deletes objects.
"""

from __future__ import annotations

import datetime as dt
import uuid
from typing import Optional

import boto3
import structlog
from botocore.client import Config
from botocore.exceptions import BotoCoreError, ClientError

from ..config import StorageConfig

__all__ = ["S3Storage", "build_file_key", "StorageError"]

logger = structlog.get_logger(__name__)

StorageError = (ClientError, BotoCoreError)


def _type_subfolder(mime_type: str) -> Optional[str]:
    if mime_type.startswith("image/"):
        return "images"
    if mime_type.startswith("video/"):
        return "videos"
    if mime_type.startswith("audio/"):
        return "audio"
    if mime_type == "application/pdf" or "document" in mime_type or "text" in mime_type:
        return "documents"
    return None


def build_file_key(
    file_name: str,
    mime_type: str,
    user_id: uuid.UUID | str,
    workplace_id: uuid.UUID | str,
    group_id: uuid.UUID | str | None = None,
    category: Optional[str] = None,
) -> str:
    """Return ``{folder}/{uuid}.{ext}`` organised by usage and media type."""

    extension = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else ""
    unique_name = f"{uuid.uuid4()}.{extension}" if extension else str(uuid.uuid4())

    if category == "avatar" and not group_id:
        folder = f"users/{user_id}/avatar"
    elif category == "avatar":
        folder = f"workplaces/{workplace_id}/groups/{group_id}/avatar"
    elif category == "logo":
        folder = f"workplaces/{workplace_id}/branding"
    elif category == "private" or (not group_id and not category):
        folder = f"workplaces/{workplace_id}/users/{user_id}/files"
    elif group_id:
        folder = f"workplaces/{workplace_id}/groups/{group_id}/files"
    else:
        folder = f"workplaces/{workplace_id}/files"

    if category not in ("avatar", "logo"):
        subfolder = _type_subfolder(mime_type)
        if subfolder:
            folder = f"{folder}/{subfolder}"

    return f"{folder}/{unique_name}"


class S3Storage:
    """boto3 S3 클라이언트 래퍼."""

    def __init__(self, config: StorageConfig, client=None):
        self.config = config
        self._client = client or boto3.client(
            "s3",
            region_name=config.region,
            endpoint_url=config.endpoint_url,
            aws_access_key_id=config.access_key_id,
            aws_secret_access_key=config.secret_access_key,
            config=Config(signature_version="s3v4"),
        )

    @property
    def bucket(self) -> str:
        return self.config.bucket_name

    def generate_upload_url(
        self,
        key: str,
        content_type: str,
        metadata: Optional[dict[str, str]] = None,
        expiry: Optional[int] = None,
    ) -> str:
        """Presigned PUT URL for a direct client upload."""
        expiry = expiry or self.config.upload_url_expiry
        params = {"Bucket": self.bucket, "Key": key, "ContentType": content_type}
        if metadata:
            params["Metadata"] = metadata
        try:
            url = self._client.generate_presigned_url(
                "put_object", Params=params, ExpiresIn=expiry
            )
        except StorageError as exc:
            logger.error("storage.presign_upload_failed", key=key, error=str(exc))
            raise
        logger.info("storage.presign_upload", key=key, expiry=expiry)
        return url

    def generate_download_url(
        self, key: str, filename: Optional[str] = None, expiry: Optional[int] = None
    ) -> str:
        expiry = expiry or self.config.download_url_expiry
        params = {"Bucket": self.bucket, "Key": key}
        if filename:
            params["ResponseContentDisposition"] = f'attachment; filename="{filename}"'
        try:
            url = self._client.generate_presigned_url(
                "get_object", Params=params, ExpiresIn=expiry
            )
        except StorageError as exc:
            logger.error("storage.presign_download_failed", key=key, error=str(exc))
            raise
        logger.info("storage.presign_download", key=key, expiry=expiry)
        return url

    def delete_object(self, key: str) -> None:
        self._client.delete_object(Bucket=self.bucket, Key=key)
        logger.info("storage.deleted", key=key)

    def cdn_url(self, key: str) -> Optional[str]:
        if key.startswith("http"):
            return key
        if not self.config.cdn_base_url:
            return None
        return f"{self.config.cdn_base_url.rstrip('/')}/{key.lstrip('/')}"

    @staticmethod
    def upload_metadata(
        file_name: str,
        user_id: uuid.UUID,
        workplace_id: uuid.UUID,
        group_id: Optional[uuid.UUID],
        category: Optional[str],
    ) -> dict[str, str]:
        return {
            "original-name": file_name,
            "user-id": str(user_id),
            "workplace-id": str(workplace_id),
            "group-id": str(group_id or ""),
            "category": category or "file",
            "uploaded-at": dt.datetime.now(dt.timezone.utc).isoformat(),
        }
