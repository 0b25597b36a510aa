"""Signed URLs for rental condition photos, stored in GCS or S3.

Clients upload photos straight to the bucket with a signed PUT URL and then
submit the returned object paths as ``before_pictures`` / ``after_pictures``.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import datetime, timedelta
from typing import Optional
from uuid import UUID

from app.core.config import StorageProvider, get_settings
from app.core.exceptions import ValidationError
from app.models.enums import EvidenceKind

IMAGE_MIME_TYPES = frozenset({"image/jpeg", "image/png", "image/webp", "image/heic"})


class EvidenceStore(ABC):
    """Signs object URLs in the evidence bucket."""

    @abstractmethod
    async def sign_upload(self, object_path: str, mime_type: str, ttl: timedelta) -> str:
        ...

    @abstractmethod
    async def sign_download(self, object_path: str, ttl: timedelta) -> str:
        ...


class GCSEvidenceStore(EvidenceStore):
    def __init__(self, bucket_name: str, project_id: Optional[str] = None):
        self.bucket_name = bucket_name
        self.project_id = project_id
        self._bucket = None

    def _blob(self, object_path: str):
        if self._bucket is None:
            from google.cloud import storage
            self._bucket = storage.Client(project=self.project_id).bucket(self.bucket_name)
        return self._bucket.blob(object_path)

    async def sign_upload(self, object_path: str, mime_type: str, ttl: timedelta) -> str:
        return self._blob(object_path).generate_signed_url(
            version="v4", expiration=ttl, method="PUT", content_type=mime_type
        )

    async def sign_download(self, object_path: str, ttl: timedelta) -> str:
        return self._blob(object_path).generate_signed_url(version="v4", expiration=ttl, method="GET")


class S3EvidenceStore(EvidenceStore):
    def __init__(
        self,
        bucket_name: str,
        region: str,
        access_key_id: Optional[str] = None,
        secret_access_key: Optional[str] = None,
    ):
        self.bucket_name = bucket_name
        self._client_kwargs = {
            "region_name": region,
            "aws_access_key_id": access_key_id,
            "aws_secret_access_key": secret_access_key,
        }
        self._client = None

    def _sign(self, operation: str, params: dict, ttl: timedelta) -> str:
        if self._client is None:
            import boto3
            self._client = boto3.client("s3", **self._client_kwargs)
        return self._client.generate_presigned_url(
            operation,
            Params={"Bucket": self.bucket_name, **params},
            ExpiresIn=int(ttl.total_seconds()),
        )

    async def sign_upload(self, object_path: str, mime_type: str, ttl: timedelta) -> str:
        return self._sign("put_object", {"Key": object_path, "ContentType": mime_type}, ttl)

    async def sign_download(self, object_path: str, ttl: timedelta) -> str:
        return self._sign("get_object", {"Key": object_path}, ttl)


class StorageService:
    """Validates evidence uploads and hands out signed URLs."""

    def __init__(
        self,
        store: EvidenceStore,
        max_upload_mb: int = 20,
        upload_ttl_seconds: int = 300,
        download_ttl_seconds: int = 3600,
    ):
        self.store = store
        self.max_upload_mb = max_upload_mb
        self.upload_ttl = timedelta(seconds=upload_ttl_seconds)
        self.download_ttl = timedelta(seconds=download_ttl_seconds)

    @staticmethod
    def object_path(rental_id: UUID, kind: EvidenceKind, file_name: str) -> str:
        """``rentals/<rental>/<before|after>/<uuid>.<ext>``; the extension defaults to jpg."""
        ext = file_name.rsplit(".", 1)[-1].lower() if "." in file_name else "jpg"
        return f"rentals/{rental_id}/{kind.value}/{uuid.uuid4()}.{ext}"

    async def presign_upload(
        self,
        rental_id: UUID,
        kind: EvidenceKind,
        file_name: str,
        mime_type: str,
        file_size_bytes: int,
    ) -> tuple[str, str, datetime]:
        """Returns ``(upload_url, object_path, expires_at)``."""
        if mime_type not in IMAGE_MIME_TYPES:
            raise ValidationError(f"Unsupported mime type: {mime_type}")
        if file_size_bytes > self.max_upload_mb * 1024 * 1024:
            raise ValidationError(f"File size exceeds maximum of {self.max_upload_mb}MB")

        object_path = self.object_path(rental_id, kind, file_name)
        expires_at = datetime.utcnow() + self.upload_ttl
        url = await self.store.sign_upload(object_path, mime_type, self.upload_ttl)
        return url, object_path, expires_at

    async def download_url(self, object_path: str) -> str:
        return await self.store.sign_download(object_path, self.download_ttl)


def get_storage_service() -> StorageService:
    """FastAPI dependency: storage for the configured provider."""
    settings = get_settings()
    if settings.storage_provider == StorageProvider.GCS:
        store: EvidenceStore = GCSEvidenceStore(settings.gcs_bucket_name, settings.gcs_project_id)
    else:
        store = S3EvidenceStore(
            settings.s3_bucket_name,
            region=settings.aws_region,
            access_key_id=settings.aws_access_key_id,
            secret_access_key=settings.aws_secret_access_key,
        )
    return StorageService(
        store,
        max_upload_mb=settings.max_upload_size_mb,
        upload_ttl_seconds=settings.presign_ttl_seconds,
    )
