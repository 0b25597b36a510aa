import uuid

import pytest

from app.core.exceptions import ValidationError
from app.models.enums import EvidenceKind
from app.services.storage import EvidenceStore, GCSEvidenceStore, StorageService, get_storage_service

RENTAL_ID = uuid.UUID("6f1c2a1e-9a0b-4a47-8d59-0d7a3c1f2b11")


class SigningStub(EvidenceStore):
    async def sign_upload(self, object_path, mime_type, ttl):
        return f"https://uploads.test/{object_path}?sig=put&ttl={int(ttl.total_seconds())}"

    async def sign_download(self, object_path, ttl):
        return f"https://uploads.test/{object_path}?sig=get"


@pytest.fixture
def storage():
    return StorageService(SigningStub(), max_upload_mb=1, upload_ttl_seconds=60)


@pytest.mark.parametrize(
    "file_name, ext",
    [("kitchen.PNG", "png"), ("living.room.jpeg", "jpeg"), ("no-extension", "jpg")],
)
def test_object_path_layout(file_name, ext):
    path = StorageService.object_path(RENTAL_ID, EvidenceKind.BEFORE, file_name)
    prefix, stored = path.rsplit("/", 1)
    assert prefix == f"rentals/{RENTAL_ID}/before"
    assert stored.endswith(f".{ext}")
    uuid.UUID(stored.rsplit(".", 1)[0])


async def test_presign_upload(storage):
    url, path, expires_at = await storage.presign_upload(
        RENTAL_ID, EvidenceKind.AFTER, "bath.webp", "image/webp", 512
    )
    assert path.startswith(f"rentals/{RENTAL_ID}/after/")
    assert url == f"https://uploads.test/{path}?sig=put&ttl=60"
    assert expires_at is not None


async def test_presign_rejects_oversized_file(storage):
    with pytest.raises(ValidationError, match="exceeds maximum of 1MB"):
        await storage.presign_upload(RENTAL_ID, EvidenceKind.AFTER, "big.jpg", "image/jpeg", 2 * 1024 * 1024)


async def test_presign_rejects_non_image(storage):
    with pytest.raises(ValidationError, match="Unsupported mime type"):
        await storage.presign_upload(RENTAL_ID, EvidenceKind.BEFORE, "notes.pdf", "application/pdf", 10)


def test_configured_provider_is_gcs():
    service = get_storage_service()
    assert isinstance(service.store, GCSEvidenceStore)
    assert service.store.bucket_name == "rentals-test-evidence"
