"""Application configuration using Pydantic Settings."""

from dataclasses import dataclass
from enum import Enum
from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageProvider(str, Enum):
    GCS = "gcs"
    S3 = "s3"


@dataclass(frozen=True)
class RentalPolicyConfig:
    """Duration bounds (whole days, inclusive) a booking must satisfy."""

    min_duration_days: int = 3
    max_duration_days: int = 7


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # App
    app_name: str = "Betak Rentals"
    debug: bool = False
    api_v1_prefix: str = "/v1"
    log_level: str = "INFO"
    allowed_origins: str = "http://localhost:3000"

    # Database
    database_url: str

    # Firebase Auth
    firebase_project_id: str
    google_application_credentials: Optional[str] = None

    # Storage
    storage_provider: StorageProvider = StorageProvider.GCS

    # GCS Config
    gcs_bucket_name: Optional[str] = None
    gcs_project_id: Optional[str] = None

    # S3 Config
    aws_access_key_id: Optional[str] = None
    aws_secret_access_key: Optional[str] = None
    aws_region: Optional[str] = "us-east-1"
    s3_bucket_name: Optional[str] = None

    # Presigned URLs
    presign_ttl_seconds: int = 300
    max_upload_size_mb: int = 20

    # Rental policy defaults (used when no RentalSetting matches the property)
    rental_min_duration_days: int = 3
    rental_max_duration_days: int = 7
    rental_max_pictures: int = 20

    @property
    def rental_policy(self) -> RentalPolicyConfig:
        """Default rental policy bounds as an explicit value object."""
        return RentalPolicyConfig(
            min_duration_days=self.rental_min_duration_days,
            max_duration_days=self.rental_max_duration_days,
        )


@lru_cache
def get_settings() -> Settings:
    """Cached settings instance."""
    return Settings()
