"""Rental schemas."""

from datetime import datetime
from typing import Annotated, Any, Optional
from uuid import UUID

from pydantic import BeforeValidator, Field, field_validator, model_validator

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin, to_naive_utc
from app.models.enums import EvidenceKind, RentalStatus


def as_picture_list(value: Any) -> list[str]:
    """Normalize a single reference or a sequence of references into a list.

    Blank entries are dropped; order is preserved.
    """
    if value is None:
        return []
    if isinstance(value, str):
        value = [value]
    if not isinstance(value, (list, tuple)):
        raise ValueError("must be a string or a list of strings")
    pictures = []
    for item in value:
        if not isinstance(item, str):
            raise ValueError("picture references must be strings")
        item = item.strip()
        if item:
            pictures.append(item)
    return pictures


PictureList = Annotated[list[str], BeforeValidator(as_picture_list)]


class RentalCreate(BaseSchema):
    """Request a booking for a property, identified by id or by name."""

    property_id: Optional[UUID] = None
    property_name: Optional[str] = Field(None, max_length=255)
    start_date: datetime
    end_date: datetime
    before_pictures: PictureList = Field(default_factory=list)

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, value: datetime) -> datetime:
        return to_naive_utc(value)

    @model_validator(mode="after")
    def validate_property_ref(self):
        """Exactly one of property_id / property_name."""
        if (self.property_id is None) == (not self.property_name):
            raise ValueError("Provide exactly one of property_id or property_name")
        return self


class RentalComplete(BaseSchema):
    """Check-in/check-out evidence submitted by the tenant."""

    before_pictures: PictureList = Field(default_factory=list)
    after_pictures: PictureList = Field(default_factory=list)
    condition_report: Optional[str] = None


class RentalStatusUpdate(BaseSchema):
    """Administrative status change (validated by the state machine)."""

    status: str = Field(..., min_length=1)


class RentalResponse(BaseSchema, IDMixin, TimestampMixin):
    """Rental response."""

    property_id: UUID
    property_name: Optional[str] = None
    user_id: UUID
    start_date: datetime
    end_date: datetime
    year: int
    status: RentalStatus
    before_pictures: list[str] = []
    after_pictures: list[str] = []
    condition_report: Optional[str] = None
    completed_at: Optional[datetime] = None


class EvidencePresignRequest(BaseSchema):
    """Request a presigned upload URL for a condition photo."""

    kind: EvidenceKind
    file_name: str = Field(..., min_length=1, max_length=255)
    mime_type: str = "image/jpeg"
    file_size_bytes: int = Field(..., gt=0)


class EvidencePresignResponse(BaseSchema):
    upload_url: str
    object_path: str
    kind: EvidenceKind
    expires_at: datetime


class EvidenceLinksResponse(BaseSchema):
    """Signed download URLs for a rental's condition photos."""

    rental_id: UUID
    before_pictures: list[str]
    after_pictures: list[str]
    condition_report: Optional[str] = None
