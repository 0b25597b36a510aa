"""Rental policy configuration schemas."""

from typing import Optional

from pydantic import Field, field_validator, model_validator

from app.schemas.base import BaseSchema, IDMixin, TimestampMixin


class RentalSettingUpsert(BaseSchema):
    """Create or replace the duration bounds for a location."""

    country: str = Field(..., min_length=1, max_length=100)
    city: Optional[str] = Field(None, max_length=100)
    min_duration: int = Field(..., ge=3)
    max_duration: int = Field(..., le=7)

    @field_validator("city")
    @classmethod
    def blank_city_is_none(cls, value: Optional[str]) -> Optional[str]:
        return value or None

    @model_validator(mode="after")
    def validate_range(self):
        if self.min_duration > self.max_duration:
            raise ValueError("min_duration must not exceed max_duration")
        return self


class RentalSettingResponse(BaseSchema, IDMixin, TimestampMixin):
    country: str
    city: Optional[str] = None
    min_duration: int
    max_duration: int
