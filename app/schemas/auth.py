"""Auth schemas."""

from typing import Optional

from pydantic import Field

from app.models.enums import UserRole
from app.schemas.base import BaseSchema


class UserSyncRequest(BaseSchema):
    """Create the local profile for a Firebase identity."""

    full_name: Optional[str] = Field(None, max_length=255)


class CurrentUserResponse(BaseSchema):
    """Current authenticated user info."""

    uid: str
    email: str | None = None
    email_verified: bool = False
    db_user_id: str | None = None
    role: UserRole | None = None
