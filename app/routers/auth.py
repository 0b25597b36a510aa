"""Auth router - local profile for Firebase identities."""

from fastapi import APIRouter, Depends, status
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.exceptions import ForbiddenError
from app.core.security import get_current_user, AuthenticatedUser
from app.models.enums import UserRole
from app.models.user import User
from app.schemas.auth import CurrentUserResponse, UserSyncRequest

router = APIRouter(prefix="/auth", tags=["auth"])


def to_current_user_response(current_user: AuthenticatedUser) -> CurrentUserResponse:
    return CurrentUserResponse(
        uid=current_user.uid,
        email=current_user.email,
        email_verified=current_user.email_verified,
        db_user_id=str(current_user.db_user_id) if current_user.db_user_id else None,
        role=current_user.role,
    )


@router.post("/sync", response_model=CurrentUserResponse, status_code=status.HTTP_200_OK)
async def sync_user(
    data: UserSyncRequest,
    db: AsyncSession = Depends(get_db),
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Create the local user for the caller if it does not exist yet.

    New users are tenants; the admin role is granted out of band.
    """
    if not current_user.db_user_id:
        result = await db.execute(select(User).where(User.firebase_uid == current_user.uid))
        user = result.scalar_one_or_none()
        if user and not user.is_active:
            raise ForbiddenError("User account is disabled")
        if not user:
            user = User(
                firebase_uid=current_user.uid,
                email=current_user.email,
                full_name=data.full_name,
                role=UserRole.TENANT,
            )
            db.add(user)
            await db.commit()
            await db.refresh(user)
        current_user.db_user_id = user.id
        current_user.role = user.role

    return to_current_user_response(current_user)


@router.get("/me", response_model=CurrentUserResponse)
async def get_current_user_info(
    current_user: AuthenticatedUser = Depends(get_current_user),
):
    """Get current authenticated user info."""
    return to_current_user_response(current_user)
