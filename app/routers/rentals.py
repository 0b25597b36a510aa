"""Rentals router - booking lifecycle and condition evidence."""

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, Request, status

from app.core.security import AuthenticatedUser, require_admin, require_registered_user
from app.models.enums import EvidenceKind
from app.schemas.rental import (
    EvidenceLinksResponse,
    EvidencePresignRequest,
    EvidencePresignResponse,
    RentalComplete,
    RentalCreate,
    RentalResponse,
    RentalStatusUpdate,
)
from app.services.booking_workflow import BookingWorkflow, get_booking_workflow
from app.services.storage import StorageService, get_storage_service

router = APIRouter(prefix="/rentals", tags=["rentals"])


def client_ip(request: Request) -> str | None:
    return request.client.host if request.client else None


@router.post("", response_model=RentalResponse, status_code=status.HTTP_201_CREATED)
async def create_rental(
    data: RentalCreate,
    request: Request,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_registered_user),
):
    """Request a booking. The rental starts in ``pending``."""
    rental = await workflow.create_booking(
        user_id=current_user.db_user_id,
        start_date=data.start_date,
        end_date=data.end_date,
        before_pictures=data.before_pictures,
        property_id=data.property_id,
        property_name=data.property_name,
        ip_address=client_ip(request),
    )
    return RentalResponse.model_validate(rental)


@router.get("/my-rentals", response_model=List[RentalResponse])
async def list_my_rentals(
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_registered_user),
):
    """Rentals of the logged-in user, newest first."""
    rentals = await workflow.list_my_bookings(current_user.db_user_id)
    return [RentalResponse.model_validate(r) for r in rentals]


@router.get("", response_model=List[RentalResponse])
async def list_rentals(
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """All rentals, newest first (admin)."""
    rentals = await workflow.list_all_bookings()
    return [RentalResponse.model_validate(r) for r in rentals]


@router.get("/{rental_id}", response_model=RentalResponse)
async def get_rental(
    rental_id: UUID,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_registered_user),
):
    """Get a rental (owner or admin)."""
    rental = await workflow.get_booking(rental_id, current_user.db_user_id, current_user.is_admin)
    return RentalResponse.model_validate(rental)


@router.put("/{rental_id}/complete", response_model=RentalResponse)
async def complete_rental(
    rental_id: UUID,
    data: RentalComplete,
    request: Request,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_registered_user),
):
    """Submit before/after pictures and complete the rental (owner only)."""
    rental = await workflow.complete_booking(
        rental_id=rental_id,
        requester_id=current_user.db_user_id,
        before_pictures=data.before_pictures,
        after_pictures=data.after_pictures,
        condition_report=data.condition_report,
        ip_address=client_ip(request),
    )
    return RentalResponse.model_validate(rental)


@router.put("/{rental_id}/status", response_model=RentalResponse)
async def update_rental_status(
    rental_id: UUID,
    data: RentalStatusUpdate,
    request: Request,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """Approve, reject or complete a rental (admin).

    ``completed`` is accepted but only succeeds once after-pictures are on
    record. Status changes never attach evidence, so in practice a rental
    is completed by its tenant through ``PUT /rentals/{id}/complete``.
    """
    rental = await workflow.set_booking_status(
        rental_id,
        data.status,
        actor_id=current_user.db_user_id,
        ip_address=client_ip(request),
    )
    return RentalResponse.model_validate(rental)


@router.delete("/{rental_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_rental(
    rental_id: UUID,
    request: Request,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    current_user: AuthenticatedUser = Depends(require_admin),
):
    """Delete a rental (admin). Uploaded evidence files are kept."""
    await workflow.delete_booking(
        rental_id,
        actor_id=current_user.db_user_id,
        ip_address=client_ip(request),
    )


@router.post("/{rental_id}/evidence/presign", response_model=EvidencePresignResponse)
async def presign_evidence_upload(
    rental_id: UUID,
    data: EvidencePresignRequest,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    storage: StorageService = Depends(get_storage_service),
    current_user: AuthenticatedUser = Depends(require_registered_user),
):
    """Get a presigned URL to upload one condition photo (owner only).

    The returned ``object_path`` is what goes into ``before_pictures`` /
    ``after_pictures`` when completing the rental.
    """
    rental = await workflow.get_booking(rental_id, current_user.db_user_id)
    upload_url, object_path, expires_at = await storage.presign_upload(
        rental_id=rental.id,
        kind=data.kind,
        file_name=data.file_name,
        mime_type=data.mime_type,
        file_size_bytes=data.file_size_bytes,
    )
    return EvidencePresignResponse(
        upload_url=upload_url,
        object_path=object_path,
        kind=data.kind,
        expires_at=expires_at,
    )


@router.get("/{rental_id}/evidence", response_model=EvidenceLinksResponse)
async def get_evidence_links(
    rental_id: UUID,
    workflow: BookingWorkflow = Depends(get_booking_workflow),
    storage: StorageService = Depends(get_storage_service),
    current_user: AuthenticatedUser = Depends(require_registered_user),
):
    """Signed download URLs for the rental's condition photos (owner or admin)."""
    rental = await workflow.get_booking(rental_id, current_user.db_user_id, current_user.is_admin)
    links = {}
    for kind, paths in (
        (EvidenceKind.BEFORE, rental.before_pictures),
        (EvidenceKind.AFTER, rental.after_pictures),
    ):
        links[kind] = [await storage.download_url(path) for path in paths or []]

    return EvidenceLinksResponse(
        rental_id=rental.id,
        before_pictures=links[EvidenceKind.BEFORE],
        after_pictures=links[EvidenceKind.AFTER],
        condition_report=rental.condition_report,
    )
