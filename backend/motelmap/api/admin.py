"""Admin API endpoints."""
from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from motelmap.api.deps import get_caller
from motelmap.api.listings import build_response
from motelmap.database import get_db
from motelmap.ids import ListingId, UserSubject
from motelmap.schemas.listing import ListingResponse, StatusUpdate
from motelmap.schemas.user import RoleUpdate, UserResponse
from motelmap.services import listings as listing_service
from motelmap.services import users as user_service
from motelmap.services.policy import Caller
from motelmap.services.storage import BlobStore, get_blob_store
from motelmap.utils.exceptions import handle_service_error

router = APIRouter(prefix="/api/admin", tags=["admin"])


@router.get("/listings", response_model=list[ListingResponse])
async def get_all_listings(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> list[ListingResponse]:
    """All listings in every status. Admin only."""
    try:
        listings = listing_service.list_all_listings(db, caller)
        return [await build_response(blob_store, listing) for listing in listings]
    except HTTPException:
        raise
    except Exception as e:
        raise handle_service_error(e, "get_all_listings")


@router.patch("/listings/{listing_id}/status", response_model=ListingResponse)
async def update_listing_status(
    listing_id: str,
    update: StatusUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingResponse:
    """
    Approve, pause or reset a listing to pending.

    Args:
        listing_id: The listing to update
        update: Target status
        caller: Authenticated caller, must be an admin
        db: Database session
        blob_store: Blob store for photo URLs

    Returns:
        Updated listing
    """
    try:
        listing = listing_service.set_listing_status(db, caller, ListingId(listing_id), update.status)
        return await build_response(blob_store, listing)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "update_listing_status")


@router.patch("/users/{subject}/role", response_model=UserResponse)
async def update_user_role(
    subject: str,
    update: RoleUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
) -> UserResponse:
    """Change a user's role. Admin only."""
    try:
        user = user_service.set_user_role(db, caller, UserSubject(subject), update.role)
        return UserResponse.from_orm(user)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "update_user_role")
