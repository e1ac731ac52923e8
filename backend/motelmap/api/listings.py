"""Listings API endpoints."""
from typing import List, Optional
from fastapi import APIRouter, Depends, File, HTTPException, Query, UploadFile
from sqlalchemy.orm import Session

from motelmap.auth.identity import Identity, get_optional_identity
from motelmap.api.deps import get_caller
from motelmap.database import get_db
from motelmap.constants import photo_quota
from motelmap.ids import BlobRef, ListingId
from motelmap.schemas.draft import ListingDraft
from motelmap.schemas.listing import ListingCreate, ListingResponse, ListingUpdate
from motelmap.schemas.upload import PhotoBatchResponse
from motelmap.services import listings as listing_service
from motelmap.services.geo import Coordinates
from motelmap.services.photos import PendingFile
from motelmap.services.policy import Caller, require_mutation
from motelmap.services.storage import BlobStore, get_blob_store
from motelmap.utils.exceptions import handle_service_error, validation_error

router = APIRouter(prefix="/api/listings", tags=["listings"])


async def build_response(blob_store: BlobStore, listing, distance_km: Optional[float] = None) -> ListingResponse:
    """Convert a listing to its response, resolving photo URLs."""
    photo_urls = await listing_service.resolve_photo_urls(blob_store, listing)
    return ListingResponse.from_orm(listing, photo_urls=photo_urls, distance_km=distance_km)


@router.post("", response_model=ListingResponse)
async def create_listing(
    payload: ListingCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingResponse:
    """
    Create a new listing in pending status.

    Args:
        payload: Listing data
        caller: Authenticated caller, becomes the owner
        db: Database session
        blob_store: Blob store for photo URLs

    Returns:
        Created listing
    """
    try:
        listing = listing_service.create_listing(db, caller, payload)
        return await build_response(blob_store, listing)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "create_listing")


@router.post("/drafts", response_model=ListingResponse)
async def submit_draft(
    draft: ListingDraft,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingResponse:
    """
    Save a listing form.

    Creates a listing when the draft has no listing_id, otherwise replaces
    the content fields of that listing.
    """
    try:
        payload = draft.to_payload()
        if draft.listing_id:
            listing = await listing_service.update_listing(
                db, blob_store, caller, ListingId(draft.listing_id), payload.to_document()
            )
        else:
            listing = listing_service.create_listing(db, caller, payload)
        return await build_response(blob_store, listing)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "submit_draft")


@router.get("/mine", response_model=list[ListingResponse])
async def get_my_listings(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> list[ListingResponse]:
    """Listings owned by the caller. Empty for anonymous callers."""
    try:
        listings = listing_service.list_owner_listings(db, identity)
        return [await build_response(blob_store, listing) for listing in listings]
    except HTTPException:
        raise
    except Exception as e:
        raise handle_service_error(e, "get_my_listings")


@router.get("/approved", response_model=list[ListingResponse])
async def get_approved_listings(
    lat: Optional[float] = Query(None, ge=-90, le=90, description="Caller latitude"),
    lng: Optional[float] = Query(None, ge=-180, le=180, description="Caller longitude"),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> list[ListingResponse]:
    """
    Approved listings, nearest first when the caller's location is given.

    Args:
        lat: Caller latitude, omit when location is unavailable
        lng: Caller longitude, omit when location is unavailable
        db: Database session
        blob_store: Blob store for photo URLs

    Returns:
        Approved listings with distance_km set when a location was given
    """
    if (lat is None) != (lng is None):
        raise validation_error("lat and lng must be given together")

    origin = Coordinates(lat=lat, lng=lng) if lat is not None else None
    try:
        ranked = listing_service.list_approved_listings(db, origin)
        return [
            await build_response(blob_store, listing, distance_km=distance)
            for listing, distance in ranked
        ]
    except HTTPException:
        raise
    except Exception as e:
        raise handle_service_error(e, "get_approved_listings")


@router.get("/{listing_id}", response_model=ListingResponse)
async def get_listing(
    listing_id: str,
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingResponse:
    """Get a listing by ID."""
    try:
        listing = listing_service.get_listing(db, ListingId(listing_id))
        return await build_response(blob_store, listing)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_service_error(e, "get_listing")


@router.get("/{listing_id}/draft", response_model=ListingDraft)
async def get_listing_draft(
    listing_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingDraft:
    """Load the edit form of a listing. Owner or admin only."""
    try:
        listing = listing_service.get_listing(db, ListingId(listing_id))
        require_mutation(caller, listing)
        photo_urls = await listing_service.resolve_photo_urls(blob_store, listing)
        return ListingDraft.from_listing(listing, photo_urls)
    except HTTPException:
        raise
    except Exception as e:
        raise handle_service_error(e, "get_listing_draft")


@router.patch("/{listing_id}", response_model=ListingResponse)
async def update_listing(
    listing_id: str,
    update: ListingUpdate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingResponse:
    """
    Patch a listing. Owner or admin only.

    Args:
        listing_id: The listing to update
        update: Fields to change
        caller: Authenticated caller
        db: Database session
        blob_store: Blob store for photo URLs

    Returns:
        Updated listing
    """
    try:
        listing = await listing_service.update_listing(
            db, blob_store, caller, ListingId(listing_id), update.to_changes()
        )
        return await build_response(blob_store, listing)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "update_listing")


@router.delete("/{listing_id}")
async def delete_listing(
    listing_id: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> dict[str, str]:
    """
    Delete a listing and release its photos. Owner or admin only.

    Returns:
        Success message
    """
    try:
        await listing_service.delete_listing(db, blob_store, caller, ListingId(listing_id))
        return {"message": "Listing deleted successfully"}
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "delete_listing")


@router.post("/{listing_id}/photos", response_model=PhotoBatchResponse)
async def upload_photos(
    listing_id: str,
    files: List[UploadFile] = File(..., description="Photos to add"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> PhotoBatchResponse:
    """
    Upload a batch of photos to a listing.

    The whole batch is rejected with 409 when it would exceed the plan quota.
    """
    try:
        pending = [
            PendingFile(
                filename=upload.filename or "photo",
                content=await upload.read(),
                content_type=upload.content_type,
            )
            for upload in files
        ]
        listing, entries = await listing_service.attach_photos(
            db, blob_store, caller, ListingId(listing_id), pending
        )
        return PhotoBatchResponse(listing_id=listing.id, photos=entries, quota=photo_quota(listing.plan))
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "upload_photos")


@router.delete("/{listing_id}/photos/{reference}", response_model=ListingResponse)
async def delete_photo(
    listing_id: str,
    reference: str,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> ListingResponse:
    """Remove one photo from a listing and release it from storage."""
    try:
        listing = await listing_service.detach_photo(
            db, blob_store, caller, ListingId(listing_id), BlobRef(reference)
        )
        return await build_response(blob_store, listing)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "delete_photo")
