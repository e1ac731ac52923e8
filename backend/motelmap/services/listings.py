"""Listing repository operations with ownership and role checks."""
import asyncio
import time
import uuid
from typing import Any, Dict, List, Optional, Sequence, Tuple
from sqlalchemy.orm import Session

from motelmap.auth.identity import Identity
from motelmap.constants import ListingStatus
from motelmap.ids import BlobRef, ListingId
from motelmap.models import Listing
from motelmap.schemas.listing import REQUIRED_FIELDS, ListingCreate
from motelmap.schemas.upload import PhotoEntry
from motelmap.services.geo import Coordinates, rank_by_proximity
from motelmap.services.photos import PendingFile, PhotoUploadCoordinator, check_photo_admission
from motelmap.services.policy import Caller, require_admin, require_mutation
from motelmap.services.status import INITIAL_STATUS, apply_transition
from motelmap.services.storage import BlobStore
from motelmap.services.uploads import claim_references, unique_references
from motelmap.services.users import promote_to_owner
from motelmap.utils.exceptions import AppException, NotFoundError, StorageError, ValidationError
from motelmap.utils.logger import logger


def _now_ms() -> int:
    return int(time.time() * 1000)


def get_listing(db: Session, listing_id: ListingId) -> Listing:
    listing = db.query(Listing).filter(Listing.id == listing_id).first()
    if not listing:
        raise NotFoundError("Listing", listing_id)
    return listing


def _get_listing_for_update(db: Session, listing_id: ListingId) -> Listing:
    """Load the latest stored version of a listing and lock its row until commit."""
    listing = (
        db.query(Listing)
        .filter(Listing.id == listing_id)
        .with_for_update()
        .populate_existing()
        .first()
    )
    if not listing:
        raise NotFoundError("Listing", listing_id)
    return listing


def create_listing(db: Session, caller: Caller, payload: ListingCreate) -> Listing:
    """
    Create a listing owned by the caller in pending status.

    Photo references must have been issued to the caller; repeated
    references are stored once.

    Args:
        db: Database session
        caller: Resolved caller
        payload: Listing fields

    Returns:
        The created listing
    """
    document = payload.to_document()
    document["photos"] = unique_references(document["photos"])
    check_photo_admission(payload.plan, 0, len(document["photos"]))
    claim_references(db, caller.subject, [], document["photos"])

    listing = Listing(
        id=str(uuid.uuid4()),
        owner_id=caller.subject,
        status=INITIAL_STATUS,
        created_at=_now_ms(),
        **document,
    )
    db.add(listing)
    promote_to_owner(db, caller.subject)
    db.commit()
    db.refresh(listing)
    logger.info(f"[LISTINGS] {caller.subject} created listing {listing.id}")
    return listing


async def update_listing(
    db: Session,
    blob_store: BlobStore,
    caller: Caller,
    listing_id: ListingId,
    changes: Dict[str, Any],
) -> Listing:
    """
    Patch the supplied fields of a listing.

    Ownership is checked against the locked, latest stored row so the check
    and the write happen in the same transaction. Photo additions must fit
    the quota of the plan in effect after the patch and must have been
    issued to the caller. Photos dropped by the patch are released from the
    blob store once the patch is committed.
    """
    cleared = [field for field in REQUIRED_FIELDS if field in changes and changes[field] is None]
    if cleared:
        raise ValidationError(f"Fields cannot be cleared: {', '.join(cleared)}")

    listing = _get_listing_for_update(db, listing_id)
    require_mutation(caller, listing)

    removed: List[BlobRef] = []
    if "photos" in changes:
        current = list(listing.photos or [])
        photos = unique_references(changes["photos"])
        added = len(photos) - len(current)
        if added > 0:
            check_photo_admission(changes.get("plan", listing.plan), len(current), added)
        claim_references(db, caller.subject, current, photos)
        kept = set(photos)
        removed = [reference for reference in current if reference not in kept]
        changes = dict(changes, photos=photos)

    for field, value in changes.items():
        setattr(listing, field, value)

    db.commit()
    db.refresh(listing)

    if removed:
        logger.info(f"[LISTINGS] Releasing {len(removed)} photos dropped from listing {listing_id}")
        await PhotoUploadCoordinator(blob_store).release(removed)
    return listing


def list_owner_listings(db: Session, identity: Optional[Identity]) -> List[Listing]:
    """Listings owned by the caller. Anonymous callers own nothing."""
    if identity is None:
        return []
    return db.query(Listing).filter(Listing.owner_id == identity.subject).all()


def list_listings_by_status(db: Session, status: ListingStatus) -> List[Listing]:
    return db.query(Listing).filter(Listing.status == ListingStatus(status)).all()


def list_approved_listings(
    db: Session,
    origin: Optional[Coordinates] = None,
) -> List[Tuple[Listing, Optional[float]]]:
    """Approved listings, nearest first when the caller's location is known."""
    return rank_by_proximity(list_listings_by_status(db, ListingStatus.APPROVED), origin)


def list_all_listings(db: Session, caller: Caller) -> List[Listing]:
    require_admin(caller)
    return db.query(Listing).all()


def set_listing_status(db: Session, caller: Caller, listing_id: ListingId, status: ListingStatus) -> Listing:
    """Move a listing to another status. Admin only."""
    require_admin(caller)
    listing = _get_listing_for_update(db, listing_id)
    apply_transition(listing, status)
    db.commit()
    db.refresh(listing)
    return listing


async def delete_listing(db: Session, blob_store: BlobStore, caller: Caller, listing_id: ListingId) -> None:
    """
    Release every photo of a listing, then delete the record.

    Photos are released in order. If a release fails, the references already
    released are dropped from the listing, the record is kept and the error
    propagates; the record is deleted only once every photo is gone.
    """
    listing = _get_listing_for_update(db, listing_id)
    require_mutation(caller, listing)

    photos = list(listing.photos or [])
    released = 0
    for reference in photos:
        try:
            await blob_store.delete(reference)
        except StorageError:
            listing.photos = photos[released:]
            db.commit()
            logger.error(
                f"[LISTINGS] Delete of {listing_id} aborted after releasing {released} of {len(photos)} photos"
            )
            raise
        released += 1

    db.delete(listing)
    db.commit()
    logger.info(f"[LISTINGS] {caller.subject} deleted listing {listing_id} and {released} photos")


async def attach_photos(
    db: Session,
    blob_store: BlobStore,
    caller: Caller,
    listing_id: ListingId,
    files: Sequence[PendingFile],
) -> Tuple[Listing, List[PhotoEntry]]:
    """
    Upload a batch of photos and append their references to a listing.

    Returns:
        The updated listing and its photo list with previews for the new photos
    """
    listing = get_listing(db, listing_id)
    require_mutation(caller, listing)

    coordinator = PhotoUploadCoordinator(blob_store)
    existing = [PhotoEntry(reference=reference) for reference in listing.photos or []]
    entries = await coordinator.upload_batch(listing.plan, existing, files)
    new_references = [entry.reference for entry in entries[len(existing):]]

    try:
        listing = _get_listing_for_update(db, listing_id)
        require_mutation(caller, listing)
        current = list(listing.photos or [])
        check_photo_admission(listing.plan, len(current), len(new_references))
    except AppException:
        db.rollback()
        await coordinator.release(new_references)
        raise

    listing.photos = current + new_references
    db.commit()
    db.refresh(listing)
    return listing, entries


async def detach_photo(
    db: Session,
    blob_store: BlobStore,
    caller: Caller,
    listing_id: ListingId,
    reference: BlobRef,
) -> Listing:
    """Release one photo and remove its reference from the listing."""
    listing = _get_listing_for_update(db, listing_id)
    require_mutation(caller, listing)

    photos = list(listing.photos or [])
    if reference not in photos:
        raise NotFoundError("Photo", reference)

    await blob_store.delete(reference)
    listing.photos = [p for p in photos if p != reference]
    db.commit()
    db.refresh(listing)
    return listing


async def resolve_photo_urls(blob_store: BlobStore, listing: Listing) -> List[Optional[str]]:
    """Fetch URLs for a listing's photos, None where a URL cannot be produced."""
    return list(await asyncio.gather(*(blob_store.get_url(ref) for ref in listing.photos or [])))
