"""Bookkeeping for photo references issued to callers."""
import time
from typing import Iterable, List, Optional, Sequence
from sqlalchemy.orm import Session

from motelmap.ids import BlobRef, UserSubject
from motelmap.models import PhotoUpload
from motelmap.services.storage import BlobStore, UploadDestination
from motelmap.utils.exceptions import AuthorizationError
from motelmap.utils.logger import logger


def unique_references(references: Iterable[str]) -> List[BlobRef]:
    """Drop repeated references, keeping first occurrences in order."""
    seen = set()
    result = []
    for reference in references:
        if reference not in seen:
            seen.add(reference)
            result.append(BlobRef(reference))
    return result


async def issue_upload_destination(
    db: Session,
    blob_store: BlobStore,
    subject: UserSubject,
    content_type: Optional[str] = None,
) -> UploadDestination:
    """Request an upload destination and record its reference as issued to the caller."""
    destination = await blob_store.request_upload_destination(content_type)
    db.add(PhotoUpload(reference=destination.reference, issued_to=subject, created_at=int(time.time() * 1000)))
    db.commit()
    logger.debug(f"[UPLOADS] Issued destination {destination.reference} to {subject}")
    return destination


def claim_references(
    db: Session,
    subject: UserSubject,
    current: Sequence[str],
    requested: Sequence[str],
) -> None:
    """
    Check that every requested reference may be stored on a listing.

    References already on the listing are always allowed. Any other
    reference must have been issued to the caller and not yet claimed; its
    grant is consumed in the caller's transaction.

    Raises:
        AuthorizationError: If a reference was not issued to the caller
    """
    on_listing = set(current)
    new = [reference for reference in requested if reference not in on_listing]
    if not new:
        return

    grants = (
        db.query(PhotoUpload)
        .filter(PhotoUpload.reference.in_(new), PhotoUpload.issued_to == subject)
        .all()
    )
    granted = {grant.reference for grant in grants}
    foreign = [reference for reference in new if reference not in granted]
    if foreign:
        logger.warning(f"[UPLOADS] {subject} tried to store photos not issued to them: {foreign}")
        raise AuthorizationError(f"Permission denied: photos were not uploaded by you: {', '.join(foreign)}")

    for grant in grants:
        db.delete(grant)
