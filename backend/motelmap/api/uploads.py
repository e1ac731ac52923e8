"""Upload destination endpoints for clients that upload photos directly."""
from typing import Optional
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from motelmap.api.deps import get_caller
from motelmap.database import get_db
from motelmap.schemas.upload import UploadDestinationResponse
from motelmap.services.policy import Caller
from motelmap.services.storage import BlobStore, get_blob_store
from motelmap.services.uploads import issue_upload_destination
from motelmap.utils.exceptions import handle_service_error

router = APIRouter(prefix="/api/uploads", tags=["uploads"])


@router.post("", response_model=UploadDestinationResponse)
async def request_upload_destination(
    content_type: Optional[str] = Query(None, description="MIME type of the file"),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db),
    blob_store: BlobStore = Depends(get_blob_store),
) -> UploadDestinationResponse:
    """
    Get a one-time URL to upload a photo to.

    The returned reference is what gets stored in a listing's photos once
    the upload succeeds. Only the caller it was issued to can store it.
    """
    try:
        destination = await issue_upload_destination(db, blob_store, caller.subject, content_type)
        return UploadDestinationResponse(upload_url=destination.url, reference=destination.reference)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "request_upload_destination")
