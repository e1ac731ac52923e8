"""Photo upload coordination bounded by plan quotas."""
import mimetypes
from dataclasses import dataclass
from typing import List, Optional, Sequence

from motelmap.constants import Plan, photo_quota
from motelmap.ids import BlobRef
from motelmap.schemas.upload import PhotoEntry
from motelmap.services.storage import BlobStore
from motelmap.utils.exceptions import QuotaExceededError, StorageError
from motelmap.utils.logger import logger


@dataclass
class PendingFile:
    """A file submitted for upload."""
    filename: str
    content: bytes
    content_type: Optional[str] = None

    def guessed_content_type(self) -> str:
        """Declared type, else the type implied by the file name."""
        return self.content_type or mimetypes.guess_type(self.filename)[0] or "application/octet-stream"


def check_photo_admission(plan: Plan, existing_count: int, batch_size: int) -> int:
    """
    Admit or reject a whole batch of photos.

    Returns:
        The plan quota

    Raises:
        QuotaExceededError: If existing_count + batch_size exceeds the quota
    """
    quota = photo_quota(plan)
    if existing_count + batch_size > quota:
        raise QuotaExceededError(quota=quota, existing=existing_count, requested=batch_size)
    return quota


class PhotoUploadCoordinator:
    """Uploads photo batches to the blob store and tracks the in-progress photo list."""

    def __init__(self, blob_store: BlobStore):
        self.blob_store = blob_store

    async def upload_batch(
        self,
        plan: Plan,
        photos: Sequence[PhotoEntry],
        files: Sequence[PendingFile],
    ) -> List[PhotoEntry]:
        """
        Upload a batch of files and append them to a photo list.

        The batch is admitted or rejected as a whole before any transfer. If a
        transfer fails, objects uploaded earlier in the batch are released and
        the error is re-raised.

        Args:
            plan: Plan of the listing the photos belong to
            photos: Current photo list
            files: Files to upload

        Returns:
            A new photo list with the uploaded photos appended
        """
        check_photo_admission(plan, len(photos), len(files))

        result = list(photos)
        uploaded: List[BlobRef] = []
        try:
            for pending in files:
                content_type = pending.guessed_content_type()
                logger.debug(f"[PHOTOS] Uploading {pending.filename} as {content_type}")
                destination = await self.blob_store.request_upload_destination(content_type)
                reference = await self.blob_store.transfer(destination, pending.content, content_type)
                uploaded.append(reference)
                preview_url = await self.blob_store.get_url(reference)
                result.append(PhotoEntry(reference=reference, preview_url=preview_url))
        except StorageError:
            logger.error(f"[PHOTOS] Batch failed after {len(uploaded)} of {len(files)} uploads, releasing")
            await self.release(uploaded)
            raise

        logger.info(f"[PHOTOS] Uploaded {len(uploaded)} photos ({len(result)}/{photo_quota(plan)})")
        return result

    async def release(self, references: Sequence[BlobRef]) -> None:
        """Best-effort release of objects no listing refers to any more."""
        for reference in references:
            try:
                await self.blob_store.delete(reference)
            except StorageError as e:
                logger.error(f"[PHOTOS] Could not release orphaned photo {reference}: {e}")
