"""Supabase Storage service for listing photos."""
import mimetypes
import uuid
import httpx
from dataclasses import dataclass
from functools import lru_cache
from typing import Optional
from urllib.parse import quote
from motelmap.config import settings
from motelmap.ids import BlobRef
from motelmap.utils.exceptions import StorageError
from motelmap.utils.logger import logger


@dataclass
class UploadDestination:
    """A one-time writable URL and the reference the object will have."""
    url: str
    reference: BlobRef


class BlobStore:
    """Operations the application needs from a blob store."""

    async def request_upload_destination(self, content_type: Optional[str] = None) -> UploadDestination:
        raise NotImplementedError

    async def transfer(self, destination: UploadDestination, content: bytes, content_type: str) -> BlobRef:
        raise NotImplementedError

    async def delete(self, reference: BlobRef) -> None:
        """Release an object. Releasing an object that is already gone succeeds."""
        raise NotImplementedError

    async def get_url(self, reference: BlobRef) -> Optional[str]:
        raise NotImplementedError


def new_reference(content_type: Optional[str] = None) -> BlobRef:
    """Generate an object key, keeping a file extension when the type is known."""
    ext = mimetypes.guess_extension(content_type or "") or ""
    if ext == ".jpe":
        ext = ".jpg"
    return BlobRef(f"{uuid.uuid4().hex}{ext}")


def _is_not_found(response: httpx.Response) -> bool:
    # Supabase reports a missing object as 404, or as 400 with a 404 body
    if response.status_code == 404:
        return True
    if response.status_code != 400:
        return False
    try:
        body = response.json()
    except ValueError:
        return False
    return isinstance(body, dict) and (str(body.get("statusCode")) == "404" or body.get("error") == "not_found")


class SupabaseBlobStore(BlobStore):
    """Blob store backed by the Supabase Storage REST API."""

    def __init__(
        self,
        supabase_url: Optional[str] = None,
        supabase_key: Optional[str] = None,
        bucket: str = "listing-photos",
        public_bucket: bool = False,
        signed_url_expires_in: int = 3600,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        if not supabase_url or not supabase_key:
            raise ValueError(
                "Supabase URL and secret key must be configured. "
                "Set SUPABASE_URL and SUPABASE_SECRET_KEY environment variables."
            )

        self.supabase_url = supabase_url.rstrip('/')
        self.supabase_key = supabase_key
        self.storage_url = f"{self.supabase_url}/storage/v1"
        self.bucket = bucket
        self.public_bucket = public_bucket
        self.signed_url_expires_in = signed_url_expires_in
        self._transport = transport
        self._bucket_checked = False

    def _headers(self, content_type: str = "application/json") -> dict:
        return {
            "apikey": self.supabase_key,
            "Authorization": f"Bearer {self.supabase_key}",
            "Content-Type": content_type,
        }

    def _client(self, timeout: float = 10.0) -> httpx.AsyncClient:
        return httpx.AsyncClient(timeout=timeout, transport=self._transport)

    async def _send(self, method: str, url: str, timeout: float = 10.0, **kwargs) -> httpx.Response:
        try:
            async with self._client(timeout=timeout) as client:
                return await client.request(method, url, **kwargs)
        except httpx.HTTPError as e:
            logger.error(f"[STORAGE] {method} {url} failed: {e}", exc_info=True)
            raise StorageError(f"Storage request failed: {e}")

    def _object_path(self, reference: str) -> str:
        # Quote each segment but keep slashes as directory separators
        return '/'.join(quote(segment, safe='') for segment in reference.split('/'))

    async def _ensure_bucket_exists(self) -> None:
        """Ensure the storage bucket exists, create it if it doesn't."""
        if self._bucket_checked:
            return

        check = await self._send("GET", f"{self.storage_url}/bucket/{self.bucket}", headers=self._headers())
        if check.status_code == 200:
            self._bucket_checked = True
            return

        # Supabase reports a missing bucket as 400 or 404 depending on version
        if check.status_code in (400, 404):
            create = await self._send(
                "POST",
                f"{self.storage_url}/bucket",
                headers=self._headers(),
                json={"id": self.bucket, "name": self.bucket, "public": self.public_bucket},
            )
            if create.status_code in (200, 201):
                logger.info(f"[STORAGE] Created bucket {self.bucket}")
                self._bucket_checked = True
                return
            raise StorageError(
                f"Failed to create bucket {self.bucket}: {create.status_code} - {create.text}"
            )

        raise StorageError(f"Failed to check bucket {self.bucket}: {check.status_code} - {check.text}")

    async def request_upload_destination(self, content_type: Optional[str] = None) -> UploadDestination:
        """
        Request a signed, one-time upload URL for a new object.

        Args:
            content_type: MIME type of the file that will be uploaded

        Returns:
            UploadDestination with the signed URL and the new object reference
        """
        await self._ensure_bucket_exists()
        reference = new_reference(content_type)
        sign_url = f"{self.storage_url}/object/upload/sign/{self.bucket}/{self._object_path(reference)}"

        response = await self._send("POST", sign_url, headers=self._headers())
        if response.status_code != 200:
            logger.error(f"[STORAGE] Failed to sign upload: {response.status_code} - {response.text}")
            raise StorageError(f"Failed to request upload destination: {response.status_code}")

        signed_path = response.json().get("url", "")
        url = f"{self.storage_url}{signed_path}" if signed_path.startswith("/") else signed_path
        return UploadDestination(url=url, reference=reference)

    async def transfer(self, destination: UploadDestination, content: bytes, content_type: str) -> BlobRef:
        """
        Upload bytes to a signed destination.

        Returns:
            The reference of the stored object
        """
        logger.debug(f"[STORAGE] Uploading {len(content)} bytes to {destination.reference}")
        response = await self._send(
            "PUT",
            destination.url,
            timeout=60.0,
            headers={"Content-Type": content_type or "application/octet-stream"},
            content=content,
        )
        if response.status_code not in (200, 201):
            logger.error(f"[STORAGE] Upload failed: {response.status_code} - {response.text}")
            raise StorageError(f"Upload failed: {response.status_code}")
        return destination.reference

    async def delete(self, reference: BlobRef) -> None:
        """Release a stored object."""
        url = f"{self.storage_url}/object/{self.bucket}/{self._object_path(reference)}"
        response = await self._send("DELETE", url, headers=self._headers())
        if _is_not_found(response):
            logger.warning(f"[STORAGE] {reference} was already gone, treating it as released")
            return
        if response.status_code not in (200, 204):
            logger.error(f"[STORAGE] Failed to delete {reference}: {response.status_code} - {response.text}")
            raise StorageError(f"Failed to delete photo {reference}: {response.status_code}")
        logger.info(f"[STORAGE] Deleted {reference}")

    async def get_url(self, reference: BlobRef) -> Optional[str]:
        """Fetch URL for a stored object, or None if it cannot be produced."""
        path = self._object_path(reference)
        if self.public_bucket:
            return f"{self.storage_url}/object/public/{self.bucket}/{path}"

        try:
            response = await self._send(
                "POST",
                f"{self.storage_url}/object/sign/{self.bucket}/{path}",
                headers=self._headers(),
                json={"expiresIn": self.signed_url_expires_in},
            )
        except StorageError:
            return None

        if response.status_code != 200:
            logger.error(f"Failed to create signed URL: {response.status_code} - {response.text}")
            return None

        signed_path = response.json().get("signedURL", "")
        if signed_path.startswith("/"):
            return f"{self.storage_url}{signed_path}"
        return signed_path or None


@lru_cache
def get_blob_store() -> BlobStore:
    """Dependency returning the configured blob store."""
    return SupabaseBlobStore(
        supabase_url=settings.supabase_url,
        supabase_key=settings.supabase_secret_key,
        bucket=settings.storage_bucket,
        public_bucket=settings.storage_public_bucket,
        signed_url_expires_in=settings.signed_url_expires_in,
    )
