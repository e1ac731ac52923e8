"""Pydantic schemas for request/response validation."""
from motelmap.schemas.listing import ListingCreate, ListingUpdate, ListingResponse, StatusUpdate
from motelmap.schemas.draft import ListingDraft
from motelmap.schemas.upload import PhotoEntry, UploadDestinationResponse
from motelmap.schemas.user import UserResponse, RoleUpdate

__all__ = [
    "ListingCreate",
    "ListingUpdate",
    "ListingResponse",
    "StatusUpdate",
    "ListingDraft",
    "PhotoEntry",
    "UploadDestinationResponse",
    "UserResponse",
    "RoleUpdate",
]
