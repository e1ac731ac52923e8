"""Schemas for photo uploads."""
from pydantic import BaseModel, Field
from typing import List, Optional


class UploadDestinationResponse(BaseModel):
    """One-time write destination handed to a client."""
    upload_url: str
    reference: str


class PhotoEntry(BaseModel):
    """A photo in an in-progress photo list. Only the reference is ever persisted."""
    reference: str
    preview_url: Optional[str] = None


class PhotoBatchResponse(BaseModel):
    """Result of a photo batch upload."""
    listing_id: str
    photos: List[PhotoEntry] = Field(default_factory=list)
    quota: int
