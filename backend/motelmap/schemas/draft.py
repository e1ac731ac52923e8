"""Editable form state for a listing.

A draft mirrors the owner dashboard form: every field is text, the
service and accessory lists are comma separated, and photos carry an
ephemeral preview next to their blob reference. Drafts are never stored;
they are loaded from a listing and serialized back into a create payload.
"""
from pydantic import BaseModel, Field
from typing import List, Optional, Sequence

from motelmap.constants import Plan
from motelmap.schemas.listing import ListingCreate, Location, Periods
from motelmap.schemas.upload import PhotoEntry
from motelmap.utils.exceptions import ValidationError


def split_list(value: str) -> List[str]:
    """Split a comma separated field, dropping blank items."""
    return [item.strip() for item in value.split(",") if item.strip()]


def _blank_to_none(value: str) -> Optional[str]:
    value = value.strip()
    return value or None


class ListingDraft(BaseModel):
    """Form state for creating or editing a listing."""
    listing_id: Optional[str] = None  # Set when editing an existing listing
    name: str = ""
    description: str = ""
    plan: Plan = Plan.FREE
    lat: str = ""
    lng: str = ""
    address: str = ""
    phone: str = ""
    whatsapp: str = ""
    tripadvisor: str = ""
    hours: str = ""
    two_hours: str = ""
    four_hours: str = ""
    twelve_hours: str = ""
    services: str = ""
    accessories: str = ""
    photos: List[PhotoEntry] = Field(default_factory=list)

    @classmethod
    def from_listing(cls, listing, photo_urls: Sequence[Optional[str]] = ()) -> "ListingDraft":
        """Load a draft from a stored listing. Photos whose URL is unavailable keep no preview."""
        periods = listing.periods or {}
        urls = list(photo_urls)
        photos = [
            PhotoEntry(reference=reference, preview_url=urls[i] if i < len(urls) else None)
            for i, reference in enumerate(listing.photos or [])
        ]

        return cls(
            listing_id=listing.id,
            name=listing.name,
            description=listing.description,
            plan=listing.plan,
            lat=str(listing.location["lat"]),
            lng=str(listing.location["lng"]),
            address=listing.location["address"],
            phone=listing.phone or "",
            whatsapp=listing.whatsapp or "",
            tripadvisor=listing.tripadvisor or "",
            hours=listing.hours or "",
            two_hours=periods.get("twoHours") or "",
            four_hours=periods.get("fourHours") or "",
            twelve_hours=periods.get("twelveHours") or "",
            services=", ".join(listing.services or []),
            accessories=", ".join(listing.accessories or []),
            photos=photos,
        )

    def to_payload(self) -> ListingCreate:
        """Serialize the draft into a mutation payload."""
        if not self.name.strip() or not self.address.strip() or not self.lat.strip() or not self.lng.strip():
            raise ValidationError("Name, address and coordinates are required")

        try:
            lat = float(self.lat)
            lng = float(self.lng)
        except ValueError:
            raise ValidationError("Coordinates must be numbers")

        periods = Periods(
            two_hours=_blank_to_none(self.two_hours),
            four_hours=_blank_to_none(self.four_hours),
            twelve_hours=_blank_to_none(self.twelve_hours),
        )
        try:
            location = Location(lat=lat, lng=lng, address=self.address.strip())
        except ValueError as e:
            raise ValidationError(f"Invalid coordinates: {e}")

        return ListingCreate(
            name=self.name.strip(),
            description=self.description,
            plan=self.plan,
            location=location,
            phone=_blank_to_none(self.phone),
            whatsapp=_blank_to_none(self.whatsapp),
            tripadvisor=_blank_to_none(self.tripadvisor),
            hours=_blank_to_none(self.hours),
            periods=periods if periods.to_document() else None,
            services=split_list(self.services),
            accessories=split_list(self.accessories),
            photos=[photo.reference for photo in self.photos],
        )
