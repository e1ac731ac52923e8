"""Schemas for listing management."""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional

from motelmap.constants import ListingStatus, Plan

# Fields a patch may not set to null
REQUIRED_FIELDS = ("name", "description", "plan", "location", "services", "accessories", "photos")


class Location(BaseModel):
    """Listing location."""
    lat: float = Field(..., ge=-90, le=90)
    lng: float = Field(..., ge=-180, le=180)
    address: str


class Periods(BaseModel):
    """Free-text prices per stay length. Stored with camelCase keys."""
    two_hours: Optional[str] = Field(None, alias="twoHours")
    four_hours: Optional[str] = Field(None, alias="fourHours")
    twelve_hours: Optional[str] = Field(None, alias="twelveHours")

    class Config:
        populate_by_name = True

    def to_document(self) -> Dict[str, str]:
        return self.model_dump(by_alias=True, exclude_none=True)


def _to_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Convert nested models in a dumped payload to their stored shape."""
    document = dict(data)
    if document.get("location") is not None:
        document["location"] = Location.model_validate(document["location"]).model_dump()
    if document.get("periods") is not None:
        document["periods"] = Periods.model_validate(document["periods"]).to_document()
    return document


class ListingCreate(BaseModel):
    """Request schema for creating a listing."""
    name: str = Field(..., min_length=1)
    description: str = ""
    plan: Plan = Plan.FREE
    location: Location
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    tripadvisor: Optional[str] = None
    hours: Optional[str] = None
    periods: Optional[Periods] = None
    services: List[str] = Field(default_factory=list)
    accessories: List[str] = Field(default_factory=list)
    photos: List[str] = Field(default_factory=list, description="Blob references")

    def to_document(self) -> Dict[str, Any]:
        """Fields to persist on a new listing."""
        return _to_document(self.model_dump(by_alias=True))


class ListingUpdate(BaseModel):
    """Request schema for patching a listing. Only supplied fields change."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    plan: Optional[Plan] = None
    location: Optional[Location] = None
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    tripadvisor: Optional[str] = None
    hours: Optional[str] = None
    periods: Optional[Periods] = None
    services: Optional[List[str]] = None
    accessories: Optional[List[str]] = None
    photos: Optional[List[str]] = None

    def to_changes(self) -> Dict[str, Any]:
        """Supplied fields in their stored shape."""
        return _to_document(self.model_dump(exclude_unset=True, by_alias=True))


class StatusUpdate(BaseModel):
    """Request schema for an admin status change."""
    status: ListingStatus


class ListingResponse(BaseModel):
    """Listing response with resolved photo URLs."""
    id: str
    owner_id: str
    name: str
    description: str
    plan: Plan
    status: ListingStatus
    location: Location
    phone: Optional[str] = None
    whatsapp: Optional[str] = None
    tripadvisor: Optional[str] = None
    hours: Optional[str] = None
    periods: Optional[Periods] = None
    services: List[str]
    accessories: List[str]
    photos: List[str]
    photo_urls: List[Optional[str]] = Field(default_factory=list)
    created_at: int
    distance_km: Optional[float] = None

    class Config:
        from_attributes = True
        populate_by_name = True

    @classmethod
    def from_orm(
        cls,
        obj,
        photo_urls: Optional[List[Optional[str]]] = None,
        distance_km: Optional[float] = None,
    ) -> "ListingResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=obj.id,
            owner_id=obj.owner_id,
            name=obj.name,
            description=obj.description,
            plan=obj.plan,
            status=obj.status,
            location=Location.model_validate(obj.location),
            phone=obj.phone,
            whatsapp=obj.whatsapp,
            tripadvisor=obj.tripadvisor,
            hours=obj.hours,
            periods=Periods.model_validate(obj.periods) if obj.periods is not None else None,
            services=list(obj.services or []),
            accessories=list(obj.accessories or []),
            photos=list(obj.photos or []),
            photo_urls=photo_urls or [],
            created_at=obj.created_at,
            distance_km=distance_km,
        )
