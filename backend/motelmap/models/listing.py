"""Listing model for motels."""
from sqlalchemy import Column, String, Text, BigInteger, Enum, JSON
import uuid
from motelmap.constants import ListingStatus, Plan
from motelmap.database import Base


def _values(enum_cls):
    return [m.value for m in enum_cls]


class Listing(Base):
    """Motel listing owned by an identity provider subject."""
    __tablename__ = "listings"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    owner_id = Column(String, nullable=False, index=True)  # Trusted subject, not a foreign key
    name = Column(String, nullable=False)
    description = Column(Text, nullable=False, default="")
    plan = Column(
        Enum(Plan, name="listing_plan", native_enum=False, values_callable=_values),
        nullable=False,
        default=Plan.FREE,
    )
    status = Column(
        Enum(ListingStatus, name="listing_status", native_enum=False, values_callable=_values),
        nullable=False,
        default=ListingStatus.PENDING,
        index=True,
    )
    location = Column(JSON, nullable=False)  # {"lat", "lng", "address"}
    phone = Column(String, nullable=True)
    whatsapp = Column(String, nullable=True)
    tripadvisor = Column(String, nullable=True)
    hours = Column(String, nullable=True)
    periods = Column(JSON, nullable=True)  # {"twoHours", "fourHours", "twelveHours"}, each optional
    services = Column(JSON, nullable=False, default=list)
    accessories = Column(JSON, nullable=False, default=list)
    photos = Column(JSON, nullable=False, default=list)  # Blob references, bounded by plan quota
    created_at = Column(BigInteger, nullable=False)  # Milliseconds since epoch
