"""Upload grant model for photo references handed out to callers."""
from sqlalchemy import Column, String, BigInteger
from motelmap.database import Base


class PhotoUpload(Base):
    """
    A blob reference issued to a caller through an upload destination.

    A grant is consumed when the reference is first attached to a listing,
    so a reference can only ever belong to one listing.
    """
    __tablename__ = "photo_uploads"

    reference = Column(String, primary_key=True)
    issued_to = Column(String, nullable=False, index=True)  # Identity provider subject
    created_at = Column(BigInteger, nullable=False)  # Milliseconds since epoch
