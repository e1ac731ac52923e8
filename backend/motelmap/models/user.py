"""User model for identity provider subjects."""
from sqlalchemy import Column, String, BigInteger, Enum
import uuid
from motelmap.constants import Role
from motelmap.database import Base


class User(Base):
    """User record mirrored from the identity provider."""
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String, unique=True, nullable=False, index=True)  # Identity provider subject
    name = Column(String, nullable=False)
    email = Column(String, nullable=False)
    role = Column(
        Enum(Role, name="user_role", native_enum=False, values_callable=lambda e: [m.value for m in e]),
        nullable=True,
    )
    created_at = Column(BigInteger, nullable=False)  # Milliseconds since epoch
