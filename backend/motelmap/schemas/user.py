"""Schemas for users."""
from pydantic import BaseModel
from typing import Optional

from motelmap.constants import Role


class UserResponse(BaseModel):
    """User response."""
    id: str
    user_id: str
    name: str
    email: str
    role: Role
    created_at: int

    class Config:
        from_attributes = True

    @classmethod
    def from_orm(cls, obj) -> "UserResponse":
        """Convert SQLAlchemy model to response model."""
        return cls(
            id=obj.id,
            user_id=obj.user_id,
            name=obj.name,
            email=obj.email,
            role=Role.from_stored(obj.role),
            created_at=obj.created_at,
        )


class RoleUpdate(BaseModel):
    """Request schema for an admin role change."""
    role: Role


class StoreUserRequest(BaseModel):
    """Optional profile values sent by the client when it has fresher ones than the token."""
    name: Optional[str] = None
    email: Optional[str] = None
