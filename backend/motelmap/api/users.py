"""User API endpoints."""
from typing import Optional
from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from motelmap.auth.identity import Identity, get_optional_identity
from motelmap.database import get_db
from motelmap.schemas.user import StoreUserRequest, UserResponse
from motelmap.services import users as user_service
from motelmap.utils.exceptions import authentication_error, handle_service_error

router = APIRouter(prefix="/api/users", tags=["users"])


@router.post("/me", response_model=UserResponse)
async def store_user(
    profile: Optional[StoreUserRequest] = Body(None),
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> UserResponse:
    """
    Record the caller on first contact and keep name/email in sync.

    Args:
        profile: Optional name/email overriding the token's claims
        identity: Authenticated caller
        db: Database session

    Returns:
        The stored user
    """
    if identity is None:
        raise authentication_error("Log in required")

    try:
        user = user_service.store_user(
            db,
            identity,
            name=profile.name if profile else None,
            email=profile.email if profile else None,
        )
        return UserResponse.from_orm(user)
    except HTTPException:
        raise
    except Exception as e:
        db.rollback()
        raise handle_service_error(e, "store_user")


@router.get("/me", response_model=Optional[UserResponse])
async def get_me(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> Optional[UserResponse]:
    """The caller's user record, or null for anonymous or unknown callers."""
    if identity is None:
        return None
    user = user_service.get_user(db, identity.subject)
    return UserResponse.from_orm(user) if user else None
