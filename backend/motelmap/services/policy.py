"""Access-control policy for listings."""
from dataclasses import dataclass
from typing import Optional
from sqlalchemy.orm import Session

from motelmap.auth.identity import Identity
from motelmap.constants import Role
from motelmap.ids import UserSubject
from motelmap.models import Listing, User
from motelmap.utils.exceptions import AuthenticationError, AuthorizationError


@dataclass(frozen=True)
class Caller:
    """A resolved caller: identity subject plus stored role."""
    subject: UserSubject
    role: Role = Role.USER


def resolve_caller(db: Session, identity: Optional[Identity]) -> Caller:
    """
    Resolve the caller's role from the users table.

    Raises:
        AuthenticationError: If there is no identity
    """
    if identity is None:
        raise AuthenticationError("Log in required")

    user = db.query(User).filter(User.user_id == identity.subject).first()
    role = Role.from_stored(user.role) if user else Role.USER
    return Caller(subject=identity.subject, role=role)


def is_admin(caller: Caller) -> bool:
    return caller.role is Role.ADMIN


def can_mutate(caller: Caller, listing: Listing) -> bool:
    """Owners may mutate their own listings, admins may mutate any listing."""
    return caller.subject == listing.owner_id or is_admin(caller)


def require_admin(caller: Caller) -> None:
    if not is_admin(caller):
        raise AuthorizationError("Permission denied: admin role required")


def require_mutation(caller: Caller, listing: Listing) -> None:
    if not can_mutate(caller, listing):
        raise AuthorizationError("Permission denied: you don't own this listing")
