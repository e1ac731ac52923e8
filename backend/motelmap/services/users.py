"""User records mirrored from the identity provider."""
import time
from typing import Optional
from sqlalchemy.orm import Session

from motelmap.auth.identity import Identity
from motelmap.config import settings
from motelmap.constants import Role
from motelmap.ids import UserSubject
from motelmap.models import User
from motelmap.services.policy import Caller, require_admin
from motelmap.utils.exceptions import NotFoundError
from motelmap.utils.logger import logger


def get_user(db: Session, subject: UserSubject) -> Optional[User]:
    return db.query(User).filter(User.user_id == subject).first()


def store_user(
    db: Session,
    identity: Identity,
    name: Optional[str] = None,
    email: Optional[str] = None,
) -> User:
    """
    Create the user on first contact, or patch name/email when they drift.

    Args:
        db: Database session
        identity: Authenticated caller
        name: Display name, defaults to the identity provider's
        email: Email, defaults to the identity provider's

    Returns:
        The stored user
    """
    name = name or identity.name
    email = email if email is not None else identity.email

    user = get_user(db, identity.subject)
    if user is not None:
        if user.name != name or user.email != email:
            user.name = name
            user.email = email
            db.commit()
            db.refresh(user)
        return user

    role = Role.ADMIN if identity.subject in settings.admin_subjects else Role.USER
    user = User(
        user_id=identity.subject,
        name=name,
        email=email,
        role=role,
        created_at=int(time.time() * 1000),
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    logger.info(f"[USERS] Stored new user {identity.subject} with role {role.value}")
    return user


def promote_to_owner(db: Session, subject: UserSubject) -> None:
    """Mark a plain user as a listing owner. Admins keep their role. Does not commit."""
    user = get_user(db, subject)
    if user is not None and Role.from_stored(user.role) is Role.USER:
        user.role = Role.OWNER


def set_user_role(db: Session, caller: Caller, subject: UserSubject, role: Role) -> User:
    """Change a user's role. Admin only."""
    require_admin(caller)
    user = get_user(db, subject)
    if user is None:
        raise NotFoundError("User", subject)

    user.role = Role(role)
    db.commit()
    db.refresh(user)
    logger.info(f"[USERS] {caller.subject} set role of {subject} to {user.role.value}")
    return user
