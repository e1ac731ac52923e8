"""Shared route dependencies."""
from typing import Optional
from fastapi import Depends
from sqlalchemy.orm import Session

from motelmap.auth.identity import Identity, get_optional_identity
from motelmap.database import get_db
from motelmap.services.policy import Caller, resolve_caller
from motelmap.utils.exceptions import AuthenticationError, authentication_error


def get_caller(
    identity: Optional[Identity] = Depends(get_optional_identity),
    db: Session = Depends(get_db),
) -> Caller:
    """
    Resolve the authenticated caller and their role.

    Raises HTTPException 401 for anonymous callers.
    """
    try:
        return resolve_caller(db, identity)
    except AuthenticationError as e:
        raise authentication_error(str(e))
