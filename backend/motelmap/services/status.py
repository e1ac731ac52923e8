"""Listing status transitions.

Every status can move to every other status; only admins may move them.
Deleting a listing leaves the machine from any state.
"""
from typing import Dict, FrozenSet

from motelmap.constants import ListingStatus
from motelmap.utils.exceptions import ValidationError
from motelmap.utils.logger import logger

INITIAL_STATUS = ListingStatus.PENDING

ALLOWED_TRANSITIONS: Dict[ListingStatus, FrozenSet[ListingStatus]] = {
    status: frozenset(ListingStatus) for status in ListingStatus
}


def can_transition(current: ListingStatus, target: ListingStatus) -> bool:
    return ListingStatus(target) in ALLOWED_TRANSITIONS[ListingStatus(current)]


def apply_transition(listing, target: ListingStatus) -> ListingStatus:
    """
    Move a listing to a new status.

    Args:
        listing: Listing model instance
        target: Status to move to

    Returns:
        The previous status
    """
    current = ListingStatus(listing.status)
    target = ListingStatus(target)
    if not can_transition(current, target):
        raise ValidationError(f"Cannot move listing from {current.value} to {target.value}")

    listing.status = target
    logger.info(f"[STATUS] Listing {listing.id}: {current.value} -> {target.value}")
    return current
