"""Application-wide constants."""
import enum
from typing import Dict, Optional


class Role(str, enum.Enum):
    """User roles. A user without a stored role is a plain user."""
    ADMIN = "admin"
    OWNER = "owner"
    USER = "user"

    @classmethod
    def from_stored(cls, value: Optional["Role"]) -> "Role":
        return value if value is not None else cls.USER


class Plan(str, enum.Enum):
    """Listing plans."""
    FREE = "free"
    PREMIUM = "premium"


class ListingStatus(str, enum.Enum):
    """Listing visibility states, controlled by admins."""
    PENDING = "pending"
    APPROVED = "approved"
    PAUSED = "paused"


# Maximum number of photos a listing may hold per plan
PLAN_PHOTO_QUOTA: Dict[Plan, int] = {
    Plan.FREE: 3,
    Plan.PREMIUM: 10,
}

EARTH_RADIUS_KM = 6371.0


def photo_quota(plan: Plan) -> int:
    """Return the photo quota for a plan."""
    return PLAN_PHOTO_QUOTA[Plan(plan)]
