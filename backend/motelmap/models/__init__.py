"""Models package."""
from motelmap.models.user import User
from motelmap.models.listing import Listing
from motelmap.models.upload import PhotoUpload

__all__ = ["User", "Listing", "PhotoUpload"]
