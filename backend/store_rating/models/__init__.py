"""SQLAlchemy models for the store rating API."""

from store_rating.models.user import User, UserRole
from store_rating.models.store import Store
from store_rating.models.rating import Rating

__all__ = [
    "User",
    "UserRole",
    "Store",
    "Rating",
]
