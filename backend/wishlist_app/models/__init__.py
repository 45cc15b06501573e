from wishlist_app.db.base import Base  # noqa: F401
from wishlist_app.models.owner import Owner  # noqa: F401
from wishlist_app.models.wishlist import Wishlist, WishlistItem  # noqa: F401

__all__ = ["Base", "Owner", "Wishlist", "WishlistItem"]
