from wishlist_app.state.store import ItemForm, Notice, WishlistStore

__all__ = ["ItemForm", "Notice", "WishlistStore"]
