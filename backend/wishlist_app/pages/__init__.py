from wishlist_app.pages.router import router

__all__ = ["router"]
