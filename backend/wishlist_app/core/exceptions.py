"""
Error kinds raised by the data-access layer and the identity plumbing.

The HTTP layer renders every ``WishlistError`` as the shared ``ErrorResponse``
shape; the application-state store turns them into user-facing messages.
"""

from fastapi import status


class WishlistError(Exception):
    """Base class for all wishlist errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "wishlist_error"
    default_detail: str = "Something went wrong"

    def __init__(self, detail: str | None = None) -> None:
        self.detail = detail or self.default_detail
        super().__init__(self.detail)


class NotAuthenticated(WishlistError):
    """No owner context for an owner-scoped operation."""

    status_code = status.HTTP_401_UNAUTHORIZED
    code = "not_authenticated"
    default_detail = "Not authenticated"


class NotFound(WishlistError):
    """Item or share slug does not resolve for the caller."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"
    default_detail = "Not found"


class ValidationError(WishlistError):
    """Required field missing or malformed before reaching storage."""

    status_code = status.HTTP_422_UNPROCESSABLE_ENTITY
    code = "validation_error"
    default_detail = "Invalid item fields"

    def __init__(self, detail: str | None = None, errors: list[dict] | None = None) -> None:
        super().__init__(detail)
        self.errors = errors or []


class StorageError(WishlistError):
    """Underlying read/write failure, including constraint violations."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    code = "storage_error"
    default_detail = "Storage unavailable"
