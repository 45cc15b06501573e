from typing import Any, Literal

from pydantic import BaseModel, Field

ErrorCode = Literal["wishlist_error", "not_authenticated", "not_found", "validation_error", "storage_error"]


class ErrorResponse(BaseModel):
    """Body of every non-2xx JSON response.

    ``code`` names the ``WishlistError`` kind behind the failure. Plain HTTP
    errors such as unknown routes or provider misconfiguration leave it empty.
    """

    detail: Any = Field(description="Message, or the list of field errors for validation failures")
    code: ErrorCode | None = None


# Shared ``responses=`` entries for routers whose handlers raise ``WishlistError``.
OWNER_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
    422: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}
PUBLIC_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    404: {"model": ErrorResponse},
    503: {"model": ErrorResponse},
}
