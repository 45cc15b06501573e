from datetime import datetime
from decimal import Decimal
from urllib.parse import urlsplit
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_serializer, field_validator

ALLOWED_URL_SCHEMES = {"http", "https"}


def _web_url(value: str | None) -> str | None:
    # image and link are rendered into src/href on the public share page
    if value is None:
        return value
    parts = urlsplit(value)
    if parts.scheme.lower() not in ALLOWED_URL_SCHEMES or not parts.netloc:
        raise ValueError("must be an http(s) URL")
    return value


class ItemCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    name: str = Field(min_length=1, max_length=255)
    price: Decimal = Field(ge=0, max_digits=10, decimal_places=2)
    image: str = Field(min_length=1)
    link: str | None = None

    @field_validator("link")
    @classmethod
    def _blank_link_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("image", "link")
    @classmethod
    def _urls_are_web(cls, value: str | None) -> str | None:
        return _web_url(value)


class ItemUpdate(BaseModel):
    """Partial update; only fields present in the payload are written."""

    model_config = ConfigDict(str_strip_whitespace=True)

    name: str | None = Field(default=None, min_length=1, max_length=255)
    price: Decimal | None = Field(default=None, ge=0, max_digits=10, decimal_places=2)
    image: str | None = Field(default=None, min_length=1)
    link: str | None = None

    @field_validator("name", "price", "image")
    @classmethod
    def _required_columns_not_null(cls, value):
        if value is None:
            raise ValueError("field may be omitted but not null")
        return value

    @field_validator("link")
    @classmethod
    def _blank_link_is_none(cls, value: str | None) -> str | None:
        return value or None

    @field_validator("image", "link")
    @classmethod
    def _urls_are_web(cls, value: str | None) -> str | None:
        return _web_url(value)


class ItemRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    price: Decimal
    image: str
    link: str | None = None
    created_at: datetime

    @field_serializer("price")
    def _price_as_text(self, value: Decimal) -> str:
        return f"{value:.2f}"


class WishlistRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    share_slug: str
    share_url: str


class SharedWishlistRead(BaseModel):
    share_slug: str
    items: list[ItemRead] = []
