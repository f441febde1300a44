"""
Product API schemas (request bodies).
"""

from __future__ import annotations

from decimal import Decimal
from typing import Annotated

from pydantic import AnyHttpUrl, BaseModel, Field, field_serializer, field_validator
from pydantic.networks import UrlConstraints

# Matches the products.price column: numeric(12, 2).
PRICE_MAX_DIGITS = 12
PRICE_DECIMAL_PLACES = 2

LinkUrl = Annotated[AnyHttpUrl, UrlConstraints(max_length=2048)]


class ProductIn(BaseModel):
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)
    price: Decimal = Field(
        ...,
        gt=0,
        max_digits=PRICE_MAX_DIGITS,
        decimal_places=PRICE_DECIMAL_PLACES,
        allow_inf_nan=False,
    )
    category_id: int = Field(..., gt=0)
    image_url: LinkUrl
    affiliate_url: LinkUrl
    address: str | None = Field(default=None, max_length=500)

    @field_validator("name", "description")
    @classmethod
    def _not_blank(cls, value: str, info) -> str:
        value = value.strip()
        if not value:
            raise ValueError(f"{info.field_name.capitalize()} is required")
        return value

    @field_serializer("image_url", "affiliate_url")
    def _url_text(self, value: AnyHttpUrl) -> str:
        # asyncpg binds text columns from str only.
        return str(value)
