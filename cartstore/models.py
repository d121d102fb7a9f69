"""Catalog Models - Pydantic models for products and stock records."""
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, field_validator

from cartstore.money import parse_price


class Product(BaseModel):
    """Catalog product. In the cart, `amount` is the quantity selected."""
    model_config = ConfigDict(extra="ignore")

    id: int
    title: str
    price: Decimal
    image: Optional[str] = None
    amount: int = 0

    @field_validator("price", mode="before")
    @classmethod
    def convert_price_to_decimal(cls, v):
        return parse_price(v)

    def with_amount(self, amount: int) -> "Product":
        """Return a copy carrying the given cart quantity."""
        return self.model_copy(update={"amount": amount})


class Stock(BaseModel):
    """Units available for a product."""
    model_config = ConfigDict(extra="ignore")

    id: int
    amount: int
