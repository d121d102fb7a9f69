"""Cart snapshot and the outcome of a cart mutation."""
import json
from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Iterator, Optional

from cartstore.models import Product
from cartstore.money import multiply, round_money


class CartFailure(str, Enum):
    """Why a mutation was rejected."""
    RESOLUTION = "resolution"  # Product or stock could not be fetched
    OUT_OF_STOCK = "out_of_stock"  # Requested quantity above available stock
    NOT_IN_CART = "not_in_cart"  # Remove targeted an absent product


@dataclass(frozen=True)
class Cart:
    """
    Ordered snapshot of cart line items.

    Snapshots are never modified; every mutation builds the next one.
    Items are unique by product id and carry amount >= 1.
    """
    items: tuple[Product, ...] = ()

    @classmethod
    def empty(cls) -> "Cart":
        return cls(())

    def __len__(self) -> int:
        return len(self.items)

    def __iter__(self) -> Iterator[Product]:
        return iter(self.items)

    def __contains__(self, product_id: object) -> bool:
        return self.get(product_id) is not None

    def get(self, product_id: object) -> Optional[Product]:
        """Find the line item for a product id."""
        return next((item for item in self.items if item.id == product_id), None)

    @property
    def total_items(self) -> int:
        """Total number of units in cart."""
        return sum(item.amount for item in self.items)

    @property
    def distinct_count(self) -> int:
        """Number of different products in cart."""
        return len(self.items)

    @property
    def subtotal(self) -> Decimal:
        """Sum of price * amount over all items."""
        return round_money(sum((multiply(item.price, item.amount) for item in self.items), Decimal("0")))

    def to_list(self) -> list[dict]:
        """Convert to plain dicts (prices as decimal strings)."""
        return [item.model_dump(mode="json") for item in self.items]

    def to_json(self) -> str:
        """Serialize the whole snapshot for storage."""
        return json.dumps(self.to_list(), ensure_ascii=False)

    @classmethod
    def from_list(cls, data: list) -> "Cart":
        """
        Build a cart from stored dicts.

        Duplicate ids are merged into the first occurrence and items with
        amount < 1 are dropped.

        Raises:
            TypeError: data is not a list
            pydantic.ValidationError: an item is not a valid product
        """
        if not isinstance(data, list):
            raise TypeError(f"Cart snapshot must be a list, got {type(data).__name__}")

        merged: dict[int, Product] = {}
        for raw in data:
            product = Product.model_validate(raw)
            if product.id in merged:
                previous = merged[product.id]
                merged[product.id] = previous.with_amount(previous.amount + product.amount)
            else:
                merged[product.id] = product

        return cls(tuple(item for item in merged.values() if item.amount >= 1))

    @classmethod
    def from_json(cls, text: str) -> "Cart":
        """Parse a stored snapshot. Raises ValueError/TypeError on bad data."""
        return cls.from_list(json.loads(text))


@dataclass(frozen=True)
class CartOutcome:
    """Result of computing the next snapshot: a cart or a failure reason."""
    cart: Optional[Cart] = None
    failure: Optional[CartFailure] = None

    @classmethod
    def ok(cls, cart: Cart) -> "CartOutcome":
        return cls(cart=cart)

    @classmethod
    def failed(cls, failure: CartFailure) -> "CartOutcome":
        return cls(failure=failure)

    @property
    def succeeded(self) -> bool:
        return self.failure is None
