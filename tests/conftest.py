"""Pytest configuration and fixtures"""
import json
import os
from unittest.mock import Mock

import pytest

# Keep test runs independent of the developer's environment
os.environ.setdefault("LOG_LEVEL", "DEBUG")
os.environ.setdefault("UPSTASH_REDIS_REST_URL", "")
os.environ.setdefault("UPSTASH_REDIS_REST_TOKEN", "")

from cartstore.cart import CartStore, MemoryCartStorage  # noqa: E402
from cartstore.errors import InventoryError  # noqa: E402
from cartstore.models import Product, Stock  # noqa: E402


def make_product(product_id: int, amount: int = 0, price: float = 100.0) -> Product:
    """Catalog product with predictable attributes."""
    return Product(
        id=product_id,
        title=f"Sneaker {product_id}",
        price=price,
        image=f"https://cdn.test/sneakers/{product_id}.jpg",
        amount=amount,
    )


def cart_json(*items: tuple[int, int]) -> str:
    """Serialized snapshot for (product_id, amount) pairs."""
    return json.dumps([
        {**make_product(pid).model_dump(mode="json"), "price": 100.0, "amount": amount}
        for pid, amount in items
    ])


class FakeInventory:
    """In-memory inventory lookup that records calls."""

    def __init__(self, stock: dict[int, int] | None = None, products: dict[int, Product] | None = None):
        self.stock = dict(stock or {})
        self.products = dict(products) if products is not None else {pid: make_product(pid) for pid in self.stock}
        self.calls: list[tuple[str, int]] = []

    async def get_stock(self, product_id: int) -> Stock:
        self.calls.append(("stock", product_id))
        if product_id not in self.stock:
            raise InventoryError(f"Stock for {product_id} not found", product_id, not_found=True)
        return Stock(id=product_id, amount=self.stock[product_id])

    async def get_product(self, product_id: int) -> Product:
        self.calls.append(("product", product_id))
        if product_id not in self.products:
            raise InventoryError(f"Product {product_id} not found", product_id, not_found=True)
        return self.products[product_id]


@pytest.fixture
def inventory():
    """Inventory with stock 5 for product 1 and 3 for product 2"""
    return FakeInventory(stock={1: 5, 2: 3})


@pytest.fixture
def notifier():
    """Notifier mock exposing only notify_error"""
    return Mock(spec=["notify_error"])


@pytest.fixture
def storage():
    """Empty in-memory storage"""
    return MemoryCartStorage()


@pytest.fixture
def store(inventory, notifier, storage):
    """Cart store over an empty cart"""
    return CartStore(inventory, notifier, storage)


@pytest.fixture
def store_with_cart(inventory, notifier):
    """Factory: loaded cart store holding the given (product_id, amount) items"""
    async def factory(*items: tuple[int, int]) -> CartStore:
        store = CartStore(inventory, notifier, MemoryCartStorage(cart_json(*items)))
        await store.load()
        return store
    return factory
