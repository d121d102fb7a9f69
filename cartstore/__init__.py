"""
cartstore - Shopping cart state manager

Keeps a persisted, stock-validated cart for a single shopping session.
"""
from cartstore.cart import Cart, CartStore, MemoryCartStorage, RedisCartStorage
from cartstore.errors import InventoryError
from cartstore.models import Product, Stock
from cartstore.services import InventoryClient, LogNotifier, TelegramNotifier

__all__ = [
    "Cart",
    "CartStore",
    "InventoryClient",
    "InventoryError",
    "LogNotifier",
    "MemoryCartStorage",
    "Product",
    "RedisCartStorage",
    "Stock",
    "TelegramNotifier",
]
