"""Cart package: snapshot models, storage, and the cart store."""
from .models import Cart, CartFailure, CartOutcome
from .service import CartStore
from .storage import CartStorage, MemoryCartStorage, RedisCartStorage

__all__ = [
    "Cart",
    "CartFailure",
    "CartOutcome",
    "CartStore",
    "CartStorage",
    "MemoryCartStorage",
    "RedisCartStorage",
]
