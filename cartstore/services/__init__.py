"""External collaborators of the cart: inventory lookup and notifiers."""
from .inventory import InventoryClient, InventoryLookup
from .notifications import LogNotifier, Notifier, TelegramNotifier

__all__ = [
    "InventoryClient",
    "InventoryLookup",
    "LogNotifier",
    "Notifier",
    "TelegramNotifier",
]
