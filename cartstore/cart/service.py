"""Cart store: validated mutations over a persisted cart snapshot."""
from typing import Optional

from pydantic import ValidationError

from cartstore.errors import (
    ERROR_ADD_PRODUCT,
    ERROR_OUT_OF_STOCK,
    ERROR_REMOVE_PRODUCT,
    ERROR_UPDATE_PRODUCT_AMOUNT,
    InventoryError,
)
from cartstore.logging import get_logger, sanitize_id_for_logging
from cartstore.models import Product, Stock
from cartstore.money import DEFAULT_CURRENCY, format_money, multiply, round_money, to_float
from cartstore.services.inventory import InventoryLookup
from cartstore.services.notifications import Notifier

from .models import Cart, CartFailure, CartOutcome
from .storage import CartStorage

logger = get_logger(__name__)


def next_cart_after_add(cart: Cart, product: Product, stock: Stock) -> CartOutcome:
    """Increment an existing item or append a new one with amount 1."""
    existing = cart.get(product.id)
    requested = (existing.amount if existing else 0) + 1
    if requested > stock.amount:
        return CartOutcome.failed(CartFailure.OUT_OF_STOCK)

    if existing is None:
        return CartOutcome.ok(Cart(cart.items + (product.with_amount(1),)))
    return CartOutcome.ok(Cart(tuple(
        item.with_amount(requested) if item.id == product.id else item
        for item in cart.items
    )))


def next_cart_after_remove(cart: Cart, product_id: int) -> CartOutcome:
    """Drop the item; fails when it is not in the cart."""
    items = tuple(item for item in cart.items if item.id != product_id)
    if len(items) == len(cart.items):
        return CartOutcome.failed(CartFailure.NOT_IN_CART)
    return CartOutcome.ok(Cart(items))


def next_cart_after_update(cart: Cart, product_id: int, amount: int, stock: Stock) -> CartOutcome:
    """Set the item amount exactly. Absent items are skipped, not created."""
    if product_id in cart and amount > stock.amount:
        return CartOutcome.failed(CartFailure.OUT_OF_STOCK)
    return CartOutcome.ok(Cart(tuple(
        item.with_amount(amount) if item.id == product_id else item
        for item in cart.items
    )))


class CartStore:
    """
    Session-scoped cart.

    Lifecycle: construct, `await load()`, call the mutations, `await close()`.
    Also usable as `async with CartStore(...) as store`.

    Mutations never raise for business conditions. Each one computes the next
    snapshot, persists it whole and swaps it in, or reports a single message
    to the notifier and leaves the cart as it was. They return True on
    success and False otherwise.

    Operations are expected to be awaited one at a time; overlapping calls
    are last-writer-wins.
    """

    def __init__(self, inventory: InventoryLookup, notifier: Notifier, storage: CartStorage):
        self.inventory = inventory
        self.notifier = notifier
        self.storage = storage
        self._cart = Cart.empty()

    @property
    def cart(self) -> Cart:
        """Current snapshot."""
        return self._cart

    async def __aenter__(self) -> "CartStore":
        await self.load()
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.close()

    async def load(self) -> Cart:
        """Hydrate from storage. Missing or corrupted data gives an empty cart."""
        data = await self.storage.load()
        if not data:
            self._cart = Cart.empty()
            return self._cart

        try:
            self._cart = Cart.from_json(data)
        except (ValueError, TypeError, ValidationError) as e:
            # Corrupted data - clear it and start empty
            logger.warning(f"Corrupted cart snapshot, starting empty: {e}")
            await self.storage.clear()
            self._cart = Cart.empty()
        return self._cart

    async def close(self) -> None:
        """Release the collaborators that hold connections."""
        for resource in (self.inventory, self.notifier):
            aclose = getattr(resource, "aclose", None)
            if aclose is not None:
                await aclose()

    async def _commit(self, cart: Cart) -> None:
        await self.storage.save(cart.to_json())
        self._cart = cart

    def _reject(self, outcome: CartOutcome, generic_message: str) -> bool:
        if outcome.failure is CartFailure.OUT_OF_STOCK:
            self.notifier.notify_error(ERROR_OUT_OF_STOCK)
        else:
            self.notifier.notify_error(generic_message)
        return False

    async def add_product(self, product_id: int) -> bool:
        """Add one unit of a product, bounded by current stock."""
        safe_id = sanitize_id_for_logging(product_id)
        try:
            stock = await self.inventory.get_stock(product_id)
            product = await self.inventory.get_product(product_id)
        except InventoryError as e:
            logger.warning(f"Add of product {safe_id} failed: {e}")
            return self._reject(CartOutcome.failed(CartFailure.RESOLUTION), ERROR_ADD_PRODUCT)

        outcome = next_cart_after_add(self._cart, product, stock)
        if not outcome.succeeded:
            logger.info(f"Add of product {safe_id} rejected: {outcome.failure.value} (stock {stock.amount})")
            return self._reject(outcome, ERROR_ADD_PRODUCT)

        await self._commit(outcome.cart)
        logger.info(f"Product {safe_id} added, amount now {outcome.cart.get(product.id).amount}")
        return True

    async def remove_product(self, product_id: int) -> bool:
        """Remove a product line entirely."""
        outcome = next_cart_after_remove(self._cart, product_id)
        if not outcome.succeeded:
            logger.info(f"Remove of product {sanitize_id_for_logging(product_id)} rejected: not in cart")
            return self._reject(outcome, ERROR_REMOVE_PRODUCT)

        await self._commit(outcome.cart)
        logger.info(f"Product {sanitize_id_for_logging(product_id)} removed")
        return True

    async def update_product_amount(self, product_id: int, amount: int) -> bool:
        """
        Set the quantity of a product already in the cart.

        Amounts <= 0 are ignored without notification. Products not in the
        cart are left out without error.
        """
        if amount <= 0:
            return False

        safe_id = sanitize_id_for_logging(product_id)
        try:
            stock = await self.inventory.get_stock(product_id)
        except InventoryError as e:
            logger.warning(f"Update of product {safe_id} failed: {e}")
            return self._reject(CartOutcome.failed(CartFailure.RESOLUTION), ERROR_UPDATE_PRODUCT_AMOUNT)

        outcome = next_cart_after_update(self._cart, product_id, amount, stock)
        if not outcome.succeeded:
            logger.info(f"Update of product {safe_id} to {amount} rejected: stock {stock.amount}")
            return self._reject(outcome, ERROR_UPDATE_PRODUCT_AMOUNT)

        await self._commit(outcome.cart)
        logger.info(f"Product {safe_id} amount set to {amount}")
        return True

    def summary(self, currency: Optional[str] = None) -> dict:
        """Plain-data view of the cart for UI layers."""
        cart = self._cart
        currency = currency or DEFAULT_CURRENCY
        items = []
        for item in cart.items:
            line_total = round_money(multiply(item.price, item.amount))
            items.append({
                "id": item.id,
                "title": item.title,
                "image": item.image,
                "amount": item.amount,
                "price": to_float(item.price),
                "price_formatted": format_money(item.price, currency),
                "total": to_float(line_total),
                "total_formatted": format_money(line_total, currency),
            })

        return {
            "is_empty": not cart.items,
            "total_items": cart.total_items,
            "distinct_count": cart.distinct_count,
            "items": items,
            "subtotal": to_float(cart.subtotal),
            "subtotal_formatted": format_money(cart.subtotal, currency),
        }
