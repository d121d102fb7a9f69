"""
Inventory Lookup

Fetches current stock and catalog data for a product from the store's REST
API (`GET /stock/{id}`, `GET /products/{id}`).
"""
import os
from typing import Optional, Protocol

import httpx
from pydantic import ValidationError

from cartstore.errors import InventoryError
from cartstore.logging import get_logger
from cartstore.models import Product, Stock

logger = get_logger(__name__)

INVENTORY_API_URL = os.environ.get("INVENTORY_API_URL", "http://localhost:3333")
INVENTORY_TIMEOUT = float(os.environ.get("INVENTORY_TIMEOUT", "10") or 10)


class InventoryLookup(Protocol):
    """Source of stock and product data. Both calls raise InventoryError."""

    async def get_stock(self, product_id: int) -> Stock: ...

    async def get_product(self, product_id: int) -> Product: ...


class InventoryClient:
    """httpx-based client for the inventory API."""

    def __init__(
        self,
        base_url: str = INVENTORY_API_URL,
        timeout: float = INVENTORY_TIMEOUT,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http_client: Optional[httpx.AsyncClient] = None

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Lazily create the shared httpx client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=httpx.Timeout(self.timeout, connect=5.0),
                limits=httpx.Limits(max_connections=10, max_keepalive_connections=5),
                transport=self._transport,
            )
        return self._http_client

    async def _get_json(self, path: str, product_id: int) -> dict:
        client = await self._get_http_client()
        try:
            response = await client.get(path)
        except httpx.HTTPError as e:
            logger.warning(f"Inventory request {path} failed: {e}")
            raise InventoryError(f"Inventory request failed: {e}", product_id) from e

        if response.status_code == 404:
            raise InventoryError(f"Product {product_id} not found", product_id, not_found=True)
        if response.status_code != 200:
            error_text = response.text[:200] if response.text else "No response body"
            logger.warning(f"Inventory request {path} returned {response.status_code}: {error_text}")
            raise InventoryError(f"Inventory returned {response.status_code}", product_id)

        try:
            data = response.json()
        except ValueError as e:
            raise InventoryError(f"Invalid JSON from {path}", product_id) from e

        # json-server style APIs answer unknown ids with an empty object
        if not data:
            raise InventoryError(f"Product {product_id} not found", product_id, not_found=True)
        return data

    async def get_stock(self, product_id: int) -> Stock:
        data = await self._get_json(f"/stock/{product_id}", product_id)
        try:
            return Stock.model_validate(data)
        except ValidationError as e:
            raise InventoryError(f"Malformed stock record for {product_id}", product_id) from e

    async def get_product(self, product_id: int) -> Product:
        data = await self._get_json(f"/products/{product_id}", product_id)
        try:
            return Product.model_validate(data)
        except ValidationError as e:
            raise InventoryError(f"Malformed product record for {product_id}", product_id) from e

    async def aclose(self) -> None:
        if self._http_client is not None:
            await self._http_client.aclose()
            self._http_client = None
