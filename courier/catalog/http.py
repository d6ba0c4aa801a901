"""HTTP catalog client built on httpx."""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ..errors import DependencyUnavailable, NotFound, StockRejected
from .base import BaseCatalogClient

logger = logging.getLogger(__name__)

CATALOG = "catalog"


class HttpCatalogClient(BaseCatalogClient):
    """Talks to the catalog service over HTTP.

    Lookups are ``GET /products/{id}`` answering ``{"name": ...}``. Stock
    mutations are ``PATCH /stock/{id}`` with ``{"quantity": delta}`` where a
    positive delta removes units and a negative one returns them.
    """

    def __init__(
        self,
        base_url: str,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = client or httpx.AsyncClient(base_url=self.base_url)
        self._owns_client = client is None

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, path: str, **kwargs: Any) -> httpx.Response:
        try:
            return await self._client.request(method, path, **kwargs)
        except httpx.HTTPError as exc:
            logger.error(f"Catalog request {method} {path} failed: {exc}")
            raise DependencyUnavailable(CATALOG, f"{method} {path}: {exc}") from exc

    async def resolve_name(self, product_id: str) -> str:
        path = f"/products/{product_id}"
        response = await self._request("GET", path)
        if response.status_code == 404:
            raise NotFound("product", product_id)
        if not response.is_success:
            raise DependencyUnavailable(
                CATALOG, f"GET {path} returned {response.status_code}"
            )
        try:
            return str(response.json()["name"])
        except (ValueError, KeyError, TypeError) as exc:
            raise DependencyUnavailable(
                CATALOG, f"GET {path} returned an unreadable body"
            ) from exc

    async def _adjust(self, product_id: str, delta: int) -> None:
        path = f"/stock/{product_id}"
        response = await self._request("PATCH", path, json={"quantity": delta})
        if response.is_success:
            return
        if response.status_code == 404:
            raise NotFound("product", product_id)
        if 400 <= response.status_code < 500:
            raise StockRejected(product_id, f"catalog answered {response.status_code}")
        raise DependencyUnavailable(
            CATALOG, f"PATCH {path} returned {response.status_code}"
        )

    async def decrement_stock(self, product_id: str, quantity: int) -> None:
        await self._adjust(product_id, quantity)

    async def restock(self, product_id: str, quantity: int) -> None:
        await self._adjust(product_id, -quantity)
