"""In-memory catalog for tests and offline runs."""

from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from ..errors import NotFound, StockRejected
from .base import BaseCatalogClient


class InMemoryCatalog(BaseCatalogClient):
    """Product names and stock levels held in local dicts.

    Every call is appended to ``calls`` as ``(operation, product_id, quantity)``
    before it is evaluated, so failed calls are recorded too. Products absent
    from ``stock`` have unlimited stock.
    """

    def __init__(
        self,
        products: Optional[Dict[str, str]] = None,
        stock: Optional[Dict[str, int]] = None,
    ) -> None:
        self.products: Dict[str, str] = dict(products or {})
        self.stock: Dict[str, int] = dict(stock or {})
        self.calls: List[Tuple[str, str, int]] = []

    async def resolve_name(self, product_id: str) -> str:
        self.calls.append(("resolve_name", product_id, 0))
        if product_id not in self.products:
            raise NotFound("product", product_id)
        return self.products[product_id]

    async def decrement_stock(self, product_id: str, quantity: int) -> None:
        self.calls.append(("decrement_stock", product_id, quantity))
        if product_id not in self.products:
            raise NotFound("product", product_id)
        if product_id in self.stock:
            available = self.stock[product_id]
            if available < quantity:
                raise StockRejected(
                    product_id, f"requested {quantity}, {available} available"
                )
            self.stock[product_id] = available - quantity

    async def restock(self, product_id: str, quantity: int) -> None:
        self.calls.append(("restock", product_id, quantity))
        if product_id in self.stock:
            self.stock[product_id] += quantity

    def calls_to(self, operation: str) -> List[Tuple[str, int]]:
        """Return ``(product_id, quantity)`` for every call to ``operation``."""
        return [(pid, qty) for op, pid, qty in self.calls if op == operation]
