"""Stock decrements for transport finalization."""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from .catalog import BaseCatalogClient
from .contracts import LineItem
from .errors import DependencyUnavailable, InventoryUpdateFailed
from .utils.timeouts import call_with_timeout

logger = logging.getLogger(__name__)


class InventoryUpdater:
    """Applies one decrement per line item, in list order.

    The first failing item aborts the rest. Items decremented before it stay
    decremented; ``revert`` restocks them and is only called when the
    workflow runs with compensation enabled. A decrement that timed out is
    kept in ``uncertain``: the catalog may or may not have applied it. An
    instance tracks a single invocation.
    """

    def __init__(
        self, catalog: BaseCatalogClient, timeout: Optional[float] = None
    ) -> None:
        self._catalog = catalog
        self._timeout = timeout
        self.applied: List[LineItem] = []
        self.uncertain: Optional[LineItem] = None

    async def apply(self, items: Sequence[LineItem]) -> List[LineItem]:
        self.applied = []
        self.uncertain = None
        for index, item in enumerate(items):
            try:
                await call_with_timeout(
                    self._catalog.decrement_stock(item.product_id, item.quantity),
                    self._timeout,
                    "catalog",
                )
            except Exception as exc:
                if getattr(exc, "uncertain", False):
                    self.uncertain = item
                logger.error(
                    f"Stock decrement failed for product {item.product_id} "
                    f"(item {index}, {len(self.applied)} already applied): {exc}"
                )
                raise InventoryUpdateFailed(
                    index, item.product_id, list(self.applied), exc
                ) from exc
            self.applied.append(item)
        return list(self.applied)

    async def revert(self) -> None:
        """Restock applied items in reverse order.

        An uncertain decrement is not restocked. It is reported by raising
        once the known decrements have been returned.
        """
        while self.applied:
            item = self.applied[-1]
            await call_with_timeout(
                self._catalog.restock(item.product_id, item.quantity),
                self._timeout,
                "catalog",
            )
            self.applied.pop()
            logger.warning(
                f"Restocked {item.quantity} of product {item.product_id}"
            )
        if self.uncertain is not None:
            raise DependencyUnavailable(
                "catalog",
                f"outcome of stock decrement for product {self.uncertain.product_id} is unknown",
                uncertain=True,
            )
