"""Line-item enrichment: resolve product names through the catalog."""

from __future__ import annotations

import abc
import asyncio
import logging
from typing import List, Optional, Sequence

from .catalog import BaseCatalogClient
from .contracts import LineItem
from .errors import DependencyUnavailable
from .utils.timeouts import call_with_timeout

logger = logging.getLogger(__name__)


class EnrichmentStrategy(metaclass=abc.ABCMeta):
    """How lookups for one invocation's line items are dispatched."""

    name: str

    async def _lookup(
        self, catalog: BaseCatalogClient, product_id: str, timeout: Optional[float]
    ) -> str:
        name = await call_with_timeout(
            catalog.resolve_name(product_id), timeout, "catalog"
        )
        if not name:
            raise DependencyUnavailable(
                "catalog", f"empty name returned for product '{product_id}'"
            )
        return name

    @abc.abstractmethod
    async def resolve_names(
        self,
        catalog: BaseCatalogClient,
        product_ids: Sequence[str],
        timeout: Optional[float] = None,
    ) -> List[str]:
        """Return one name per product id, in input order."""
        raise NotImplementedError


class SequentialEnrichment(EnrichmentStrategy):
    """One lookup at a time; the first failure stops the rest."""

    name = "sequential"

    async def resolve_names(
        self,
        catalog: BaseCatalogClient,
        product_ids: Sequence[str],
        timeout: Optional[float] = None,
    ) -> List[str]:
        return [await self._lookup(catalog, pid, timeout) for pid in product_ids]


class ConcurrentEnrichment(EnrichmentStrategy):
    """All lookups in flight at once, failing fast.

    When a lookup fails the still-pending ones are cancelled and their
    results discarded. If several have already failed, the one for the
    earliest line item is raised.
    """

    name = "concurrent"

    async def resolve_names(
        self,
        catalog: BaseCatalogClient,
        product_ids: Sequence[str],
        timeout: Optional[float] = None,
    ) -> List[str]:
        if not product_ids:
            return []
        tasks = [
            asyncio.ensure_future(self._lookup(catalog, pid, timeout))
            for pid in product_ids
        ]
        done, pending = await asyncio.wait(tasks, return_when=asyncio.FIRST_EXCEPTION)
        failed = [t for t in tasks if t in done and t.exception() is not None]
        if failed:
            for task in pending:
                task.cancel()
            await asyncio.gather(*pending, return_exceptions=True)
            raise failed[0].exception()
        return [t.result() for t in tasks]


_STRATEGIES = {
    SequentialEnrichment.name: SequentialEnrichment,
    ConcurrentEnrichment.name: ConcurrentEnrichment,
}


def get_enrichment_strategy(name: str) -> EnrichmentStrategy:
    try:
        return _STRATEGIES[name]()
    except KeyError:
        raise ValueError(f"Unsupported enrichment strategy: {name}") from None


async def enrich_line_items(
    items: Sequence[LineItem],
    catalog: BaseCatalogClient,
    strategy: Optional[EnrichmentStrategy] = None,
    timeout: Optional[float] = None,
) -> None:
    """Fill ``product_name`` on every item.

    Names are assigned only after every lookup succeeded, so a failure
    leaves all items untouched.
    """
    strategy = strategy or SequentialEnrichment()
    names = await strategy.resolve_names(
        catalog, [item.product_id for item in items], timeout
    )
    for item, name in zip(items, names):
        item.product_name = name
    logger.debug(f"Enriched {len(items)} line items ({strategy.name})")
