"""Base client interface for the external catalog service."""

from __future__ import annotations

import abc


class BaseCatalogClient(metaclass=abc.ABCMeta):
    """Product lookup and stock mutation against the catalog service."""

    async def aclose(self) -> None:
        """Release network resources (no-op by default)."""
        pass

    @abc.abstractmethod
    async def resolve_name(self, product_id: str) -> str:
        """Return the display name for ``product_id``.

        Raises:
            NotFound: The catalog does not know the product.
            DependencyUnavailable: Any other non-success answer or network error.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def decrement_stock(self, product_id: str, quantity: int) -> None:
        """Remove ``quantity`` units of ``product_id`` from stock.

        Raises:
            StockRejected: The catalog refused the mutation.
            NotFound: The catalog does not know the product.
            DependencyUnavailable: Any other non-success answer or network error.
        """
        raise NotImplementedError

    @abc.abstractmethod
    async def restock(self, product_id: str, quantity: int) -> None:
        """Return ``quantity`` units of ``product_id`` to stock."""
        raise NotImplementedError
