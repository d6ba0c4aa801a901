"""Catalog client factory."""

from __future__ import annotations

from typing import Optional

from ..config import CourierConfig, load_config
from .base import BaseCatalogClient
from .http import HttpCatalogClient
from .inmemory import InMemoryCatalog


def get_catalog(config: Optional[CourierConfig] = None) -> BaseCatalogClient:
    """Factory function to get the configured catalog client."""

    config = config or load_config()
    catalog_conf = config.catalog

    if catalog_conf.backend == "http":
        return HttpCatalogClient(catalog_conf.base_url)
    elif catalog_conf.backend == "inmemory":
        return InMemoryCatalog(catalog_conf.products, catalog_conf.stock)
    else:
        raise ValueError(f"Unsupported catalog backend: {catalog_conf.backend}")


__all__ = ["BaseCatalogClient", "HttpCatalogClient", "InMemoryCatalog", "get_catalog"]
