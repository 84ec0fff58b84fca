"""Catalog adapter registry — product lookup for checkout pricing."""

from ordering.catalog.port import CatalogPort

_current_catalog: CatalogPort | None = None


def get_catalog() -> CatalogPort:
    """Return the current catalog adapter. Defaults to an empty InMemoryCatalog."""
    global _current_catalog
    if _current_catalog is None:
        from ordering.catalog.memory_adapter import InMemoryCatalog

        _current_catalog = InMemoryCatalog()
    return _current_catalog


def set_catalog(catalog: CatalogPort) -> None:
    """Override the active catalog (useful for tests)."""
    global _current_catalog
    _current_catalog = catalog


def reset_catalog() -> None:
    global _current_catalog
    _current_catalog = None
