"""Catalog port — read-only product lookup used at checkout.

The catalogue is owned elsewhere; the ordering core only reads prices,
discount rules, and shipping weights from it.
"""

from abc import ABC, abstractmethod

from ordering.pricing.engine import Product


class CatalogPort(ABC):
    """Abstract interface for catalogue adapters."""

    @abstractmethod
    def get_product(self, product_id: str) -> Product | None:
        """Return the product, or None when it is unknown."""
        ...
