"""In-memory catalog adapter for development and testing."""

from ordering.catalog.port import CatalogPort
from ordering.pricing.engine import Product


class InMemoryCatalog(CatalogPort):
    """Catalog backed by a dict of products keyed by id."""

    def __init__(self, products: list[Product] | None = None):
        self.products: dict[str, Product] = {p.id: p for p in products or []}

    def get_product(self, product_id: str) -> Product | None:
        return self.products.get(product_id)
