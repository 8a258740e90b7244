"""Catalog port (abstract interface).

The catalog is owned by another service. The storefront only reads a
product's display fields, live price and advisory stock through this
contract when pricing cart lines and staff-added order lines.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class CatalogProduct:
    """A product as the catalog reports it right now."""

    product_id: str
    name: str
    price: float
    size: str | None = None
    temperature: str | None = None
    qty_available: int | None = None
    unlimited_stock: bool = False

    @property
    def out_of_stock(self) -> bool:
        if self.unlimited_stock or self.qty_available is None:
            return False
        return self.qty_available <= 0


class Catalog(ABC):
    """Abstract catalog interface."""

    @abstractmethod
    def get_product(self, product_id: str) -> CatalogProduct | None:
        """Return the product or None when the catalog does not know it."""
        ...

    @abstractmethod
    def get_products(self, product_ids: list[str]) -> dict[str, CatalogProduct]:
        """Return known products keyed by product id. Unknown ids are omitted."""
        ...
