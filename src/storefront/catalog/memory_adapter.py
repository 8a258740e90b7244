"""In-memory catalog for development and testing."""

from storefront.catalog.port import Catalog, CatalogProduct


class InMemoryCatalog(Catalog):
    """Catalog backed by a dict, editable at runtime."""

    def __init__(self, products: list[CatalogProduct] | None = None) -> None:
        self.products: dict[str, CatalogProduct] = {}
        for product in products or []:
            self.put(product)

    def put(self, product: CatalogProduct) -> None:
        self.products[str(product.product_id)] = product

    def reprice(self, product_id: str, price: float) -> None:
        current = self.products[str(product_id)]
        self.products[str(product_id)] = CatalogProduct(
            product_id=current.product_id,
            name=current.name,
            price=price,
            size=current.size,
            temperature=current.temperature,
            qty_available=current.qty_available,
            unlimited_stock=current.unlimited_stock,
        )

    def get_product(self, product_id: str) -> CatalogProduct | None:
        return self.products.get(str(product_id))

    def get_products(self, product_ids: list[str]) -> dict[str, CatalogProduct]:
        return {str(pid): self.products[str(pid)] for pid in product_ids if str(pid) in self.products}
