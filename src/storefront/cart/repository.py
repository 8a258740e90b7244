"""Repository for the ShoppingCart aggregate."""

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.repository(part_of=ShoppingCart)
class ShoppingCartRepository:
    def for_session(self, session_id: str) -> ShoppingCart | None:
        """Return the session's cart, or None before the first line write."""
        carts = self._dao.query.filter(session_id=session_id).all().items
        return carts[0] if carts else None
