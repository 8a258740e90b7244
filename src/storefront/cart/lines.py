"""Cart line management — command and handler.

A single command sets a line to an exact quantity. The cart is created on
the first write for a session.
"""

from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.domain import storefront


@storefront.command(part_of="ShoppingCart")
class SetCartLineQty:
    """Set a cart line to an exact quantity; zero or less deletes the line."""

    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    qty = Integer(required=True)


@storefront.command_handler(part_of=ShoppingCart)
class ManageCartLinesHandler:
    @handle(SetCartLineQty)
    def set_cart_line_qty(self, command):
        repo = current_domain.repository_for(ShoppingCart)
        cart = repo.for_session(command.session_id)
        if cart is None:
            if command.qty <= 0:
                return None
            cart = ShoppingCart.create(session_id=command.session_id)

        cart.set_line_qty(product_id=command.product_id, qty=command.qty)
        repo.add(cart)
        return str(cart.id)
