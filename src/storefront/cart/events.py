"""Domain events for the ShoppingCart aggregate."""

from protean.fields import Identifier, Integer, String

from storefront.domain import storefront


@storefront.event(part_of="ShoppingCart")
class CartLineQtySet:
    """A cart line was set to an exact quantity."""

    __version__ = 1

    cart_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    previous_qty = Integer(required=True)
    qty = Integer(required=True)


@storefront.event(part_of="ShoppingCart")
class CartLineRemoved:
    """A cart line was deleted because its quantity dropped to zero."""

    __version__ = 1

    cart_id = Identifier(required=True)
    session_id = String(required=True, max_length=255)
    product_id = Identifier(required=True)
    previous_qty = Integer(required=True)
