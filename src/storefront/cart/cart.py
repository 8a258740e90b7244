"""Shopping Cart aggregate — the only mutable state before an order exists.

One cart per session, created lazily on the first line write. Lines hold an
exact quantity per product; a line whose quantity drops to zero is removed,
never stored as zero. The cart is never deleted, only emptied after a
successful checkout.
"""

from datetime import UTC, datetime

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, HasMany, Identifier, Integer, String

from storefront.cart.events import CartLineQtySet, CartLineRemoved
from storefront.domain import storefront


@storefront.entity(part_of="ShoppingCart")
class CartLine:
    product_id = Identifier(required=True)
    qty = Integer(required=True, min_value=1)
    updated_at = DateTime()


@storefront.aggregate
class ShoppingCart:
    session_id = String(required=True, max_length=255)
    lines = HasMany(CartLine)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def one_line_per_product(self):
        product_ids = [str(line.product_id) for line in self.lines]
        if len(product_ids) != len(set(product_ids)):
            raise ValidationError({"lines": ["A product can appear only once in a cart"]})

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def create(cls, session_id):
        now = datetime.now(UTC)
        return cls(session_id=session_id, created_at=now, updated_at=now)

    # -------------------------------------------------------------------
    # Line management
    # -------------------------------------------------------------------
    def line_for(self, product_id):
        return next((line for line in self.lines if str(line.product_id) == str(product_id)), None)

    def set_line_qty(self, product_id, qty):
        """Set the line for ``product_id`` to exactly ``qty``.

        Setting the same quantity twice leaves the cart unchanged. A quantity
        of zero or less removes the line.
        """
        qty = max(int(qty or 0), 0)
        existing = self.line_for(product_id)
        previous_qty = existing.qty if existing else 0

        if previous_qty == qty:
            return

        now = datetime.now(UTC)

        if qty == 0:
            self.remove_lines(existing)
            self.updated_at = now
            self.raise_(
                CartLineRemoved(
                    cart_id=str(self.id),
                    session_id=self.session_id,
                    product_id=str(product_id),
                    previous_qty=previous_qty,
                )
            )
            return

        if existing:
            existing.qty = qty
            existing.updated_at = now
        else:
            self.add_lines(CartLine(product_id=product_id, qty=qty, updated_at=now))

        self.updated_at = now
        self.raise_(
            CartLineQtySet(
                cart_id=str(self.id),
                session_id=self.session_id,
                product_id=str(product_id),
                previous_qty=previous_qty,
                qty=qty,
            )
        )

    @property
    def total_units(self):
        return sum(line.qty for line in self.lines)
