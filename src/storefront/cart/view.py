"""Cart reads and fire-and-confirm cart writes.

``get_cart`` joins the stored lines with live catalog fields for display;
the joined fields are never cart-owned data. ``set_cart_line_qty`` always
re-reads the cart after writing, so callers replace any optimistic state
with what the store actually holds.
"""

from dataclasses import dataclass, field

import structlog
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.lines import SetCartLineQty
from storefront.catalog import get_catalog
from storefront.session import SessionContext

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLineView:
    product_id: str
    qty: int
    name: str
    price: float
    line_total: float
    size: str | None = None
    temperature: str | None = None
    qty_available: int | None = None
    unlimited_stock: bool = False

    @property
    def out_of_stock(self) -> bool:
        if self.unlimited_stock or self.qty_available is None:
            return False
        return self.qty_available <= 0

    @property
    def exceeds_stock(self) -> bool:
        """Advisory only: the UI warns "only N left" but never blocks."""
        if self.unlimited_stock or self.qty_available is None:
            return False
        return self.qty > self.qty_available


@dataclass(frozen=True)
class CartSnapshot:
    session_id: str
    lines: list[CartLineView] = field(default_factory=list)

    @property
    def total_units(self) -> int:
        return sum(line.qty for line in self.lines)

    @property
    def subtotal(self) -> float:
        return round(sum(line.line_total for line in self.lines), 2)

    @property
    def is_empty(self) -> bool:
        return not self.lines

    def qty_by_product(self) -> dict[str, int]:
        return {line.product_id: line.qty for line in self.lines}


@dataclass(frozen=True)
class CartTotals:
    total_units: int
    subtotal: float


@dataclass(frozen=True)
class CartWriteOutcome:
    """Result of a cart write: the confirmed cart, or a refresh signal with server truth."""

    cart: CartSnapshot
    refresh_required: bool = False
    error: str | None = None

    @property
    def ok(self) -> bool:
        return not self.refresh_required


def get_cart(session: SessionContext) -> CartSnapshot:
    """Return the session's cart lines priced from the live catalog."""
    cart = current_domain.repository_for(ShoppingCart).for_session(session.session_id)
    if cart is None:
        return CartSnapshot(session_id=session.session_id)

    products = get_catalog().get_products([str(line.product_id) for line in cart.lines])

    views = []
    for line in cart.lines:
        product = products.get(str(line.product_id))
        if product is None:
            logger.warning(
                "Cart line references unknown product",
                session_id=session.session_id,
                product_id=str(line.product_id),
            )
            continue
        views.append(
            CartLineView(
                product_id=str(line.product_id),
                qty=line.qty,
                name=product.name,
                price=product.price,
                line_total=round(product.price * line.qty, 2),
                size=product.size,
                temperature=product.temperature,
                qty_available=product.qty_available,
                unlimited_stock=product.unlimited_stock,
            )
        )
    return CartSnapshot(session_id=session.session_id, lines=views)


def get_cart_totals(session: SessionContext) -> CartTotals:
    cart = get_cart(session)
    return CartTotals(total_units=cart.total_units, subtotal=cart.subtotal)


def set_cart_line_qty(session: SessionContext, product_id: str, qty) -> CartWriteOutcome:
    """Set a cart line and confirm by re-reading the cart.

    On failure the caller receives ``refresh_required`` and the re-read cart,
    which must overwrite whatever it displayed optimistically.
    """
    try:
        next_qty = max(int(float(qty)), 0)
    except (TypeError, ValueError, OverflowError):
        next_qty = 0

    try:
        current_domain.process(
            SetCartLineQty(session_id=session.session_id, product_id=product_id, qty=next_qty),
            asynchronous=False,
        )
    except Exception as exc:
        logger.warning(
            "Cart write failed, refreshing from store",
            session_id=session.session_id,
            product_id=str(product_id),
            qty=next_qty,
            error=str(exc),
        )
        return CartWriteOutcome(cart=get_cart(session), refresh_required=True, error=str(exc))

    return CartWriteOutcome(cart=get_cart(session))
