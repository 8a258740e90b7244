"""Order creation procedure backed by the storefront domain.

Reads the session's stored cart, snapshots each line from the live catalog
and places the order with a ``PlaceOrder`` command. Version 1 predates the
"placed for someone else" and express delivery columns and drops them.
"""

import json

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.catalog import get_catalog
from storefront.checkout.procedure.port import (
    CreatedOrder,
    OrderCreationPayload,
    OrderCreationProcedure,
)
from storefront.exceptions import ProcedureUnavailableError
from storefront.order.placement import PlaceOrder

logger = structlog.get_logger(__name__)

_V1_DROPPED_FIELDS = ("placed_for_someone_else", "express_delivery")


class DomainOrderProcedure(OrderCreationProcedure):
    """In-process procedure with configurable deployed versions.

    ``unavailable`` lists versions that are advertised but answer as not
    deployed, the way a stale schema cache does.
    """

    def __init__(self, versions: set[int] | None = None, unavailable: set[int] | None = None) -> None:
        self.versions = set(versions) if versions is not None else {1, 2}
        self.unavailable = set(unavailable or ())
        self.calls: list[dict] = []

    def configure(self, versions: set[int] | None = None, unavailable: set[int] | None = None) -> None:
        if versions is not None:
            self.versions = set(versions)
        self.unavailable = set(unavailable or ())

    def available_versions(self) -> set[int]:
        return set(self.versions)

    def create_order(self, version: int, payload: OrderCreationPayload) -> CreatedOrder:
        self.calls.append({"version": version, "session_id": payload.session_id})

        if version not in self.versions or version in self.unavailable:
            raise ProcedureUnavailableError(version)

        details = payload.to_dict()
        if version < 2:
            for name in _V1_DROPPED_FIELDS:
                details.pop(name, None)

        lines = self._snapshot_cart(payload.session_id)
        order_id = current_domain.process(
            PlaceOrder(
                session_id=payload.session_id,
                user_id=payload.user_id,
                details=json.dumps(details),
                lines=json.dumps(lines),
                delivery_fee=payload.delivery_fee,
                thermal_bag_fee=payload.thermal_bag_fee,
            ),
            asynchronous=False,
        )
        logger.info("Order created", order_id=order_id, version=version, line_count=len(lines))
        return CreatedOrder(order_id=order_id, version=version)

    def _snapshot_cart(self, session_id) -> list[dict]:
        cart = current_domain.repository_for(ShoppingCart).for_session(session_id)
        if cart is None or not cart.lines:
            raise ValidationError({"cart": ["Cart is empty"]})

        products = get_catalog().get_products([str(line.product_id) for line in cart.lines])
        lines = []
        for line in cart.lines:
            product = products.get(str(line.product_id))
            if product is None:
                raise ValidationError({"cart": [f"Product {line.product_id} is no longer available"]})
            lines.append(
                {
                    "product_id": str(line.product_id),
                    "name": product.name,
                    "unit_price": product.price,
                    "qty": line.qty,
                    "size": product.size,
                    "temperature": product.temperature,
                }
            )
        return lines
