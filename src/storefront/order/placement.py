"""Order placement — command and handler.

The caller supplies customer details and checkout fees. Line snapshots
are priced from the live catalog by whoever builds the command.
"""

import json

from protean import handle
from protean.fields import Float, String, Text
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class PlaceOrder:
    session_id = String(required=True, max_length=255)
    user_id = String(max_length=255)
    details = Text(required=True)  # JSON: customer and delivery fields
    lines = Text(required=True)  # JSON: list of line snapshot dicts
    delivery_fee = Float(default=0.0)
    thermal_bag_fee = Float(default=0.0)


@storefront.command_handler(part_of=Order)
class PlaceOrderHandler:
    @handle(PlaceOrder)
    def place_order(self, command):
        details = json.loads(command.details) if isinstance(command.details, str) else command.details
        lines_data = json.loads(command.lines) if isinstance(command.lines, str) else command.lines

        order = Order.place(
            session_id=command.session_id,
            user_id=command.user_id,
            details=details,
            lines_data=lines_data,
            delivery_fee=command.delivery_fee or 0.0,
            thermal_bag_fee=command.thermal_bag_fee or 0.0,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
