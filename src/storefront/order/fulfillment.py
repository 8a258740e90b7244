"""Order fulfilment — status, packed quantity and amount paid commands.

Each command changes a single concern of one order so staff edits fail
independently, field by field.
"""

from protean import handle
from protean.fields import Float, Identifier, String
from protean.utils.globals import current_domain

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.command(part_of="Order")
class StartFulfillment:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class UpdateOrderStatuses:
    order_id = Identifier(required=True)
    status = String(max_length=20)
    paid_status = String(max_length=20)
    delivery_status = String(max_length=20)


@storefront.command(part_of="Order")
class RecordPackedQty:
    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    packed_qty = Float()  # None clears the count


@storefront.command(part_of="Order")
class RecordAmountPaid:
    order_id = Identifier(required=True)
    amount_paid = Float()  # None clears the amount


@storefront.command_handler(part_of=Order)
class FulfillmentHandler:
    @handle(StartFulfillment)
    def start_fulfillment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.start_fulfillment()
        repo.add(order)

    @handle(UpdateOrderStatuses)
    def update_statuses(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        if order.update_statuses(
            status=command.status,
            paid_status=command.paid_status,
            delivery_status=command.delivery_status,
        ):
            repo.add(order)

    @handle(RecordPackedQty)
    def record_packed_qty(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_packed_qty(command.line_id, command.packed_qty)
        repo.add(order)

    @handle(RecordAmountPaid)
    def record_amount_paid(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.record_amount_paid(command.amount_paid)
        repo.add(order)
