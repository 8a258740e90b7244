"""Domain events for the Order aggregate.

Orders are stored as current state; these events are raised alongside each
state change so downstream handlers (notifications, reporting) can react.
"""

from protean.fields import Date, DateTime, Float, Identifier, Integer, String, Text

from storefront.domain import storefront


@storefront.event(part_of="Order")
class OrderPlaced:
    """A priced order was created from a session's cart."""

    __version__ = 1

    order_id = Identifier(required=True)
    session_id = String(required=True)
    user_id = String()
    email = String()
    total_qty = Integer(required=True)
    subtotal = Float(required=True)
    delivery_fee = Float(required=True)
    thermal_bag_fee = Float(required=True)
    total_selling_price = Float(required=True)
    delivery_date = Date()
    delivery_slot = String()
    placed_at = DateTime(required=True)


@storefront.event(part_of="Order")
class FulfillmentStarted:
    """The order entered fulfilment with its initial statuses."""

    __version__ = 1

    order_id = Identifier(required=True)
    status = String(required=True)
    paid_status = String(required=True)
    delivery_status = String(required=True)
    amount_paid = Float()


@storefront.event(part_of="Order")
class OrderStatusesUpdated:
    __version__ = 1

    order_id = Identifier(required=True)
    status = String()
    paid_status = String()
    delivery_status = String()
    updated_at = DateTime(required=True)


@storefront.event(part_of="Order")
class PackedQtyRecorded:
    """Staff recorded how many units of a line were packed (None clears it)."""

    __version__ = 1

    order_id = Identifier(required=True)
    line_id = Identifier(required=True)
    qty = Integer(required=True)
    packed_qty = Integer()


@storefront.event(part_of="Order")
class AmountPaidRecorded:
    __version__ = 1

    order_id = Identifier(required=True)
    amount_paid = Float()
    total_selling_price = Float(required=True)


@storefront.event(part_of="Order")
class OrderLinesAdded:
    """Staff appended lines to an existing order."""

    __version__ = 1

    order_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of added line dicts
    total_qty = Integer(required=True)
    subtotal = Float(required=True)
    total_selling_price = Float(required=True)


@storefront.event(part_of="Order")
class OrderAmended:
    """Staff edited order fields. ``changes`` lists the field names touched."""

    __version__ = 1

    order_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: list of field names
    total_selling_price = Float(required=True)


@storefront.event(part_of="Order")
class PaymentProofAttached:
    __version__ = 1

    order_id = Identifier(required=True)
    payment_proof_path = String(required=True)
    previous_path = String()


@storefront.event(part_of="Order")
class PaymentProofDetached:
    __version__ = 1

    order_id = Identifier(required=True)
    previous_path = String()


@storefront.event(part_of="Order")
class OrderDiscarded:
    """The order is about to be deleted together with its lines."""

    __version__ = 1

    order_id = Identifier(required=True)
    line_count = Integer(required=True)
    payment_proof_path = String()
