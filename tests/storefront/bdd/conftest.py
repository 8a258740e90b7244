"""Shared BDD fixtures and step definitions for the Storefront domain."""

import pytest
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, then
from storefront.cart.view import get_cart, set_cart_line_qty
from storefront.order.events import (
    AmountPaidRecorded,
    FulfillmentStarted,
    OrderAmended,
    OrderLinesAdded,
    OrderPlaced,
    OrderStatusesUpdated,
    PackedQtyRecorded,
)
from storefront.order.order import Order

# Map event name strings to classes for dynamic lookup
_EVENT_CLASSES = {
    "OrderPlaced": OrderPlaced,
    "FulfillmentStarted": FulfillmentStarted,
    "OrderStatusesUpdated": OrderStatusesUpdated,
    "PackedQtyRecorded": PackedQtyRecorded,
    "AmountPaidRecorded": AmountPaidRecorded,
    "OrderLinesAdded": OrderLinesAdded,
    "OrderAmended": OrderAmended,
}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------
@pytest.fixture()
def error():
    """Container for captured validation errors."""
    return {"exc": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("a placed order for 3 Longganisa and 1 Beef Tapa with a 100 delivery fee", target_fixture="order")
def placed_order():
    order = Order.place(
        "sess-001",
        {"full_name": "Maria Santos", "email": "maria@example.com", "phone": "09171234567"},
        [
            {"product_id": "prod-longganisa", "name": "Longganisa", "unit_price": 100.0, "qty": 3},
            {"product_id": "prod-tapa", "name": "Beef Tapa", "unit_price": 250.0, "qty": 1},
        ],
        delivery_fee=100.0,
    )
    order._events.clear()
    return order


@given("fulfilment has started")
def fulfilment_started(order):
    order.start_fulfillment()
    order._events.clear()


@given(parsers.cfparse('the cart holds {qty:d} of "{product_id}"'))
def cart_holds(catalog, session, qty, product_id):
    outcome = set_cart_line_qty(session, product_id, qty)
    assert outcome.ok


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("the action fails with a validation error")
def action_fails(error):
    assert error["exc"] is not None
    assert isinstance(error["exc"], ValidationError)


@then(parsers.cfparse("a {event_type} event is raised"))
def event_raised(order, event_type):
    event_cls = _EVENT_CLASSES[event_type]
    assert any(isinstance(e, event_cls) for e in order._events)


@then(parsers.cfparse('the order status is "{status}"'))
def order_status_is(order, status):
    assert order.status == status


@then(parsers.cfparse('the delivery status is "{delivery_status}"'))
def delivery_status_is(order, delivery_status):
    assert order.delivery_status == delivery_status


@then(parsers.cfparse("the order total is {total:g}"))
def order_total_is(order, total):
    assert order.total_selling_price == pytest.approx(total)


@then("the cart is empty")
def cart_is_empty(session):
    assert get_cart(session).is_empty

