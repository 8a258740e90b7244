"""BDD tests for cart line management."""

from pytest_bdd import parsers, scenarios, then, when
from storefront.cart.view import get_cart, set_cart_line_qty

scenarios("features/cart_lines.feature")


@when(parsers.cfparse('the customer sets "{product_id}" to {qty:d}'), target_fixture="outcome")
def set_line(catalog, session, product_id, qty):
    return set_cart_line_qty(session, product_id, qty)


@then(parsers.cfparse('the cart shows {qty:d} of "{product_id}"'))
def cart_shows(outcome, qty, product_id):
    assert outcome.cart.qty_by_product()[product_id] == qty


@then(parsers.cfparse('the cart does not show "{product_id}"'))
def cart_does_not_show(outcome, product_id):
    assert product_id not in outcome.cart.qty_by_product()


@then(parsers.cfparse("the cart subtotal is {subtotal:g}"))
def cart_subtotal_is(session, subtotal):
    assert get_cart(session).subtotal == subtotal


@then(parsers.cfparse('"{product_id}" is flagged as exceeding stock'))
def flagged_exceeding(outcome, product_id):
    line = next(line for line in outcome.cart.lines if line.product_id == product_id)
    assert line.exceeds_stock
