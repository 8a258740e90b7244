"""BDD tests for order reconciliation."""

from protean.exceptions import ValidationError
from pytest_bdd import parsers, scenarios, then, when

scenarios("features/order_reconciliation.feature")


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('staff add {qty:d} "{name}" at {price:g}'))
def add_line(order, qty, name, price):
    order.add_admin_lines([{"product_id": f"prod-{name.lower().replace(' ', '-')}", "name": name, "unit_price": price, "qty": qty}])


@when(parsers.cfparse("staff set the delivery fee to {fee:g} claiming a total of {total:g}"))
def set_fee_with_claim(order, fee, total, error):
    try:
        order.amend(delivery_fee=fee, total_selling_price=total)
    except ValidationError as exc:
        error["exc"] = exc


@when(parsers.cfparse("staff set the delivery fee to {fee:g}"))
def set_fee(order, fee):
    order.amend(delivery_fee=fee)


@when("staff add the thermal bag")
def add_thermal_bag(order):
    order.amend(add_thermal_bag=True)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the order holds {units:d} units"))
def order_holds(order, units):
    assert order.total_qty == units


@then(parsers.cfparse("the thermal bag fee is {fee:g}"))
def thermal_bag_fee_is(order, fee):
    assert order.thermal_bag_fee == fee
