"""BDD tests for checkout submission."""

from dataclasses import replace

import pytest
from protean import current_domain
from protean.exceptions import ValidationError
from pytest_bdd import given, parsers, scenarios, then, when
from storefront.cart.view import get_cart
from storefront.checkout.submission import submit_checkout
from storefront.exceptions import StorefrontError
from storefront.order.order import Order

scenarios("features/checkout_submission.feature")


@pytest.fixture()
def submission():
    return {"result": None, "failure": None}


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given("the customer asks for a thermal bag", target_fixture="draft")
def thermal_bag(draft):
    return replace(draft, add_thermal_bag=True)


@given("proof storage is unavailable")
def storage_unavailable(storage):
    storage.configure(fail_uploads=True)


@given(parsers.cfparse("order procedure version {version:d} is unavailable"))
def procedure_unavailable(procedure, version):
    procedure.configure(unavailable={version})


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when("the customer submits the checkout with a payment proof")
def submit_with_proof(session, draft, proof, now, storage, procedure, submission):
    try:
        submission["result"] = submit_checkout(session, draft, proof, now=now)
    except StorefrontError as exc:
        submission["failure"] = exc


@when("the customer submits the checkout without a payment proof")
def submit_without_proof(session, draft, now, storage, procedure, error):
    try:
        submit_checkout(session, draft, None, now=now)
    except ValidationError as exc:
        error["exc"] = exc


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then("an order is created")
def order_created(submission):
    assert submission["failure"] is None
    assert submission["result"].order_id


@then(parsers.cfparse("an order is created with procedure version {version:d}"))
def order_created_with_version(submission, version):
    assert submission["result"].procedure_version == version


@then(parsers.cfparse('the submission fails with "{message}"'))
def submission_fails(submission, message):
    assert submission["result"] is None
    assert message in submission["failure"].message


@then(parsers.cfparse("the cart still holds {units:d} items"))
def cart_still_holds(session, units):
    assert get_cart(session).total_units == units


@then(parsers.cfparse("the stored order total is {total:g}"))
def stored_order_total_is(submission, total):
    order = current_domain.repository_for(Order).get(submission["result"].order_id)
    assert order.total_selling_price == pytest.approx(total)
