"""Staff reconciliation — added lines, admin field edits, payment proof and deletion."""

import json
import math

import structlog
from protean import handle
from protean.fields import Identifier, String, Text
from protean.utils.globals import current_domain

from storefront.catalog import get_catalog
from storefront.domain import storefront
from storefront.exceptions import WriteRejectedError
from storefront.order.order import Order

logger = structlog.get_logger(__name__)


@storefront.command(part_of="Order")
class AddOrderLines:
    order_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of {"product_id", "qty"}


@storefront.command(part_of="Order")
class AmendOrder:
    order_id = Identifier(required=True)
    changes = Text(required=True)  # JSON: partial admin patch


@storefront.command(part_of="Order")
class AttachPaymentProof:
    order_id = Identifier(required=True)
    payment_proof_path = String(required=True, max_length=1024)


@storefront.command(part_of="Order")
class DetachPaymentProof:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class DiscardOrderLines:
    order_id = Identifier(required=True)


@storefront.command(part_of="Order")
class DeleteOrder:
    order_id = Identifier(required=True)


def clean_line_requests(requests) -> list[dict]:
    """Floor quantities and drop requests without a product or units."""
    cleaned = []
    for request in requests or []:
        product_id = str(request.get("product_id") or "").strip()
        try:
            qty = max(0, math.floor(float(request.get("qty") or 0)))
        except (TypeError, ValueError, OverflowError):
            qty = 0
        if product_id and qty > 0:
            cleaned.append({"product_id": product_id, "qty": qty})
    return cleaned


def price_line_requests(requests) -> list[dict]:
    """Snapshot each request from the live catalog; unknown products become "Item" at 0."""
    products = get_catalog().get_products(list({request["product_id"] for request in requests}))
    priced = []
    for request in requests:
        product = products.get(request["product_id"])
        priced.append(
            {
                "product_id": request["product_id"],
                "qty": request["qty"],
                "name": product.name if product else "Item",
                "unit_price": product.price if product else 0.0,
                "size": product.size if product else None,
                "temperature": product.temperature if product else None,
            }
        )
    return priced


@storefront.command_handler(part_of=Order)
class ReconciliationHandler:
    @handle(AddOrderLines)
    def add_order_lines(self, command):
        requests = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        cleaned = clean_line_requests(requests)
        if not cleaned:
            return []

        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        added = order.add_admin_lines(price_line_requests(cleaned))
        repo.add(order)
        return [str(line.id) for line in added]

    @handle(AmendOrder)
    def amend_order(self, command):
        changes = json.loads(command.changes) if isinstance(command.changes, str) else command.changes
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        changed = order.amend(**changes)
        if changed or "total_selling_price" in changes:
            repo.add(order)
        return changed

    @handle(AttachPaymentProof)
    def attach_payment_proof(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.attach_payment_proof(command.payment_proof_path)
        repo.add(order)
        return previous

    @handle(DetachPaymentProof)
    def detach_payment_proof(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        previous = order.detach_payment_proof()
        repo.add(order)
        return previous

    @handle(DiscardOrderLines)
    def discard_order_lines(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        order.discard()
        repo.add(order)

    @handle(DeleteOrder)
    def delete_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.get(command.order_id)
        proof_path = order.payment_proof_path
        try:
            repo.remove(order)
        except Exception as exc:
            logger.error("Order row delete failed", order_id=str(order.id), error=str(exc))
            raise WriteRejectedError(
                "Order delete was blocked (no rows deleted). Check the delete policy on orders."
            ) from exc
        return proof_path
