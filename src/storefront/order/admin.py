"""Staff operations on placed orders.

Every function checks the caller is staff before touching the order.
Money and status fields follow last-write-wins; there are no version
tokens.
"""

import json
from datetime import UTC, datetime

import structlog
from protean.utils.globals import current_domain

from storefront.access import ensure_staff
from storefront.checkout.draft import PaymentProof
from storefront.exceptions import ProofUploadError
from storefront.order.fulfillment import RecordAmountPaid, RecordPackedQty, UpdateOrderStatuses
from storefront.order.order import Order
from storefront.order.reconciliation import (
    AddOrderLines,
    AmendOrder,
    AttachPaymentProof,
    DeleteOrder,
    DetachPaymentProof,
    DiscardOrderLines,
)
from storefront.session import SessionContext
from storefront.storage import get_storage

logger = structlog.get_logger(__name__)


def patch_order_status(session: SessionContext, order_id, status=None, paid_status=None, delivery_status=None):
    ensure_staff(session, "status")
    current_domain.process(
        UpdateOrderStatuses(
            order_id=order_id,
            status=status,
            paid_status=paid_status,
            delivery_status=delivery_status,
        ),
        asynchronous=False,
    )


def patch_packed_qty(session: SessionContext, order_id, line_id, packed_qty):
    ensure_staff(session, "packed_qty")
    current_domain.process(
        RecordPackedQty(order_id=order_id, line_id=line_id, packed_qty=packed_qty),
        asynchronous=False,
    )


def patch_amount_paid(session: SessionContext, order_id, amount_paid):
    ensure_staff(session, "amount_paid")
    current_domain.process(
        RecordAmountPaid(order_id=order_id, amount_paid=amount_paid),
        asynchronous=False,
    )


def patch_admin_fields(session: SessionContext, order_id, changes: dict):
    """Apply a partial admin patch; returns the names of the fields changed."""
    ensure_staff(session, "order")
    return current_domain.process(
        AmendOrder(order_id=order_id, changes=json.dumps(changes, default=str)),
        asynchronous=False,
    )


def add_order_lines(session: SessionContext, order_id, lines: list[dict]):
    """Append staff lines priced from the catalog now; returns the new line ids."""
    ensure_staff(session, "order")
    return current_domain.process(
        AddOrderLines(order_id=order_id, lines=json.dumps(lines, default=str)),
        asynchronous=False,
    )


def patch_payment_proof(session: SessionContext, order_id, proof: PaymentProof | None):
    """Replace or remove an order's payment proof.

    Replacing uploads the new object first, removes the old one best-effort,
    then records the new path. Removing clears the path and deletes the
    object best-effort. Returns the stored path, or None after removal.
    """
    ensure_staff(session, "order")
    order = current_domain.repository_for(Order).get(order_id)
    current_path = order.payment_proof_path

    if proof is None:
        current_domain.process(DetachPaymentProof(order_id=order_id), asynchronous=False)
        if current_path:
            _remove_quietly(current_path, order_id)
        return None

    path = proof.object_path(f"orders/{order_id}", datetime.now(UTC))
    result = get_storage().upload(path, proof.content, proof.content_type)
    if not result.success:
        logger.error("Payment proof upload failed", order_id=str(order_id), reason=result.failure_reason)
        raise ProofUploadError(f"Payment proof upload failed: {result.failure_reason}")

    if current_path and current_path != path:
        _remove_quietly(current_path, order_id)

    current_domain.process(
        AttachPaymentProof(order_id=order_id, payment_proof_path=path),
        asynchronous=False,
    )
    logger.info("Payment proof replaced", order_id=str(order_id), path=path)
    return path


def delete_order(session: SessionContext, order_id):
    """Delete lines then the order; the proof object goes last, best-effort."""
    ensure_staff(session, "delete")
    # Lines go in their own write; a blocked row delete does not bring them back.
    current_domain.process(DiscardOrderLines(order_id=order_id), asynchronous=False)
    proof_path = current_domain.process(DeleteOrder(order_id=order_id), asynchronous=False)
    if proof_path:
        _remove_quietly(proof_path, order_id)
    logger.info("Order deleted", order_id=str(order_id))


def _remove_quietly(path, order_id):
    if not get_storage().remove(path):
        logger.warning("Payment proof removal failed", order_id=str(order_id), path=path)
