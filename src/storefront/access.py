"""Access policy for staff-only order mutations."""

import structlog

from storefront.exceptions import WriteRejectedError
from storefront.session import SessionContext

logger = structlog.get_logger(__name__)

_BLOCKED_MESSAGES = {
    "status": "Status update was blocked (no rows updated). Check the update policy on orders.",
    "packed_qty": "Packed quantity update was blocked (no rows updated). Check the update policy on order lines.",
    "amount_paid": "Amount update was blocked (no rows updated). Check the update policy on orders.",
    "order": "Order update was blocked (no rows updated). Check the update policy on orders.",
    "delete": "Order delete was blocked (no rows deleted). Check the delete policy on orders.",
}


def ensure_staff(session: SessionContext | None, action: str = "order") -> None:
    """Reject the write unless the caller is staff.

    A rejection is a permissions failure, not a missing record, and is
    raised as ``WriteRejectedError``.
    """
    if session is not None and session.is_staff:
        return
    logger.warning(
        "Staff write rejected",
        action=action,
        session_id=session.session_id if session else None,
    )
    raise WriteRejectedError(_BLOCKED_MESSAGES.get(action, _BLOCKED_MESSAGES["order"]))
