"""Storefront bounded context — Cart, Checkout and Order lifecycle.

Handles the per-session shopping cart, delivery pricing, checkout
composition and submission, and the staff-side fulfilment and
reconciliation of submitted orders.
"""

import structlog
from protean.domain import Domain

storefront = Domain(name="storefront")

logger = structlog.get_logger(__name__)
