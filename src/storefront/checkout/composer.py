"""Checkout composer — the single place checkout totals and readiness are computed.

Totals:
    subtotal        = Σ live unit price × qty
    delivery_fee    = 0 when subtotal ≥ free-delivery ceiling (4000) or ≥ the
                      rule's own threshold, else the rule's fee; 0 when the
                      address is unresolved
    thermal_bag_fee = flat fee when the thermal bag is chosen, else 0
    total           = subtotal + delivery_fee + thermal_bag_fee

The delivery fee is computed from the pre-fee subtotal only, so adding the
fee can never move the order across a free-delivery threshold.

Readiness problems are reported as a list of missing fields, never raised.
"""

import re
from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum

from storefront.cart.view import CartSnapshot, get_cart
from storefront.checkout.draft import CheckoutDraft
from storefront.checkout.slots import (
    is_valid_delivery_date,
    is_valid_delivery_slot,
    is_within_lead_time,
)
from storefront.delivery.resolver import (
    DeliveryResolution,
    ResolutionStatus,
    ResolvedRule,
    resolve_delivery,
)
from storefront.delivery.rule import load_delivery_rules
from storefront.session import SessionContext
from storefront.settings import setting

_EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")


class PostalState(Enum):
    MISSING = "missing"
    UNSUPPORTED = "unsupported"
    SUPPORTED = "supported"


@dataclass(frozen=True)
class StockWarning:
    product_id: str
    name: str
    requested: int
    available: int


@dataclass(frozen=True)
class Readiness:
    missing: list[str] = field(default_factory=list)
    postal_state: PostalState = PostalState.MISSING
    within_lead_time: bool = False
    stock_warnings: list[StockWarning] = field(default_factory=list)

    @property
    def ready(self) -> bool:
        return not self.missing


@dataclass(frozen=True)
class CheckoutSummary:
    subtotal: float
    delivery_fee: float
    thermal_bag_fee: float
    total: float
    delivery: DeliveryResolution
    readiness: Readiness

    @property
    def free_delivery_target(self) -> float:
        return self.delivery.rule.min_order_free_delivery if self.delivery.rule else 0.0


def compute_delivery_fee(computed_total: float, rule: ResolvedRule | None) -> float:
    if rule is None:
        return 0.0
    if computed_total >= setting("free_delivery_ceiling") or computed_total >= rule.min_order_free_delivery:
        return 0.0
    return float(rule.fee_below_min)


def compute_thermal_bag_fee(add_thermal_bag: bool) -> float:
    return float(setting("thermal_bag_fee")) if add_thermal_bag else 0.0


def _postal_state(draft: CheckoutDraft, delivery: DeliveryResolution) -> PostalState:
    if not draft.normalized_postal_code:
        return PostalState.MISSING
    return PostalState.SUPPORTED if delivery.resolved else PostalState.UNSUPPORTED


def check_readiness(
    draft: CheckoutDraft,
    cart: CartSnapshot,
    delivery: DeliveryResolution,
    has_payment_proof: bool,
    now: datetime,
) -> Readiness:
    missing = []

    if cart.is_empty:
        missing.append("cart items")
    if len(draft.full_name.strip()) <= 1:
        missing.append("full name")
    if not _EMAIL_PATTERN.match(draft.email.strip()):
        missing.append("valid email")
    if len(draft.phone.strip()) < 7:
        missing.append("phone")
    if len(draft.line1.strip()) <= 3:
        missing.append("line 1")
    if len(draft.barangay.strip()) <= 1:
        missing.append("barangay")
    if len(draft.city.strip()) <= 1:
        missing.append("city")
    if len(draft.province.strip()) <= 1:
        missing.append("province")

    postal_state = _postal_state(draft, delivery)
    if len(draft.postal_code.strip()) <= 2:
        missing.append("postal code")
    elif postal_state != PostalState.SUPPORTED:
        missing.append("supported delivery postal code")

    # Unparseable date or slot text counts as missing.
    date_ok = is_valid_delivery_date(draft.delivery_date.strip())
    slot_ok = is_valid_delivery_slot(draft.delivery_slot.strip())
    if not date_ok:
        missing.append("delivery date")
    if not slot_ok:
        missing.append("delivery time")

    within_lead_time = False
    if date_ok and slot_ok:
        within_lead_time = is_within_lead_time(draft.delivery_date, draft.delivery_slot, now)
        if within_lead_time and not draft.express_delivery:
            missing.append("express delivery or a later delivery time")

    if not has_payment_proof:
        missing.append("payment proof")

    stock_warnings = [
        StockWarning(
            product_id=line.product_id,
            name=line.name,
            requested=line.qty,
            available=max(line.qty_available or 0, 0),
        )
        for line in cart.lines
        if line.exceeds_stock
    ]

    return Readiness(
        missing=missing,
        postal_state=postal_state,
        within_lead_time=within_lead_time,
        stock_warnings=stock_warnings,
    )


def compose_checkout(
    draft: CheckoutDraft,
    cart: CartSnapshot,
    rules,
    has_payment_proof: bool = False,
    now: datetime | None = None,
) -> CheckoutSummary:
    """Price the draft against the cart and judge whether it can be submitted."""
    now = now or datetime.now()
    delivery = resolve_delivery(draft.postal_code, draft.area_text, rules)

    subtotal = cart.subtotal
    delivery_fee = compute_delivery_fee(subtotal, delivery.rule)
    thermal_bag_fee = compute_thermal_bag_fee(draft.add_thermal_bag)
    total = round(subtotal + delivery_fee + thermal_bag_fee, 2)

    return CheckoutSummary(
        subtotal=subtotal,
        delivery_fee=delivery_fee,
        thermal_bag_fee=thermal_bag_fee,
        total=total,
        delivery=delivery,
        readiness=check_readiness(draft, cart, delivery, has_payment_proof, now),
    )


def compose_for_session(
    session: SessionContext,
    draft: CheckoutDraft,
    has_payment_proof: bool = False,
    now: datetime | None = None,
) -> CheckoutSummary:
    """Compose against the session's stored cart and the configured rules."""
    return compose_checkout(
        draft,
        get_cart(session),
        load_delivery_rules(),
        has_payment_proof=has_payment_proof,
        now=now,
    )
