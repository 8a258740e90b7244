"""Checkout submission — turns a ready draft and a payment proof into an order.

Steps run strictly in order and each is logged on its own:
    1. require a payment proof and a ready draft            (fatal)
    2. upload the proof under proofs/<owner>/<millis>-<name>        (fatal)
    3. create the order through the negotiated procedure    (fatal)
    4. start fulfilment: submitted / processed / unpacked   (advisory)
    5. clear the session's cart, one write per line         (advisory)
    6. save the address to the customer profile if asked    (advisory)
    7. email the customer a link to the order, admins cc'd  (advisory)

A fatal failure raises and leaves the cart and any uploaded proof as they
were. Advisory failures are logged and returned as warnings.
"""

from dataclasses import dataclass, field
from datetime import datetime

import structlog
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.cart.cart import ShoppingCart
from storefront.cart.view import get_cart, set_cart_line_qty
from storefront.checkout.composer import compose_checkout
from storefront.checkout.draft import CheckoutDraft, PaymentProof
from storefront.checkout.procedure import get_procedure
from storefront.checkout.procedure.port import CreatedOrder, OrderCreationPayload, OrderCreationProcedure
from storefront.delivery.rule import load_delivery_rules
from storefront.exceptions import OrderCreationError, ProcedureUnavailableError, ProofUploadError
from storefront.notifications.order_email import send_order_confirmation
from storefront.order.fulfillment import StartFulfillment
from storefront.order.order import order_number_for
from storefront.profile.profile import SaveProfileAddress
from storefront.session import SessionContext
from storefront.settings import setting
from storefront.storage import get_storage

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CheckoutSubmission:
    order_id: str
    order_number: str
    total: float
    procedure_version: int
    payment_proof_path: str
    warnings: list[str] = field(default_factory=list)


def negotiate_versions(advertised: set[int]) -> list[int]:
    """Versions to try, primary first, limited to what the procedure advertises."""
    preferred = [setting("primary_procedure_version"), setting("legacy_procedure_version")]
    return [version for version in dict.fromkeys(preferred) if version in advertised]


def create_order_negotiated(procedure: OrderCreationProcedure, payload: OrderCreationPayload) -> CreatedOrder:
    """Call the primary procedure version, falling back to legacy once if it is unavailable."""
    versions = negotiate_versions(procedure.available_versions())
    if not versions:
        raise OrderCreationError("No supported order creation procedure is deployed")

    unavailable = None
    for version in versions:
        try:
            return procedure.create_order(version, payload)
        except ProcedureUnavailableError as exc:
            logger.warning("Order creation procedure unavailable", version=version)
            unavailable = exc
        except ValidationError as exc:
            raise OrderCreationError(f"Order could not be created: {exc.messages}") from exc
        except Exception as exc:
            raise OrderCreationError(f"Order could not be created: {exc}") from exc

    raise OrderCreationError(unavailable.message) from unavailable


def submit_checkout(
    session: SessionContext,
    draft: CheckoutDraft,
    proof: PaymentProof | None,
    save_address_to_profile: bool = False,
    now: datetime | None = None,
) -> CheckoutSubmission:
    now = now or datetime.now()
    log = logger.bind(session_id=session.session_id, user_id=session.user_id)

    # Step 1: a payment proof is required
    if proof is None or not proof.content:
        log.error("Checkout rejected: no payment proof")
        raise ValidationError({"payment_proof": ["Please upload your payment proof"]})

    summary = compose_checkout(draft, get_cart(session), load_delivery_rules(), has_payment_proof=True, now=now)
    if not summary.readiness.ready:
        log.error("Checkout rejected: draft not ready", missing=summary.readiness.missing)
        raise ValidationError({"checkout": [f"Missing: {', '.join(summary.readiness.missing)}"]})
    for warning in summary.readiness.stock_warnings:
        log.warning(
            "Ordering beyond available stock",
            product_id=warning.product_id,
            requested=warning.requested,
            available=warning.available,
        )

    # Step 2: upload the proof
    path = proof.object_path(f"{setting('proof_prefix')}/{session.owner_key}", now)
    result = get_storage().upload(path, proof.content, proof.content_type)
    if not result.success:
        log.error("Payment proof upload failed", path=path, reason=result.failure_reason)
        raise ProofUploadError(f"Payment proof upload failed: {result.failure_reason}")
    log.info("Payment proof uploaded", path=path)

    # Step 3: create the order
    payload = OrderCreationPayload(
        session_id=session.session_id,
        user_id=session.user_id,
        full_name=draft.full_name.strip(),
        email=draft.email.strip(),
        phone=draft.phone.strip(),
        placed_for_someone_else=draft.placed_for_someone_else,
        address=draft.address_text(),
        postal_code=draft.postal_code.strip(),
        notes=draft.notes.strip(),
        delivery_date=draft.delivery_date,
        delivery_slot=draft.delivery_slot,
        express_delivery=draft.express_delivery,
        add_thermal_bag=draft.add_thermal_bag,
        delivery_fee=summary.delivery_fee,
        thermal_bag_fee=summary.thermal_bag_fee,
        payment_proof_path=path,
    )
    try:
        created = create_order_negotiated(get_procedure(), payload)
    except OrderCreationError as exc:
        log.error("Order creation failed", error=exc.message)
        raise
    log = log.bind(order_id=created.order_id)
    log.info("Order created from cart", version=created.version, total=summary.total)

    warnings = []

    # Step 4: initial fulfilment state
    try:
        current_domain.process(StartFulfillment(order_id=created.order_id), asynchronous=False)
        log.info("Fulfilment started")
    except Exception as exc:
        log.warning("Initial order status could not be set", error=str(exc))
        warnings.append("Order status could not be initialised")

    # Step 5: clear the cart
    try:
        cart = current_domain.repository_for(ShoppingCart).for_session(session.session_id)
        product_ids = [str(line.product_id) for line in cart.lines] if cart else []
    except Exception as exc:
        log.warning("Cart could not be read for clearing", error=str(exc))
        warnings.append("Cart could not be cleared")
        product_ids = []
    for product_id in product_ids:
        outcome = set_cart_line_qty(session, product_id, 0)
        if not outcome.ok:
            log.warning("Cart line not cleared", product_id=product_id, error=outcome.error)
            warnings.append(f"Cart line {product_id} could not be cleared")
    log.info("Cart cleared", line_count=len(product_ids))

    # Step 6: remember the address
    if save_address_to_profile and session.is_authenticated:
        try:
            current_domain.process(
                SaveProfileAddress(user_id=session.user_id, **draft.profile_address()),
                asynchronous=False,
            )
            log.info("Address saved to profile")
        except Exception as exc:
            log.warning("Profile address save failed", error=str(exc))
            warnings.append("Address could not be saved to your profile")

    # Step 7: confirmation email to the customer, admins copied
    order_number = order_number_for(created.order_id)
    try:
        sent = send_order_confirmation(payload.email, created.order_id, order_number, payload.full_name)
    except Exception as exc:
        sent = {"status": "failed", "error": str(exc)}
    if sent.get("status") == "sent":
        log.info("Order email sent", message_id=sent.get("message_id"))
    else:
        log.warning("Order email not sent", error=sent.get("error"))
        warnings.append("Order confirmation email could not be sent")

    return CheckoutSubmission(
        order_id=created.order_id,
        order_number=order_number,
        total=summary.total,
        procedure_version=created.version,
        payment_proof_path=path,
        warnings=warnings,
    )
