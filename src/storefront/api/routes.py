"""FastAPI routes for the Storefront — carts, delivery, checkout and orders."""

from datetime import datetime

from fastapi import APIRouter, Depends
from protean.exceptions import ValidationError
from protean.utils.globals import current_domain

from storefront.access import ensure_staff
from storefront.api.dependencies import session_context
from storefront.api.schemas import (
    AddLinesRequest,
    AdminPatchRequest,
    AmountPaidRequest,
    CartResponse,
    CartTotalsResponse,
    CartWriteResponse,
    ChangedFieldsResponse,
    CheckoutSubmissionResponse,
    CheckoutSummaryResponse,
    ComposeCheckoutRequest,
    DefineDeliveryRuleRequest,
    DeliveryResolutionResponse,
    DeliverySlotsResponse,
    LineIdsResponse,
    OrderDetailResponse,
    OrderListItemResponse,
    OrderStatusPatchRequest,
    PackedQtyRequest,
    PaymentProofResponse,
    PaymentProofSchema,
    RuleIdResponse,
    SetCartLineRequest,
    StatusResponse,
    SubmitCheckoutRequest,
)
from storefront.cart.view import CartSnapshot, get_cart, get_cart_totals, set_cart_line_qty
from storefront.checkout.composer import CheckoutSummary, compose_for_session
from storefront.checkout.slots import (
    clear_invalid_slot,
    earliest_delivery_date,
    parse_delivery_date,
    suggested_delivery,
    valid_slots,
)
from storefront.checkout.submission import submit_checkout
from storefront.delivery.resolver import DeliveryResolution, normalize_area, resolve_delivery
from storefront.delivery.rule import DefineDeliveryRule, load_delivery_rules
from storefront.order import admin
from storefront.order.indicators import packed_tone, payment_standing
from storefront.order.queries import get_order_detail, list_orders
from storefront.session import SessionContext


def _cart_response(cart: CartSnapshot) -> CartResponse:
    return CartResponse.model_validate(
        {
            "session_id": cart.session_id,
            "lines": [
                {
                    "product_id": line.product_id,
                    "qty": line.qty,
                    "name": line.name,
                    "price": line.price,
                    "line_total": line.line_total,
                    "size": line.size,
                    "temperature": line.temperature,
                    "qty_available": line.qty_available,
                    "out_of_stock": line.out_of_stock,
                    "exceeds_stock": line.exceeds_stock,
                }
                for line in cart.lines
            ],
            "total_units": cart.total_units,
            "subtotal": cart.subtotal,
        }
    )


def _resolution_response(resolution: DeliveryResolution) -> DeliveryResolutionResponse:
    rule = resolution.rule
    return DeliveryResolutionResponse.model_validate(
        {
            "status": resolution.status.value,
            "rule": (
                {
                    "postal_code": rule.postal_code,
                    "area_name": rule.area_name,
                    "min_order_free_delivery": rule.min_order_free_delivery,
                    "fee_below_min": rule.fee_below_min,
                }
                if rule
                else None
            ),
        }
    )


def _summary_response(summary: CheckoutSummary) -> CheckoutSummaryResponse:
    readiness = summary.readiness
    return CheckoutSummaryResponse.model_validate(
        {
            "subtotal": summary.subtotal,
            "delivery_fee": summary.delivery_fee,
            "thermal_bag_fee": summary.thermal_bag_fee,
            "total": summary.total,
            "free_delivery_target": summary.free_delivery_target,
            "delivery": _resolution_response(summary.delivery),
            "readiness": {
                "ready": readiness.ready,
                "missing": readiness.missing,
                "postal_state": readiness.postal_state.value,
                "within_lead_time": readiness.within_lead_time,
                "stock_warnings": [vars(warning) for warning in readiness.stock_warnings],
            },
        }
    )


# ---------------------------------------------------------------------------
# Cart Router
# ---------------------------------------------------------------------------
cart_router = APIRouter(prefix="/carts", tags=["carts"])


@cart_router.get("/current", response_model=CartResponse)
async def read_cart(session: SessionContext = Depends(session_context)) -> CartResponse:
    return _cart_response(get_cart(session))


@cart_router.get("/current/totals", response_model=CartTotalsResponse)
async def read_cart_totals(session: SessionContext = Depends(session_context)) -> CartTotalsResponse:
    totals = get_cart_totals(session)
    return CartTotalsResponse(total_units=totals.total_units, subtotal=totals.subtotal)


@cart_router.put("/current/lines/{product_id}", response_model=CartWriteResponse)
async def write_cart_line(
    product_id: str,
    body: SetCartLineRequest,
    session: SessionContext = Depends(session_context),
) -> CartWriteResponse:
    """Set a line to an exact quantity. The response always carries the stored cart."""
    outcome = set_cart_line_qty(session, product_id, body.qty)
    return CartWriteResponse(
        refresh_required=outcome.refresh_required,
        error=outcome.error,
        cart=_cart_response(outcome.cart),
    )


# ---------------------------------------------------------------------------
# Delivery Router
# ---------------------------------------------------------------------------
delivery_router = APIRouter(prefix="/delivery", tags=["delivery"])


@delivery_router.post("/rules", status_code=201, response_model=RuleIdResponse)
async def define_delivery_rule(
    body: DefineDeliveryRuleRequest,
    session: SessionContext = Depends(session_context),
) -> RuleIdResponse:
    ensure_staff(session, "order")
    command = DefineDeliveryRule(
        postal_code=body.postal_code,
        area_name=body.area_name,
        min_order_free_delivery=body.min_order_free_delivery,
        fee_below_min=body.fee_below_min,
    )
    result = current_domain.process(command, asynchronous=False)
    return RuleIdResponse(rule_id=result)


@delivery_router.get("/resolve", response_model=DeliveryResolutionResponse)
async def resolve_delivery_rule(postal_code: str = "", barangay: str = "", city: str = "") -> DeliveryResolutionResponse:
    resolution = resolve_delivery(postal_code, normalize_area(barangay, city), load_delivery_rules())
    return _resolution_response(resolution)


@delivery_router.get("/slots", response_model=DeliverySlotsResponse)
async def read_delivery_slots(delivery_date: str = "", delivery_slot: str = "") -> DeliverySlotsResponse:
    """Bookable slots for a date. A chosen slot that is no longer bookable comes back empty."""
    now = datetime.now()
    try:
        chosen = parse_delivery_date(delivery_date)
    except ValueError as exc:
        raise ValidationError({"delivery_date": ["Use the YYYY-MM-DD format"]}) from exc
    return DeliverySlotsResponse(
        delivery_date=chosen,
        earliest_delivery_date=earliest_delivery_date(now),
        slots=valid_slots(chosen, now),
        delivery_slot=clear_invalid_slot(chosen, delivery_slot, now),
        suggested=suggested_delivery(now),
    )


# ---------------------------------------------------------------------------
# Checkout Router
# ---------------------------------------------------------------------------
checkout_router = APIRouter(prefix="/checkout", tags=["checkout"])


@checkout_router.post("/summary", response_model=CheckoutSummaryResponse)
async def compose(
    body: ComposeCheckoutRequest,
    session: SessionContext = Depends(session_context),
) -> CheckoutSummaryResponse:
    summary = compose_for_session(session, body.draft.to_draft(), has_payment_proof=body.has_payment_proof)
    return _summary_response(summary)


@checkout_router.post("", status_code=201, response_model=CheckoutSubmissionResponse)
async def submit(
    body: SubmitCheckoutRequest,
    session: SessionContext = Depends(session_context),
) -> CheckoutSubmissionResponse:
    submission = submit_checkout(
        session,
        body.draft.to_draft(),
        body.payment_proof.to_proof() if body.payment_proof else None,
        save_address_to_profile=body.save_address_to_profile,
    )
    return CheckoutSubmissionResponse(
        order_id=submission.order_id,
        order_number=submission.order_number,
        total=submission.total,
        warnings=submission.warnings,
    )


# ---------------------------------------------------------------------------
# Order Router
# ---------------------------------------------------------------------------
order_router = APIRouter(prefix="/orders", tags=["orders"])


@order_router.get("", response_model=list[OrderListItemResponse])
async def read_orders(
    email: str | None = None,
    phone: str | None = None,
    all: bool = False,
    session: SessionContext = Depends(session_context),
) -> list[OrderListItemResponse]:
    if all:
        ensure_staff(session, "order")
    items = list_orders(user_id=session.user_id, email=email, phone=phone, all=all)
    return [OrderListItemResponse.model_validate(vars(item)) for item in items]


@order_router.get("/{order_id}", response_model=OrderDetailResponse)
async def read_order(order_id: str) -> OrderDetailResponse:
    detail = get_order_detail(order_id)
    payment = payment_standing(detail.amount_paid, detail.total_selling_price)
    data = {key: value for key, value in vars(detail).items() if key != "lines"}
    data["payment_standing"] = payment.standing.value
    data["payment_delta"] = payment.delta
    data["lines"] = [
        {**vars(line), "packed_tone": packed_tone(line.packed_qty, line.qty).value} for line in detail.lines
    ]
    return OrderDetailResponse.model_validate(data)


@order_router.patch("/{order_id}/status", response_model=StatusResponse)
async def update_order_status(
    order_id: str,
    body: OrderStatusPatchRequest,
    session: SessionContext = Depends(session_context),
) -> StatusResponse:
    admin.patch_order_status(
        session,
        order_id,
        status=body.status,
        paid_status=body.paid_status,
        delivery_status=body.delivery_status,
    )
    return StatusResponse()


@order_router.put("/{order_id}/lines/{line_id}/packed-qty", response_model=StatusResponse)
async def update_packed_qty(
    order_id: str,
    line_id: str,
    body: PackedQtyRequest,
    session: SessionContext = Depends(session_context),
) -> StatusResponse:
    admin.patch_packed_qty(session, order_id, line_id, body.packed_qty)
    return StatusResponse()


@order_router.put("/{order_id}/amount-paid", response_model=StatusResponse)
async def update_amount_paid(
    order_id: str,
    body: AmountPaidRequest,
    session: SessionContext = Depends(session_context),
) -> StatusResponse:
    admin.patch_amount_paid(session, order_id, body.amount_paid)
    return StatusResponse()


@order_router.patch("/{order_id}", response_model=ChangedFieldsResponse)
async def update_admin_fields(
    order_id: str,
    body: AdminPatchRequest,
    session: SessionContext = Depends(session_context),
) -> ChangedFieldsResponse:
    changed = admin.patch_admin_fields(session, order_id, body.model_dump(exclude_unset=True))
    return ChangedFieldsResponse(changed=changed or [])


@order_router.post("/{order_id}/lines", status_code=201, response_model=LineIdsResponse)
async def append_order_lines(
    order_id: str,
    body: AddLinesRequest,
    session: SessionContext = Depends(session_context),
) -> LineIdsResponse:
    line_ids = admin.add_order_lines(session, order_id, [line.model_dump() for line in body.lines])
    return LineIdsResponse(line_ids=line_ids or [])


@order_router.put("/{order_id}/payment-proof", response_model=PaymentProofResponse)
async def replace_payment_proof(
    order_id: str,
    body: PaymentProofSchema,
    session: SessionContext = Depends(session_context),
) -> PaymentProofResponse:
    path = admin.patch_payment_proof(session, order_id, body.to_proof())
    return PaymentProofResponse(payment_proof_path=path)


@order_router.delete("/{order_id}/payment-proof", response_model=PaymentProofResponse)
async def remove_payment_proof(
    order_id: str,
    session: SessionContext = Depends(session_context),
) -> PaymentProofResponse:
    admin.patch_payment_proof(session, order_id, None)
    return PaymentProofResponse(payment_proof_path=None)


@order_router.delete("/{order_id}", response_model=StatusResponse)
async def remove_order(
    order_id: str,
    session: SessionContext = Depends(session_context),
) -> StatusResponse:
    admin.delete_order(session, order_id)
    return StatusResponse()
