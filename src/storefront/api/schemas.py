"""Pydantic request/response schemas for the Storefront API.

These are external contracts (anti-corruption layer), separate from the
internal Protean commands and read models.
"""

import base64
import binascii
from datetime import date, datetime

from pydantic import BaseModel, Field, field_validator

from storefront.checkout.draft import CheckoutDraft, PaymentProof


# ---------------------------------------------------------------------------
# Shared sub-models
# ---------------------------------------------------------------------------
class PaymentProofSchema(BaseModel):
    filename: str
    content_base64: str
    content_type: str = "image/jpeg"

    @field_validator("content_base64")
    @classmethod
    def must_be_base64(cls, value: str) -> str:
        try:
            base64.b64decode(value, validate=True)
        except (binascii.Error, ValueError) as exc:
            raise ValueError("content_base64 must be base64 encoded") from exc
        return value

    def to_proof(self) -> PaymentProof:
        return PaymentProof(
            filename=self.filename,
            content=base64.b64decode(self.content_base64),
            content_type=self.content_type,
        )


class CheckoutDraftSchema(BaseModel):
    full_name: str = ""
    email: str = ""
    phone: str = ""
    placed_for_someone_else: bool = False
    attention_to: str = ""
    line1: str = ""
    line2: str = ""
    barangay: str = ""
    city: str = ""
    province: str = ""
    postal_code: str = ""
    country: str = "Philippines"
    notes: str = ""
    delivery_date: str = ""
    delivery_slot: str = ""
    express_delivery: bool = False
    add_thermal_bag: bool = False

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "full_name": "Maria Santos",
                    "email": "maria@example.com",
                    "phone": "09171234567",
                    "line1": "12 Sampaguita St",
                    "barangay": "Tambo",
                    "city": "Paranaque",
                    "province": "Metro Manila",
                    "postal_code": "1700",
                    "delivery_date": "2026-03-14",
                    "delivery_slot": "14:30",
                    "add_thermal_bag": True,
                }
            ]
        }
    }

    def to_draft(self) -> CheckoutDraft:
        return CheckoutDraft(**self.model_dump())


# ---------------------------------------------------------------------------
# Cart Schemas
# ---------------------------------------------------------------------------
class SetCartLineRequest(BaseModel):
    qty: float


class CartLineResponse(BaseModel):
    product_id: str
    qty: int
    name: str
    price: float
    line_total: float
    size: str | None = None
    temperature: str | None = None
    qty_available: int | None = None
    out_of_stock: bool
    exceeds_stock: bool


class CartResponse(BaseModel):
    session_id: str
    lines: list[CartLineResponse]
    total_units: int
    subtotal: float


class CartTotalsResponse(BaseModel):
    total_units: int
    subtotal: float


class CartWriteResponse(BaseModel):
    refresh_required: bool
    error: str | None = None
    cart: CartResponse


# ---------------------------------------------------------------------------
# Delivery Schemas
# ---------------------------------------------------------------------------
class DefineDeliveryRuleRequest(BaseModel):
    postal_code: str
    area_name: str
    min_order_free_delivery: float = Field(ge=0)
    fee_below_min: float = Field(ge=0)


class DeliveryRuleResponse(BaseModel):
    postal_code: str
    area_name: str
    min_order_free_delivery: float
    fee_below_min: float


class DeliveryResolutionResponse(BaseModel):
    status: str
    rule: DeliveryRuleResponse | None = None


class DeliverySlotsResponse(BaseModel):
    delivery_date: date | None
    earliest_delivery_date: date
    slots: list[str]
    delivery_slot: str = ""
    suggested: datetime


# ---------------------------------------------------------------------------
# Checkout Schemas
# ---------------------------------------------------------------------------
class ComposeCheckoutRequest(BaseModel):
    draft: CheckoutDraftSchema
    has_payment_proof: bool = False


class StockWarningResponse(BaseModel):
    product_id: str
    name: str
    requested: int
    available: int


class ReadinessResponse(BaseModel):
    ready: bool
    missing: list[str]
    postal_state: str
    within_lead_time: bool
    stock_warnings: list[StockWarningResponse]


class CheckoutSummaryResponse(BaseModel):
    subtotal: float
    delivery_fee: float
    thermal_bag_fee: float
    total: float
    free_delivery_target: float
    delivery: DeliveryResolutionResponse
    readiness: ReadinessResponse


class SubmitCheckoutRequest(BaseModel):
    draft: CheckoutDraftSchema
    payment_proof: PaymentProofSchema | None = None
    save_address_to_profile: bool = False


class CheckoutSubmissionResponse(BaseModel):
    order_id: str
    order_number: str
    total: float
    warnings: list[str]


# ---------------------------------------------------------------------------
# Order Schemas
# ---------------------------------------------------------------------------
class OrderStatusPatchRequest(BaseModel):
    status: str | None = None
    paid_status: str | None = None
    delivery_status: str | None = None

    model_config = {"json_schema_extra": {"examples": [{"delivery_status": "delivered"}]}}


class PackedQtyRequest(BaseModel):
    packed_qty: float | None = None


class AmountPaidRequest(BaseModel):
    amount_paid: float | None = None


class AdminPatchRequest(BaseModel):
    """Partial patch. Only fields present in the request body are applied."""

    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    address: str | None = None
    notes: str | None = None
    delivery_date: str | None = None
    delivery_slot: str | None = None
    express_delivery: bool | None = None
    add_thermal_bag: bool | None = None
    delivery_fee: float | None = Field(default=None, ge=0)
    created_at: datetime | None = None
    total_selling_price: float | None = None


class AddLineRequest(BaseModel):
    product_id: str
    qty: float


class AddLinesRequest(BaseModel):
    lines: list[AddLineRequest]


class OrderListItemResponse(BaseModel):
    id: str
    order_number: str
    created_at: datetime
    delivery_date: date | None = None
    total_qty: int
    packed_qty_total: int
    subtotal: float
    delivery_fee: float
    thermal_bag_fee: float
    total_selling_price: float
    amount_paid: float | None = None
    status: str
    paid_status: str
    delivery_status: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    placed_for_someone_else: bool = False


class OrderLineResponse(BaseModel):
    id: str
    product_id: str
    name: str
    size: str | None = None
    temperature: str | None = None
    unit_price: float
    qty: int
    packed_qty: int | None = None
    line_total: float
    added_by_admin: bool
    packed_tone: str


class OrderDetailResponse(BaseModel):
    id: str
    order_number: str
    created_at: datetime
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    placed_for_someone_else: bool
    address: str | None = None
    postal_code: str | None = None
    notes: str | None = None
    delivery_date: date | None = None
    delivery_slot: str | None = None
    express_delivery: bool
    add_thermal_bag: bool
    total_qty: int
    subtotal: float
    delivery_fee: float
    thermal_bag_fee: float
    total_selling_price: float
    amount_paid: float | None = None
    payment_standing: str
    payment_delta: float
    payment_proof_path: str | None = None
    payment_proof_url: str | None = None
    status: str
    paid_status: str
    delivery_status: str
    lines: list[OrderLineResponse]


class LineIdsResponse(BaseModel):
    line_ids: list[str]


class ChangedFieldsResponse(BaseModel):
    changed: list[str]


class PaymentProofResponse(BaseModel):
    payment_proof_path: str | None = None


class RuleIdResponse(BaseModel):
    rule_id: str


class StatusResponse(BaseModel):
    status: str = "ok"
