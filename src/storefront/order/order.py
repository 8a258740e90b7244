"""Order aggregate — an immutable priced snapshot of a cart plus its fulfilment state.

Lines are created once at placement. Staff may append lines later (flagged
``added_by_admin``) but never remove a single line; deleting removes the
whole order.

Status fields are independent of each other:
    status          draft → submitted → confirmed → completed
    paid_status     unpaid | processed | paid
    delivery_status unpacked | packed | in progress | delivered

The only coupling: marking an order delivered completes it in the same
update.

Totals are always re-derived from the lines:
    subtotal            = Σ line_total
    total_qty           = Σ qty
    total_selling_price = subtotal + delivery_fee + thermal_bag_fee
"""

import json
import math
import re
from datetime import UTC, date, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import (
    Boolean,
    Date,
    DateTime,
    Float,
    HasMany,
    Identifier,
    Integer,
    String,
    Text,
)

from storefront.domain import storefront
from storefront.order.events import (
    AmountPaidRecorded,
    FulfillmentStarted,
    OrderAmended,
    OrderDiscarded,
    OrderLinesAdded,
    OrderPlaced,
    OrderStatusesUpdated,
    PackedQtyRecorded,
    PaymentProofAttached,
    PaymentProofDetached,
)
from storefront.settings import setting

_TOLERANCE = 0.005


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    DRAFT = "draft"
    SUBMITTED = "submitted"
    CONFIRMED = "confirmed"
    COMPLETED = "completed"


class PaidStatus(Enum):
    UNPAID = "unpaid"
    PROCESSED = "processed"
    PAID = "paid"


class DeliveryStatus(Enum):
    UNPACKED = "unpacked"
    PACKED = "packed"
    IN_PROGRESS = "in progress"
    DELIVERED = "delivered"


def normalize_status(value) -> str:
    """Lower-case a status value; legacy ``pending`` reads as ``submitted``."""
    raw = str(value if value is not None else "").strip().lower()
    if raw == "pending":
        return OrderStatus.SUBMITTED.value
    return raw or OrderStatus.DRAFT.value


def order_number_for(order_id) -> str:
    """Short display number: the last 8 digits found in the order id."""
    digits = re.sub(r"\D", "", str(order_id or ""))
    return (digits[-8:] or "00000000").rjust(8, "0")


def _checked(value, enum_cls, field_name) -> str:
    allowed = [member.value for member in enum_cls]
    if value not in allowed:
        raise ValidationError({field_name: [f"Must be one of: {', '.join(allowed)}"]})
    return value


def clamp_packed_qty(value):
    if value is None:
        return None
    number = float(value)
    if math.isnan(number):
        return None
    return max(0, math.floor(number))


def clamp_amount_paid(value):
    if value is None:
        return None
    number = float(value)
    if math.isnan(number):
        return None
    return max(0.0, number)


# Fields staff may edit on a placed order.
ADMIN_FIELDS = (
    "full_name",
    "email",
    "phone",
    "address",
    "notes",
    "delivery_date",
    "delivery_slot",
    "express_delivery",
    "add_thermal_bag",
    "delivery_fee",
    "created_at",
)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@storefront.entity(part_of="Order")
class OrderLine:
    """A product snapshot taken when the line was added.

    Name, size, temperature and price never follow later catalog changes.
    Only ``packed_qty`` changes after creation.
    """

    product_id = Identifier(required=True)
    name_snapshot = String(required=True, max_length=255)
    size_snapshot = String(max_length=100)
    temperature_snapshot = String(max_length=100)
    unit_price_snapshot = Float(required=True, min_value=0.0)
    qty = Integer(required=True, min_value=1)
    packed_qty = Integer(min_value=0)
    line_total = Float(required=True, min_value=0.0)
    added_by_admin = Boolean(default=False)

    @classmethod
    def snapshot(cls, product_id, name, unit_price, qty, size=None, temperature=None, added_by_admin=False):
        unit_price = float(unit_price or 0.0)
        return cls(
            product_id=product_id,
            name_snapshot=name,
            size_snapshot=size,
            temperature_snapshot=temperature,
            unit_price_snapshot=unit_price,
            qty=qty,
            packed_qty=0 if added_by_admin else None,
            line_total=round(unit_price * qty, 2),
            added_by_admin=added_by_admin,
        )

    def to_dict(self):
        return {
            "id": str(self.id),
            "product_id": str(self.product_id),
            "name": self.name_snapshot,
            "size": self.size_snapshot,
            "temperature": self.temperature_snapshot,
            "unit_price": self.unit_price_snapshot,
            "qty": self.qty,
            "packed_qty": self.packed_qty,
            "line_total": self.line_total,
            "added_by_admin": bool(self.added_by_admin),
        }


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@storefront.aggregate
class Order:
    session_id = String(required=True, max_length=255)
    user_id = String(max_length=255)
    full_name = String(max_length=255)
    email = String(max_length=255)
    phone = String(max_length=50)
    placed_for_someone_else = Boolean(default=False)
    address = Text()
    postal_code = String(max_length=20)
    notes = Text()
    delivery_date = Date()
    delivery_slot = String(max_length=5)
    express_delivery = Boolean(default=False)
    add_thermal_bag = Boolean(default=False)
    lines = HasMany(OrderLine)
    total_qty = Integer(default=0)
    subtotal = Float(default=0.0)
    delivery_fee = Float(default=0.0, min_value=0.0)
    thermal_bag_fee = Float(default=0.0, min_value=0.0)
    total_selling_price = Float(default=0.0)
    amount_paid = Float(min_value=0.0)
    payment_proof_path = String(max_length=1024)
    status = String(choices=OrderStatus, default=OrderStatus.DRAFT.value)
    paid_status = String(choices=PaidStatus, default=PaidStatus.UNPAID.value)
    delivery_status = String(choices=DeliveryStatus, default=DeliveryStatus.UNPACKED.value)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def totals_follow_lines(self):
        line_sum = sum(line.line_total or 0.0 for line in self.lines)
        qty_sum = sum(line.qty or 0 for line in self.lines)
        if abs((self.subtotal or 0.0) - line_sum) > _TOLERANCE:
            raise ValidationError({"subtotal": ["Subtotal must equal the sum of line totals"]})
        if (self.total_qty or 0) != qty_sum:
            raise ValidationError({"total_qty": ["Total quantity must equal the sum of line quantities"]})

    @invariant.post
    def total_is_subtotal_plus_fees(self):
        expected = (self.subtotal or 0.0) + (self.delivery_fee or 0.0) + (self.thermal_bag_fee or 0.0)
        if abs((self.total_selling_price or 0.0) - expected) > _TOLERANCE:
            raise ValidationError(
                {"total_selling_price": ["Total must equal subtotal plus delivery and thermal bag fees"]}
            )

    # -------------------------------------------------------------------
    # Derived values
    # -------------------------------------------------------------------
    @property
    def order_number(self) -> str:
        return order_number_for(self.id)

    @property
    def packed_qty_total(self) -> int:
        return sum(line.packed_qty or 0 for line in self.lines)

    @property
    def payment_delta(self) -> float:
        return round((self.amount_paid or 0.0) - (self.total_selling_price or 0.0), 2)

    def line_for(self, line_id):
        return next((line for line in self.lines if str(line.id) == str(line_id)), None)

    def _recalculate_totals(self):
        self.total_qty = sum(line.qty for line in self.lines)
        self.subtotal = round(sum(line.line_total for line in self.lines), 2)
        self.total_selling_price = round(self.subtotal + (self.delivery_fee or 0.0) + (self.thermal_bag_fee or 0.0), 2)

    def _touch(self):
        self.updated_at = datetime.now(UTC)

    # -------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------
    @classmethod
    def place(cls, session_id, details, lines_data, delivery_fee=0.0, thermal_bag_fee=0.0, user_id=None):
        """Create an order from checkout details and cart line snapshots.

        Args:
            session_id: The cart session the order came from.
            details: Dict of customer and delivery fields (full_name, email,
                phone, placed_for_someone_else, address, postal_code, notes,
                delivery_date, delivery_slot, express_delivery, add_thermal_bag,
                payment_proof_path).
            lines_data: List of dicts with product_id, name, unit_price, qty,
                and optionally size and temperature.
            delivery_fee: Fee computed at checkout.
            thermal_bag_fee: Fee computed at checkout.
            user_id: Authenticated user, if any.
        """
        if not lines_data:
            raise ValidationError({"lines": ["An order needs at least one line"]})

        now = datetime.now(UTC)
        order = cls(
            session_id=session_id,
            user_id=user_id,
            full_name=details.get("full_name"),
            email=details.get("email"),
            phone=details.get("phone"),
            placed_for_someone_else=bool(details.get("placed_for_someone_else", False)),
            address=details.get("address"),
            postal_code=details.get("postal_code"),
            notes=details.get("notes"),
            delivery_date=_as_date(details.get("delivery_date")),
            delivery_slot=details.get("delivery_slot") or None,
            express_delivery=bool(details.get("express_delivery", False)),
            add_thermal_bag=bool(details.get("add_thermal_bag", False)),
            payment_proof_path=details.get("payment_proof_path"),
            created_at=now,
            updated_at=now,
        )

        with atomic_change(order):
            for data in lines_data:
                order.add_lines(
                    OrderLine.snapshot(
                        product_id=data["product_id"],
                        name=data.get("name") or "Item",
                        unit_price=data.get("unit_price", 0.0),
                        qty=data["qty"],
                        size=data.get("size"),
                        temperature=data.get("temperature"),
                    )
                )
            order.delivery_fee = float(delivery_fee or 0.0)
            order.thermal_bag_fee = float(thermal_bag_fee or 0.0)
            order._recalculate_totals()

        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                session_id=session_id,
                user_id=user_id,
                email=order.email,
                total_qty=order.total_qty,
                subtotal=order.subtotal,
                delivery_fee=order.delivery_fee,
                thermal_bag_fee=order.thermal_bag_fee,
                total_selling_price=order.total_selling_price,
                delivery_date=order.delivery_date,
                delivery_slot=order.delivery_slot,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Fulfilment state
    # -------------------------------------------------------------------
    def start_fulfillment(self):
        """Put a freshly placed order into its initial fulfilment state.

        The customer has asserted payment with a proof, so the amount paid
        starts at the order total.
        """
        with atomic_change(self):
            self.status = OrderStatus.SUBMITTED.value
            self.paid_status = PaidStatus.PROCESSED.value
            self.delivery_status = DeliveryStatus.UNPACKED.value
            self.amount_paid = self.total_selling_price
            self._touch()

        self.raise_(
            FulfillmentStarted(
                order_id=str(self.id),
                status=self.status,
                paid_status=self.paid_status,
                delivery_status=self.delivery_status,
                amount_paid=self.amount_paid,
            )
        )

    def update_statuses(self, status=None, paid_status=None, delivery_status=None):
        """Apply a partial status patch. An empty patch changes nothing."""
        patch = {}
        if status is not None:
            patch["status"] = _checked(normalize_status(status), OrderStatus, "status")
        if paid_status is not None:
            patch["paid_status"] = _checked(str(paid_status).strip().lower(), PaidStatus, "paid_status")
        if delivery_status is not None:
            patch["delivery_status"] = _checked(str(delivery_status).strip().lower(), DeliveryStatus, "delivery_status")

        if not patch:
            return False

        if patch.get("delivery_status") == DeliveryStatus.DELIVERED.value:
            patch["status"] = OrderStatus.COMPLETED.value

        with atomic_change(self):
            for field_name, value in patch.items():
                setattr(self, field_name, value)
            self._touch()

        self.raise_(
            OrderStatusesUpdated(
                order_id=str(self.id),
                status=patch.get("status"),
                paid_status=patch.get("paid_status"),
                delivery_status=patch.get("delivery_status"),
                updated_at=self.updated_at,
            )
        )
        return True

    def record_packed_qty(self, line_id, packed_qty):
        line = self.line_for(line_id)
        if line is None:
            raise ValidationError({"line_id": [f"Order line {line_id} not found"]})

        value = clamp_packed_qty(packed_qty)
        with atomic_change(self):
            line.packed_qty = value
            self._touch()

        self.raise_(
            PackedQtyRecorded(
                order_id=str(self.id),
                line_id=str(line.id),
                qty=line.qty,
                packed_qty=value,
            )
        )

    def record_amount_paid(self, amount_paid):
        value = clamp_amount_paid(amount_paid)
        with atomic_change(self):
            self.amount_paid = value
            self._touch()

        self.raise_(
            AmountPaidRecorded(
                order_id=str(self.id),
                amount_paid=value,
                total_selling_price=self.total_selling_price,
            )
        )

    # -------------------------------------------------------------------
    # Staff reconciliation
    # -------------------------------------------------------------------
    def add_admin_lines(self, lines_data):
        """Append staff-added lines and re-derive every total from all lines."""
        if not lines_data:
            return []

        added = []
        with atomic_change(self):
            for data in lines_data:
                line = OrderLine.snapshot(
                    product_id=data["product_id"],
                    name=data.get("name") or "Item",
                    unit_price=data.get("unit_price", 0.0),
                    qty=data["qty"],
                    size=data.get("size"),
                    temperature=data.get("temperature"),
                    added_by_admin=True,
                )
                self.add_lines(line)
                added.append(line)
            self._recalculate_totals()
            self._touch()

        self.raise_(
            OrderLinesAdded(
                order_id=str(self.id),
                lines=json.dumps([line.to_dict() for line in added]),
                total_qty=self.total_qty,
                subtotal=self.subtotal,
                total_selling_price=self.total_selling_price,
            )
        )
        return added

    def amend(self, **changes):
        """Apply a partial admin patch.

        A delivery fee change or thermal bag toggle recomputes the total in
        the same update. A supplied ``total_selling_price`` is accepted only
        when it agrees with the recomputed total.
        """
        claimed_total = changes.pop("total_selling_price", None)
        unknown = sorted(set(changes) - set(ADMIN_FIELDS))
        if unknown:
            raise ValidationError({field_name: ["Field cannot be edited"] for field_name in unknown})

        # A blank order date leaves the original untouched.
        if "created_at" in changes and not changes["created_at"]:
            del changes["created_at"]
        if "delivery_date" in changes:
            changes["delivery_date"] = _parsed(_as_date, changes["delivery_date"], "delivery_date", "YYYY-MM-DD")
        if "created_at" in changes:
            changes["created_at"] = _parsed(_as_datetime, changes["created_at"], "created_at", "ISO 8601")

        if not changes and claimed_total is None:
            return []

        with atomic_change(self):
            for field_name, value in changes.items():
                if field_name == "delivery_slot":
                    value = value or None
                elif field_name == "delivery_fee":
                    value = max(float(value or 0.0), 0.0)
                elif field_name in ("express_delivery", "add_thermal_bag"):
                    value = bool(value)
                setattr(self, field_name, value)

            if "add_thermal_bag" in changes:
                self.thermal_bag_fee = float(setting("thermal_bag_fee")) if self.add_thermal_bag else 0.0

            self._recalculate_totals()
            if claimed_total is not None and abs(float(claimed_total) - self.total_selling_price) > _TOLERANCE:
                raise ValidationError(
                    {"total_selling_price": [f"Total must be {self.total_selling_price:.2f} for the current lines and fees"]}
                )
            self._touch()

        changed = sorted(changes)
        self.raise_(
            OrderAmended(
                order_id=str(self.id),
                changes=json.dumps(changed),
                total_selling_price=self.total_selling_price,
            )
        )
        return changed

    def attach_payment_proof(self, path):
        previous = self.payment_proof_path
        self.payment_proof_path = path
        self._touch()
        self.raise_(
            PaymentProofAttached(
                order_id=str(self.id),
                payment_proof_path=path,
                previous_path=previous,
            )
        )
        return previous

    def detach_payment_proof(self):
        previous = self.payment_proof_path
        self.payment_proof_path = None
        self._touch()
        self.raise_(PaymentProofDetached(order_id=str(self.id), previous_path=previous))
        return previous

    def discard(self):
        """Remove every line ahead of deleting the order itself."""
        line_count = len(self.lines)
        with atomic_change(self):
            for line in list(self.lines):
                self.remove_lines(line)
            self._recalculate_totals()

        self.raise_(
            OrderDiscarded(
                order_id=str(self.id),
                line_count=line_count,
                payment_proof_path=self.payment_proof_path,
            )
        )


def _as_date(value):
    if not value:
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def _parsed(convert, value, field_name, layout):
    try:
        return convert(value)
    except ValueError as exc:
        raise ValidationError({field_name: [f"Use the {layout} format"]}) from exc


def _as_datetime(value):
    if not isinstance(value, datetime):
        value = datetime.fromisoformat(str(value).strip())
    return value if value.tzinfo else value.replace(tzinfo=UTC)
