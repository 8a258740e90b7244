"""Order reads for the customer "my orders" list and the staff order drawer."""

from dataclasses import dataclass, field
from datetime import date, datetime

from protean.utils.globals import current_domain

from storefront.order.order import Order, normalize_status
from storefront.settings import setting
from storefront.storage import get_storage


@dataclass(frozen=True)
class OrderListItem:
    id: str
    order_number: str
    created_at: datetime
    delivery_date: date | None
    total_qty: int
    packed_qty_total: int
    subtotal: float
    delivery_fee: float
    thermal_bag_fee: float
    total_selling_price: float
    amount_paid: float | None
    status: str
    paid_status: str
    delivery_status: str
    full_name: str | None = None
    email: str | None = None
    phone: str | None = None
    placed_for_someone_else: bool = False


@dataclass(frozen=True)
class OrderDetailLine:
    id: str
    product_id: str
    name: str
    size: str | None
    temperature: str | None
    unit_price: float
    qty: int
    packed_qty: int | None
    line_total: float
    added_by_admin: bool


@dataclass(frozen=True)
class OrderDetail:
    id: str
    order_number: str
    created_at: datetime
    full_name: str | None
    email: str | None
    phone: str | None
    placed_for_someone_else: bool
    address: str | None
    postal_code: str | None
    notes: str | None
    delivery_date: date | None
    delivery_slot: str | None
    express_delivery: bool
    add_thermal_bag: bool
    total_qty: int
    subtotal: float
    delivery_fee: float
    thermal_bag_fee: float
    total_selling_price: float
    amount_paid: float | None
    payment_proof_path: str | None
    payment_proof_url: str | None
    status: str
    paid_status: str
    delivery_status: str
    lines: list[OrderDetailLine] = field(default_factory=list)


def _list_item(order: Order) -> OrderListItem:
    return OrderListItem(
        id=str(order.id),
        order_number=order.order_number,
        created_at=order.created_at,
        delivery_date=order.delivery_date,
        total_qty=order.total_qty or 0,
        packed_qty_total=order.packed_qty_total,
        subtotal=order.subtotal or 0.0,
        delivery_fee=order.delivery_fee or 0.0,
        thermal_bag_fee=order.thermal_bag_fee or 0.0,
        total_selling_price=order.total_selling_price or 0.0,
        amount_paid=order.amount_paid,
        status=normalize_status(order.status),
        paid_status=order.paid_status,
        delivery_status=order.delivery_status,
        full_name=order.full_name,
        email=order.email,
        phone=order.phone,
        placed_for_someone_else=bool(order.placed_for_someone_else),
    )


def list_orders(user_id=None, email=None, phone=None, all=False) -> list[OrderListItem]:
    """Newest orders first.

    Staff pass ``all=True`` to see everything. A customer listing matches
    any of user id, email or phone and hides orders placed for someone
    else; with none of them it returns nothing.
    """
    repo = current_domain.repository_for(Order)
    limit = setting("order_list_limit")

    if all:
        return [_list_item(order) for order in repo.recent(limit)]

    matches = {}
    if user_id:
        matches.update({str(order.id): order for order in repo.for_user(user_id, limit)})
    if email:
        matches.update({str(order.id): order for order in repo.for_email(email.strip(), limit)})
    if phone:
        matches.update({str(order.id): order for order in repo.for_phone(phone.strip(), limit)})

    orders = [order for order in matches.values() if not order.placed_for_someone_else]
    orders.sort(key=lambda order: order.created_at, reverse=True)
    return [_list_item(order) for order in orders[:limit]]


def get_order_detail(order_id) -> OrderDetail:
    """Full order with lines; raises ``ObjectNotFoundError`` for an unknown id."""
    order = current_domain.repository_for(Order).get(order_id)

    # Customer lines first, then staff additions, each by name.
    lines = sorted(order.lines, key=lambda line: (bool(line.added_by_admin), (line.name_snapshot or "").lower()))

    proof_path = order.payment_proof_path
    return OrderDetail(
        id=str(order.id),
        order_number=order.order_number,
        created_at=order.created_at,
        full_name=order.full_name,
        email=order.email,
        phone=order.phone,
        placed_for_someone_else=bool(order.placed_for_someone_else),
        address=order.address,
        postal_code=order.postal_code,
        notes=order.notes,
        delivery_date=order.delivery_date,
        delivery_slot=order.delivery_slot,
        express_delivery=bool(order.express_delivery),
        add_thermal_bag=bool(order.add_thermal_bag),
        total_qty=order.total_qty or 0,
        subtotal=order.subtotal or 0.0,
        delivery_fee=order.delivery_fee or 0.0,
        thermal_bag_fee=order.thermal_bag_fee or 0.0,
        total_selling_price=order.total_selling_price or 0.0,
        amount_paid=order.amount_paid,
        payment_proof_path=proof_path,
        payment_proof_url=get_storage().resolve_url(proof_path) if proof_path else None,
        status=normalize_status(order.status),
        paid_status=order.paid_status,
        delivery_status=order.delivery_status,
        lines=[
            OrderDetailLine(
                id=str(line.id),
                product_id=str(line.product_id),
                name=line.name_snapshot,
                size=line.size_snapshot,
                temperature=line.temperature_snapshot,
                unit_price=line.unit_price_snapshot,
                qty=line.qty,
                packed_qty=line.packed_qty,
                line_total=line.line_total,
                added_by_admin=bool(line.added_by_admin),
            )
            for line in lines
        ],
    )
