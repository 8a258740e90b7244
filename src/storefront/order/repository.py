"""Order repository — customer-scoped and staff-wide order reads."""

from storefront.domain import storefront
from storefront.order.order import Order


@storefront.repository(part_of=Order)
class OrderRepository:
    def recent(self, limit):
        return self._dao.query.order_by("-created_at").limit(limit).all().items

    def for_user(self, user_id, limit):
        return self._dao.query.filter(user_id=user_id).order_by("-created_at").limit(limit).all().items

    def for_email(self, email, limit):
        return self._dao.query.filter(email=email).order_by("-created_at").limit(limit).all().items

    def for_phone(self, phone, limit):
        return self._dao.query.filter(phone=phone).order_by("-created_at").limit(limit).all().items

    def remove(self, order):
        """Delete the order row. Lines must already be discarded and persisted."""
        self._dao.delete(order)
