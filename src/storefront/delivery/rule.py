"""Delivery rules — read-only reference data mapping a postal area to a fee.

Several rules may share a postal code; the resolver disambiguates them by
area name.
"""

from protean import handle
from protean.fields import Float, String
from protean.utils.globals import current_domain

from storefront.domain import storefront


@storefront.aggregate
class DeliveryRule:
    postal_code = String(required=True, max_length=20)
    area_name = String(required=True, max_length=255)
    min_order_free_delivery = Float(required=True, min_value=0.0)
    fee_below_min = Float(required=True, min_value=0.0)


@storefront.repository(part_of=DeliveryRule)
class DeliveryRuleRepository:
    def all_rules(self, limit=1000):
        return self._dao.query.limit(limit).all().items


@storefront.command(part_of="DeliveryRule")
class DefineDeliveryRule:
    """Register a delivery rule for a postal code and area."""

    postal_code = String(required=True, max_length=20)
    area_name = String(required=True, max_length=255)
    min_order_free_delivery = Float(required=True, min_value=0.0)
    fee_below_min = Float(required=True, min_value=0.0)


@storefront.command_handler(part_of=DeliveryRule)
class DefineDeliveryRuleHandler:
    @handle(DefineDeliveryRule)
    def define_delivery_rule(self, command):
        rule = DeliveryRule(
            postal_code=command.postal_code.strip(),
            area_name=command.area_name.strip(),
            min_order_free_delivery=command.min_order_free_delivery,
            fee_below_min=command.fee_below_min,
        )
        current_domain.repository_for(DeliveryRule).add(rule)
        return str(rule.id)


def load_delivery_rules() -> list[DeliveryRule]:
    """Return every configured delivery rule."""
    return current_domain.repository_for(DeliveryRule).all_rules()
