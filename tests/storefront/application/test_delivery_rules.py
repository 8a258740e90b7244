from protean import current_domain
from storefront.delivery.rule import DefineDeliveryRule, DeliveryRule, load_delivery_rules


def define(postal_code, area_name, threshold=2000.0, fee=100.0):
    return current_domain.process(
        DefineDeliveryRule(
            postal_code=postal_code,
            area_name=area_name,
            min_order_free_delivery=threshold,
            fee_below_min=fee,
        ),
        asynchronous=False,
    )


class TestDeliveryRuleRepository:
    def test_all_rules(self):
        define("1700", " Tambo ")
        define("1709", "Merville", fee=150.0)
        rules = current_domain.repository_for(DeliveryRule).all_rules()
        assert sorted((rule.postal_code, rule.area_name) for rule in rules) == [("1700", "Tambo"), ("1709", "Merville")]

    def test_all_rules_respects_limit(self):
        define("1700", "Tambo")
        define("1709", "Merville")
        assert len(current_domain.repository_for(DeliveryRule).all_rules(limit=1)) == 1

    def test_load_delivery_rules_reads_repository(self):
        assert load_delivery_rules() == []
        rule_id = define("1700", "Tambo")
        assert [str(rule.id) for rule in load_delivery_rules()] == [rule_id]
