"""Delivery pricing resolver — postal code and area text to a fee rule.

A pure function over the configured rule table. When no rules are
configured at all, hand-coded zone tiers stand in for the table.

Resolution order for a normalised postal code:
    1. no postal code                      → unresolved (missing)
    2. no rule for the postal code         → unresolved (not covered)
    3. exactly one rule                    → that rule
    4. several rules, pick the first that
       a. has its area name inside the area text
       b. has an area-name token (> 3 chars) inside the area text
       c. otherwise the lowest free-delivery threshold
"""

import re
from dataclasses import dataclass
from enum import Enum


class ResolutionStatus(Enum):
    RESOLVED = "resolved"
    MISSING_POSTAL = "missing_postal"
    NOT_COVERED = "not_covered"


@dataclass(frozen=True)
class ResolvedRule:
    postal_code: str
    area_name: str
    min_order_free_delivery: float
    fee_below_min: float


@dataclass(frozen=True)
class DeliveryResolution:
    status: ResolutionStatus
    rule: ResolvedRule | None = None

    @property
    def resolved(self) -> bool:
        return self.status == ResolutionStatus.RESOLVED


_NEAR_1700_AREAS = ("san dionisio", "tambo", "baclaran")
_MEDIUM_ZONE_CODES = ("1711", "1715", "1720")
_AREA_TOKEN_SPLIT = re.compile(r"[,\s/]+")


def normalize_postal_code(postal_code) -> str:
    return re.sub(r"\D", "", str(postal_code or ""))


def normalize_area(barangay, city) -> str:
    return f"{barangay or ''} {city or ''}".strip().lower()


def fallback_rule(postal_code, area) -> ResolvedRule | None:
    """Zone tiers used when the rule table is empty."""
    postal = normalize_postal_code(postal_code)
    area = (area or "").lower()
    if not postal:
        return None

    # Near zones
    if postal == "1709":
        return ResolvedRule(postal, "Merville/Moonwalk", 2000.0, 100.0)
    if postal == "1700":
        if any(name in area for name in _NEAR_1700_AREAS):
            return ResolvedRule(postal, "San Dionisio/Tambo/Baclaran", 2000.0, 100.0)
        return ResolvedRule(postal, "Sucat/Marcelo Green", 3000.0, 150.0)
    if postal in ("1701", "1702"):
        return ResolvedRule(postal, "Paranaque near", 2000.0, 100.0)

    # Medium zones
    if postal in _MEDIUM_ZONE_CODES or re.fullmatch(r"130\d", postal):
        return ResolvedRule(postal, "Medium zone", 3000.0, 150.0)

    return ResolvedRule(postal, "Far zone", 4000.0, 200.0)


def _as_resolved(rule) -> ResolvedRule:
    return ResolvedRule(
        postal_code=normalize_postal_code(rule.postal_code),
        area_name=str(rule.area_name or ""),
        min_order_free_delivery=float(rule.min_order_free_delivery or 0),
        fee_below_min=float(rule.fee_below_min or 0),
    )


def _area_tokens(area_name):
    return [token for token in _AREA_TOKEN_SPLIT.split(area_name.lower()) if len(token) > 3]


def resolve_delivery(postal_code, area, rules) -> DeliveryResolution:
    """Resolve the delivery rule for a postal code and free-text area.

    ``rules`` is any iterable of objects with ``postal_code``, ``area_name``,
    ``min_order_free_delivery`` and ``fee_below_min`` attributes.
    """
    postal = normalize_postal_code(postal_code)
    area = (area or "").strip().lower()
    rules = [_as_resolved(rule) for rule in rules]

    if not rules:
        rule = fallback_rule(postal, area)
        if rule is None:
            return DeliveryResolution(ResolutionStatus.MISSING_POSTAL)
        return DeliveryResolution(ResolutionStatus.RESOLVED, rule)

    if not postal:
        return DeliveryResolution(ResolutionStatus.MISSING_POSTAL)

    matches = [rule for rule in rules if rule.postal_code == postal]
    if not matches:
        return DeliveryResolution(ResolutionStatus.NOT_COVERED)
    if len(matches) == 1:
        return DeliveryResolution(ResolutionStatus.RESOLVED, matches[0])

    exact = next((rule for rule in matches if rule.area_name.lower() in area), None)
    if exact:
        return DeliveryResolution(ResolutionStatus.RESOLVED, exact)

    partial = next(
        (rule for rule in matches if any(token in area for token in _area_tokens(rule.area_name))),
        None,
    )
    if partial:
        return DeliveryResolution(ResolutionStatus.RESOLVED, partial)

    cheapest = min(matches, key=lambda rule: rule.min_order_free_delivery)
    return DeliveryResolution(ResolutionStatus.RESOLVED, cheapest)
