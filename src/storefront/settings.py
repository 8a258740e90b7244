"""Business settings read from the ``[custom]`` table of ``domain.toml``."""

from storefront.domain import storefront

_DEFAULTS = {
    "free_delivery_ceiling": 4000.0,
    "thermal_bag_fee": 200.0,
    "lead_time_minutes": 120,
    "suggested_slot_offset_minutes": 180,
    "slot_window_start": "10:00",
    "slot_window_end": "21:00",
    "slot_interval_minutes": 30,
    "proof_prefix": "proofs",
    "primary_procedure_version": 2,
    "legacy_procedure_version": 1,
    "order_list_limit": 200,
    "order_link_origin": "https://tastyprotein.vercel.app",
    "admin_cc_emails": [],
}


def setting(name):
    """Return a custom setting, falling back to the built-in default."""
    custom = storefront.config.get("custom") or {}
    return custom.get(name, _DEFAULTS[name])
