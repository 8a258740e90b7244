"""Delivery slot rules.

Slots are half-hour marks across the daytime window (10:00 to 21:00
inclusive by default). A delivery must be at least the lead time (2 hours)
away unless the customer asks for express delivery.

All datetimes here are naive store-local times; callers pass ``now`` so the
rules stay pure.
"""

from datetime import date, datetime, time, timedelta

from storefront.settings import setting


def _parse_hhmm(value) -> time:
    hours, minutes = str(value).split(":")
    return time(int(hours), int(minutes))


def _window():
    return _parse_hhmm(setting("slot_window_start")), _parse_hhmm(setting("slot_window_end"))


def lead_time() -> timedelta:
    return timedelta(minutes=setting("lead_time_minutes"))


def daytime_slots() -> list[str]:
    """All slot labels in the daytime window, as ``HH:MM``."""
    start, end = _window()
    step = setting("slot_interval_minutes")
    slots = []
    minutes = start.hour * 60 + start.minute
    last = end.hour * 60 + end.minute
    while minutes <= last:
        slots.append(f"{minutes // 60:02d}:{minutes % 60:02d}")
        minutes += step
    return slots


def min_delivery_at(now: datetime) -> datetime:
    return now + lead_time()


def _slots_from(cutoff: datetime) -> list[str]:
    floor = cutoff.time().replace(second=0, microsecond=0)
    return [slot for slot in daytime_slots() if _parse_hhmm(slot) >= floor]


def valid_slots(delivery_date: date | None, now: datetime) -> list[str]:
    """Slots still bookable on ``delivery_date``.

    Only the date the lead-time cutoff falls on is filtered; any later date
    offers the whole window and earlier dates offer nothing.
    """
    if delivery_date is None:
        return daytime_slots()
    cutoff = min_delivery_at(now)
    if delivery_date < cutoff.date():
        return []
    if delivery_date > cutoff.date():
        return daytime_slots()
    return _slots_from(cutoff)


def earliest_delivery_date(now: datetime) -> date:
    """First date with at least one bookable slot."""
    cutoff = min_delivery_at(now)
    if _slots_from(cutoff):
        return cutoff.date()
    return cutoff.date() + timedelta(days=1)


def parse_delivery_date(value) -> date | None:
    if not value:
        return None
    if isinstance(value, date):
        return value
    return date.fromisoformat(str(value).strip())


def is_valid_delivery_date(value) -> bool:
    """True for a non-blank ISO date (YYYY-MM-DD)."""
    try:
        return parse_delivery_date(value) is not None
    except ValueError:
        return False


def is_valid_delivery_slot(value) -> bool:
    """True for a non-blank ``HH:MM`` slot."""
    if not value:
        return False
    try:
        _parse_hhmm(value)
    except ValueError:
        return False
    return True


def delivery_datetime(delivery_date, delivery_slot) -> datetime | None:
    """Combine a date and an ``HH:MM`` slot, or None when either is missing."""
    if not delivery_date or not delivery_slot:
        return None
    return datetime.combine(parse_delivery_date(delivery_date), _parse_hhmm(delivery_slot))


def is_within_lead_time(delivery_date, delivery_slot, now: datetime) -> bool:
    """True when the chosen delivery time is sooner than the lead time allows."""
    chosen = delivery_datetime(delivery_date, delivery_slot)
    return chosen is not None and chosen < min_delivery_at(now)


def clear_invalid_slot(delivery_date, delivery_slot, now: datetime) -> str:
    """Return the slot if it is bookable for the date, else an empty string."""
    if not delivery_date:
        return ""
    if delivery_slot and delivery_slot in valid_slots(parse_delivery_date(delivery_date), now):
        return delivery_slot
    return ""


def suggested_delivery(now: datetime) -> datetime:
    """Default suggestion: now + 3h rounded up to the next slot mark.

    Lands at or after the window end → next day at window start. Lands
    before the window start → window start the same day.
    """
    start, end = _window()
    step = setting("slot_interval_minutes")
    target = now + timedelta(minutes=setting("suggested_slot_offset_minutes"))
    target = target.replace(second=0, microsecond=0) + (
        timedelta(minutes=1) if (target.second or target.microsecond) else timedelta()
    )
    remainder = (target.hour * 60 + target.minute) % step
    if remainder:
        target += timedelta(minutes=step - remainder)

    if target.time() >= end:
        return datetime.combine(target.date() + timedelta(days=1), start)
    if target.time() < start:
        return datetime.combine(target.date(), start)
    return target
