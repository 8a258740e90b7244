"""Reconciliation indicators shown to staff beside each order."""

from dataclasses import dataclass
from enum import Enum


class PackedTone(Enum):
    INCOMPLETE = "incomplete"
    SATISFIED = "satisfied"
    OVERSHOOT = "overshoot"


class PaymentStanding(Enum):
    CORRECT = "correct"
    AMOUNT_DUE = "amount_due"
    REFUND_DUE = "refund_due"


def packed_tone(packed_qty, qty) -> PackedTone:
    """Compare packed against ordered units. An unrecorded count reads as 0."""
    packed = packed_qty or 0
    if packed < qty:
        return PackedTone.INCOMPLETE
    if packed == qty:
        return PackedTone.SATISFIED
    return PackedTone.OVERSHOOT


@dataclass(frozen=True)
class PaymentCheck:
    standing: PaymentStanding
    delta: float

    @property
    def amount(self) -> float:
        """Magnitude of money owed in either direction."""
        return abs(self.delta)


def payment_standing(amount_paid, total_selling_price) -> PaymentCheck:
    delta = round((amount_paid or 0.0) - (total_selling_price or 0.0), 2)
    if delta == 0:
        return PaymentCheck(PaymentStanding.CORRECT, 0.0)
    if delta < 0:
        return PaymentCheck(PaymentStanding.AMOUNT_DUE, delta)
    return PaymentCheck(PaymentStanding.REFUND_DUE, delta)
