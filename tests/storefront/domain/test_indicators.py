import pytest
from storefront.order.indicators import PackedTone, PaymentStanding, packed_tone, payment_standing


class TestPackedTone:
    @pytest.mark.parametrize(
        "packed, expected",
        [
            (None, PackedTone.INCOMPLETE),
            (0, PackedTone.INCOMPLETE),
            (4, PackedTone.INCOMPLETE),
            (5, PackedTone.SATISFIED),
            (6, PackedTone.OVERSHOOT),
        ],
    )
    def test_against_five_ordered(self, packed, expected):
        assert packed_tone(packed, 5) is expected


class TestPaymentStanding:
    def test_exact_payment(self):
        check = payment_standing(850.0, 850.0)
        assert check.standing is PaymentStanding.CORRECT
        assert check.delta == 0.0

    def test_underpaid(self):
        check = payment_standing(800.0, 850.0)
        assert check.standing is PaymentStanding.AMOUNT_DUE
        assert check.delta == -50.0
        assert check.amount == 50.0

    def test_overpaid(self):
        check = payment_standing(900.0, 850.0)
        assert check.standing is PaymentStanding.REFUND_DUE
        assert check.amount == 50.0

    def test_unrecorded_payment_reads_as_zero(self):
        check = payment_standing(None, 850.0)
        assert check.standing is PaymentStanding.AMOUNT_DUE
        assert check.amount == 850.0

    def test_float_noise_ignored(self):
        assert payment_standing(0.1 + 0.2, 0.3).standing is PaymentStanding.CORRECT
