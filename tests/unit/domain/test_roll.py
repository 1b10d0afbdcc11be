"""Unit tests for Roll domain entity and decimal helpers"""

import pytest
from decimal import Decimal

from src.domain.amounts import is_non_negative_finite, is_positive_finite, quantize
from src.domain.roll import Roll


def make_roll(total: str, available: str) -> Roll:
    return Roll(
        roll_number=1,
        material_type="DTF",
        total_length=Decimal(total),
        available_length=Decimal(available),
        used_length=Decimal(total) - Decimal(available),
    )


class TestRoll:

    def test_new_roll_is_active_at_version_one(self):
        roll = make_roll("105.00", "105.00")
        assert roll.is_active is True
        assert roll.version == 1

    def test_available_percentage(self):
        assert make_roll("105.00", "52.50").available_percentage == Decimal("50.00")

    def test_available_percentage_of_empty_capacity_roll(self):
        assert make_roll("0.00", "0.00").available_percentage == Decimal("0.00")


class TestAmounts:

    def test_quantize_rounds_half_up(self):
        assert quantize("6.975") == Decimal("6.98")
        assert quantize(2.5) == Decimal("2.50")

    @pytest.mark.parametrize("value", [Decimal("NaN"), Decimal("Infinity"), "-0.01", "abc", None])
    def test_rejects_negative_and_non_finite(self, value):
        assert is_non_negative_finite(value) is False

    def test_zero_is_non_negative_but_not_positive(self):
        assert is_non_negative_finite(Decimal("0")) is True
        assert is_positive_finite(Decimal("0")) is False

    def test_sub_cent_amount_that_rounds_to_zero_is_not_positive(self):
        assert is_positive_finite(Decimal("0.004")) is False
        assert is_positive_finite(Decimal("0.005")) is True
