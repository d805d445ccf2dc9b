"""Unit tests for the minimum order quantity guard."""

import pytest

from mart.domain.exceptions import BelowMinimumOrder, ValidationError
from mart.domain.service.moq_guard import (
    QuantityLine,
    find_below_minimum,
    require_minimum,
    step_quantity,
    validate_quantity,
)


class TestValidateQuantity:

    def test_below_moq_suggests_moq(self):
        check = validate_quantity(5, moq=10)
        assert not check.accepted
        assert check.quantity == 10

    def test_at_moq_accepted(self):
        check = validate_quantity(10, moq=10)
        assert check.accepted
        assert check.quantity == 10

    def test_above_moq_kept(self):
        assert validate_quantity(25, moq=10).quantity == 25

    def test_non_positive_rejected(self):
        with pytest.raises(ValidationError):
            validate_quantity(0, moq=10)


class TestRequireMinimum:

    def test_raises_with_suggestion(self):
        with pytest.raises(BelowMinimumOrder) as exc_info:
            require_minimum(5, 10)
        assert exc_info.value.requested == 5
        assert exc_info.value.suggested == 10

    def test_never_silently_raises_quantity(self):
        assert require_minimum(12, 10) == 12


class TestStepper:

    def test_decrement_clamped_at_moq(self):
        assert step_quantity(11, -5, moq=10) == 10

    def test_increment(self):
        assert step_quantity(10, 1, moq=10) == 11


def test_find_below_minimum():
    lines = [
        QuantityLine("Bolts", 5, 10),
        QuantityLine("Nuts", 20, 10),
        QuantityLine("Washers", 1, 1),
    ]
    assert [line.label for line in find_below_minimum(lines)] == ["Bolts"]
