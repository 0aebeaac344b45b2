"""Decimal to quantum conversion."""

from decimal import Decimal

import pytest

from paradex_defi.quantum import from_quantum, parse_decimal, to_quantum


def test_to_quantum():
    assert to_quantum("1.5", 8) == 150_000_000
    assert to_quantum(Decimal("0.00000001"), 8) == 1
    assert to_quantum("0", 8) == 0
    assert to_quantum(3, 6) == 3_000_000
    assert to_quantum("50000", 8) == 5_000_000_000_000


def test_to_quantum_too_precise():
    with pytest.raises(ValueError, match="does not fit"):
        to_quantum("0.000000001", 8)


def test_from_quantum():
    assert from_quantum(150_000_000, 8) == Decimal("1.5")
    assert from_quantum("1", 8) == Decimal("0.00000001")

    with pytest.raises(ValueError):
        from_quantum("1.5", 8)


@pytest.mark.parametrize("value", [1.5, "abc", "NaN", "Infinity", None, ""])
def test_parse_decimal_rejects(value):
    with pytest.raises(ValueError):
        parse_decimal(value)
