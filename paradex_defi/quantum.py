"""Decimal to quantum conversion.

Paradex (Paraclear) settles amounts as fixed point integers called *quantums*.
A decimal ``1.5`` with 8 decimals becomes the integer ``150_000_000``.

Signed order messages carry sizes and prices as quantums.
"""

from decimal import Decimal, InvalidOperation


def parse_decimal(value: str | Decimal | int) -> Decimal:
    """Parse a human readable amount.

    We never accept floats, as they lose precision.

    :raise ValueError:
        If the value is not a finite decimal number
    """
    if isinstance(value, float):
        raise ValueError(f"Pass amounts as strings or Decimals, got float {value}")

    try:
        parsed = Decimal(value)
    except (InvalidOperation, TypeError) as e:
        raise ValueError(f"Not a decimal number: {value!r}") from e

    if not parsed.is_finite():
        raise ValueError(f"Not a finite decimal number: {value!r}")

    return parsed


def to_quantum(value: str | Decimal | int, decimals: int) -> int:
    """Convert a decimal amount to quantums.

    Example:

    .. code-block:: python

        assert to_quantum("1.5", 8) == 150_000_000

    :param value:
        Human readable amount

    :param decimals:
        Number of decimals in the quantum representation

    :raise ValueError:
        If the value has more precision than ``decimals`` allows
    """
    assert decimals >= 0, f"Bad decimals: {decimals}"
    quantum = parse_decimal(value).scaleb(decimals)
    if quantum != quantum.to_integral_value():
        raise ValueError(f"{value} does not fit into {decimals} decimals")
    return int(quantum)


def from_quantum(quantum: str | int, decimals: int) -> Decimal:
    """Convert quantums back to a decimal amount.

    :param quantum:
        Integer amount, or its decimal string presentation

    :param decimals:
        Number of decimals in the quantum representation
    """
    assert decimals >= 0, f"Bad decimals: {decimals}"
    if isinstance(quantum, str):
        value = parse_decimal(quantum)
        if value != value.to_integral_value():
            raise ValueError(f"Quantum must be an integer: {quantum}")
    else:
        value = Decimal(quantum)
    return value.scaleb(-decimals)
