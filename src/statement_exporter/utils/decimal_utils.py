"""Decimal utilities for monetary values.

Amounts are kept as Decimal end to end; floats only appear when a
data-layer record hands one in, and are converted through str().
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP

# Largest magnitude accepted for an amount. Spreadsheet numbers carry 15
# significant digits, and rounding stays within the default context precision.
MAX_AMOUNT = Decimal("1e15")


def to_decimal(value: object) -> Decimal:
    """Convert a data-layer amount into a Decimal.

    Args:
        value: Amount as Decimal, int, float or numeric string.

    Returns:
        Decimal value.

    Raises:
        ValueError: If the value is missing, not numeric or out of range.
    """
    if value is None or isinstance(value, bool):
        raise ValueError(f"Invalid amount: {value!r}")

    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, (int, float, str)):
        try:
            result = Decimal(str(value).strip())
        except InvalidOperation as e:
            raise ValueError(f"Cannot parse amount '{value}': {e}") from e
    else:
        raise ValueError(f"Unsupported amount type: {type(value).__name__}")

    if not result.is_finite():
        raise ValueError(f"Amount must be finite, got {value!r}")
    if abs(result) >= MAX_AMOUNT:
        raise ValueError(f"Amount out of range: {value!r}")
    return result


def round_amount(amount: Decimal, decimal_places: int = 2) -> Decimal:
    """Round half away from zero to a fixed number of places.

    Args:
        amount: The amount to round.
        decimal_places: Number of decimal places (default 2).

    Returns:
        Rounded Decimal, with negative zero normalized to zero.

    Raises:
        ValueError: If the amount is too large to hold at that precision.
    """
    quantum = Decimal(1).scaleb(-decimal_places)
    try:
        rounded = amount.quantize(quantum, rounding=ROUND_HALF_UP)
    except InvalidOperation as e:
        raise ValueError(f"Cannot round {amount} to {decimal_places} places") from e
    if rounded == 0:
        return abs(rounded)
    return rounded


def format_number(amount: Decimal) -> str:
    """Render a Decimal the way a spreadsheet numeric cell expects it.

    No exponent notation and no trailing zeros: 1000.00 -> "1000",
    -150.50 -> "-150.5".
    """
    if amount == 0:
        return "0"
    if amount == amount.to_integral_value():
        return str(amount.quantize(Decimal(1)))
    text = format(amount, "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    return text
