"""
Money rounding helpers.

All monetary amounts are floats rounded half-up to the currency's minor unit.
Rounding goes through Decimal on the float's shortest repr, so 0.125 rounds to
0.13 and 2.675 to 2.68 (binary float rounding would give 0.12 and 2.67).
"""

from decimal import Decimal, ROUND_HALF_UP

# ISO 4217 currencies whose minor unit is not 1/100
CURRENCY_DECIMALS: dict[str, int] = {
    "JPY": 0,
    "KRW": 0,
    "VND": 0,
    "CLP": 0,
    "ISK": 0,
    "BHD": 3,
    "JOD": 3,
    "KWD": 3,
    "OMR": 3,
    "TND": 3,
}

DEFAULT_DECIMALS = 2


def currency_decimals(currency: str | None) -> int:
    """Number of decimal places of the currency's minor unit (2 when unknown)."""
    if not currency:
        return DEFAULT_DECIMALS
    return CURRENCY_DECIMALS.get(currency.upper(), DEFAULT_DECIMALS)


def round_money(amount: float, currency: str | None = None) -> float:
    """
    Round an amount half-up to the currency precision.

    Args:
        amount: Amount to round
        currency: ISO currency code (defaults to 2 decimals)

    Returns:
        Rounded amount as float

    Example:
        >>> round_money(10.005)
        10.01
        >>> round_money(1234.5, "JPY")
        1235.0
    """
    exponent = Decimal(1).scaleb(-currency_decimals(currency))
    rounded = Decimal(str(amount)).quantize(exponent, rounding=ROUND_HALF_UP)
    # Normalize -0.0 to 0.0 so identical totals serialize identically
    return float(rounded) + 0.0
