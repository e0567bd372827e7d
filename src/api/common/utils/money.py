from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union

Number = Union[Decimal, float, int, str]

CENT = Decimal("0.01")
TENTH = Decimal("0.1")
# Largest amount a Numeric(14, 2) column holds
MAX_AMOUNT = Decimal("999999999999.99")


def to_decimal(value: Number) -> Decimal:
    """
    Convert a number to Decimal without picking up binary float artifacts.

    NaN, infinities and unparseable values become 0.
    """
    if value is None:
        return Decimal("0")
    if isinstance(value, Decimal):
        result = value
    else:
        try:
            result = Decimal(str(value))
        except InvalidOperation:
            return Decimal("0")
    if not result.is_finite():
        return Decimal("0")
    return result


def _quantize(value: Decimal, exponent: Decimal) -> Decimal:
    with localcontext() as ctx:
        # Widen precision so very large amounts still fit after quantizing
        ctx.prec = max(ctx.prec, value.adjusted() - exponent.as_tuple().exponent + 2)
        return value.quantize(exponent, rounding=ROUND_HALF_UP)


def round_money(value: Number) -> Decimal:
    """Round half-up to the cent"""
    return _quantize(to_decimal(value), CENT)


def round_percentage(value: Number) -> Decimal:
    """Round half-up to one decimal place"""
    return _quantize(to_decimal(value), TENTH)
