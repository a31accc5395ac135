"""Monetary helpers

All monetary and rate values are ``Decimal``; binary floating point is never
used. Rounding is applied in exactly one place, ``round_money``, and only
when a value is presented (PDF, exports to humans). Accumulation always
works on the exact values.
"""

from decimal import Decimal, InvalidOperation, ROUND_HALF_UP, localcontext
from typing import Union
from sqlalchemy import Numeric, String
from sqlalchemy.types import TypeDecorator

ZERO = Decimal("0")
ONE = Decimal("1")
HUNDRED = Decimal("100")

# Precision used while accumulating; wide enough that products of
# NUMERIC(20, 8) amounts and rates are never rounded.
ACCUMULATION_PRECISION = 60


class SqliteDecimal(TypeDecorator):
    """Exact decimal storage for SQLite, which only has binary floats.

    Values are persisted as their canonical string and parsed back into
    ``Decimal`` on load.
    """

    impl = String(64)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return None
        return str(to_decimal(value))

    def process_result_value(self, value, dialect):
        if value is None:
            return None
        return Decimal(value)


def money_type(precision: int = 20, scale: int = 8):
    """Column type for amounts and rates: NUMERIC, text-backed on SQLite"""
    return Numeric(precision, scale, asdecimal=True).with_variant(SqliteDecimal(), "sqlite")


def to_decimal(value: Union[Decimal, int, str]) -> Decimal:
    """
    Convert a value to Decimal without passing through float

    Accepts the German/European decimal comma ("19,5") the way the invoice
    forms submit it.

    Raises:
        ValueError: value is a float or not a finite decimal number
    """
    if isinstance(value, Decimal):
        result = value
    elif isinstance(value, bool) or isinstance(value, float):
        raise ValueError(f"refusing to convert {type(value).__name__} to a monetary value")
    elif isinstance(value, int):
        result = Decimal(value)
    else:
        text = str(value).strip().replace(",", ".")
        try:
            result = Decimal(text)
        except InvalidOperation:
            raise ValueError(f"invalid decimal value: {value!r}")
    if not result.is_finite():
        raise ValueError(f"invalid decimal value: {value!r}")
    return result


def exact_product(left: Decimal, right: Decimal) -> Decimal:
    """Product computed with the accumulation precision instead of the default 28 digits"""
    with localcontext() as ctx:
        ctx.prec = ACCUMULATION_PRECISION
        return left * right


def round_money(value: Decimal, places: int = 2) -> Decimal:
    """Presentation rounding (half up) to a fixed number of places"""
    return value.quantize(ONE.scaleb(-places), rounding=ROUND_HALF_UP)


def normalize_rate(rate: Decimal) -> Decimal:
    """
    Canonical form of a tax rate percentage

    Numerically equal rates share one representation: 19, 19.0 and 19.00
    all become 19, 7.50 becomes 7.5.
    """
    if rate == rate.to_integral_value():
        return rate.quantize(ONE)
    return rate.normalize()


def format_rate(rate: Decimal) -> str:
    """Plain percent string as expected by e-invoice exporters ("19", "7.5")"""
    return format(normalize_rate(rate), "f")
