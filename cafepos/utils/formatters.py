"""
Number, money and date helpers shared by models, services and blueprints.
"""
from decimal import Decimal, InvalidOperation
from datetime import date, datetime
from typing import Union, Optional

Number = Union[int, float, Decimal, str, None]


def to_decimal(value: Number, default: Decimal = Decimal('0')) -> Decimal:
    """
    Convert a numeric-ish value to Decimal without float artefacts.

    Examples:
        to_decimal(2.5) -> Decimal('2.5')
        to_decimal('3') -> Decimal('3')
        to_decimal(None) -> Decimal('0')
    """
    if value is None or value == '':
        return default
    if isinstance(value, Decimal):
        return value
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        return default


def to_float(value: Number) -> float:
    """Decimal/None to a JSON-friendly float (None becomes 0.0)."""
    return float(to_decimal(value))


def parse_amount(value: Number, field: str, allow_negative: bool = False) -> Decimal:
    """
    Parse a required monetary or quantity field.

    Raises:
        ValueError: if the value is missing, not a number, or negative.
    """
    if value is None or value == '' or isinstance(value, bool):
        raise ValueError(f'{field} is required')
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        raise ValueError(f'{field} must be a number')
    if not number.is_finite():
        raise ValueError(f'{field} must be a number')
    if number < 0 and not allow_negative:
        raise ValueError(f'{field} cannot be negative')
    return number


def parse_date(value: Union[str, date, datetime, None]) -> Optional[date]:
    """
    Parse ``YYYY-MM-DD`` (a trailing time part is ignored).

    Raises:
        ValueError: if the value is not a valid date.
    """
    if value is None or value == '':
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        raise ValueError(f'Invalid date: {value!r}. Use YYYY-MM-DD')


def money_usd(value: Number) -> str:
    """
    Format an amount in the currency of record.

    Examples:
        money_usd(13) -> "$13.00"
        money_usd(1500.5) -> "$1,500.50"
    """
    return f"${to_decimal(value).quantize(Decimal('0.01')):,}"


def convert_to_local(amount: Number, rate: Number) -> Decimal:
    """USD amount to local currency at ``rate`` local units per USD."""
    return (to_decimal(amount) * to_decimal(rate)).quantize(Decimal('1'))


SQL_INT_MAX = 2 ** 63 - 1


def whole_number(value) -> Optional[int]:
    """
    Integer value of a JSON number or numeric string.

    Returns None for booleans, fractions and anything outside the
    64-bit range of the database.

    Examples:
        whole_number('3') -> 3
        whole_number(2.0) -> 2
        whole_number(2.7) -> None
    """
    if isinstance(value, bool) or value is None:
        return None
    try:
        number = Decimal(str(value).strip())
    except (InvalidOperation, ValueError, TypeError):
        return None
    if not number.is_finite() or number != number.to_integral_value():
        return None
    if abs(number) > SQL_INT_MAX:
        return None
    return int(number)
