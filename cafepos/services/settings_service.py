"""Settings service - single logical record stored as key/value rows."""
import logging
from decimal import Decimal
from typing import Dict, Any, Union

from cafepos.database import transaction
from cafepos.exceptions import ValidationError
from cafepos.models import Setting
from cafepos.utils.formatters import parse_amount

logger = logging.getLogger(__name__)

EXCHANGE_RATE_KEY = 'exchangeRate'


def _coerce(value: str) -> Union[int, float, str, None]:
    """Stored text back to a number when it looks like one."""
    if value is None:
        return None
    try:
        number = Decimal(value)
    except Exception:
        return value
    if not number.is_finite():
        return value
    if number == number.to_integral_value() and 'e' not in value.lower():
        return int(number)
    return float(number)


def get_settings(session) -> Dict[str, Any]:
    """All settings as a dict; numeric values come back as numbers."""
    return {row.key: _coerce(row.value) for row in session.query(Setting).all()}


def get_exchange_rate(session, default=None) -> Decimal:
    row = session.query(Setting).filter_by(key=EXCHANGE_RATE_KEY).first()
    if row is None or row.value is None:
        return Decimal(str(default or 0))
    return Decimal(row.value)


def _validate(key: str, value) -> str:
    if not isinstance(key, str) or not key.strip():
        raise ValidationError('Setting keys must be non-empty strings')
    if key == EXCHANGE_RATE_KEY:
        try:
            rate = parse_amount(value, EXCHANGE_RATE_KEY)
        except ValueError as e:
            raise ValidationError(str(e))
        if rate <= 0:
            raise ValidationError(f'{EXCHANGE_RATE_KEY} must be greater than 0')
        return str(int(rate)) if rate == rate.to_integral_value() else str(rate)
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return '' if value is None else str(value)


def update_settings(session, values: Dict[str, Any]) -> Dict[str, Any]:
    """
    Insert or replace every key in ``values``.

    Raises:
        ValidationError: empty payload or invalid value
    """
    if not isinstance(values, dict) or not values:
        raise ValidationError('No settings provided')

    cleaned = {key: _validate(key, value) for key, value in values.items()}

    with transaction(session):
        for key, value in cleaned.items():
            session.merge(Setting(key=key, value=value))

    logger.info(f"Settings updated: {', '.join(cleaned)}")
    return get_settings(session)


def ensure_defaults(session, exchange_rate) -> None:
    """Seed the exchange rate if it was never set."""
    if session.query(Setting).filter_by(key=EXCHANGE_RATE_KEY).first() is None:
        session.add(Setting(key=EXCHANGE_RATE_KEY, value=str(exchange_rate)))
        session.commit()
