"""Centralized locale service for money parsing and formatting.

Single source of truth for turning user-entered dollar strings into integer
cents at the edge, and integer cents back into display strings for notices.
Uses the babel library.

Configuration:
    LOCALE env var (default: en_US) - determines currency and number formatting

Example:
    >>> from fundledger.services.locale_service import format_cents, parse_amount_to_cents
    >>> parse_amount_to_cents("$1,234.56")
    123456
    >>> format_cents(-3000)
    '-$30.00'
"""

import logging
import os
from decimal import Decimal, InvalidOperation

from babel import Locale, UnknownLocaleError
from babel.numbers import (
    NumberFormatError,
    get_territory_currencies,
)
from babel.numbers import (
    format_currency as babel_format_currency,
)
from babel.numbers import (
    get_currency_symbol as babel_get_currency_symbol,
)
from babel.numbers import (
    parse_decimal as babel_parse_decimal,
)

from fundledger.constants import MAX_AMOUNT_IN_CENTS

logger = logging.getLogger(__name__)

# Default locale if LOCALE env var is invalid or missing
DEFAULT_LOCALE = "en_US"
DEFAULT_CURRENCY = "USD"

_CENT = Decimal("0.01")


def _get_locale() -> str:
    """Get locale from environment with validation and fallback.

    Returns:
        Valid locale string (e.g., 'en_US')
    """
    locale_str = os.getenv("LOCALE", DEFAULT_LOCALE)
    try:
        Locale.parse(locale_str)
        return locale_str
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Invalid LOCALE '{locale_str}': {e}. Falling back to '{DEFAULT_LOCALE}'")
        return DEFAULT_LOCALE


def _get_currency_from_locale(locale_str: str) -> str:
    """Derive currency code from locale territory.

    Args:
        locale_str: Locale string (e.g., 'en_US')

    Returns:
        Currency code (e.g., 'USD')
    """
    try:
        locale = Locale.parse(locale_str)
        territory = locale.territory
        if territory:
            currencies = get_territory_currencies(territory)
            if currencies:
                return currencies[0]
    except (UnknownLocaleError, ValueError) as e:
        logger.warning(f"Could not derive currency from locale '{locale_str}': {e}")

    return DEFAULT_CURRENCY


# Module-level constants (computed once at import)
LOCALE = _get_locale()
CURRENCY = _get_currency_from_locale(LOCALE)


def get_currency_symbol() -> str:
    """Get currency symbol for current locale.

    Returns:
        Currency symbol (e.g., '$')
    """
    return babel_get_currency_symbol(CURRENCY, locale=LOCALE)


def format_cents(amount_in_cents: int) -> str:
    """Format an integer cent amount as a localized currency string.

    Args:
        amount_in_cents: Signed amount in cents

    Returns:
        Formatted currency string (e.g., '$1,234.56' or '-$30.00')
    """
    return babel_format_currency(Decimal(amount_in_cents) / 100, CURRENCY, locale=LOCALE)


def _to_decimal(value: str | int | float | Decimal) -> Decimal:
    if isinstance(value, bool):
        raise ValueError("Must be a number")
    if isinstance(value, (int, Decimal)):
        return Decimal(value)
    if isinstance(value, float):
        # str() keeps the shortest repr, so 12.34 stays 12.34
        return Decimal(str(value))
    if isinstance(value, str):
        text = value.strip()
        symbol = get_currency_symbol()
        if text.startswith(symbol):
            text = text[len(symbol):].strip()
        if not text:
            raise ValueError("Amount required")
        try:
            return babel_parse_decimal(text, locale=LOCALE)
        except (NumberFormatError, InvalidOperation) as e:
            raise ValueError("Must be a number") from e
    raise ValueError("Must be a number")


def parse_amount_to_cents(value: str | int | float | Decimal | None) -> int:
    """Parse a user-entered dollar amount into non-negative integer cents.

    Accepts strings with an optional leading currency symbol and locale
    grouping separators, as well as plain numbers (interpreted as dollars).

    Args:
        value: Amount such as "$12.34", "1,000", 12.5 or Decimal("3")

    Returns:
        Amount in cents

    Raises:
        ValueError: If the value is missing, not a number, negative, has more
            than two decimal places, or is $100,000 or more

    Example:
        >>> parse_amount_to_cents("$12.34")
        1234
    """
    if value is None:
        raise ValueError("Amount required")

    amount = _to_decimal(value)
    if not amount.is_finite():
        raise ValueError("Must be a number")
    if amount < 0:
        raise ValueError("Must be greater than $0.00")
    if amount != amount.quantize(_CENT):
        raise ValueError("Must be multiple of $0.01")

    cents = int(amount * 100)
    if cents > MAX_AMOUNT_IN_CENTS:
        raise ValueError("Must be less than $100,000")
    return cents


__all__ = [
    "LOCALE",
    "CURRENCY",
    "get_currency_symbol",
    "format_cents",
    "parse_amount_to_cents",
]
