"""User-facing string formatting for journey metrics."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from korastor.domains.cessation.domain_logic.models import MS_PER_DAY, MS_PER_HOUR, MS_PER_MINUTE

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CurrencyConvention:
    group_separator: str
    decimal_separator: str
    symbol: str
    symbol_first: bool
    symbol_spacing: str = ""


# USD rendered under each locale's own number conventions
_CONVENTIONS: dict[str, CurrencyConvention] = {
    "en-US": CurrencyConvention(",", ".", "$", True),
    "en-GB": CurrencyConvention(",", ".", "US$", True),
    "de-DE": CurrencyConvention(".", ",", "$", False, " "),
    "fr-FR": CurrencyConvention(" ", ",", "$US", False, " "),
}
DEFAULT_LOCALE = "en-US"

_CENT = Decimal("0.01")


def _plural(count: int, unit: str) -> str:
    return f"{count} {unit}{'' if count == 1 else 's'}"


def format_currency(amount: float, locale: str = DEFAULT_LOCALE) -> str:
    """Format ``amount`` as US dollars, rounded half-up to the cent.

    >>> format_currency(1234.5)
    '$1,234.50'
    """
    convention = _CONVENTIONS.get(locale)
    if convention is None:
        logger.debug("No currency convention for locale %r; using %s", locale, DEFAULT_LOCALE)
        convention = _CONVENTIONS[DEFAULT_LOCALE]

    # str() first so binary float noise (e.g. 2.675) rounds as written
    cents = Decimal(str(amount)).quantize(_CENT, rounding=ROUND_HALF_UP)
    negative = cents < 0
    whole, frac = f"{abs(cents):,.2f}".split(".")
    number = whole.replace(",", convention.group_separator) + convention.decimal_separator + frac

    if convention.symbol_first:
        text = f"{convention.symbol}{convention.symbol_spacing}{number}"
    else:
        text = f"{number}{convention.symbol_spacing}{convention.symbol}"
    return f"-{text}" if negative else text


def format_streak(ms: float) -> str:
    """Whole days and hours, e.g. ``"3 days, 1 hour"`` or ``"5 hours"``."""
    total_seconds = int(ms // 1000)
    days = total_seconds // (MS_PER_DAY // 1000)
    hours = (total_seconds % (MS_PER_DAY // 1000)) // (MS_PER_HOUR // 1000)

    if days > 0:
        return f"{_plural(days, 'day')}, {_plural(hours, 'hour')}"
    return _plural(hours, "hour")


def format_time_regained(ms: float) -> str:
    """Non-zero days, hours and minutes joined by commas; ``"0 minutes"`` if empty."""
    total_seconds = int(ms // 1000)
    days = total_seconds // (MS_PER_DAY // 1000)
    hours = (total_seconds % (MS_PER_DAY // 1000)) // (MS_PER_HOUR // 1000)
    minutes = (total_seconds % (MS_PER_HOUR // 1000)) // (MS_PER_MINUTE // 1000)

    parts = []
    if days > 0:
        parts.append(_plural(days, "day"))
    if hours > 0:
        parts.append(_plural(hours, "hour"))
    if minutes > 0:
        parts.append(_plural(minutes, "minute"))
    return ", ".join(parts) or "0 minutes"


def format_countdown(seconds: int) -> str:
    """Craving timer display, ``M:SS``."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"


def format_percent(value: float) -> str:
    return f"{round(value)}%"
