"""
Display formatting shared by list views, filters and reports.

Due dates are date-only values. A datetime or ISO string is reduced to its
calendar part as written, never converted between timezones, so the day a
user typed is the day every view shows.
"""

import calendar
import unicodedata
from datetime import date, datetime, timezone
from decimal import Decimal, ROUND_HALF_EVEN
from typing import Optional, Tuple

from fluxo.core.config import settings

CENTS = Decimal("0.01")

CURRENCY_SYMBOLS = {
    "BRL": "R$",
    "USD": "$",
    "EUR": "€",
}

INSTALLMENT_LABELS = {
    "pt_BR": {"single": "Único", "installment": "Parcelado", "recurring": "Recorrente"},
    "en_US": {"single": "Single", "installment": "Installments", "recurring": "Recurring"},
}


def coerce_date(value):
    """Reduce a date, datetime or ISO string to a date without shifting the day."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        day_part = value.strip().split("T")[0].split(" ")[0]
        try:
            return date.fromisoformat(day_part)
        except ValueError:
            raise ValueError(f"Invalid date: {value!r}")
    return value


def ensure_utc(value):
    """Attach UTC to a naive datetime; aware datetimes pass through unchanged."""
    if isinstance(value, datetime) and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


def format_currency(value, locale: Optional[str] = None, currency: Optional[str] = None) -> str:
    """Render a monetary value, e.g. 'R$ 1.234,56' (pt_BR) or 'R$1,234.56' (en_US)."""
    locale = locale or settings.DISPLAY_LOCALE
    currency = currency or settings.CURRENCY
    symbol = CURRENCY_SYMBOLS.get(currency, currency)

    amount = Decimal(value).quantize(CENTS, rounding=ROUND_HALF_EVEN)
    sign = "-" if amount < 0 else ""
    text = f"{abs(amount):,.2f}"

    if locale == "pt_BR":
        text = text.replace(",", "_").replace(".", ",").replace("_", ".")
        return f"{sign}{symbol} {text}"
    return f"{sign}{symbol}{text}"


def format_date(value, locale: Optional[str] = None) -> str:
    """Render a date-only value as dd/mm/yyyy (pt_BR) or mm/dd/yyyy (en_US)."""
    locale = locale or settings.DISPLAY_LOCALE
    day = coerce_date(value)
    if locale == "pt_BR":
        return f"{day.day:02d}/{day.month:02d}/{day.year:04d}"
    return f"{day.month:02d}/{day.day:02d}/{day.year:04d}"


def installment_label(installment_type: str, locale: Optional[str] = None) -> str:
    locale = locale or settings.DISPLAY_LOCALE
    labels = INSTALLMENT_LABELS.get(locale, INSTALLMENT_LABELS["en_US"])
    key = getattr(installment_type, "value", installment_type)
    return labels.get(key, key)


def collation_key(text: str) -> Tuple[str, str]:
    """Sort key approximating locale-aware ordering: accents and case are secondary."""
    decomposed = unicodedata.normalize("NFKD", text)
    base = "".join(ch for ch in decomposed if not unicodedata.combining(ch))
    return base.casefold(), text


def month_key(value) -> str:
    day = coerce_date(value)
    return f"{day.year:04d}-{day.month:02d}"


def month_bounds(month: str) -> Tuple[date, date]:
    """First and last day of a 'YYYY-MM' month."""
    try:
        year_text, month_text = month.split("-")
        year, month_number = int(year_text), int(month_text)
        last_day = calendar.monthrange(year, month_number)[1]
    except (ValueError, calendar.IllegalMonthError):
        raise ValueError(f"Invalid month: {month!r}, expected YYYY-MM")
    return date(year, month_number, 1), date(year, month_number, last_day)
