"""
Date parsing and installment handling.

Israeli card issuers split a purchase into installments ("תשלום 2 מ-12") and
charge every installment on the statement date. YNAB treats transactions with
the same date, payee and amount as duplicates, so installment rows are moved
off the statement date by a fixed offset: one calendar month back, one day
forward.
"""

import logging
import re
from datetime import date, datetime, timedelta
from typing import NamedTuple, Optional

logger = logging.getLogger(__name__)

DMY_PATTERN = re.compile(r'^(\d{1,2})[/.-](\d{1,2})[/.-](\d{2}|\d{4})$')

# Checked in order; the first pattern that matches decides the result
INSTALLMENT_PATTERNS = (
    re.compile(r'תשלום\s*-?\s*(\d+)\s*מ\s*-\s*(\d+)'),
    re.compile(r'(\d+)\s*מתוך\s*(\d+)'),
    re.compile(r'payment\s+(\d+)\s+of\s+(\d+)', re.IGNORECASE),
)


class Installment(NamedTuple):
    """Position of a charge within an installment plan."""

    number: int
    total: int


def expand_year(year: str) -> int:
    """Expand a 2 or 4 digit year. Two-digit years from 70 up are 19xx."""
    value = int(year)
    if len(year) == 2:
        return 1900 + value if value >= 70 else 2000 + value
    return value


def parse_installments(text) -> Optional[Installment]:
    """
    Detect installment notation in a transaction description.

    Args:
        text (str): Free-text description

    Returns:
        Installment or None: (number, total), or None if the text is not an
        installment or the numbers are inconsistent (zero, or number > total)
    """
    if not text:
        return None

    for pattern in INSTALLMENT_PATTERNS:
        match = pattern.search(text)
        if not match:
            continue
        number, total = int(match.group(1)), int(match.group(2))
        if number <= 0 or total <= 0 or number > total:
            logger.debug(f"Ignoring inconsistent installment {number}/{total} in: {text}")
            return None
        return Installment(number, total)

    return None


def parse_iso(text) -> Optional[date]:
    """Calendar date of an ISO date or timestamp, without timezone conversion."""
    try:
        return datetime.fromisoformat(text.strip().replace('Z', '+00:00')).date()
    except (ValueError, AttributeError):
        return None


def parse_date(value) -> Optional[date]:
    """
    Parse a date value into a calendar date.

    Accepts date/datetime objects, ISO strings (with or without time and
    offset) and D/M/Y with '/', '-' or '.' separators.

    Args:
        value (str, date or datetime): Value to parse

    Returns:
        date or None: Parsed date, None if the value is not a valid date
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None

    match = DMY_PATTERN.match(text)
    if match:
        day, month, year = match.groups()
        try:
            return date(expand_year(year), int(month), int(day))
        except ValueError:
            return None

    return parse_iso(text)


def format_date(value) -> str:
    """
    Format a date as YYYY-MM-DD.

    Args:
        value (str, date or datetime): Date to format

    Returns:
        str: ISO calendar date

    Raises:
        ValueError: If value cannot be parsed as a date
    """
    parsed = parse_date(value)
    if parsed is None:
        raise ValueError(f"Invalid date: {value!r}")
    return parsed.strftime('%Y-%m-%d')


def shift_months(day: date, months: int) -> date:
    """
    Move a date by whole months, rolling overflow days into the next month.

    Feb 31 does not exist, so 2024-03-31 shifted back one month becomes
    2024-03-02 (Feb 29 plus two days), not Feb 29.
    """
    index = day.year * 12 + (day.month - 1) + months
    first = date(index // 12, index % 12 + 1, 1)
    return first + timedelta(days=day.day - 1)


def derive_installment_date(charge_date) -> str:
    """
    Output date for an installment charge.

    Subtracts one calendar month from the charge date and adds one day. The
    offset is the same for every installment of every plan.

    Args:
        charge_date (str or date): Date the installment was charged

    Returns:
        str: Shifted date as YYYY-MM-DD

    Raises:
        ValueError: If charge_date cannot be parsed
    """
    parsed = parse_date(charge_date)
    if parsed is None:
        raise ValueError(f"Invalid date: {charge_date!r}")
    return format_date(shift_months(parsed, -1) + timedelta(days=1))
