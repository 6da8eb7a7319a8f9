"""
Column and field standardization.

Bank exports, card statements, the scraper and our own YNAB exports all name
the same fields differently. This module maps any of those column names onto
a single NormalizedTransaction shape so that files from different sources can
be compared.

Normalized fields:
- transaction_date: Date the purchase happened (YYYY-MM-DD or empty)
- charge_date: Date the bank/card posted the charge (YYYY-MM-DD or empty)
- payee: Merchant or counterparty
- outflow / inflow: Non-negative amounts, at most one of them non-zero
- original_amount: Amount before currency conversion, if known
- notes: Free text, joined with " | " when several columns contribute
- source: Card or account identifier
"""

import logging
import math
import re
from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Optional

from .dates import DMY_PATTERN, expand_year, parse_iso

logger = logging.getLogger(__name__)

# Column name -> NormalizedTransaction field
COLUMN_MAPPING = MappingProxyType({
    # Hebrew bank columns
    'תאריך': 'charge_date',
    'תאריך ערך': 'transaction_date',
    'תיאור': 'payee',
    'בחובה': 'outflow',
    'בזכות': 'inflow',
    'היתרה בש"ח': 'notes',
    'מספר הכרטיס': 'source',
    # Hebrew credit card columns
    'תאריך העסקה': 'transaction_date',
    'שם בית העסק': 'payee',
    'סכום העסקה': 'original_amount',
    'סכום החיוב': 'outflow',
    'סוג העסקה': 'notes',
    'פרטים': 'notes',
    'תאריך החיוב': 'charge_date',
    'תאריך עסקה': 'transaction_date',
    '4 ספרות אחרונות של כרטיס האשראי': 'source',
    'סכום חיוב': 'outflow',
    'סכום עסקה מקורי': 'original_amount',
    'הערות': 'notes',
    'תאריך חיוב': 'charge_date',
    'תאריך רכישה': 'transaction_date',
    'שם בית עסק': 'payee',
    'סכום עסקה': 'original_amount',
    'פירוט נוסף': 'notes',

    # Scraper fields
    'date': 'transaction_date',
    'processedDate': 'charge_date',
    'description': 'payee',
    'chargedAmount': 'outflow',
    'originalAmount': 'original_amount',
    'memo': 'notes',
    'identifier': 'notes',
    'Account': 'source',

    # YNAB export headers
    'Date': 'transaction_date',
    'Payee': 'payee',
    'Memo': 'notes',
    'Outflow': 'outflow',
    'Inflow': 'inflow',
})

_ISO_PREFIX = re.compile(r'^\d{4}')
_NUMBER_PATTERN = re.compile(r'[+-]?(\d+(\.\d*)?|\.\d+)')
_AMOUNT_JUNK = re.compile(r'[₪$€,\s]')


@dataclass
class NormalizedTransaction:
    """A transaction reduced to the fields shared by every source."""

    transaction_date: str = ''
    charge_date: str = ''
    payee: str = ''
    outflow: float = 0.0
    inflow: float = 0.0
    original_amount: Optional[float] = None
    notes: str = ''
    source: str = ''


def normalize_column_name(column_name, mapping=COLUMN_MAPPING):
    """
    Resolve a source column name to a NormalizedTransaction field.

    Args:
        column_name (str): Column header as found in the source
        mapping (Mapping[str, str]): Column table to resolve against

    Returns:
        str or None: Field name, or None if the column is not recognized
    """
    if not isinstance(column_name, str):
        return None
    return mapping.get(column_name.strip().lstrip('\ufeff'))


def normalize_date(value) -> str:
    """
    Convert a date string to YYYY-MM-DD.

    Accepts D/M/Y, D-M-Y and D.M.Y (Israeli order) with 2 or 4 digit years,
    and ISO strings with or without a time part. The calendar date of an ISO
    timestamp is kept as written; offsets are not applied. D/M/Y input is
    reordered without a calendar check, so '31/02/2024' becomes '2024-02-31';
    reconciliation treats such a date as unusable.

    Args:
        value (str): Raw date text

    Returns:
        str: YYYY-MM-DD, or the trimmed input when it is not a recognized date
    """
    if value is None:
        return ''
    trimmed = str(value).strip()
    if not trimmed:
        return ''

    match = DMY_PATTERN.match(trimmed)
    if match:
        day, month, year = match.groups()
        return f"{expand_year(year):04d}-{int(month):02d}-{int(day):02d}"

    if _ISO_PREFIX.match(trimmed):
        parsed = parse_iso(trimmed)
        if parsed is not None:
            return parsed.strftime('%Y-%m-%d')

    logger.debug(f"Unrecognized date format, keeping as-is: {trimmed}")
    return trimmed


def normalize_amount(value) -> float:
    """
    Parse an amount, ignoring currency symbols and thousands separators.

    Args:
        value (str or float): Raw amount, e.g. "₪1,500.00" or "-150"

    Returns:
        float: The leading number, 0.0 when the value does not start with one
    """
    if value is None or isinstance(value, bool):
        return 0.0
    if isinstance(value, (int, float)):
        return float(value) if math.isfinite(value) else 0.0
    if not isinstance(value, str):
        return 0.0

    # Leading number only: '150 ש"ח', '150 ILS' and '150-' all read as 150
    match = _NUMBER_PATTERN.match(_AMOUNT_JUNK.sub('', value))
    if not match:
        return 0.0
    return float(match.group(0))


def normalize_row(row: Mapping[str, str], mapping=COLUMN_MAPPING) -> NormalizedTransaction:
    """
    Build a NormalizedTransaction from a column -> value record.

    Unrecognized columns and empty values are ignored. When several columns
    map to the same field:
    - dates, payee and source keep the first value seen
    - a negative outflow always wins (stored as its absolute value); a
      positive one is only taken when no outflow is set yet
    - inflow is symmetric to outflow
    - original_amount keeps the absolute value of the first non-zero amount
    - notes are concatenated with " | "

    Args:
        row (Mapping[str, str]): Column name -> raw value
        mapping (Mapping[str, str]): Column table

    Returns:
        NormalizedTransaction: The normalized record
    """
    normalized = NormalizedTransaction()

    for column, value in row.items():
        if value is None or value == '':
            continue

        field = normalize_column_name(column, mapping)
        if field is None:
            continue

        text = value if isinstance(value, str) else str(value)

        if field in ('transaction_date', 'charge_date'):
            if not getattr(normalized, field):
                setattr(normalized, field, normalize_date(text))

        elif field == 'outflow':
            amount = normalize_amount(value)
            if amount < 0:
                normalized.outflow = abs(amount)
            elif amount > 0 and normalized.outflow == 0:
                normalized.outflow = amount

        elif field == 'inflow':
            amount = normalize_amount(value)
            if amount > 0:
                normalized.inflow = amount
            elif amount < 0 and normalized.inflow == 0:
                normalized.inflow = abs(amount)

        elif field == 'original_amount':
            amount = normalize_amount(value)
            if amount != 0 and normalized.original_amount is None:
                normalized.original_amount = abs(amount)

        elif field == 'payee':
            if not normalized.payee:
                normalized.payee = text.strip()

        elif field == 'notes':
            part = text.strip()
            normalized.notes = f"{normalized.notes} | {part}" if normalized.notes else part

        elif field == 'source':
            if not normalized.source:
                normalized.source = text.strip()

    return normalized


def effective_date(txn: NormalizedTransaction) -> str:
    """Charge date when known, otherwise the transaction date."""
    return txn.charge_date or txn.transaction_date


def effective_amount(txn: NormalizedTransaction) -> float:
    """Signed amount: negative for outflows, positive for inflows."""
    if txn.outflow > 0:
        return -txn.outflow
    if txn.inflow > 0:
        return txn.inflow
    return 0.0
