"""
CSV reading and writing.

Writing produces YNAB's import format (Date,Payee,Memo,Outflow,Inflow).
Reading accepts any export whose columns standardize.COLUMN_MAPPING knows:
Hebrew bank and card statements as well as files this tool wrote earlier.
"""

import csv
import io
import logging
from datetime import datetime

from .standardize import COLUMN_MAPPING, normalize_row

logger = logging.getLogger(__name__)

CSV_HEADERS = ['Date', 'Payee', 'Memo', 'Outflow', 'Inflow']


def escape_csv(value) -> str:
    """Quote a field if it contains a comma, a quote or a newline."""
    text = '' if value is None else str(value)
    if '"' in text or ',' in text or '\n' in text:
        return '"' + text.replace('"', '""') + '"'
    return text


def to_csv(rows) -> str:
    """
    Render YNAB rows as CSV text.

    Args:
        rows (Iterable[YnabRow]): Rows to render

    Returns:
        str: Header line plus one line per row, joined with '\\n'
    """
    lines = [','.join(CSV_HEADERS)]
    for row in rows:
        values = [row.date, row.payee, row.memo, row.outflow, row.inflow]
        lines.append(','.join(escape_csv(value) for value in values))
    return '\n'.join(lines)


def parse_records(content):
    """
    Split CSV text into header -> value records.

    Quoted fields may contain commas, doubled quotes and line breaks. Blank
    lines are ignored and the first non-blank line is the header. NUL bytes
    are dropped.

    Args:
        content (str): CSV text

    Returns:
        list: One dict per data line; missing trailing fields are ''

    Raises:
        ValueError: If the text is not readable as CSV (e.g. a field larger
            than the csv module's field size limit)
    """
    if not content:
        return []

    reader = csv.reader(io.StringIO(content.lstrip('\ufeff').replace('\x00', ''), newline=''))
    try:
        lines = [line for line in reader if any(cell.strip() for cell in line)]
    except csv.Error as e:
        raise ValueError(f"Malformed CSV at line {reader.line_num}: {str(e)}") from e
    if len(lines) < 2:
        return []

    headers = lines[0]
    records = []
    for values in lines[1:]:
        records.append({
            header: values[i] if i < len(values) else ''
            for i, header in enumerate(headers)
        })
    return records


def is_valid_transaction(txn) -> bool:
    """A usable transaction has a date and a non-zero amount."""
    has_date = bool(txn.transaction_date or txn.charge_date)
    has_amount = txn.outflow > 0 or txn.inflow > 0
    return has_date and has_amount


def parse_csv(content, mapping=COLUMN_MAPPING):
    """
    Parse CSV text into normalized transactions.

    Rows without a date or without an amount (balance lines, totals, blank
    separators in bank statements) are dropped.

    Args:
        content (str): CSV text
        mapping (Mapping[str, str]): Column table for normalize_row

    Returns:
        list: NormalizedTransaction objects in file order

    Raises:
        ValueError: If the text is not readable as CSV
    """
    records = parse_records(content)
    transactions = [normalize_row(record, mapping) for record in records]
    valid = [txn for txn in transactions if is_valid_transaction(txn)]

    if len(valid) < len(transactions):
        logger.debug(f"Dropped {len(transactions) - len(valid)} rows without a date or amount")
    logger.info(f"Parsed {len(valid)} transactions from {len(records)} CSV rows")
    return valid


def generate_filename(prefix='ynab-transactions', now=None) -> str:
    """
    Output file name with a filesystem-safe timestamp.

    Args:
        prefix (str): File name prefix
        now (datetime, optional): Timestamp to use, defaults to current time

    Returns:
        str: e.g. 'ynab-transactions-2024-03-15T10-30-00.csv'
    """
    now = now or datetime.now()
    return f"{prefix}-{now.strftime('%Y-%m-%dT%H-%M-%S')}.csv"
