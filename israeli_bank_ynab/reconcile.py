"""
Transaction Reconciliation

Compares two independently sourced transaction lists (typically a bank's own
CSV export against this tool's YNAB export) to find anything missing or
duplicated.

Matching rules:
- Amounts must agree within AMOUNT_TOLERANCE (sign is ignored)
- Effective dates (charge date, else transaction date) must be within
  DATE_TOLERANCE_DAYS of each other
- Among candidates the closest date wins; on ties the earliest target wins
- A target transaction can be claimed once; source transactions are
  processed in order, so an earlier source keeps its best candidate even if a
  later source would have matched it more closely

Results:
- matched: same date and amount
- flagged: same amount, dates 1-2 days apart (needs a human look)
- missing_from_target: source transactions with no counterpart
- extra_in_target: target transactions nobody claimed
"""

import logging
from dataclasses import dataclass, field
from datetime import date
from typing import List, Optional

import pandas as pd

from .csv_codec import parse_csv
from .standardize import NormalizedTransaction, effective_amount, effective_date

logger = logging.getLogger(__name__)

DATE_TOLERANCE_DAYS = 2
AMOUNT_TOLERANCE = 0.01

RESULT_COLUMNS = ['Status', 'Date', 'Payee', 'Amount', 'Counterpart Date', 'Date Diff']


@dataclass
class MatchedTransaction:
    source: NormalizedTransaction
    target: NormalizedTransaction


@dataclass
class FlaggedTransaction:
    source: NormalizedTransaction
    target: NormalizedTransaction
    date_diff: int


@dataclass
class ReconcileResult:
    source_name: str = 'source'
    target_name: str = 'target'
    source_count: int = 0
    target_count: int = 0
    matched: List[MatchedTransaction] = field(default_factory=list)
    flagged: List[FlaggedTransaction] = field(default_factory=list)
    missing_from_target: List[NormalizedTransaction] = field(default_factory=list)
    extra_in_target: List[NormalizedTransaction] = field(default_factory=list)


def _as_date(value) -> Optional[date]:
    try:
        return date.fromisoformat(value)
    except (TypeError, ValueError):
        return None


def amounts_match(a, b) -> bool:
    return abs(abs(a) - abs(b)) < AMOUNT_TOLERANCE


def find_best_match(source, pool):
    """
    Find the closest-dated pool transaction with the same amount.

    Args:
        source (NormalizedTransaction): Transaction to match
        pool (list): Unclaimed target transactions

    Returns:
        tuple or None: (pool index, date difference in days), or None when
        the source cannot be matched
    """
    source_amount = effective_amount(source)
    source_date = _as_date(effective_date(source))
    if source_date is None or source_amount == 0:
        return None

    best = None
    for index, candidate in enumerate(pool):
        candidate_date = _as_date(effective_date(candidate))
        if candidate_date is None:
            continue
        if not amounts_match(source_amount, effective_amount(candidate)):
            continue

        date_diff = abs((source_date - candidate_date).days)
        if date_diff > DATE_TOLERANCE_DAYS:
            continue
        if best is None or date_diff < best[1]:
            best = (index, date_diff)

    return best


def reconcile(source, target, source_name='source', target_name='target') -> ReconcileResult:
    """
    Match source transactions against target transactions.

    Args:
        source (list): NormalizedTransaction objects from the reference side
        target (list): NormalizedTransaction objects to check
        source_name (str): Label used in the report
        target_name (str): Label used in the report

    Returns:
        ReconcileResult: Exact matches, flagged matches and both remainders
    """
    source = list(source)
    pool = list(target)
    result = ReconcileResult(
        source_name=source_name,
        target_name=target_name,
        source_count=len(source),
        target_count=len(pool),
    )

    for txn in source:
        match = find_best_match(txn, pool)
        if match is None:
            result.missing_from_target.append(txn)
            continue

        index, date_diff = match
        counterpart = pool.pop(index)
        if date_diff == 0:
            result.matched.append(MatchedTransaction(txn, counterpart))
        else:
            result.flagged.append(FlaggedTransaction(txn, counterpart, date_diff))

    result.extra_in_target = pool

    logger.info(
        f"Reconciled {result.source_count} source vs {result.target_count} target transactions: "
        f"{len(result.matched)} matched, {len(result.flagged)} flagged, "
        f"{len(result.missing_from_target)} missing, {len(result.extra_in_target)} extra"
    )
    return result


def reconcile_csv(source_content, target_content, source_name='source', target_name='target'):
    """Parse two CSV texts and reconcile them."""
    return reconcile(
        parse_csv(source_content),
        parse_csv(target_content),
        source_name=source_name,
        target_name=target_name,
    )


def has_discrepancies(result) -> bool:
    return bool(result.missing_from_target or result.extra_in_target)


def format_amount(amount) -> str:
    sign = '-' if amount < 0 else ' '
    return f"{sign}₪{abs(amount):>10.2f}"


def truncate(text, max_length=30) -> str:
    if len(text) <= max_length:
        return text.ljust(max_length)
    return text[:max_length - 3] + '...'


def _describe(txn) -> str:
    return f"{effective_date(txn)} | {format_amount(effective_amount(txn))} | {truncate(txn.payee)}"


def format_reconcile_report(result) -> str:
    """
    Render a reconciliation result as text.

    Args:
        result (ReconcileResult): Result to render

    Returns:
        str: Report with flagged, missing and extra sections and a summary
    """
    lines = [
        f"Reconciliation: {result.source_name} vs {result.target_name}",
        '=' * 70,
        '',
    ]

    if has_discrepancies(result):
        lines.extend(['DISCREPANCIES FOUND', ''])
    else:
        lines.extend(['All transactions reconciled', ''])

    if result.flagged:
        lines.append(f"MATCHED WITH DATE DISCREPANCY ({len(result.flagged)}):")
        for item in result.flagged:
            days = 'day' if item.date_diff == 1 else 'days'
            lines.append(f"  ! {_describe(item.source)} (date diff: {item.date_diff} {days})")
        lines.append('')

    if result.missing_from_target:
        lines.append(f"MISSING FROM TARGET ({len(result.missing_from_target)}):")
        for txn in result.missing_from_target:
            lines.append(f"  x {_describe(txn)}")
        lines.append('')

    if result.extra_in_target:
        lines.append(f"EXTRA IN TARGET ({len(result.extra_in_target)}):")
        for txn in result.extra_in_target:
            lines.append(f"  + {_describe(txn)}")
        lines.append('')

    lines.extend([
        'SUMMARY:',
        f"  Source transactions:  {result.source_count}",
        f"  Target transactions:  {result.target_count}",
        f"  Exact matches:        {len(result.matched)}",
        f"  Flagged matches:      {len(result.flagged)}",
        f"  Missing from target:  {len(result.missing_from_target)}",
        f"  Extra in target:      {len(result.extra_in_target)}",
    ])
    return '\n'.join(lines)


def result_to_dataframe(result) -> pd.DataFrame:
    """
    Flatten a reconciliation result into one row per outcome.

    Matched and flagged pairs produce one row (described from the source
    side, with the target's date as counterpart); missing and extra
    transactions produce one row each.

    Args:
        result (ReconcileResult): Result to flatten

    Returns:
        pd.DataFrame: Columns RESULT_COLUMNS, empty but typed when there is
        nothing to report
    """
    records = []

    def add(status, txn, counterpart=None, date_diff=None):
        records.append({
            'Status': status,
            'Date': effective_date(txn),
            'Payee': txn.payee,
            'Amount': effective_amount(txn),
            'Counterpart Date': effective_date(counterpart) if counterpart is not None else '',
            'Date Diff': date_diff,
        })

    for item in result.matched:
        add('matched', item.source, item.target, 0)
    for item in result.flagged:
        add('flagged', item.source, item.target, item.date_diff)
    for txn in result.missing_from_target:
        add('missing_from_target', txn)
    for txn in result.extra_in_target:
        add('extra_in_target', txn)

    if not records:
        return pd.DataFrame(columns=RESULT_COLUMNS)

    df = pd.DataFrame(records, columns=RESULT_COLUMNS)
    df['Date Diff'] = df['Date Diff'].astype('Int64')
    return df
