"""
Scraped transactions -> YNAB rows.

Input transactions are mappings with the scraper's field names:
- date: Purchase date (ISO timestamp)
- processedDate: Charge date (ISO timestamp)
- chargedAmount: Signed amount in ILS (negative for expenses)
- description: Merchant / free text
- status: 'completed' or 'pending'
- Optional: type, identifier, originalAmount, originalCurrency, category,
  memo, accountNumber, accountName

Each kept transaction becomes a YnabRow with Date, Payee, Memo, Outflow and
Inflow. Everything that does not fit YNAB's columns is serialized as JSON
into the memo.
"""

import json
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional

import pandas as pd

from .dates import derive_installment_date, format_date, parse_date, parse_installments
from .standardize import normalize_amount

logger = logging.getLogger(__name__)

UNKNOWN_ACCOUNT = 'unknown'
DEFAULT_TYPE = 'normal'
DEFAULT_CURRENCY = 'ILS'


@dataclass(frozen=True)
class YnabRow:
    date: str
    payee: str
    memo: str
    outflow: str
    inflow: str


@dataclass(frozen=True)
class SkippedTransaction:
    """A transaction left out of the export, kept for the run summary."""

    reason: str
    description: str
    amount: float
    date: str


@dataclass
class AccountSummary:
    count: int = 0
    outflow: float = 0.0
    inflow: float = 0.0


@dataclass
class Summary:
    by_account: Dict[str, AccountSummary] = field(default_factory=dict)
    total_outflow: float = 0.0
    total_inflow: float = 0.0
    total_count: int = 0


def _charged_amount(txn):
    return normalize_amount(txn.get('chargedAmount'))


def _text(value):
    if value is None:
        return ''
    return str(value).strip()


def skip_reason(txn) -> Optional[str]:
    """
    Reason a transaction must not be exported.

    Args:
        txn (Mapping): Scraped transaction

    Returns:
        str or None: 'Pending', 'Zero amount', or None if it should be kept
    """
    if _text(txn.get('status')).lower() == 'pending':
        return 'Pending'
    if _charged_amount(txn) == 0:
        return 'Zero amount'
    return None


def should_skip_transaction(txn) -> bool:
    """True for pending and zero-amount transactions."""
    return skip_reason(txn) is not None


def filter_and_partition(transactions):
    """
    Split transactions into exportable ones and skipped ones.

    Args:
        transactions (Iterable[Mapping]): Scraped transactions

    Returns:
        tuple: (kept, skipped) where kept is a list of the original
        transactions and skipped a list of SkippedTransaction
    """
    kept = []
    skipped = []

    for txn in transactions:
        reason = skip_reason(txn)
        if reason is None:
            kept.append(txn)
            continue

        skipped.append(SkippedTransaction(
            reason=reason,
            description=_text(txn.get('description')),
            amount=_charged_amount(txn),
            date=_text(txn.get('processedDate')) or _text(txn.get('date')) or 'unknown',
        ))
        logger.debug(f"Skipping transaction ({reason}): {txn.get('description')}")

    logger.info(f"Kept {len(kept)} transactions, skipped {len(skipped)}")
    return kept, skipped


def _has_original_amount(txn):
    original = normalize_amount(txn.get('originalAmount'))
    if original == 0:
        return False
    currency = _text(txn.get('originalCurrency'))
    if currency and currency != DEFAULT_CURRENCY:
        return True
    return abs(original) != abs(_charged_amount(txn))


def _memo_date(value):
    """YYYY-MM-DD, or '' when the value is missing or not a date."""
    parsed = parse_date(value)
    if parsed is None:
        if value:
            logger.debug(f"Leaving unparseable date out of memo: {value!r}")
        return ''
    return format_date(parsed)


def build_memo(txn, installment=None) -> str:
    """
    Serialize transaction metadata for the YNAB memo column.

    Keys are only written when they carry information: transactionDate only
    when it differs from the charge date, originalAmount/originalCurrency
    only for foreign or converted charges, and type only when it is not
    'normal'.

    Args:
        txn (Mapping): Scraped transaction
        installment (Installment, optional): Parsed installment descriptor

    Returns:
        str: Compact JSON object, or '' when there is nothing to record
    """
    memo = {}

    charge_date = _memo_date(txn.get('processedDate'))
    transaction_date = _memo_date(txn.get('date'))

    if charge_date and transaction_date and transaction_date != charge_date:
        memo['transactionDate'] = transaction_date
    if charge_date:
        memo['chargeDate'] = charge_date
    if installment is not None:
        memo['installment'] = f"{installment.number}/{installment.total}"
    if _has_original_amount(txn):
        memo['originalAmount'] = txn['originalAmount']
        if txn.get('originalCurrency'):
            memo['originalCurrency'] = txn['originalCurrency']
    if _text(txn.get('identifier')):
        memo['ref'] = _text(txn['identifier'])
    if _text(txn.get('accountNumber')):
        memo['account'] = _text(txn['accountNumber'])
    if _text(txn.get('accountName')):
        memo['source'] = _text(txn['accountName'])
    if _text(txn.get('type')) and _text(txn['type']) != DEFAULT_TYPE:
        memo['type'] = _text(txn['type'])
    if _text(txn.get('category')):
        memo['category'] = _text(txn['category'])
    if _text(txn.get('memo')):
        memo['bankMemo'] = _text(txn['memo'])

    if not memo:
        return ''
    return json.dumps(memo, ensure_ascii=False, separators=(',', ':'))


def transform_transaction(txn) -> Optional[YnabRow]:
    """
    Convert one scraped transaction to a YNAB row.

    Installment charges get the shifted installment date (see
    dates.derive_installment_date); everything else uses the purchase date,
    falling back to the charge date.

    Args:
        txn (Mapping): Scraped transaction

    Returns:
        YnabRow or None: The row, or None if the transaction is skipped

    Raises:
        ValueError: If the transaction has no usable date
    """
    if should_skip_transaction(txn):
        return None

    description = _text(txn.get('description'))
    installment = parse_installments(description)

    if installment is not None:
        date = derive_installment_date(txn.get('processedDate') or txn.get('date'))
    else:
        date = format_date(txn.get('date') or txn.get('processedDate'))

    amount = _charged_amount(txn)
    return YnabRow(
        date=date,
        payee=description,
        memo=build_memo(txn, installment),
        outflow=f"{abs(amount):.2f}" if amount < 0 else '',
        inflow=f"{amount:.2f}" if amount > 0 else '',
    )


def transform_transactions(transactions) -> List[YnabRow]:
    """
    Convert scraped transactions to YNAB rows, newest first.

    Skipped transactions and transactions without a usable date are left out.

    Args:
        transactions (Iterable[Mapping]): Scraped transactions

    Returns:
        list: YnabRow objects sorted by date descending
    """
    rows = []
    for txn in transactions:
        try:
            row = transform_transaction(txn)
        except ValueError as e:
            logger.warning(f"Dropping transaction '{txn.get('description')}': {str(e)}")
            continue
        if row is not None:
            rows.append(row)

    return sorted(rows, key=lambda row: row.date, reverse=True)


def group_by_account(transactions):
    """Group transactions by accountName ('unknown' when missing)."""
    by_account = {}
    for txn in transactions:
        key = _text(txn.get('accountName')) or UNKNOWN_ACCOUNT
        by_account.setdefault(key, []).append(txn)
    return by_account


def calculate_summary(transactions) -> Summary:
    """
    Count and total transactions per account.

    Args:
        transactions (Iterable[Mapping]): Scraped transactions

    Returns:
        Summary: Per-account counts, outflow and inflow, plus overall totals
    """
    transactions = list(transactions)
    if not transactions:
        return Summary()

    df = pd.DataFrame({
        'account': [_text(t.get('accountName')) or UNKNOWN_ACCOUNT for t in transactions],
        'amount': pd.Series([_charged_amount(t) for t in transactions], dtype=float),
    })
    df['outflow'] = df['amount'].where(df['amount'] < 0, 0.0).abs()
    df['inflow'] = df['amount'].where(df['amount'] > 0, 0.0)

    grouped = df.groupby('account', sort=False).agg(
        count=('amount', 'size'),
        outflow=('outflow', 'sum'),
        inflow=('inflow', 'sum'),
    )

    summary = Summary(total_count=len(df))
    for account, row in grouped.iterrows():
        summary.by_account[account] = AccountSummary(
            count=int(row['count']),
            outflow=round(float(row['outflow']), 2),
            inflow=round(float(row['inflow']), 2),
        )
    summary.total_outflow = round(float(df['outflow'].sum()), 2)
    summary.total_inflow = round(float(df['inflow'].sum()), 2)
    return summary
