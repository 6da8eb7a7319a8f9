"""
Israeli Bank YNAB - scraped Israeli bank transactions to YNAB, and back.

This package provides functionality to:
- Standardize bank, card and YNAB CSV columns into one transaction shape
- Parse Israeli (D/M/Y) and ISO dates and detect installment charges
- Transform scraped transactions into YNAB import rows with a JSON memo
- Read and write YNAB CSV files
- Reconcile two transaction lists and report discrepancies

The YNAB format includes:
- Date: Transaction date (YYYY-MM-DD); installment charges are shifted one
  month back and one day forward so YNAB does not flag them as duplicates
- Payee: Transaction description
- Memo: JSON with charge date, installment, original amount, account, etc.
- Outflow / Inflow: Amounts with two decimals, one of them empty
"""

from .standardize import (
    NormalizedTransaction,
    normalize_column_name,
    normalize_date,
    normalize_amount,
    normalize_row,
    effective_date,
    effective_amount,
)
from .dates import (
    Installment,
    parse_installments,
    parse_date,
    format_date,
    derive_installment_date,
)
from .transformer import (
    YnabRow,
    SkippedTransaction,
    should_skip_transaction,
    filter_and_partition,
    build_memo,
    transform_transaction,
    transform_transactions,
    group_by_account,
    calculate_summary,
)
from .csv_codec import to_csv, parse_csv
from .reconcile import (
    ReconcileResult,
    reconcile,
    reconcile_csv,
    format_reconcile_report,
)

__all__ = [
    'NormalizedTransaction',
    'normalize_column_name',
    'normalize_date',
    'normalize_amount',
    'normalize_row',
    'effective_date',
    'effective_amount',
    'Installment',
    'parse_installments',
    'parse_date',
    'format_date',
    'derive_installment_date',
    'YnabRow',
    'SkippedTransaction',
    'should_skip_transaction',
    'filter_and_partition',
    'build_memo',
    'transform_transaction',
    'transform_transactions',
    'group_by_account',
    'calculate_summary',
    'to_csv',
    'parse_csv',
    'ReconcileResult',
    'reconcile',
    'reconcile_csv',
    'format_reconcile_report',
]
