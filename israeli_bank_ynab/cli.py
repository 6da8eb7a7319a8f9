"""
Command line entry point.

Commands:
- transform: scraped transactions (JSON) -> YNAB CSV
- reconcile: compare two CSV files and report discrepancies
"""

import argparse
import json
import logging
import pathlib
import sys

from .csv_codec import to_csv
from .reconcile import format_reconcile_report, has_discrepancies, reconcile_csv
from .transformer import (
    calculate_summary,
    filter_and_partition,
    group_by_account,
    transform_transactions,
)
from .utils import (
    save_reconciliation_results,
    setup_logging,
    write_csv,
    write_csv_per_account,
)

logger = logging.getLogger(__name__)


def load_transactions(file_path):
    """Load scraped transactions from a JSON file.

    The file holds either a list of transactions or a list of scraped
    accounts ({"accountNumber", "accountName", "txns": [...]}), in which case
    every transaction is tagged with its account.

    Args:
        file_path (str or pathlib.Path): JSON file

    Returns:
        list: Transaction dicts

    Raises:
        FileNotFoundError: If the file does not exist
        ValueError: If the file is not a JSON list
    """
    path = pathlib.Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")

    data = json.loads(path.read_text(encoding='utf-8-sig'))
    if not isinstance(data, list):
        raise ValueError(f"Expected a JSON list in {file_path}")

    transactions = []
    for item in data:
        if isinstance(item, dict) and isinstance(item.get('txns'), list):
            for txn in item['txns']:
                enriched = dict(txn)
                enriched.setdefault('accountNumber', item.get('accountNumber'))
                enriched.setdefault('accountName', item.get('accountName'))
                transactions.append(enriched)
        else:
            transactions.append(item)

    logger.info(f"Loaded {len(transactions)} transactions from {file_path}")
    return transactions


def read_csv_text(file_path):
    path = pathlib.Path(file_path)
    if not path.exists():
        raise FileNotFoundError(f"File not found: {file_path}")
    if path.is_dir():
        raise ValueError(f"Path is a directory: {file_path}")
    return path.read_text(encoding='utf-8-sig')


def format_summary(summary):
    """Per-account dry run summary."""
    lines = ['--- Dry Run Summary ---']
    for account, totals in summary.by_account.items():
        lines.append('')
        lines.append(f"{account}: {totals.count} transactions")
        lines.append(f"  Outflow: ₪{totals.outflow:.2f}")
        lines.append(f"  Inflow: ₪{totals.inflow:.2f}")
    lines.extend([
        '',
        '--- Totals ---',
        f"Transactions: {summary.total_count}",
        f"Outflow: ₪{summary.total_outflow:.2f}",
        f"Inflow: ₪{summary.total_inflow:.2f}",
    ])
    return '\n'.join(lines)


def run_transform(args):
    transactions = load_transactions(args.input)
    kept, skipped = filter_and_partition(transactions)

    for item in skipped:
        logger.info(f"Skipped ({item.reason}): {item.date} {item.description} {item.amount:.2f}")

    if not kept:
        print("No transactions to export.")
        return 0

    if args.dry_run:
        print(format_summary(calculate_summary(kept)))
        print("\n[Dry run - no files written]")
        return 0

    if args.split:
        rows_by_account = {
            account: transform_transactions(txns)
            for account, txns in group_by_account(kept).items()
        }
        paths = write_csv_per_account(rows_by_account, args.output)
        print(f"Wrote {len(paths)} CSV file(s):")
        for path in paths:
            print(f"  {path}")
        return 0

    rows = transform_transactions(kept)
    if args.stdout:
        print(to_csv(rows))
        return 0

    path = write_csv(rows, args.output)
    print(f"Wrote {len(rows)} transactions to:\n  {path}")
    return 0


def run_reconcile(args):
    result = reconcile_csv(
        read_csv_text(args.source),
        read_csv_text(args.target),
        source_name=args.source,
        target_name=args.target,
    )
    print(format_reconcile_report(result))

    if args.output:
        results_path, report_path = save_reconciliation_results(result, args.output)
        logger.info(f"Saved {results_path} and {report_path}")

    return 1 if has_discrepancies(result) else 0


def build_parser():
    parser = argparse.ArgumentParser(
        prog='israeli-bank-ynab',
        description='Convert scraped Israeli bank transactions to YNAB CSV and reconcile exports',
    )
    parser.add_argument('--debug', action='store_true',
                        help='Enable debug logging')
    parser.add_argument('--log-level', type=str, default='info',
                        help='Log level (debug, info, warning, error)')
    subparsers = parser.add_subparsers(dest='command', required=True)

    transform = subparsers.add_parser('transform', help='Convert scraped transactions to YNAB CSV')
    transform.add_argument('input', type=str,
                           help='JSON file with scraped transactions')
    transform.add_argument('-o', '--output', type=str, default=None,
                           help='Output directory (default: $OUTPUT_DIR or ./output)')
    transform.add_argument('--split', action='store_true',
                           help='Write a separate CSV per account')
    transform.add_argument('--dry-run', action='store_true',
                           help='Print a summary without writing files')
    transform.add_argument('--stdout', action='store_true',
                           help='Print the CSV instead of writing a file')
    transform.set_defaults(handler=run_transform)

    reconcile = subparsers.add_parser('reconcile', help='Compare two transaction CSV files')
    reconcile.add_argument('source', type=str,
                           help='Source CSV file (e.g. bank export)')
    reconcile.add_argument('target', type=str,
                           help='Target CSV file (e.g. YNAB export)')
    reconcile.add_argument('-o', '--output', type=str, default=None,
                           help='Directory for the results CSV and report')
    reconcile.set_defaults(handler=run_reconcile)

    return parser


def main(argv=None):
    """Main execution function."""
    args = build_parser().parse_args(argv)
    setup_logging(debug=args.debug, log_level=args.log_level)

    try:
        return args.handler(args)
    except (FileNotFoundError, ValueError) as e:
        logger.error(f"Error running {args.command}: {str(e)}")
        return 1


if __name__ == '__main__':
    sys.exit(main())
