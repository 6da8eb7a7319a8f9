"""
Utility functions for the command line tool.

This module holds logging setup and everything that touches the filesystem,
so that the transformation and reconciliation modules stay free of I/O.
"""

import csv
import os
import pathlib
import logging
import re

from .csv_codec import generate_filename, to_csv
from .reconcile import format_reconcile_report, result_to_dataframe

logger = logging.getLogger(__name__)

DEFAULT_OUTPUT_DIR = 'output'


def setup_logging(debug=False, log_level='info'):
    """Configure logging for the application."""
    # Determine log level
    if debug:
        level = logging.DEBUG
    else:
        level = getattr(logging, log_level.upper(), logging.INFO)

    format = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

    # Get log file path from environment or use default
    log_file = os.getenv('LOG_FILE', 'debug.log')

    log_dir = os.path.dirname(log_file)
    if log_dir and not os.path.exists(log_dir):
        os.makedirs(log_dir, exist_ok=True)

    logging.basicConfig(
        level=level,
        format=format,
        handlers=[
            logging.FileHandler(log_file, encoding='utf-8'),
            logging.StreamHandler()
        ]
    )

    return log_file


def ensure_output_directory(output_dir=None):
    """Resolve and create the output directory.

    Args:
        output_dir (str or pathlib.Path, optional): Explicit directory. When
            omitted, OUTPUT_DIR from the environment is used, then 'output'.

    Returns:
        pathlib.Path: Path to the directory
    """
    if output_dir is None:
        output_dir = os.getenv('OUTPUT_DIR') or DEFAULT_OUTPUT_DIR
    dir_path = pathlib.Path(output_dir)
    dir_path.mkdir(parents=True, exist_ok=True)
    return dir_path


def account_slug(account_name):
    """File-name-safe version of an account name."""
    slug = re.sub(r'[^\w-]+', '-', account_name.strip(), flags=re.UNICODE).strip('-')
    return slug.lower() or 'unknown'


def write_csv(rows, output_dir, prefix='ynab-transactions'):
    """
    Write YNAB rows to a timestamped CSV file.

    Args:
        rows (list): YnabRow objects
        output_dir (str or pathlib.Path): Directory to write into
        prefix (str): File name prefix

    Returns:
        pathlib.Path: Path of the written file
    """
    output_dir = ensure_output_directory(output_dir)
    output_path = output_dir / generate_filename(prefix)
    output_path.write_text(to_csv(rows), encoding='utf-8')
    logger.info(f"Wrote {len(rows)} rows to {output_path}")
    return output_path


def write_csv_per_account(rows_by_account, output_dir):
    """
    Write one CSV file per account.

    Args:
        rows_by_account (dict): Account name -> list of YnabRow
        output_dir (str or pathlib.Path): Directory to write into

    Returns:
        list: Paths of the written files
    """
    paths = []
    for account, rows in rows_by_account.items():
        paths.append(write_csv(rows, output_dir, prefix=f"ynab-{account_slug(account)}"))
    return paths


def save_reconciliation_results(result, output_path):
    """Save reconciliation results and the text report.

    Args:
        result (ReconcileResult): Reconciliation outcome
        output_path (str or pathlib.Path): Output directory

    Returns:
        tuple: (results CSV path, report path)
    """
    output_dir = ensure_output_directory(output_path)

    results_path = output_dir / 'reconciliation_results.csv'
    result_to_dataframe(result).to_csv(
        results_path, index=False, quoting=csv.QUOTE_NONNUMERIC, encoding='utf-8'
    )

    report_path = output_dir / 'reconciliation_report.txt'
    logger.debug(f"Writing reconciliation report to {report_path}")
    report_path.write_text(format_reconcile_report(result), encoding='utf-8')

    return results_path, report_path
