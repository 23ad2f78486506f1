"""Main entry point for the spreadsheet quality tool.

This module can be run directly as:
    python -m sheetsane

Or via the installed command:
    sheetsane

Quick Start:
    Preview a workbook and list candidate key columns:

        sheetsane preview data/orders.xlsx

    Run the full analysis with duplicate detection on column A of "Orders"
    and write an Excel report:

        sheetsane analyze data/orders.xlsx --key-sheet Orders --key-column-index 0 --report-dir reports
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Optional

from sheetsane.config import load_settings
from sheetsane.core.db import InMemoryResultStore, SQLResultStore
from sheetsane.core.models import KeyColumnSelection
from sheetsane.core.processor import DocumentProcessor
from sheetsane.errors import SheetSaneError
from sheetsane.reporting import ReportGenerator, export_findings_csv

logger = logging.getLogger(__name__)


def setup_logging(verbose: bool = False) -> None:
    """Configure logging for the application.

    Args:
        verbose: If True, set log level to DEBUG, otherwise INFO
    """
    log_level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


def _build_processor(
    env_file: Optional[str], database_url: Optional[str], force: bool
) -> DocumentProcessor:
    settings = load_settings(Path(env_file) if env_file else None)
    url = database_url or settings.database_url
    if url:
        store = SQLResultStore(url, ttl_seconds=settings.result_ttl_seconds)
    else:
        store = InMemoryResultStore(ttl_seconds=settings.result_ttl_seconds)
    return DocumentProcessor(store, settings, force_reprocess=force)


def _key_column(processor: DocumentProcessor, file_path: Path, sheet_name: str, index: int) -> KeyColumnSelection:
    """Resolve the header text of the selected key column by its absolute index."""
    workbook = processor.reader.load_file(file_path)
    header = ""
    for sheet in workbook.sheets:
        if sheet.name == sheet_name:
            header = sheet.header(index)
    return KeyColumnSelection(
        sheet=sheet_name, column=header or f"Column {index + 1}", column_index=index
    )


def preview(file: str, env_file: Optional[str] = None) -> int:
    """Print the preview of a workbook as JSON.

    Args:
        file: Path to the workbook
        env_file: Optional dotenv file with settings

    Returns:
        Process exit code
    """
    processor = _build_processor(env_file, None, False)
    try:
        result = processor.preview_file(Path(file))
    except (SheetSaneError, FileNotFoundError) as e:
        logger.error(f"Preview failed: {e}")
        return 1
    finally:
        processor.store.close()

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def analyze(
    file: str,
    key_sheet: Optional[str] = None,
    key_column_index: Optional[int] = None,
    report_dir: Optional[str] = None,
    csv_path: Optional[str] = None,
    database_url: Optional[str] = None,
    env_file: Optional[str] = None,
    force: bool = False,
) -> int:
    """Analyze a workbook, print the result and optionally render reports.

    Args:
        file: Path to the workbook
        key_sheet: Sheet holding the duplicate-key column
        key_column_index: Zero-based index of the duplicate-key column
        report_dir: Directory for the Excel report
        csv_path: Path for a CSV export of the findings
        database_url: SQLAlchemy URL of the result store
        env_file: Optional dotenv file with settings
        force: If True, ignore cached results

    Returns:
        Process exit code
    """
    processor = _build_processor(env_file, database_url, force)
    file_path = Path(file)

    try:
        key_column = None
        if key_sheet is not None and key_column_index is not None:
            key_column = _key_column(processor, file_path, key_sheet, key_column_index)
            logger.info(f"Duplicate key column: {key_column.sheet}!{key_column.column}")

        result = processor.analyze_file(file_path, key_column)
    except (SheetSaneError, FileNotFoundError) as e:
        logger.error(f"Analysis failed: {e}")
        return 1
    finally:
        processor.store.close()

    logger.info("=" * 60)
    logger.info("ANALYSIS SUMMARY")
    logger.info("=" * 60)
    logger.info(f"File: {result.file_name}")
    logger.info(f"Score: {result.score}/100")
    logger.info(f"Errors: {result.error_count}")
    logger.info(f"Warnings: {result.warning_count}")
    logger.info(f"Info: {result.info_count}")
    logger.info(result.score_explanation)
    logger.info("=" * 60)

    if report_dir:
        report_path = ReportGenerator(Path(report_dir)).generate_report(result, force_overwrite=True)
        logger.info(f"Report written to {report_path}")

    if csv_path:
        export_findings_csv(result, Path(csv_path))

    print(json.dumps(result.to_dict(), indent=2))
    return 0


def main(argv=None):
    """Command-line interface entry point."""
    parser = argparse.ArgumentParser(
        description="SheetSane - Deterministic spreadsheet quality checks"
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )
    parser.add_argument(
        "--env-file",
        "-e",
        default=None,
        help="Path to a .env file with SHEETSANE_* settings",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    preview_parser = subparsers.add_parser(
        "preview", help="List sheets, candidate key columns and the checks that will run"
    )
    preview_parser.add_argument("file", help="Workbook to preview (.xlsx or .xls)")

    analyze_parser = subparsers.add_parser("analyze", help="Run the full analysis")
    analyze_parser.add_argument("file", help="Workbook to analyze (.xlsx or .xls)")
    analyze_parser.add_argument(
        "--key-sheet",
        default=None,
        help="Sheet holding the column to check for duplicate keys",
    )
    analyze_parser.add_argument(
        "--key-column-index",
        type=int,
        default=None,
        help="Zero-based index of the column to check for duplicate keys",
    )
    analyze_parser.add_argument(
        "--report-dir",
        "-o",
        default=None,
        help="Directory for the Excel report",
    )
    analyze_parser.add_argument(
        "--csv",
        default=None,
        help="Write findings to this CSV file",
    )
    analyze_parser.add_argument(
        "--database-url",
        default=None,
        help="SQLAlchemy URL for caching results (default: in-memory)",
    )
    analyze_parser.add_argument(
        "--force",
        "-f",
        action="store_true",
        help="Re-run the analysis even if a cached result exists",
    )

    args = parser.parse_args(argv)
    setup_logging(args.verbose)

    if args.command == "preview":
        exit_code = preview(args.file, env_file=args.env_file)
    else:
        exit_code = analyze(
            args.file,
            key_sheet=args.key_sheet,
            key_column_index=args.key_column_index,
            report_dir=args.report_dir,
            csv_path=args.csv,
            database_url=args.database_url,
            env_file=args.env_file,
            force=args.force,
        )
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
