#!/usr/bin/env python3
"""Statement Trade Reconciler.

Reads statement rows handed over by the document extraction step, reconciles
the trade rows (settlement dates, signed quantities, commissions) and writes
the result to an Excel or CSV report.

Usage:
    python main.py --ledger-file <rows.json|rows.csv> [--output-dir <dir>] [--format xlsx|csv]

    python main.py --batch-dir <directory_with_ledgers> [--output-dir <dir>] [--format xlsx|csv]
"""

import argparse
import sys
from datetime import datetime
from pathlib import Path
from typing import List, Optional

from trade_recon.config.settings import REPORTS_DIR, Settings, load_settings
from trade_recon.excel_generator.converter import ExportError, TransactionExporter
from trade_recon.excel_generator.summarizer import ReconciliationSummarizer, SummaryCalculationError
from trade_recon.ledger.loader import LedgerLoader, LedgerLoadError
from trade_recon.reconciler.assembler import TransactionAssembler
from trade_recon.utils.logger import ReconciliationLogger, get_logger, setup_logger


class StatementReconciler:
    """Main processor for statement ledger files."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the processor."""
        self.settings = settings or Settings.from_env()
        self.logger = get_logger(__name__)
        self.loader = LedgerLoader(
            max_file_size_mb=self.settings.max_file_size_mb,
            supported_formats=self.settings.supported_ledger_formats,
        )
        self.assembler = TransactionAssembler(self.settings.rules)
        self.summarizer = ReconciliationSummarizer()
        self.exporter = TransactionExporter(self.settings)

    def process_single_ledger(
        self,
        ledger_path: str,
        output_dir: Optional[str] = None,
        export_format: Optional[str] = None
    ) -> Optional[str]:
        """Reconcile one ledger file and write its report.

        Args:
            ledger_path: Path to the ledger file.
            output_dir: Optional output directory for reports.
            export_format: Optional ``xlsx`` or ``csv`` override.

        Returns:
            Path to the generated report or None if processing failed.
        """
        run_logger = ReconciliationLogger(
            Path(ledger_path).stem,
            logs_dir=self.settings.logs_dir,
            level=self.settings.get_log_level(),
        )
        run_logger.log_start(ledger_path)

        try:
            rows = self.loader.load(ledger_path)
            outcomes = self.assembler.assemble(rows)
            transactions = [outcome.transaction for outcome in outcomes if outcome.emitted]

            if not transactions:
                self.logger.warning(f"No trade transactions reconciled from {ledger_path}")
                return None

            run_logger.log_progress(f"Reconciled {len(transactions)} of {len(rows)} rows")

            summary = self.summarizer.generate_summary(outcomes)
            metadata = {
                "Source Ledger": ledger_path,
                "Generated At": datetime.now().isoformat(timespec="seconds"),
                "Ledger Rows": len(rows),
                "Transactions": len(transactions),
            }

            output_path = self.exporter.export(
                transactions,
                output_path=output_dir or self.settings.output_dir,
                filename=self.exporter.generate_filename(
                    Path(ledger_path).stem,
                    suffix="reconciled",
                    export_format=export_format,
                ),
                summary_data=summary,
                metadata=metadata,
                export_format=export_format,
            )

            run_logger.log_completion(output_path)
            return output_path

        except LedgerLoadError as e:
            run_logger.log_error(e, "ledger loading")
            return None
        except SummaryCalculationError as e:
            run_logger.log_error(e, "summary calculation")
            return None
        except ExportError as e:
            run_logger.log_error(e, "report export")
            return None

    def process_batch(
        self,
        batch_dir: str,
        output_dir: Optional[str] = None,
        export_format: Optional[str] = None
    ) -> List[str]:
        """Reconcile every ledger file in a directory.

        Args:
            batch_dir: Directory containing ledger files.
            output_dir: Optional output directory for reports.
            export_format: Optional ``xlsx`` or ``csv`` override.

        Returns:
            List of paths to generated reports.
        """
        self.logger.info(f"Processing batch directory: {batch_dir}")

        ledger_files = sorted(
            path for path in Path(batch_dir).iterdir()
            if path.is_file() and path.suffix.lower() in self.settings.supported_ledger_formats
        ) if Path(batch_dir).is_dir() else []

        if not ledger_files:
            self.logger.warning(f"No ledger files found in {batch_dir}")
            return []

        self.logger.info(f"Found {len(ledger_files)} ledger files")

        successful_reports = []
        for ledger_file in ledger_files:
            report_path = self.process_single_ledger(str(ledger_file), output_dir, export_format)
            if report_path:
                successful_reports.append(report_path)

        self.logger.info(f"Successfully processed {len(successful_reports)}/{len(ledger_files)} files")
        return successful_reports


def parse_arguments(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """Parse command line arguments.

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        description="Reconcile statement trade rows and generate Excel or CSV reports",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Reconcile a single ledger
    python main.py --ledger-file statement_rows.json

    # Reconcile a CSV ledger into a CSV report
    python main.py --ledger-file statement_rows.csv --format csv

    # Reconcile every ledger in a directory
    python main.py --batch-dir ./ledgers --output-dir ./reports
        """
    )

    group = parser.add_mutually_exclusive_group(required=True)
    group.add_argument(
        '--ledger-file',
        type=str,
        help='Path to a single ledger file (.json or .csv)'
    )
    group.add_argument(
        '--batch-dir',
        type=str,
        help='Directory containing multiple ledger files'
    )

    parser.add_argument(
        '--output-dir',
        type=str,
        default=None,
        help=f'Output directory for reports (default: {REPORTS_DIR})'
    )
    parser.add_argument(
        '--format',
        dest='export_format',
        choices=['xlsx', 'csv'],
        default=None,
        help='Report format (default: EXPORT_FORMAT setting)'
    )
    parser.add_argument(
        '--no-summary',
        action='store_true',
        help='Leave the Summary sheet out of Excel reports'
    )
    parser.add_argument(
        '--config',
        type=str,
        default=None,
        help='JSON file overriding settings'
    )

    return parser.parse_args(argv)


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point.

    Returns:
        Exit code (0 for success, 1 for error).
    """
    try:
        args = parse_arguments(argv)

        settings = load_settings(args.config)
        if args.no_summary:
            settings.include_summary = False
        if not settings.validate():
            print("Error: Invalid settings. Check EXPORT_FORMAT, MAX_FILE_SIZE_MB and the reference prefixes.")
            return 1

        setup_logger(
            "trade_recon",
            log_file="trade_recon.log",
            level=settings.get_log_level(),
            logs_dir=settings.logs_dir,
            log_format=settings.log_format,
        )

        processor = StatementReconciler(settings)

        if args.ledger_file:
            output_path = processor.process_single_ledger(
                ledger_path=args.ledger_file,
                output_dir=args.output_dir,
                export_format=args.export_format
            )

            if output_path:
                print(f"Success! Report created: {output_path}")
                return 0
            print("Error: Reconciliation failed. Check logs for details.")
            return 1

        output_paths = processor.process_batch(
            batch_dir=args.batch_dir,
            output_dir=args.output_dir,
            export_format=args.export_format
        )

        if output_paths:
            print(f"Success! Created {len(output_paths)} reports:")
            for path in output_paths:
                print(f"  - {path}")
            return 0
        print("Error: No ledgers were processed successfully. Check logs for details.")
        return 1

    except (OSError, ValueError) as e:
        print(f"Error: {str(e)}")
        return 1
    except KeyboardInterrupt:
        print("\nOperation cancelled by user")
        return 130


if __name__ == "__main__":
    sys.exit(main())
