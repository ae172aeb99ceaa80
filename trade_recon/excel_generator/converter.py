"""Excel and CSV export of reconciled transactions."""

import os
from datetime import datetime
from typing import Dict, List, Optional, Any

import pandas as pd
from openpyxl import Workbook
from openpyxl.styles import Font, PatternFill, Alignment
from openpyxl.utils import get_column_letter
from openpyxl.utils.dataframe import dataframe_to_rows

from trade_recon.config.settings import Settings
from trade_recon.reconciler.models import TRANSACTION_COLUMNS, Transaction
from trade_recon.utils.logger import get_logger
from trade_recon.utils.validators import (
    ValidationError,
    validate_directory_path,
    validate_export_format,
)

NUMERIC_COLUMNS = ["Quantity", "Price", "Transaction Amount", "Commission"]


class ExportError(Exception):
    """Custom exception for export errors."""
    pass


class TransactionExporter:
    """Writes reconciled transactions to Excel or CSV files."""

    def __init__(self, settings: Optional[Settings] = None) -> None:
        """Initialize the exporter.

        Args:
            settings: Output settings; defaults are read from the environment.
        """
        self.logger = get_logger(__name__)
        self.settings = settings or Settings.from_env()

        self.header_font = Font(bold=True, color="FFFFFF")
        self.header_fill = PatternFill(start_color="366092", end_color="366092", fill_type="solid")
        self.header_alignment = Alignment(horizontal="center", vertical="center")

        self.number_format = self.settings.number_format

    def generate_filename(
        self,
        base_name: str,
        suffix: Optional[str] = None,
        timestamp: bool = True,
        export_format: Optional[str] = None
    ) -> str:
        """Generate an output filename with timestamp.

        Args:
            base_name: Base filename.
            suffix: Optional suffix to add.
            timestamp: Whether to include timestamp.
            export_format: File extension, defaults to the configured format.

        Returns:
            Generated filename.
        """
        parts = [base_name]
        if suffix:
            parts.append(suffix)
        if timestamp:
            parts.append(datetime.now().strftime("%Y%m%d_%H%M%S"))

        filename = "_".join(parts)
        return f"{filename}.{export_format or self.settings.export_format}"

    def transactions_to_dataframe(self, transactions: List[Transaction]) -> pd.DataFrame:
        """Convert transactions to a DataFrame with the export columns.

        Args:
            transactions: Reconciled transactions.

        Returns:
            pandas DataFrame, one row per transaction in input order.
        """
        columns = list(TRANSACTION_COLUMNS.values())
        df = pd.DataFrame([t.to_dict() for t in transactions], columns=columns)
        for column in NUMERIC_COLUMNS:
            df[column] = pd.to_numeric(df[column], errors="coerce")
        return df

    def _style_header_cell(self, cell) -> None:
        cell.font = self.header_font
        cell.fill = self.header_fill
        cell.alignment = self.header_alignment

    def _auto_size_columns(self, worksheet) -> None:
        for col_idx in range(1, worksheet.max_column + 1):
            max_length = 0
            for row_idx in range(1, worksheet.max_row + 1):
                value = worksheet.cell(row=row_idx, column=col_idx).value
                if value is not None:
                    max_length = max(max_length, len(str(value)))

            worksheet.column_dimensions[get_column_letter(col_idx)].width = min(max_length + 2, 50)

    def create_transactions_sheet(
        self,
        workbook: Workbook,
        transactions_df: pd.DataFrame,
        sheet_name: str = "Transactions"
    ) -> None:
        """Create transactions sheet in workbook.

        Args:
            workbook: Excel workbook object.
            transactions_df: DataFrame with transaction data.
            sheet_name: Name for the sheet.
        """
        worksheet = workbook.create_sheet(title=sheet_name)

        headers = list(transactions_df.columns)
        for col_num, header in enumerate(headers, 1):
            self._style_header_cell(worksheet.cell(row=1, column=col_num, value=header))

        if transactions_df.empty:
            self.logger.warning("No transaction data to write to Excel")

        numeric_cols = {headers.index(name) + 1 for name in NUMERIC_COLUMNS if name in headers}
        # openpyxl cannot store NaN
        cleaned_df = transactions_df.astype(object).where(pd.notna(transactions_df), None)

        for row_num, row in enumerate(dataframe_to_rows(cleaned_df, index=False, header=False), 2):
            for col_num, value in enumerate(row, 1):
                cell = worksheet.cell(row=row_num, column=col_num, value=value)
                if col_num in numeric_cols and isinstance(value, (int, float)):
                    cell.number_format = self.number_format

        self._auto_size_columns(worksheet)
        self.logger.info(f"Created transactions sheet with {len(transactions_df)} rows")

    def create_summary_sheet(
        self,
        workbook: Workbook,
        summary_data: Dict[str, Any],
        sheet_name: str = "Summary"
    ) -> None:
        """Create summary sheet in workbook.

        Args:
            workbook: Excel workbook object.
            summary_data: Output of ``ReconciliationSummarizer.generate_summary``.
            sheet_name: Name for the sheet.
        """
        worksheet = workbook.create_sheet(title=sheet_name)

        title_cell = worksheet.cell(row=1, column=1, value="Reconciliation Summary")
        title_cell.font = Font(bold=True, size=16)
        worksheet.merge_cells(start_row=1, start_column=1, end_row=1, end_column=4)

        row = 3
        period = summary_data.get("posting_period", {})
        overview = [
            ("Ledger Rows:", summary_data.get("total_rows", 0)),
            ("Transactions:", summary_data.get("emitted", 0)),
            ("Without Settlement Date:", summary_data.get("unresolved_settlement", 0)),
            ("First Posting Date:", period.get("start_date") or "N/A"),
            ("Last Posting Date:", period.get("end_date") or "N/A"),
        ]
        for trans_type, count in summary_data.get("by_type", {}).items():
            overview.append((f"{trans_type} Trades:", count))
        for reason, count in summary_data.get("skipped", {}).items():
            overview.append((f"Skipped ({reason}):", count))

        for label, value in overview:
            worksheet.cell(row=row, column=1, value=label)
            worksheet.cell(row=row, column=2, value=value)
            row += 1

        row += 1
        headers = ["Currency", "Transactions", "Gross Amount", "Total Commission"]
        for col, header in enumerate(headers, 1):
            self._style_header_cell(worksheet.cell(row=row, column=col, value=header))
        row += 1

        for currency, totals in summary_data.get("currency_totals", {}).items():
            worksheet.cell(row=row, column=1, value=currency)
            worksheet.cell(row=row, column=2, value=totals.get("transaction_count", 0))
            amount_cell = worksheet.cell(row=row, column=3, value=totals.get("gross_amount", 0.0))
            amount_cell.number_format = self.number_format
            commission_cell = worksheet.cell(row=row, column=4, value=totals.get("total_commission", 0.0))
            commission_cell.number_format = self.number_format
            row += 1

        row += 1
        for col, header in enumerate(["Security", "Net Quantity"], 1):
            self._style_header_cell(worksheet.cell(row=row, column=col, value=header))
        row += 1

        for security, quantity in summary_data.get("security_positions", {}).items():
            worksheet.cell(row=row, column=1, value=security)
            worksheet.cell(row=row, column=2, value=quantity)
            row += 1

        self._auto_size_columns(worksheet)
        self.logger.info("Created summary sheet")

    def create_metadata_sheet(
        self,
        workbook: Workbook,
        metadata: Dict[str, Any],
        sheet_name: str = "Metadata"
    ) -> None:
        """Create metadata sheet in workbook.

        Args:
            workbook: Excel workbook object.
            metadata: Dictionary with metadata information.
            sheet_name: Name for the sheet.
        """
        worksheet = workbook.create_sheet(title=sheet_name)

        for col, header in enumerate(["Key", "Value"], 1):
            self._style_header_cell(worksheet.cell(row=1, column=col, value=header))

        for row_num, (key, value) in enumerate(metadata.items(), 2):
            worksheet.cell(row=row_num, column=1, value=str(key))
            worksheet.cell(row=row_num, column=2, value=str(value))

        self._auto_size_columns(worksheet)
        self.logger.info(f"Created metadata sheet with {len(metadata)} items")

    def _resolve_target(
        self,
        output_path: Optional[str],
        filename: Optional[str],
        base_name: str,
        export_format: str
    ) -> str:
        if output_path is None:
            output_path = self.settings.output_dir

        validate_directory_path(output_path)

        if filename is None:
            filename = self.generate_filename(base_name, export_format=export_format)

        if not filename.endswith(f".{export_format}"):
            filename = f"{filename}.{export_format}"

        return os.path.join(output_path, filename)

    def export_excel(
        self,
        transactions: List[Transaction],
        output_path: Optional[str] = None,
        filename: Optional[str] = None,
        summary_data: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None
    ) -> str:
        """Write transactions to an Excel workbook.

        Args:
            transactions: Reconciled transactions.
            output_path: Optional output directory path.
            filename: Optional filename for output file.
            summary_data: Optional run summary, written as a Summary sheet.
            metadata: Optional metadata, written when enabled in settings.

        Returns:
            Path to created Excel file.

        Raises:
            ExportError: If the export fails.
        """
        try:
            full_path = self._resolve_target(output_path, filename, "transactions", "xlsx")

            workbook = Workbook()
            if "Sheet" in workbook.sheetnames:
                workbook.remove(workbook["Sheet"])

            if summary_data and self.settings.include_summary:
                self.create_summary_sheet(workbook, summary_data)

            self.create_transactions_sheet(workbook, self.transactions_to_dataframe(transactions))

            if metadata and self.settings.include_metadata:
                self.create_metadata_sheet(workbook, metadata)

            workbook.save(full_path)
            workbook.close()

            self.logger.info(f"Excel file created successfully: {full_path}")
            return full_path

        except ValidationError as e:
            raise ExportError(f"Validation error: {str(e)}")
        except (OSError, ValueError) as e:
            raise ExportError(f"Failed to export to Excel: {str(e)}")

    def export_csv(
        self,
        transactions: List[Transaction],
        output_path: Optional[str] = None,
        filename: Optional[str] = None
    ) -> str:
        """Write transactions to a CSV file with the export column labels.

        Raises:
            ExportError: If the export fails.
        """
        try:
            full_path = self._resolve_target(output_path, filename, "transactions", "csv")
            self.transactions_to_dataframe(transactions).to_csv(full_path, index=False)

            self.logger.info(f"CSV file created successfully: {full_path}")
            return full_path

        except ValidationError as e:
            raise ExportError(f"Validation error: {str(e)}")
        except (OSError, ValueError) as e:
            raise ExportError(f"Failed to export to CSV: {str(e)}")

    def export(
        self,
        transactions: List[Transaction],
        output_path: Optional[str] = None,
        filename: Optional[str] = None,
        summary_data: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        export_format: Optional[str] = None
    ) -> str:
        """Export in the requested or configured format.

        Raises:
            ExportError: If the format is unsupported or the export fails.
        """
        export_format = export_format or self.settings.export_format
        try:
            validate_export_format(export_format)
        except ValidationError as e:
            raise ExportError(str(e))

        if export_format == "csv":
            return self.export_csv(transactions, output_path, filename)
        return self.export_excel(transactions, output_path, filename, summary_data, metadata)
