"""Report output for reconciled transactions."""

from trade_recon.excel_generator.converter import ExportError, TransactionExporter
from trade_recon.excel_generator.summarizer import ReconciliationSummarizer, SummaryCalculationError

__all__ = [
    "ExportError",
    "ReconciliationSummarizer",
    "SummaryCalculationError",
    "TransactionExporter",
]
