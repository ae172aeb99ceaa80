"""Summary calculation for a reconciliation run."""

from collections import defaultdict
from typing import Any, Dict, List, Optional

from trade_recon.reconciler.models import RowOutcome, SkipReason, Transaction, TransactionType
from trade_recon.reconciler.normalizer import parse_date
from trade_recon.utils.logger import get_logger


class SummaryCalculationError(Exception):
    """Custom exception for summary calculation errors."""
    pass


class ReconciliationSummarizer:
    """Builds run-level figures from the per-row outcomes of a ledger."""

    def __init__(self) -> None:
        """Initialize reconciliation summarizer."""
        self.logger = get_logger(__name__)

    def count_skips(self, outcomes: List[RowOutcome]) -> Dict[str, int]:
        """Count skipped rows per skip reason, including zero counts."""
        counts = {reason.value: 0 for reason in SkipReason}
        for outcome in outcomes:
            if outcome.skip_reason is not None:
                counts[outcome.skip_reason.value] += 1
        return counts

    def count_by_type(self, transactions: List[Transaction]) -> Dict[str, int]:
        """Count transactions per trade type."""
        counts = {trans_type.value: 0 for trans_type in TransactionType}
        for transaction in transactions:
            if transaction.transaction_type is not None:
                counts[transaction.transaction_type.value] += 1
        return counts

    def calculate_currency_totals(self, transactions: List[Transaction]) -> Dict[str, Dict[str, Any]]:
        """Calculate gross amount and commission per currency.

        Args:
            transactions: Reconciled transactions.

        Returns:
            Dictionary keyed by currency code.
        """
        totals: Dict[str, Dict[str, Any]] = defaultdict(
            lambda: {"transaction_count": 0, "gross_amount": 0.0, "total_commission": 0.0}
        )

        for transaction in transactions:
            entry = totals[transaction.currency.upper()]
            entry["transaction_count"] += 1
            if transaction.transaction_amount is not None:
                entry["gross_amount"] += transaction.transaction_amount
            if transaction.commission is not None:
                entry["total_commission"] += transaction.commission

        return dict(sorted(totals.items()))

    def calculate_security_positions(self, transactions: List[Transaction]) -> Dict[str, float]:
        """Net signed quantity per security."""
        positions: Dict[str, float] = defaultdict(float)
        for transaction in transactions:
            if transaction.quantity is not None:
                positions[transaction.security_name] += transaction.quantity
        return dict(sorted(positions.items()))

    def get_posting_period(self, transactions: List[Transaction]) -> Dict[str, Optional[str]]:
        """First and last resolved GL posting dates."""
        dates = []
        for transaction in transactions:
            parsed = parse_date(transaction.gl_posting_date)
            if parsed is not None:
                dates.append((parsed, transaction.gl_posting_date))

        if not dates:
            return {"start_date": None, "end_date": None}

        dates.sort()
        return {"start_date": dates[0][1], "end_date": dates[-1][1]}

    def generate_summary(self, outcomes: List[RowOutcome]) -> Dict[str, Any]:
        """Generate the summary of one reconciliation run.

        Args:
            outcomes: Row outcomes as returned by ``TransactionAssembler.assemble``.

        Returns:
            Dictionary with row counts, skip reasons, totals and positions.

        Raises:
            SummaryCalculationError: If the outcomes cannot be summarized.
        """
        try:
            transactions = [outcome.transaction for outcome in outcomes if outcome.emitted]

            summary = {
                "total_rows": len(outcomes),
                "emitted": len(transactions),
                "skipped": self.count_skips(outcomes),
                "by_type": self.count_by_type(transactions),
                "unresolved_settlement": sum(1 for t in transactions if not t.settlement_date),
                "currency_totals": self.calculate_currency_totals(transactions),
                "security_positions": self.calculate_security_positions(transactions),
                "posting_period": self.get_posting_period(transactions),
            }

            self.logger.info(
                f"Summarized {summary['emitted']} of {summary['total_rows']} rows "
                f"across {len(summary['currency_totals'])} currencies"
            )
            return summary

        except (AttributeError, TypeError) as e:
            raise SummaryCalculationError(f"Failed to summarize reconciliation: {str(e)}")
