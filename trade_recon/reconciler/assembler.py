"""Assembly of reconciled trade transactions from a raw row ledger."""

from typing import Any, List, Optional, Tuple

from trade_recon.config.settings import DEFAULT_RULES, ReconciliationRules
from trade_recon.reconciler.description import DescriptionParser
from trade_recon.reconciler.models import (
    RawRow,
    RowOutcome,
    SkipReason,
    Transaction,
    TransactionType,
    coerce_ledger,
)
from trade_recon.reconciler.normalizer import standardize_date, standardize_number
from trade_recon.reconciler.settlement import SettlementResolver
from trade_recon.utils.logger import get_logger


class TransactionAssembler:
    """Turns a ledger of raw statement rows into reconciled transactions."""

    def __init__(self, rules: ReconciliationRules = DEFAULT_RULES) -> None:
        """Initialize the assembler.

        Args:
            rules: Prefixes and patterns used for classification, parsing and
                settlement lookups.
        """
        self.logger = get_logger(__name__)
        self.rules = rules
        self.parser = DescriptionParser(rules)

    def classify(self, reference: Optional[str]) -> Optional[Tuple[str, TransactionType]]:
        """Classify a row by reference prefix.

        Returns:
            ``(prefix, TransactionType)`` for trade rows, otherwise None.
        """
        if not reference:
            return None
        if reference.startswith(self.rules.purchase_prefix):
            return self.rules.purchase_prefix, TransactionType.TPF
        if reference.startswith(self.rules.sale_prefix):
            return self.rules.sale_prefix, TransactionType.TSF
        return None

    def assemble_row(
        self,
        row_index: int,
        row: RawRow,
        resolver: SettlementResolver
    ) -> RowOutcome:
        """Assemble a single row against the ledger indexed by ``resolver``."""
        classified = self.classify(row.reference)
        if classified is None:
            return RowOutcome(row_index, row, skip_reason=SkipReason.UNCLASSIFIED_REFERENCE)
        prefix, trans_type = classified

        security, currency, quantity, price = self.parser.parse(row.description)
        if not security or not currency or quantity is None or price is None:
            return RowOutcome(row_index, row, skip_reason=SkipReason.UNPARSEABLE_DESCRIPTION)

        gl_date = standardize_date(row.date) or ""
        settlement_date = resolver.resolve(row.reference, prefix) or ""

        # Amount uses the quantity as written, before the sale sign flip
        transaction_amount = quantity * price

        balance_in_trust = standardize_number(row.balance_in_trust)
        commission = None
        if balance_in_trust is not None:
            if trans_type is TransactionType.TPF:
                commission = abs(balance_in_trust + transaction_amount)
            else:
                commission = abs(balance_in_trust - transaction_amount)

        transaction = Transaction(
            reference_code=row.reference,
            gl_posting_date=gl_date,
            date=gl_date,
            settlement_date=settlement_date,
            security_name=security,
            currency=currency,
            quantity=-quantity if trans_type is TransactionType.TSF else quantity,
            price=price,
            transaction_amount=transaction_amount,
            commission=commission,
            transaction_type=trans_type,
        )
        return RowOutcome(row_index, row, transaction=transaction)

    def assemble(self, rows: Any) -> List[RowOutcome]:
        """Assemble every row of a ledger.

        Args:
            rows: Sequence of RawRow objects or row mappings.

        Returns:
            One RowOutcome per row, in ledger order.

        Raises:
            ValidationError: If ``rows`` is not a sequence of rows.
        """
        ledger = coerce_ledger(rows)
        resolver = SettlementResolver(ledger, self.rules)

        outcomes = []
        for row_index, row in enumerate(ledger):
            outcome = self.assemble_row(row_index, row, resolver)
            if not outcome.emitted:
                self.logger.debug(
                    f"Skipped row {row_index} ({row.reference!r}): {outcome.skip_reason.value}"
                )
            outcomes.append(outcome)

        emitted = [o.transaction for o in outcomes if o.emitted]
        unresolved = sum(1 for t in emitted if not t.settlement_date)
        self.logger.info(
            f"Assembled {len(emitted)} transactions from {len(ledger)} rows "
            f"({len(ledger) - len(emitted)} skipped, {unresolved} without settlement date)"
        )
        return outcomes

    def process(self, rows: Any) -> List[Transaction]:
        """Return only the emitted transactions, in ledger order."""
        return [outcome.transaction for outcome in self.assemble(rows) if outcome.emitted]


_default_assembler = TransactionAssembler()


def process_transactions(rows: Any) -> List[Transaction]:
    """Reconcile a ledger with the default rules.

    Rows that are not trades, or whose description cannot be parsed, are
    left out. A trade whose settlement chase fails is still emitted with an
    empty settlement date.
    """
    return _default_assembler.process(rows)
