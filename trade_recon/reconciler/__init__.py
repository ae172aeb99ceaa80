"""Reconciliation of raw statement rows into trade transactions."""

from trade_recon.reconciler.assembler import TransactionAssembler, process_transactions
from trade_recon.reconciler.description import DescriptionParser, parse_description
from trade_recon.reconciler.models import (
    RawRow,
    RowOutcome,
    SkipReason,
    Transaction,
    TransactionType,
)
from trade_recon.reconciler.normalizer import standardize_date, standardize_number
from trade_recon.reconciler.settlement import SettlementResolver, find_settlement_date

__all__ = [
    "DescriptionParser",
    "RawRow",
    "RowOutcome",
    "SettlementResolver",
    "SkipReason",
    "Transaction",
    "TransactionAssembler",
    "TransactionType",
    "find_settlement_date",
    "parse_description",
    "process_transactions",
    "standardize_date",
    "standardize_number",
]
