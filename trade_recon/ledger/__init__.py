"""Ledger input files."""

from trade_recon.ledger.loader import LedgerLoader, LedgerLoadError

__all__ = ["LedgerLoader", "LedgerLoadError"]
