"""Settlement date resolution by chasing reference codes through a ledger."""

from typing import Dict, List, Optional, Pattern, Sequence

from trade_recon.config.settings import DEFAULT_RULES, ReconciliationRules
from trade_recon.reconciler.models import RawRow, coerce_ledger
from trade_recon.reconciler.normalizer import standardize_date
from trade_recon.utils.logger import get_logger

_UNSET = object()


class SettlementResolver:
    """Finds the settlement date of trade rows within one ledger.

    Sales (TSF) settle on the first payment row (PY) that names the trade's
    reference code. Purchases (TPF) settle through a two-step chase: the
    first receipt row (RC) yields an intermediate code, and the first
    withdrawal row (WC) naming that code carries the date.

    The ledger is indexed once by settlement prefix. Each index keeps rows in
    ledger order, so the first match is the same row a full scan would find.
    """

    def __init__(self, rows: Sequence[RawRow], rules: ReconciliationRules = DEFAULT_RULES) -> None:
        """Index a ledger for settlement lookups.

        Args:
            rows: The full ledger, in statement order.
            rules: Prefixes and patterns of the chase.
        """
        self.logger = get_logger(__name__)
        self.rules = rules
        self.rc_pattern = rules.compile_rc_code()
        self.index = self._build_index(rows)
        self._rc_code = _UNSET
        self._cache: Dict[tuple, Optional[str]] = {}

    def _build_index(self, rows: Sequence[RawRow]) -> Dict[str, List[RawRow]]:
        index: Dict[str, List[RawRow]] = {prefix: [] for prefix in self.rules.settlement_prefixes}
        for row in rows:
            reference = row.reference or ""
            for prefix in index:
                if reference.startswith(prefix):
                    index[prefix].append(row)
        return index

    def resolve(self, ref_code: str, trans_type: Optional[str]) -> Optional[str]:
        """Resolve the settlement date of a trade.

        Args:
            ref_code: Reference code of the trade row.
            trans_type: ``TSF`` or ``TPF`` (any other value resolves to None).

        Returns:
            Normalized settlement date, or None if the chase fails.
        """
        key = (ref_code, trans_type)
        if key not in self._cache:
            if trans_type == self.rules.sale_prefix:
                self._cache[key] = self._resolve_sale(ref_code)
            elif trans_type == self.rules.purchase_prefix:
                self._cache[key] = self._resolve_purchase()
            else:
                self._cache[key] = None
        return self._cache[key]

    def _resolve_sale(self, ref_code: str) -> Optional[str]:
        pattern = self.rules.compile_py_settlement(ref_code)
        row = self._first_confirming_row(self.rules.payment_prefix, pattern)
        if row is None:
            self.logger.debug(f"No payment row settles {ref_code}")
            return None
        return standardize_date(row.date)

    def _resolve_purchase(self) -> Optional[str]:
        rc_code = self.receipt_code()
        if rc_code is None:
            return None

        pattern = self.rules.compile_wc_settlement(rc_code)
        row = self._first_confirming_row(self.rules.withdrawal_prefix, pattern)
        if row is None:
            self.logger.debug(f"No withdrawal row settles receipt code {rc_code}")
            return None
        return standardize_date(row.date)

    def receipt_code(self) -> Optional[str]:
        """Return the code named by the first matching receipt row.

        Later receipt rows are ignored even when they name other codes.
        """
        if self._rc_code is _UNSET:
            self._rc_code = None
            for row in self.index[self.rules.receipt_prefix]:
                match = self.rc_pattern.search(row.description or "")
                if match:
                    self._rc_code = match.group(1)
                    break
        return self._rc_code

    def _first_confirming_row(self, prefix: str, pattern: Pattern) -> Optional[RawRow]:
        for row in self.index[prefix]:
            if pattern.search(row.description or "") and row.balance_in_trust is not None:
                return row
        return None


def find_settlement_date(
    rows: Sequence[RawRow],
    ref_code: str,
    trans_type: Optional[str],
    rules: ReconciliationRules = DEFAULT_RULES
) -> Optional[str]:
    """Find the settlement date of one trade by searching the whole ledger.

    Args:
        rows: Full ledger of raw rows.
        ref_code: Reference code of the trade row.
        trans_type: ``TSF`` or ``TPF``.
        rules: Prefixes and patterns of the chase.

    Returns:
        Normalized settlement date, or None.
    """
    if trans_type not in rules.trade_prefixes:
        return None
    return SettlementResolver(coerce_ledger(rows), rules).resolve(ref_code, trans_type)
