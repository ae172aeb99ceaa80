"""Tests for settlement date resolution."""

import pytest

from trade_recon.reconciler.models import RawRow
from trade_recon.reconciler.settlement import SettlementResolver, find_settlement_date


def make_row(reference, description, date="2025-03-20", balance_in_trust="0.00"):
    return RawRow(
        date=date,
        reference=reference,
        description=description,
        balance_in_trust=balance_in_trust,
    )


class TestSaleSettlement:
    """Test cases for TSF settlement through payment rows."""

    def test_payment_row_after_trade(self):
        """Test the basic sale chase."""
        rows = [
            make_row("TSF0042", "Sold 50 APPLE INC @ USD 10", date="2025-03-10"),
            make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)", date="2025-03-12"),
        ]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/12/2025"

    def test_payment_row_before_trade(self):
        """Test that row order does not matter."""
        rows = [
            make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)", date="12-Mar-25"),
            make_row("TSF0042", "Sold 50 APPLE INC @ USD 10", date="2025-03-10"),
        ]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/12/2025"

    def test_payment_without_balance_in_trust_is_ignored(self):
        """Test that the confirming row must carry a balance in trust."""
        rows = [
            make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)", date="2025-03-11", balance_in_trust=None),
            make_row("PY0002", "Amount paid TFR to TRUST (TSF0042)", date="2025-03-12"),
        ]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/12/2025"

    def test_empty_balance_in_trust_counts_as_present(self):
        """Test that an empty string is a present value."""
        rows = [make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)", balance_in_trust="")]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/20/2025"

    def test_null_balance_in_trust_counts_as_present(self):
        """Test a mapping row whose balance in trust is given as null."""
        rows = [
            {"Date": "2025-03-10", "Reference": "TSF0042", "Description": "Sold 50 APPLE INC @ USD 10"},
            {
                "Date": "2025-03-12",
                "Reference": "PY1",
                "Description": "Amount paid TFR to TRUST (TSF0042)",
                "Balance in Trust": None,
            },
        ]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/12/2025"

    def test_missing_balance_in_trust_key_is_absent(self):
        """Test a mapping row without the balance in trust column."""
        rows = [{"Date": "2025-03-12", "Reference": "PY1", "Description": "Amount paid TFR to TRUST (TSF0042)"}]
        assert find_settlement_date(rows, "TSF0042", "TSF") is None

    def test_first_matching_payment_wins(self):
        """Test first-match semantics in ledger order."""
        rows = [
            make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)", date="2025-03-12"),
            make_row("PY0002", "Amount paid TFR to TRUST (TSF0042)", date="2025-03-13"),
        ]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/12/2025"

    def test_payment_for_other_reference(self):
        """Test that another trade's payment does not settle this one."""
        rows = [make_row("PY0001", "Amount paid TFR to TRUST (TSF0043)")]
        assert find_settlement_date(rows, "TSF0042", "TSF") is None

    def test_requires_payment_prefix(self):
        """Test that only PY rows confirm a sale."""
        rows = [
            make_row("WC0001", "Amount paid TFR to TRUST (TSF0042)"),
            make_row("XPY001", "Amount paid TFR to TRUST (TSF0042)"),
        ]
        assert find_settlement_date(rows, "TSF0042", "TSF") is None

    def test_case_insensitive_and_spacing(self):
        """Test case and whitespace tolerance in the description."""
        rows = [make_row("PY0001", "amount  PAID tfr to trust(TSF0042)")]
        assert find_settlement_date(rows, "TSF0042", "TSF") == "3/20/2025"

    def test_reference_code_is_escaped(self):
        """Test that regex metacharacters in codes are matched literally."""
        rows = [
            make_row("PY0001", "Amount paid TFR to TRUST (TSFX42)", date="2025-03-11"),
            make_row("PY0002", "Amount paid TFR to TRUST (TSF.42+)", date="2025-03-12"),
        ]
        assert find_settlement_date(rows, "TSF.42+", "TSF") == "3/12/2025"
        assert find_settlement_date(rows, "TSF(42", "TSF") is None

    def test_unparseable_payment_date(self):
        """Test that a matching row with a bad date resolves to None."""
        rows = [make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)", date="soon")]
        assert find_settlement_date(rows, "TSF0042", "TSF") is None


class TestPurchaseSettlement:
    """Test cases for the TPF receipt/withdrawal chase."""

    def test_receipt_then_withdrawal(self):
        """Test the basic purchase chase."""
        rows = [
            make_row("TPF0001", "Bought 10 APPLE INC @ USD 10", date="2025-03-10"),
            make_row("RC0001", "TRUSTTFR_TRTTFR (RC7788)", balance_in_trust=None),
            make_row("WC0001", "Withdrawal from TRUST account (RC7788)", date="2025-03-13"),
        ]
        assert find_settlement_date(rows, "TPF0001", "TPF") == "3/13/2025"

    def test_first_receipt_wins(self):
        """Test that later receipt rows are ignored."""
        rows = [
            make_row("RC0001", "TRUSTTFR_TRTTFR (AAA111)"),
            make_row("RC0002", "TRUSTTFR_TRTTFR (BBB222)"),
            make_row("WC0001", "Withdrawal from TRUST (BBB222)", date="2025-03-14"),
            make_row("WC0002", "Withdrawal from TRUST (AAA111)", date="2025-03-15"),
        ]
        assert find_settlement_date(rows, "TPF0001", "TPF") == "3/15/2025"

    def test_receipt_without_code_is_skipped(self):
        """Test that non-matching receipt rows do not stop the scan."""
        rows = [
            make_row("RC0001", "Receipt from client"),
            make_row("RC0002", "trusttfr_trttfr ( ab12 )"),
            make_row("WC0001", "Withdrawal from TRUST (ab12)", date="2025-03-16"),
        ]
        assert find_settlement_date(rows, "TPF0001", "TPF") == "3/16/2025"

    def test_no_receipt_row(self):
        """Test that a missing receipt code ends the chase."""
        rows = [make_row("WC0001", "Withdrawal from TRUST (RC7788)")]
        assert find_settlement_date(rows, "TPF0001", "TPF") is None

    def test_no_withdrawal_row(self):
        """Test a receipt code that no withdrawal names."""
        rows = [
            make_row("RC0001", "TRUSTTFR_TRTTFR (RC7788)"),
            make_row("WC0001", "Withdrawal from TRUST (RC9999)"),
        ]
        assert find_settlement_date(rows, "TPF0001", "TPF") is None

    def test_withdrawal_without_balance_in_trust(self):
        """Test that the withdrawal must carry a balance in trust."""
        rows = [
            make_row("RC0001", "TRUSTTFR_TRTTFR (RC7788)"),
            make_row("WC0001", "Withdrawal from TRUST (RC7788)", balance_in_trust=None),
        ]
        assert find_settlement_date(rows, "TPF0001", "TPF") is None


class TestSettlementResolver:
    """Test cases for the indexed resolver."""

    @pytest.mark.parametrize("trans_type", ["", "DV", "tsf", None])
    def test_unknown_type(self, trans_type):
        """Test that other transaction types resolve to None."""
        rows = [make_row("PY0001", "Amount paid TFR to TRUST (TSF0042)")]
        assert find_settlement_date(rows, "TSF0042", trans_type) is None

    def test_index_keeps_ledger_order(self):
        """Test that each prefix index preserves statement order."""
        rows = [
            make_row("WC0002", "x"),
            make_row("PY0001", "y"),
            make_row("WC0001", "z"),
            make_row("TPF0001", "t"),
            RawRow(reference=None),
        ]
        resolver = SettlementResolver(rows)

        assert [r.reference for r in resolver.index["WC"]] == ["WC0002", "WC0001"]
        assert [r.reference for r in resolver.index["PY"]] == ["PY0001"]
        assert resolver.index["RC"] == []

    def test_receipt_code_lookup(self):
        """Test the intermediate receipt code."""
        resolver = SettlementResolver([make_row("RC0001", "TRUSTTFR_TRTTFR (RC7788)")])
        assert resolver.receipt_code() == "RC7788"
        assert SettlementResolver([]).receipt_code() is None

    def test_repeated_lookups_agree(self, sample_ledger):
        """Test that cached results match fresh lookups."""
        rows = [RawRow.from_dict(row) for row in sample_ledger]
        resolver = SettlementResolver(rows)

        assert resolver.resolve("TSF0042", "TSF") == "3/14/2025"
        assert resolver.resolve("TSF0042", "TSF") == find_settlement_date(rows, "TSF0042", "TSF")
        assert resolver.resolve("TPF0001", "TPF") == "3/13/2025"

    def test_accepts_row_mappings(self, sample_ledger):
        """Test the function with mapping rows."""
        assert find_settlement_date(sample_ledger, "TSF0042", "TSF") == "3/14/2025"
