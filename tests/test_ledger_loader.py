"""Tests for ledger file loading."""

import json

import pandas as pd
import pytest

from trade_recon.ledger.loader import LedgerLoader, LedgerLoadError
from trade_recon.reconciler.models import RawRow


class TestLedgerLoader:
    """Test cases for LedgerLoader."""

    def test_load_json_payload(self, ledger_json_file, sample_ledger):
        """Test a JSON object wrapping the row list."""
        rows = LedgerLoader().load(ledger_json_file)

        assert len(rows) == len(sample_ledger)
        assert all(isinstance(row, RawRow) for row in rows)
        assert rows[0].reference == "TPF0001"
        assert rows[0].balance_in_trust == "-15,100.00"
        assert rows[2].balance_in_trust is None

    def test_load_json_list(self, temp_dir):
        """Test a bare JSON list."""
        path = temp_dir / "rows.json"
        path.write_text(json.dumps([{"Reference": "PY1", "Balance in Trust": ""}]))

        (row,) = LedgerLoader().load(str(path))
        assert row.reference == "PY1"
        assert row.balance_in_trust == ""

    def test_load_json_null_is_present(self, temp_dir):
        """Test that a JSON null keeps the field present."""
        path = temp_dir / "rows.json"
        path.write_text(json.dumps([{"Reference": "PY1", "Balance in Trust": None}]))

        (row,) = LedgerLoader().load(str(path))
        assert row.balance_in_trust == ""
        assert row.debit is None

    @pytest.mark.parametrize("key", ["transactions", "data"])
    def test_load_json_other_keys(self, temp_dir, key):
        """Test the other accepted payload keys."""
        path = temp_dir / "rows.json"
        path.write_text(json.dumps({key: [{"Reference": "TPF1"}]}))

        assert LedgerLoader().load(str(path))[0].reference == "TPF1"

    def test_load_csv(self, ledger_csv_file, sample_ledger):
        """Test a CSV ledger with empty cells as absent fields."""
        rows = LedgerLoader().load(ledger_csv_file)

        assert len(rows) == len(sample_ledger)
        assert rows[0].debit == "15,025.00"
        assert rows[0].credit is None
        assert rows[3].date == "13-Mar-25"
        assert rows[2].balance_in_trust is None

    def test_csv_header_whitespace(self, temp_dir):
        """Test that padded headers still map to fields."""
        path = temp_dir / "rows.csv"
        path.write_text(" Reference , Balance in Trust \nWC1,0.00\n")

        (row,) = LedgerLoader().load(str(path))
        assert row.reference == "WC1"
        assert row.balance_in_trust == "0.00"

    def test_dataframe_to_rows(self):
        """Test conversion of an in-memory DataFrame."""
        df = pd.DataFrame([{"Reference": "TSF1", "Description": None}])
        (row,) = LedgerLoader().dataframe_to_rows(df)

        assert row.reference == "TSF1"
        assert row.description is None

    def test_missing_file(self, temp_dir):
        """Test a missing ledger file."""
        with pytest.raises(LedgerLoadError, match="Validation error"):
            LedgerLoader().load(str(temp_dir / "missing.json"))

    def test_unsupported_extension(self, temp_dir):
        """Test a file type outside the supported formats."""
        path = temp_dir / "statement.pdf"
        path.write_bytes(b"%PDF-1.4")

        with pytest.raises(LedgerLoadError):
            LedgerLoader().load(str(path))

    def test_file_too_large(self, ledger_json_file):
        """Test the size limit."""
        with pytest.raises(LedgerLoadError):
            LedgerLoader(max_file_size_mb=0).load(ledger_json_file)

    def test_invalid_json(self, temp_dir):
        """Test malformed JSON."""
        path = temp_dir / "rows.json"
        path.write_text("{not json")

        with pytest.raises(LedgerLoadError, match="Failed to read JSON ledger"):
            LedgerLoader().load(str(path))

    @pytest.mark.parametrize("payload", [{"rows": "x"}, {"pages": []}, "rows", [1, 2]])
    def test_bad_payload_shapes(self, payload):
        """Test payloads without a usable row list."""
        with pytest.raises(LedgerLoadError):
            LedgerLoader().rows_from_payload(payload)
