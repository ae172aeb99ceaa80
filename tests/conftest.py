"""Pytest configuration and fixtures for the Statement Trade Reconciler."""

import json
import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch

import pandas as pd
import pytest

from trade_recon.config.settings import Settings


@pytest.fixture
def temp_dir():
    """Create a temporary directory for test files."""
    temp_path = tempfile.mkdtemp()
    yield Path(temp_path)
    shutil.rmtree(temp_path, ignore_errors=True)


@pytest.fixture
def sample_settings(temp_dir):
    """Create sample settings writing into the temporary directory."""
    return Settings(
        output_dir=str(temp_dir / "reports"),
        logs_dir=str(temp_dir / "logs"),
        export_format="xlsx",
        log_level="INFO",
    )


@pytest.fixture
def sample_ledger():
    """One purchase, one sale, their settlement chains and a dividend row."""
    return [
        {
            "Date": "2025-03-10",
            "Reference": "TPF0001",
            "Description": "Bought 100 APPLE INC @ USD 150.25",
            "Debit": "15,025.00",
            "Balance in Trust": "-15,100.00",
        },
        {
            "Date": "2025-03-11",
            "Reference": "TSF0042",
            "Description": "Sold 50 MICROSOFT CORP @ USD 400.00",
            "Credit": "20,000.00",
            "Balance in Trust": "19,950.00",
        },
        {
            "Date": "2025-03-12",
            "Reference": "RC0007",
            "Description": "TRUSTTFR_TRTTFR (RC7788)",
            "Credit": "15,100.00",
        },
        {
            "Date": "13-Mar-25",
            "Reference": "WC0003",
            "Description": "Withdrawal from TRUST account (RC7788)",
            "Debit": "15,100.00",
            "Balance in Trust": "0.00",
        },
        {
            "Date": "2025-03-14",
            "Reference": "PY0100",
            "Description": "Amount paid TFR to TRUST (TSF0042)",
            "Debit": "19,950.00",
            "Balance in Trust": "0.00",
        },
        {
            "Date": "2025-03-15",
            "Reference": "DV0001",
            "Description": "Dividend APPLE INC",
            "Credit": "25.00",
            "Balance": "25.00",
        },
    ]


@pytest.fixture
def ledger_json_file(temp_dir, sample_ledger):
    """Write the sample ledger as an extraction payload."""
    path = temp_dir / "statement_march.json"
    path.write_text(json.dumps({"rows": sample_ledger}), encoding="utf-8")
    return str(path)


@pytest.fixture
def ledger_csv_file(temp_dir, sample_ledger):
    """Write the sample ledger as a CSV with statement column headers."""
    path = temp_dir / "statement_march.csv"
    columns = ["Date", "Reference", "Description", "Debit", "Credit", "Balance", "Balance in Trust"]
    pd.DataFrame(sample_ledger, columns=columns).to_csv(path, index=False)
    return str(path)


@pytest.fixture
def sample_environment(temp_dir):
    """Create sample environment variables for testing."""
    env_vars = {
        "OUTPUT_DIR": str(temp_dir / "env_reports"),
        "LOGS_DIR": str(temp_dir / "env_logs"),
        "LOG_LEVEL": "DEBUG",
        "EXPORT_FORMAT": "csv",
        "INCLUDE_SUMMARY": "False",
        "MAX_FILE_SIZE_MB": "5",
    }
    with patch.dict(os.environ, env_vars):
        yield env_vars
