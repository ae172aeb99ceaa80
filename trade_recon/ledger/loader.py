"""Loading of extracted statement rows from hand-off files."""

import json
import os
from typing import Any, Dict, List, Optional

import pandas as pd

from trade_recon.config.settings import MAX_FILE_SIZE_MB, SUPPORTED_LEDGER_FORMATS
from trade_recon.reconciler.models import RawRow
from trade_recon.utils.logger import get_logger
from trade_recon.utils.validators import ValidationError, validate_ledger_file

# Keys under which an extraction payload may wrap its row list
PAYLOAD_KEYS = ["rows", "transactions", "data"]


class LedgerLoadError(Exception):
    """Custom exception for ledger loading errors."""
    pass


class LedgerLoader:
    """Reads a ledger of raw rows from a JSON or CSV file."""

    def __init__(
        self,
        max_file_size_mb: int = MAX_FILE_SIZE_MB,
        supported_formats: Optional[List[str]] = None
    ) -> None:
        """Initialize the loader.

        Args:
            max_file_size_mb: Largest accepted ledger file.
            supported_formats: Accepted file extensions.
        """
        self.logger = get_logger(__name__)
        self.max_file_size_mb = max_file_size_mb
        self.supported_formats = supported_formats or SUPPORTED_LEDGER_FORMATS.copy()

    def load(self, file_path: str) -> List[RawRow]:
        """Load a ledger file, dispatching on its extension.

        Args:
            file_path: Path to a ``.json`` or ``.csv`` ledger.

        Returns:
            Ledger rows in file order.

        Raises:
            LedgerLoadError: If the file is invalid or cannot be parsed.
        """
        try:
            validate_ledger_file(file_path, self.max_file_size_mb, self.supported_formats)
        except ValidationError as e:
            raise LedgerLoadError(f"Validation error: {str(e)}")

        _, ext = os.path.splitext(file_path.lower())
        if ext == ".csv":
            rows = self.load_csv(file_path)
        else:
            rows = self.load_json(file_path)

        self.logger.info(f"Loaded {len(rows)} ledger rows from {file_path}")
        return rows

    def load_json(self, file_path: str) -> List[RawRow]:
        """Load rows from a JSON list, or an object wrapping one.

        Raises:
            LedgerLoadError: If the payload has no row list.
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                payload = json.load(f)
        except (OSError, ValueError) as e:
            raise LedgerLoadError(f"Failed to read JSON ledger {file_path}: {str(e)}")

        return self.rows_from_payload(payload)

    def rows_from_payload(self, payload: Any) -> List[RawRow]:
        """Convert a decoded extraction payload to ledger rows.

        Raises:
            LedgerLoadError: If the payload has no row list or a row is not an object.
        """
        if isinstance(payload, dict):
            for key in PAYLOAD_KEYS:
                if isinstance(payload.get(key), list):
                    payload = payload[key]
                    break
            else:
                raise LedgerLoadError(
                    f"Ledger object has no row list under any of: {', '.join(PAYLOAD_KEYS)}"
                )

        if not isinstance(payload, list):
            raise LedgerLoadError(f"Ledger must be a list of rows, got {type(payload).__name__}")

        rows = []
        for idx, item in enumerate(payload):
            if not isinstance(item, dict):
                raise LedgerLoadError(f"Ledger row {idx} is not an object")
            rows.append(RawRow.from_dict(item))
        return rows

    def load_csv(self, file_path: str) -> List[RawRow]:
        """Load rows from a CSV file with statement column headers.

        Empty cells are treated as absent fields.

        Raises:
            LedgerLoadError: If the CSV cannot be parsed.
        """
        try:
            df = pd.read_csv(file_path, dtype=str, keep_default_na=False, na_values=[""])
        except (OSError, ValueError, pd.errors.ParserError) as e:
            raise LedgerLoadError(f"Failed to read CSV ledger {file_path}: {str(e)}")

        df.columns = [str(column).strip() for column in df.columns]
        return self.dataframe_to_rows(df)

    def dataframe_to_rows(self, df: pd.DataFrame) -> List[RawRow]:
        """Convert a DataFrame of statement columns to ledger rows."""
        records: List[Dict[str, Any]] = df.to_dict(orient="records")
        # Blank cells are absent fields, not present-but-empty ones
        return [
            RawRow.from_dict({key: value for key, value in record.items() if not pd.isna(value)})
            for record in records
        ]
