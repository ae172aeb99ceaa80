"""Data classes for ledger rows and reconciled transactions."""

import math
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from trade_recon.utils.validators import ValidationError, validate_ledger

# Statement column label -> RawRow field name
ROW_FIELD_LABELS = {
    "Date": "date",
    "Reference": "reference",
    "Description": "description",
    "Debit": "debit",
    "Credit": "credit",
    "Balance": "balance",
    "Balance in Trust": "balance_in_trust",
}

# Transaction field name -> export column label, in export order
TRANSACTION_COLUMNS = {
    "reference_code": "Reference - Code",
    "gl_posting_date": "GL Posting Date",
    "date": "Date",
    "settlement_date": "Settlement Date",
    "security_name": "Security Name",
    "currency": "Currency",
    "quantity": "Quantity",
    "price": "Price",
    "transaction_amount": "Transaction Amount",
    "commission": "Commission",
}


class TransactionType(Enum):
    """Trade classification derived from the reference prefix."""
    TPF = "TPF"
    TSF = "TSF"


class SkipReason(Enum):
    """Why a ledger row produced no transaction."""
    UNCLASSIFIED_REFERENCE = "unclassified_reference"
    UNPARSEABLE_DESCRIPTION = "unparseable_description"


def _cell_to_str(value: Any) -> Optional[str]:
    # A key given as null is still present; only NaN (a blank table cell) is absent
    if value is None:
        return ""
    if isinstance(value, float) and math.isnan(value):
        return None
    if isinstance(value, str):
        return value
    return str(value)


@dataclass(frozen=True)
class RawRow:
    """One ledger entry as handed over by the extraction step.

    Every field is optional; ``None`` means the column was absent for the
    row, while an empty string counts as present. ``from_dict`` keeps keys
    whose value is null as present (``""``).
    """

    date: Optional[str] = None
    reference: Optional[str] = None
    description: Optional[str] = None
    debit: Optional[str] = None
    credit: Optional[str] = None
    balance: Optional[str] = None
    balance_in_trust: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RawRow":
        """Build a row from statement column labels or field names.

        Unknown keys are ignored.
        """
        names = {f.name for f in fields(cls)}
        values: Dict[str, Optional[str]] = {}
        for key, value in data.items():
            name = ROW_FIELD_LABELS.get(key, key)
            if name in names:
                values[name] = _cell_to_str(value)
        return cls(**values)

    def to_dict(self) -> Dict[str, Optional[str]]:
        """Convert the row back to statement column labels."""
        return {label: getattr(self, name) for label, name in ROW_FIELD_LABELS.items()}


@dataclass(frozen=True)
class Transaction:
    """A reconciled trade record."""

    reference_code: str
    gl_posting_date: str
    date: str
    settlement_date: str
    security_name: str
    currency: str
    quantity: Optional[float]
    price: Optional[float]
    transaction_amount: Optional[float]
    commission: Optional[float]
    transaction_type: Optional[TransactionType] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert transaction to dictionary keyed by export column labels.

        Returns:
            Dictionary representation of transaction.
        """
        return {label: getattr(self, name) for name, label in TRANSACTION_COLUMNS.items()}


@dataclass(frozen=True)
class RowOutcome:
    """Result of assembling one ledger row: a transaction or a skip reason."""

    row_index: int
    row: RawRow
    transaction: Optional[Transaction] = None
    skip_reason: Optional[SkipReason] = None

    def __post_init__(self) -> None:
        if (self.transaction is None) == (self.skip_reason is None):
            raise ValueError("RowOutcome needs exactly one of transaction or skip_reason")

    @property
    def emitted(self) -> bool:
        return self.transaction is not None


def coerce_ledger(rows: Any) -> List[RawRow]:
    """Validate a ledger and convert mapping rows to RawRow.

    Args:
        rows: Sequence of RawRow objects or row mappings.

    Returns:
        List of RawRow in ledger order.

    Raises:
        ValidationError: If the ledger is not a sequence or holds non-row items.
    """
    validate_ledger(rows)

    ledger: List[RawRow] = []
    for index, row in enumerate(rows):
        if isinstance(row, RawRow):
            ledger.append(row)
        elif isinstance(row, Mapping):
            ledger.append(RawRow.from_dict(row))
        else:
            raise ValidationError(
                f"Ledger row {index} must be a RawRow or mapping, got {type(row).__name__}"
            )
    return ledger
