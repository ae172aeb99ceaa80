"""Configuration settings for the statement trade reconciler."""

import os
import json
import re
from typing import Dict, Any, Optional, List, Pattern, Tuple
from dataclasses import dataclass, asdict, field, fields

# File Paths
BASE_DIR = os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__))))
REPORTS_DIR = os.getenv("REPORTS_DIR", os.path.join(BASE_DIR, "reports"))
LOGS_DIR = os.getenv("LOGS_DIR", os.path.join(BASE_DIR, "logs"))

# Ledger input
MAX_FILE_SIZE_MB = int(os.getenv("MAX_FILE_SIZE_MB", "10"))
SUPPORTED_LEDGER_FORMATS = [".json", ".csv"]

# Logging Configuration
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")
LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

# Export Configuration
EXPORT_FORMAT = os.getenv("EXPORT_FORMAT", "xlsx")
SUPPORTED_EXPORT_FORMATS = ["xlsx", "csv"]
INCLUDE_METADATA = os.getenv("INCLUDE_METADATA", "True").lower() == "true"
INCLUDE_SUMMARY = os.getenv("INCLUDE_SUMMARY", "True").lower() == "true"
NUMBER_FORMAT = os.getenv("NUMBER_FORMAT", "#,##0.00")

# Reconciliation patterns, matched ASCII-only. Code placeholders are filled
# with re.escape()d values.
DESCRIPTION_PATTERN = (
    r"(Bought|Sold)\s+([\d,]+)\s+([\w\s&]+?)\s*@\s*([A-Z]{3})\s*([\d,]+\.?\d*)"
)
PY_SETTLEMENT_TEMPLATE = r"Amount\s+paid\s+TFR\s+to\s+TRUST\s*\({code}\)"
RC_CODE_PATTERN = r"TRUSTTFR_TRTTFR\s*\(\s*([A-Z0-9]+)\s*\)"
WC_SETTLEMENT_TEMPLATE = r"Withdrawal\s+from\s+TRUST.*\({code}\)"


@dataclass(frozen=True)
class ReconciliationRules:
    """Reference prefixes and text patterns driving the reconciliation."""

    purchase_prefix: str = "TPF"
    sale_prefix: str = "TSF"
    payment_prefix: str = "PY"
    receipt_prefix: str = "RC"
    withdrawal_prefix: str = "WC"

    description_pattern: str = DESCRIPTION_PATTERN
    py_settlement_template: str = PY_SETTLEMENT_TEMPLATE
    rc_code_pattern: str = RC_CODE_PATTERN
    wc_settlement_template: str = WC_SETTLEMENT_TEMPLATE

    @property
    def trade_prefixes(self) -> Tuple[str, str]:
        """Prefixes that mark trade rows, in classification order."""
        return (self.purchase_prefix, self.sale_prefix)

    @property
    def settlement_prefixes(self) -> Tuple[str, str, str]:
        """Prefixes of the rows searched during a settlement chase."""
        return (self.payment_prefix, self.receipt_prefix, self.withdrawal_prefix)

    def compile_description(self) -> Pattern:
        """Compile the trade description pattern."""
        return re.compile(self.description_pattern, re.IGNORECASE | re.ASCII)

    def compile_rc_code(self) -> Pattern:
        """Compile the pattern extracting the intermediate receipt code."""
        return re.compile(self.rc_code_pattern, re.IGNORECASE | re.ASCII)

    def compile_py_settlement(self, ref_code: str) -> Pattern:
        """Compile the payment-row pattern for a sale reference code."""
        return re.compile(
            self.py_settlement_template.format(code=re.escape(ref_code)),
            re.IGNORECASE | re.ASCII,
        )

    def compile_wc_settlement(self, rc_code: str) -> Pattern:
        """Compile the withdrawal-row pattern for a receipt code."""
        return re.compile(
            self.wc_settlement_template.format(code=re.escape(rc_code)),
            re.IGNORECASE | re.ASCII,
        )


DEFAULT_RULES = ReconciliationRules()


@dataclass
class Settings:
    """Configuration settings class."""

    # Output Configuration
    output_dir: str = REPORTS_DIR
    export_format: str = EXPORT_FORMAT
    include_metadata: bool = INCLUDE_METADATA
    include_summary: bool = INCLUDE_SUMMARY
    number_format: str = NUMBER_FORMAT

    # Logging
    log_level: str = "INFO"
    log_format: str = LOG_FORMAT
    logs_dir: str = LOGS_DIR

    # Ledger input
    max_file_size_mb: int = MAX_FILE_SIZE_MB
    supported_ledger_formats: List[str] = field(default_factory=lambda: SUPPORTED_LEDGER_FORMATS.copy())

    # Reconciliation
    rules: ReconciliationRules = field(default_factory=ReconciliationRules)

    @classmethod
    def from_env(cls) -> "Settings":
        """Create Settings from environment variables."""
        return cls(
            output_dir=os.getenv("OUTPUT_DIR", REPORTS_DIR),
            export_format=os.getenv("EXPORT_FORMAT", "xlsx"),
            include_metadata=os.getenv("INCLUDE_METADATA", "True").lower() == "true",
            include_summary=os.getenv("INCLUDE_SUMMARY", "True").lower() == "true",
            number_format=os.getenv("NUMBER_FORMAT", "#,##0.00"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            log_format=os.getenv("LOG_FORMAT", LOG_FORMAT),
            logs_dir=os.getenv("LOGS_DIR", LOGS_DIR),
            max_file_size_mb=int(os.getenv("MAX_FILE_SIZE_MB", "10")),
            rules=ReconciliationRules(
                purchase_prefix=os.getenv("PURCHASE_PREFIX", "TPF"),
                sale_prefix=os.getenv("SALE_PREFIX", "TSF"),
            ),
        )

    def validate(self) -> bool:
        """Validate settings."""
        return (
            self.export_format in SUPPORTED_EXPORT_FORMATS and
            self.max_file_size_mb > 0 and
            len(self.supported_ledger_formats) > 0 and
            all(self.rules.trade_prefixes) and
            all(self.rules.settlement_prefixes)
        )

    def get_log_level(self) -> str:
        """Get log level as string."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if self.log_level.upper() in valid_levels:
            return self.log_level.upper()
        return "INFO"

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Settings":
        """Create settings from dictionary.

        Raises:
            ValueError: If a key is not a setting or ``rules`` is malformed.
        """
        data = dict(data)
        unknown = sorted(set(data) - {f.name for f in fields(cls)})
        if unknown:
            raise ValueError(f"Unknown settings: {', '.join(unknown)}")

        rules = data.pop("rules", None)
        if isinstance(rules, dict):
            unknown = sorted(set(rules) - {f.name for f in fields(ReconciliationRules)})
            if unknown:
                raise ValueError(f"Unknown reconciliation rules: {', '.join(unknown)}")
            data["rules"] = ReconciliationRules(**rules)
        elif isinstance(rules, ReconciliationRules):
            data["rules"] = rules
        elif rules is not None:
            raise ValueError("Settings 'rules' must be an object")
        return cls(**data)


def load_config_from_file(file_path: str) -> Dict[str, Any]:
    """Load configuration from file."""
    with open(file_path, 'r') as f:
        return json.load(f)


def merge_configs(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """Merge two configuration dictionaries."""
    result = base.copy()
    result.update(override)
    return result


def load_settings(config_file: Optional[str] = None) -> Settings:
    """Build Settings from the environment, overridden by an optional JSON file."""
    settings_obj = Settings.from_env()
    if config_file:
        base = settings_obj.to_dict()
        overrides = load_config_from_file(config_file)
        if not isinstance(overrides, dict):
            raise ValueError(f"Settings file {config_file} must hold a JSON object")
        if isinstance(overrides.get("rules"), dict):
            overrides["rules"] = merge_configs(base["rules"], overrides["rules"])
        settings_obj = Settings.from_dict(merge_configs(base, overrides))
    return settings_obj
