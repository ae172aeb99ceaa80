"""Validation utilities for the reconciliation system."""

import os
from collections.abc import Mapping, Sequence
from typing import Any, List

from trade_recon.config.settings import (
    MAX_FILE_SIZE_MB,
    SUPPORTED_EXPORT_FORMATS,
    SUPPORTED_LEDGER_FORMATS,
)


class ValidationError(TypeError):
    """Custom exception for validation errors."""
    pass


def validate_ledger(rows: Any) -> None:
    """Validate that a ledger is an in-memory sequence of rows.

    Args:
        rows: Candidate ledger.

    Raises:
        ValidationError: If the ledger is not a sequence of rows.
    """
    if rows is None:
        raise ValidationError("Ledger cannot be None")

    if isinstance(rows, (str, bytes, bytearray, Mapping)) or not isinstance(rows, Sequence):
        raise ValidationError(
            f"Ledger must be a sequence of rows, got {type(rows).__name__}"
        )


def validate_file_path(file_path: str) -> None:
    """Validate that a file path exists and is accessible.

    Args:
        file_path: Path to the file to validate.

    Raises:
        ValidationError: If file path is invalid.
    """
    if not file_path:
        raise ValidationError("File path cannot be empty")

    if not os.path.exists(file_path):
        raise ValidationError(f"File does not exist: {file_path}")

    if not os.path.isfile(file_path):
        raise ValidationError(f"Path is not a file: {file_path}")

    if not os.access(file_path, os.R_OK):
        raise ValidationError(f"File is not readable: {file_path}")


def validate_file_size(file_path: str, max_size_mb: int = MAX_FILE_SIZE_MB) -> None:
    """Validate file size against maximum allowed size.

    Args:
        file_path: Path to the file to validate.
        max_size_mb: Maximum allowed file size in MB.

    Raises:
        ValidationError: If file size exceeds limit.
    """
    file_size_bytes = os.path.getsize(file_path)
    file_size_mb = file_size_bytes / (1024 * 1024)

    if file_size_mb > max_size_mb:
        raise ValidationError(
            f"File size {file_size_mb:.2f}MB exceeds maximum "
            f"allowed size {max_size_mb}MB"
        )


def validate_file_extension(
    file_path: str,
    supported_formats: List[str] = SUPPORTED_LEDGER_FORMATS
) -> None:
    """Validate file extension against supported formats.

    Args:
        file_path: Path to the file to validate.
        supported_formats: List of supported file extensions.

    Raises:
        ValidationError: If file extension is not supported.
    """
    _, ext = os.path.splitext(file_path.lower())

    if ext not in supported_formats:
        raise ValidationError(
            f"File extension '{ext}' not supported. "
            f"Supported formats: {', '.join(supported_formats)}"
        )


def validate_ledger_file(
    file_path: str,
    max_size_mb: int = MAX_FILE_SIZE_MB,
    supported_formats: List[str] = SUPPORTED_LEDGER_FORMATS
) -> None:
    """Perform comprehensive ledger file validation.

    Raises:
        ValidationError: If any validation fails.
    """
    validate_file_path(file_path)
    validate_file_size(file_path, max_size_mb)
    validate_file_extension(file_path, supported_formats)


def validate_directory_path(dir_path: str) -> None:
    """Validate that a directory path exists and is writable.

    Args:
        dir_path: Path to the directory to validate.

    Raises:
        ValidationError: If directory path is invalid.
    """
    if not dir_path:
        raise ValidationError("Directory path cannot be empty")

    if not os.path.exists(dir_path):
        try:
            os.makedirs(dir_path, exist_ok=True)
        except OSError as e:
            raise ValidationError(f"Cannot create directory {dir_path}: {str(e)}")

    if not os.path.isdir(dir_path):
        raise ValidationError(f"Path is not a directory: {dir_path}")

    if not os.access(dir_path, os.W_OK):
        raise ValidationError(f"Directory is not writable: {dir_path}")


def validate_export_format(export_format: str) -> None:
    """Validate an export format name.

    Raises:
        ValidationError: If the format is not supported.
    """
    if export_format not in SUPPORTED_EXPORT_FORMATS:
        raise ValidationError(
            f"Export format '{export_format}' not supported. "
            f"Supported formats: {', '.join(SUPPORTED_EXPORT_FORMATS)}"
        )
