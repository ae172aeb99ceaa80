"""Shared logging and validation utilities."""
