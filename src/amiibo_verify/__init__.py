"""Amiibo Verify - structural and signature checks for tag dumps."""
from .logic import BatchReport, ValidationReport, validate_many, validate_one

__all__ = ["BatchReport", "ValidationReport", "validate_many", "validate_one"]
