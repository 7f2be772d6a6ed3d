"""Diff subsystem for CacheKit."""

from cachepack.diff.engine import diff, field_value, values_equal
from cachepack.diff.exceptions import RecordValidationError
from cachepack.diff.formatting import format_change, render_diff_report, render_value, style_value
from cachepack.diff.models import DiffReport, ValidationIssue
from cachepack.diff.validation import collect_issues, ensure_valid, validate

__all__ = [
    "DiffReport",
    "RecordValidationError",
    "ValidationIssue",
    "collect_issues",
    "diff",
    "ensure_valid",
    "field_value",
    "format_change",
    "render_diff_report",
    "render_value",
    "style_value",
    "validate",
    "values_equal",
]
