"""Stable public API surface for CacheKit.

This module is the supported import path for library users.
"""

from __future__ import annotations

from typing import Any

from cachepack.binding import CacheDiff, cache_diff, cache_field, diff_records, resolve_descriptor
from cachepack.core.models import (
    Active,
    CustomComparator,
    CustomRenderer,
    DefaultDisplay,
    DefaultEquality,
    FieldDescriptor,
    Ignored,
    RecordDescriptor,
)
from cachepack.core.types import ValueStyle
from cachepack.diff import collect_issues, ensure_valid
from cachepack.diff import diff as _diff_descriptor
from cachepack.diff.exceptions import RecordValidationError
from cachepack.diff.models import ValidationIssue

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "ValueStyle",
    "CacheDiff",
    "FieldDescriptor",
    "RecordDescriptor",
    "DefaultEquality",
    "CustomComparator",
    "DefaultDisplay",
    "CustomRenderer",
    "Active",
    "Ignored",
    "RecordValidationError",
    "ValidationIssue",
    "cache_diff",
    "cache_field",
    "validate",
    "check",
    "diff",
    "changes",
]


def validate(target: Any) -> RecordDescriptor:
    """Validate a record shape and return its descriptor.

    ``target`` is a ``RecordDescriptor``, a ``@cache_diff`` class, or a
    parameterized alias such as ``Box[int]``. Raises ``RecordValidationError``
    naming each offending field, type parameter and missing capability.
    """
    return ensure_valid(resolve_descriptor(target))


def check(target: Any) -> list[ValidationIssue]:
    """Return the validation issues of a record shape without raising."""
    try:
        descriptor = resolve_descriptor(target)
    except RecordValidationError as error:
        return list(error.issues)
    return collect_issues(descriptor)


def diff(
    descriptor: Any,
    old: Any,
    new: Any,
    *,
    style: ValueStyle | None = None,
) -> list[str]:
    """Describe the changes from ``old`` to ``new`` for a record shape.

    Returns one entry per changed field in declaration order followed by the
    record-level custom diff entries; an empty list means nothing changed.
    """
    return _diff_descriptor(resolve_descriptor(descriptor), old, new, style=style)


def changes(old: Any, new: Any) -> list[str]:
    """Describe the changes between two instances of a ``@cache_diff`` class."""
    return diff_records(old, new)
