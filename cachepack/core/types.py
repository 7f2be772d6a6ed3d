"""Type definitions for CacheKit core models."""

from typing import Literal

Capability = Literal["equality", "display"]

ValueStyle = Literal["plain", "backtick", "color"]

VALUE_STYLES: tuple[str, ...] = (
    "plain",
    "backtick",
    "color",
)

IssueKind = Literal[
    "missing_equality_capability",
    "missing_display_capability",
    "zero_active_fields",
    "missing_ignore_reason",
    "dangling_custom_ignore",
    "invalid_strategy",
    "duplicate_field",
    "unknown_field_option",
    "conflicting_field_options",
]

# Ignore reason that hands a field over to the record-level custom diff function.
CUSTOM_IGNORE_REASON = "custom"
