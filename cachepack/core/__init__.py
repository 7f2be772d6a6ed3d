"""Core descriptors and capability probes for CacheKit."""

from cachepack.core.capabilities import (
    CapabilityGap,
    find_capability_gap,
    supports_display,
    supports_equality,
    type_name,
)
from cachepack.core.models import (
    ACTIVE,
    DEFAULT_DISPLAY,
    DEFAULT_EQUALITY,
    Active,
    Comparator,
    CustomComparator,
    CustomDiffFn,
    CustomRenderer,
    DefaultDisplay,
    DefaultEquality,
    FieldDescriptor,
    Ignored,
    Participation,
    RecordDescriptor,
    Renderer,
)
from cachepack.core.types import CUSTOM_IGNORE_REASON, VALUE_STYLES, Capability, IssueKind, ValueStyle

__all__ = [
    "ACTIVE",
    "Active",
    "Capability",
    "CapabilityGap",
    "Comparator",
    "CUSTOM_IGNORE_REASON",
    "CustomComparator",
    "CustomDiffFn",
    "CustomRenderer",
    "DEFAULT_DISPLAY",
    "DEFAULT_EQUALITY",
    "DefaultDisplay",
    "DefaultEquality",
    "FieldDescriptor",
    "Ignored",
    "IssueKind",
    "Participation",
    "RecordDescriptor",
    "Renderer",
    "VALUE_STYLES",
    "ValueStyle",
    "find_capability_gap",
    "supports_display",
    "supports_equality",
    "type_name",
]
