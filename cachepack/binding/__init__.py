"""Dataclass binding layer for CacheKit."""

from cachepack.binding.options import FIELD_OPTIONS, METADATA_KEY, FieldOptions, cache_field, parse_field_options
from cachepack.binding.record import (
    DESCRIPTOR_ATTRIBUTE,
    CacheDiff,
    bind_instance,
    bind_record,
    build_descriptor,
    cache_diff,
    descriptor_for,
    descriptor_of_instance,
    diff_records,
    is_bound,
    resolve_descriptor,
)

__all__ = [
    "DESCRIPTOR_ATTRIBUTE",
    "FIELD_OPTIONS",
    "METADATA_KEY",
    "CacheDiff",
    "FieldOptions",
    "bind_instance",
    "bind_record",
    "build_descriptor",
    "cache_diff",
    "cache_field",
    "descriptor_for",
    "descriptor_of_instance",
    "diff_records",
    "is_bound",
    "resolve_descriptor",
    "parse_field_options",
]
