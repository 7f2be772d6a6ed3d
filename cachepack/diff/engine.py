"""Field-by-field diff engine for validated record descriptors."""

from __future__ import annotations

from typing import Any, Mapping

from cachepack.core.models import CustomComparator, FieldDescriptor, RecordDescriptor
from cachepack.core.types import ValueStyle
from cachepack.diff.formatting import format_change
from cachepack.diff.validation import ensure_valid
from cachepack.plugins import DiffEndEvent, DiffStartEvent, get_active_plugin_manager


def diff(
    descriptor: RecordDescriptor,
    old: Any,
    new: Any,
    *,
    style: ValueStyle | None = None,
) -> list[str]:
    """Describe every change from ``old`` to ``new``.

    Changed active fields come first in declaration order, then whatever the
    record-level custom diff function returns. An empty list means nothing
    changed. Errors raised by author-supplied functions propagate unchanged.
    """
    ensure_valid(descriptor)
    value_style = style or descriptor.value_style

    plugin_manager = get_active_plugin_manager()
    plugin_manager.on_diff_start(
        DiffStartEvent(
            shape=descriptor.shape,
            active_field_count=len(descriptor.active_fields),
            has_custom_diff=descriptor.custom_diff is not None,
        )
    )

    changes: list[str] = []
    try:
        for item in descriptor.active_fields:
            old_value = field_value(old, item.name)
            new_value = field_value(new, item.name)
            if values_equal(item, old_value, new_value):
                continue
            changes.append(
                format_change(
                    item.display_name,
                    old_value,
                    new_value,
                    item.rendering,
                    style=value_style,
                )
            )

        if descriptor.custom_diff is not None:
            entries = descriptor.custom_diff(old, new)
            if isinstance(entries, str):
                # A single sentence, not a sequence of characters.
                entries = [entries]
            changes.extend(str(entry) for entry in entries)
    except Exception as error:
        plugin_manager.on_diff_end(
            DiffEndEvent(
                shape=descriptor.shape,
                status="error",
                error_type=error.__class__.__name__,
                error_message=str(error),
            )
        )
        raise

    plugin_manager.on_diff_end(
        DiffEndEvent(
            shape=descriptor.shape,
            status="ok",
            change_count=len(changes),
        )
    )
    return changes


def values_equal(item: FieldDescriptor, old: Any, new: Any) -> bool:
    if isinstance(item.comparison, CustomComparator):
        return bool(item.comparison.fn(old, new))
    # Identity first so a value always equals itself (NaN included).
    return old is new or old == new


def field_value(record: Any, name: str) -> Any:
    if isinstance(record, Mapping):
        return record[name]
    return getattr(record, name)
