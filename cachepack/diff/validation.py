"""Definition-time validation of record descriptors.

Every problem is collected before anything is raised so one pass over a shape
reports all of its issues together.
"""

from __future__ import annotations

from typing import Any, Iterable

from cachepack.core.capabilities import find_capability_gap
from cachepack.core.models import (
    CustomComparator,
    CustomRenderer,
    DefaultDisplay,
    FieldDescriptor,
    Ignored,
    RecordDescriptor,
)
from cachepack.core.types import Capability
from cachepack.diff.exceptions import RecordValidationError
from cachepack.diff.models import ValidationIssue
from cachepack.plugins import ValidateEndEvent, ValidateStartEvent, get_active_plugin_manager

_VALIDATED: set[RecordDescriptor] = set()

_CAPABILITY_WORDING: dict[str, str] = {
    "equality": "does not support equality comparison",
    "display": "does not support display formatting (only a debug repr)",
}
_TYPE_FIX: dict[str, str] = {
    "equality": "define `__eq__` on it",
    "display": "define `__str__` on it",
}
_FIELD_FIX: dict[str, str] = {
    "equality": "pass compare=<function>",
    "display": "pass display=<function> or render=<function>",
}


def collect_issues(descriptor: RecordDescriptor) -> list[ValidationIssue]:
    """Return every definitional issue of ``descriptor`` (empty when valid)."""
    issues: list[ValidationIssue] = []
    shape = descriptor.shape
    seen: set[str] = set()

    if descriptor.custom_diff is not None and not callable(descriptor.custom_diff):
        issues.append(
            ValidationIssue(
                kind="invalid_strategy",
                shape=shape,
                message=(
                    f"custom diff function on {shape} is not callable: "
                    f"{descriptor.custom_diff!r}"
                ),
            )
        )

    for item in descriptor.fields:
        if item.name in seen:
            issues.append(
                ValidationIssue(
                    kind="duplicate_field",
                    shape=shape,
                    field=item.name,
                    message=f"field `{item.name}` is declared more than once on {shape}",
                )
            )
        seen.add(item.name)

        if isinstance(item.participation, Ignored):
            issues.extend(_ignored_field_issues(descriptor, item, item.participation))
        else:
            issues.extend(_active_field_issues(descriptor, item))

    if not descriptor.active_fields and descriptor.custom_diff is None:
        issues.append(
            ValidationIssue(
                kind="zero_active_fields",
                shape=shape,
                message=(
                    f"No fields to compare for {shape}, ensure it has at least one field "
                    "that is not ignored, or set a record-level custom diff function"
                ),
            )
        )

    return issues


def validate(
    descriptor: RecordDescriptor,
    *,
    binding_issues: Iterable[ValidationIssue] = (),
) -> None:
    """Raise ``RecordValidationError`` unless ``descriptor`` is usable for comparison.

    ``binding_issues`` are problems the binding layer found while building the
    descriptor; they are reported ahead of the descriptor's own issues.
    """
    plugin_manager = get_active_plugin_manager()
    plugin_manager.on_validate_start(
        ValidateStartEvent(
            shape=descriptor.shape,
            field_count=len(descriptor.fields),
            has_custom_diff=descriptor.custom_diff is not None,
        )
    )

    issues = [*binding_issues, *collect_issues(descriptor)]
    plugin_manager.on_validate_end(
        ValidateEndEvent(
            shape=descriptor.shape,
            status="error" if issues else "ok",
            issue_count=len(issues),
            issue_kinds=tuple(issue.kind for issue in issues),
        )
    )
    if issues:
        raise RecordValidationError(descriptor.shape, issues)


def ensure_valid(descriptor: RecordDescriptor) -> RecordDescriptor:
    """Validate ``descriptor`` once; later calls with an equal descriptor are free."""
    try:
        if descriptor in _VALIDATED:
            return descriptor
    except TypeError:
        # Unhashable annotation metadata, nothing to cache on.
        validate(descriptor)
        return descriptor

    validate(descriptor)
    _VALIDATED.add(descriptor)
    return descriptor


def _ignored_field_issues(
    descriptor: RecordDescriptor,
    item: FieldDescriptor,
    participation: Ignored,
) -> list[ValidationIssue]:
    shape = descriptor.shape
    if participation.reason is None or not participation.reason.strip():
        return [
            ValidationIssue(
                kind="missing_ignore_reason",
                shape=shape,
                field=item.name,
                message=(
                    f"field `{item.name}` on {shape} is ignored without a reason; "
                    'give one such as ignore="not cache relevant", or ignore="custom" '
                    "when the record-level custom diff function handles it"
                ),
            )
        ]
    if participation.delegates_to_custom and descriptor.custom_diff is None:
        return [
            ValidationIssue(
                kind="dangling_custom_ignore",
                shape=shape,
                field=item.name,
                message=(
                    f"field `{item.name}` on {shape} marked ignored as custom, "
                    f"but no custom diff function found on `{shape}`"
                ),
            )
        ]
    return []


def _active_field_issues(descriptor: RecordDescriptor, item: FieldDescriptor) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    check_equality = True
    check_display = True

    if isinstance(item.comparison, CustomComparator):
        check_equality = False
        if not callable(item.comparison.fn):
            issues.append(_invalid_strategy(descriptor, item, "comparator", item.comparison.fn))

    if isinstance(item.rendering, CustomRenderer):
        check_display = False
        if not callable(item.rendering.fn):
            issues.append(_invalid_strategy(descriptor, item, "renderer", item.rendering.fn))
    elif isinstance(item.rendering, DefaultDisplay) and item.rendering.display is not None:
        check_display = False
        if not callable(item.rendering.display):
            issues.append(_invalid_strategy(descriptor, item, "display function", item.rendering.display))

    capabilities: list[Capability] = []
    if check_equality:
        capabilities.append("equality")
    if check_display:
        capabilities.append("display")

    for capability in capabilities:
        gap = find_capability_gap(item.value_type, capability, bindings=descriptor.bindings)
        if gap is None:
            continue
        issues.append(
            ValidationIssue(
                kind=(
                    "missing_equality_capability"
                    if capability == "equality"
                    else "missing_display_capability"
                ),
                shape=descriptor.shape,
                field=item.name,
                capability=capability,
                type_name=gap.type_name,
                type_parameter=gap.type_parameter,
                message=_capability_message(descriptor, item, capability, gap.type_name, gap.type_parameter),
            )
        )
    return issues


def _capability_message(
    descriptor: RecordDescriptor,
    item: FieldDescriptor,
    capability: Capability,
    type_name: str,
    type_parameter: str | None,
) -> str:
    missing = _CAPABILITY_WORDING[capability]
    if type_parameter is not None:
        return (
            f"type parameter `{type_parameter}` of {descriptor.shape} resolves to "
            f"`{type_name}` which {missing}, required by field `{item.name}`; "
            f"bind `{type_parameter}` to a type with {capability} support, "
            f"or {_FIELD_FIX[capability]} on field `{item.name}`"
        )
    return (
        f"field `{item.name}` on {descriptor.shape} has type `{type_name}` which {missing}; "
        f"{_TYPE_FIX[capability]}, {_FIELD_FIX[capability]}, or ignore the field with a reason"
    )


def _invalid_strategy(
    descriptor: RecordDescriptor,
    item: FieldDescriptor,
    role: str,
    value: Any,
) -> ValidationIssue:
    return ValidationIssue(
        kind="invalid_strategy",
        shape=descriptor.shape,
        field=item.name,
        message=f"field `{item.name}` on {descriptor.shape} has a non-callable {role}: {value!r}",
    )
