"""Per-field ``cache_diff`` options stored in dataclass field metadata."""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Any, Callable, Mapping

from cachepack.core.models import (
    ACTIVE,
    DEFAULT_DISPLAY,
    DEFAULT_EQUALITY,
    CustomComparator,
    CustomRenderer,
    DefaultDisplay,
    FieldDescriptor,
    Ignored,
)
from cachepack.diff.models import ValidationIssue

METADATA_KEY = "cache_diff"
FIELD_OPTIONS: tuple[str, ...] = ("rename", "display", "render", "compare", "ignore")


@dataclass(frozen=True, slots=True)
class FieldOptions:
    rename: str | None = None
    display: Callable[[Any], str] | None = None
    render: Callable[[Any, Any], str] | None = None
    compare: Callable[[Any, Any], bool] | None = None
    ignore: str | bool | None = None

    def to_descriptor(self, name: str, value_type: Any) -> FieldDescriptor:
        if self.ignore is not None and self.ignore is not False:
            reason = self.ignore if isinstance(self.ignore, str) else None
            return FieldDescriptor(name=name, value_type=value_type, participation=Ignored(reason))

        if self.render is not None:
            rendering: Any = CustomRenderer(self.render)
        elif self.display is not None:
            rendering = DefaultDisplay(display=self.display)
        else:
            rendering = DEFAULT_DISPLAY

        return FieldDescriptor(
            name=name,
            value_type=value_type,
            label=self.rename,
            comparison=CustomComparator(self.compare) if self.compare is not None else DEFAULT_EQUALITY,
            rendering=rendering,
            participation=ACTIVE,
        )


def cache_field(
    *,
    rename: str | None = None,
    display: Callable[[Any], str] | None = None,
    render: Callable[[Any, Any], str] | None = None,
    compare: Callable[[Any, Any], bool] | None = None,
    ignore: str | bool | None = None,
    **field_kwargs: Any,
) -> Any:
    """``dataclasses.field`` carrying cache diff options.

    - ``rename``: label used in messages instead of the field name.
    - ``display``: converts one value to text for the default sentence.
    - ``render``: ``fn(old, new)`` returning the whole change sentence.
    - ``compare``: ``fn(old, new)`` returning True when values are equivalent.
    - ``ignore``: reason for leaving the field out; ``"custom"`` hands it to
      the record-level custom diff function.
    """
    options = {
        key: value
        for key, value in (
            ("rename", rename),
            ("display", display),
            ("render", render),
            ("compare", compare),
            ("ignore", ignore),
        )
        if value is not None
    }
    metadata = dict(field_kwargs.pop("metadata", None) or {})
    metadata[METADATA_KEY] = options
    return dataclasses.field(metadata=metadata, **field_kwargs)


def parse_field_options(
    shape: str,
    field_name: str,
    raw: Any,
) -> tuple[FieldOptions, list[ValidationIssue]]:
    """Read options from field metadata, reporting unknown or conflicting ones."""
    if raw is None:
        return FieldOptions(), []
    if not isinstance(raw, Mapping):
        return FieldOptions(), [
            ValidationIssue(
                kind="unknown_field_option",
                shape=shape,
                field=field_name,
                message=(
                    f"cache_diff options on field `{field_name}` of {shape} must be a mapping, "
                    f"got {type(raw).__name__}"
                ),
            )
        ]

    issues: list[ValidationIssue] = []
    for key in raw:
        if key not in FIELD_OPTIONS:
            issues.append(_unknown_option(shape, field_name, str(key)))

    options = FieldOptions(**{key: raw[key] for key in FIELD_OPTIONS if key in raw})

    if options.ignore is not None and options.ignore is not False:
        useless = [
            key
            for key in ("rename", "display", "render", "compare")
            if getattr(options, key) is not None
        ]
        if useless:
            issues.append(
                ValidationIssue(
                    kind="conflicting_field_options",
                    shape=shape,
                    field=field_name,
                    message=(
                        f"The cache_diff option `ignore` on field `{field_name}` of {shape} "
                        f"renders {', '.join(f'`{key}`' for key in useless)} useless, "
                        "remove the additional options"
                    ),
                )
            )
    elif options.display is not None and options.render is not None:
        issues.append(
            ValidationIssue(
                kind="conflicting_field_options",
                shape=shape,
                field=field_name,
                message=(
                    f"field `{field_name}` of {shape} sets both `display` and `render`; "
                    "`render` writes the whole sentence, keep only one"
                ),
            )
        )
    return options, issues


def _unknown_option(shape: str, field_name: str, key: str) -> ValidationIssue:
    valid = ", ".join(f"`{option}`" for option in FIELD_OPTIONS)
    message = (
        f"Unknown cache_diff option on field `{field_name}` of {shape}: `{key}`. "
        f"Must be one of {valid}"
    )
    if key == "custom":
        message += (
            ". The cache_diff option `custom` is available on the record "
            '(@cache_diff(custom=<function>)), not the field; use ignore="custom" here'
        )
    return ValidationIssue(kind="unknown_field_option", shape=shape, field=field_name, message=message)
