"""Declarative descriptors for comparable record shapes."""

from __future__ import annotations

from dataclasses import dataclass, replace
from typing import Any, Callable, Iterable, TypeVar, Union

from cachepack.core.capabilities import type_name
from cachepack.core.types import CUSTOM_IGNORE_REASON, VALUE_STYLES, ValueStyle

CustomDiffFn = Callable[[Any, Any], Iterable[str]]


@dataclass(frozen=True, slots=True)
class DefaultEquality:
    """Compare field values with ``==``."""


@dataclass(frozen=True, slots=True)
class CustomComparator:
    """Author-supplied equivalence check; ``fn(old, new)`` returns True when equal."""

    fn: Callable[[Any, Any], bool]


@dataclass(frozen=True, slots=True)
class DefaultDisplay:
    """Render ``name (old to new)``.

    ``display`` optionally converts one value to text for types without a
    human-readable ``str()``.
    """

    display: Callable[[Any], str] | None = None


@dataclass(frozen=True, slots=True)
class CustomRenderer:
    """Author-supplied sentence; ``fn(old, new)`` returns the full change entry."""

    fn: Callable[[Any, Any], str]


@dataclass(frozen=True, slots=True)
class Active:
    """Field takes part in field-by-field diffing."""


@dataclass(frozen=True, slots=True)
class Ignored:
    """Field is excluded from field-by-field diffing, with a justification."""

    reason: str | None = None

    @property
    def delegates_to_custom(self) -> bool:
        return self.reason is not None and self.reason.strip() == CUSTOM_IGNORE_REASON


Comparator = Union[DefaultEquality, CustomComparator]
Renderer = Union[DefaultDisplay, CustomRenderer]
Participation = Union[Active, Ignored]

DEFAULT_EQUALITY = DefaultEquality()
DEFAULT_DISPLAY = DefaultDisplay()
ACTIVE = Active()


@dataclass(frozen=True, slots=True)
class FieldDescriptor:
    """How one field of a record shape participates in the diff."""

    name: str
    value_type: Any = Any
    label: str | None = None
    comparison: Comparator = DEFAULT_EQUALITY
    rendering: Renderer = DEFAULT_DISPLAY
    participation: Participation = ACTIVE

    @property
    def is_active(self) -> bool:
        return isinstance(self.participation, Active)

    @property
    def display_name(self) -> str:
        return self.label if self.label is not None else self.name

    def describe(self) -> dict[str, Any]:
        if isinstance(self.participation, Ignored):
            participation = f"ignored ({self.participation.reason or '<no reason>'})"
        else:
            participation = "active"
        return {
            "name": self.name,
            "label": self.display_name,
            "type": type_name(self.value_type),
            "participation": participation,
            "comparison": "custom" if isinstance(self.comparison, CustomComparator) else "equality",
            "rendering": _rendering_name(self.rendering),
        }


@dataclass(frozen=True, slots=True)
class RecordDescriptor:
    """Ordered field descriptors plus an optional record-level custom diff."""

    shape: str
    fields: tuple[FieldDescriptor, ...] = ()
    custom_diff: CustomDiffFn | None = None
    type_parameters: tuple[TypeVar, ...] = ()
    type_arguments: tuple[Any, ...] = ()
    value_style: ValueStyle = "plain"

    def __post_init__(self) -> None:
        if not isinstance(self.fields, tuple):
            object.__setattr__(self, "fields", tuple(self.fields))
        if self.value_style not in VALUE_STYLES:
            raise ValueError(f"Unsupported value style: {self.value_style}")

    @property
    def active_fields(self) -> tuple[FieldDescriptor, ...]:
        return tuple(item for item in self.fields if item.is_active)

    @property
    def is_generic(self) -> bool:
        return bool(self.type_parameters) and not self.type_arguments

    @property
    def bindings(self) -> dict[TypeVar, Any]:
        return dict(zip(self.type_parameters, self.type_arguments))

    def field_named(self, name: str) -> FieldDescriptor | None:
        for item in self.fields:
            if item.name == name:
                return item
        return None

    def specialize(self, type_arguments: tuple[Any, ...]) -> "RecordDescriptor":
        """Return a copy with the type parameters bound to concrete type arguments."""
        if self.type_arguments:
            raise TypeError(f"{self.shape} is already specialized")
        if len(type_arguments) != len(self.type_parameters):
            raise TypeError(
                f"{self.shape} takes {len(self.type_parameters)} type parameter(s), "
                f"got {len(type_arguments)}"
            )
        arguments = ", ".join(type_name(argument) for argument in type_arguments)
        return replace(
            self,
            shape=f"{self.shape}[{arguments}]",
            type_arguments=tuple(type_arguments),
        )

    def describe(self) -> dict[str, Any]:
        return {
            "shape": self.shape,
            "custom_diff": _callable_name(self.custom_diff),
            "type_parameters": [type_name(parameter) for parameter in self.type_parameters],
            "type_arguments": [type_name(argument) for argument in self.type_arguments],
            "value_style": self.value_style,
            "fields": [item.describe() for item in self.fields],
        }


def _rendering_name(rendering: Renderer) -> str:
    if isinstance(rendering, CustomRenderer):
        return "custom"
    if rendering.display is not None:
        return f"display ({_callable_name(rendering.display)})"
    return "default"


def _callable_name(fn: Any) -> str | None:
    if fn is None:
        return None
    return getattr(fn, "__qualname__", None) or repr(fn)

