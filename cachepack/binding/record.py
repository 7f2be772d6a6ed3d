"""Bind dataclasses to record descriptors with the ``@cache_diff`` decorator.

The decorator reads each dataclass field (and its ``cache_field`` options),
builds a ``RecordDescriptor`` and validates it right away, so a shape that
cannot be diffed fails when its module is imported rather than on first use.

    @cache_diff(custom=diff_os)
    @dataclass
    class Metadata:
        ruby_version: str = cache_field(rename="Ruby version")
        os_distribution: str = cache_field(ignore="custom")
        os_version: str = cache_field(ignore="custom")
"""

from __future__ import annotations

import dataclasses
import functools
import typing
from typing import Any, Protocol, TypeVar, runtime_checkable

from cachepack.binding.options import METADATA_KEY, parse_field_options
from cachepack.core.models import CustomDiffFn, RecordDescriptor
from cachepack.core.types import ValueStyle
from cachepack.diff.engine import diff, field_value
from cachepack.diff.models import ValidationIssue
from cachepack.diff.validation import ensure_valid, validate

DESCRIPTOR_ATTRIBUTE = "__cache_diff__"

_T = TypeVar("_T")


@runtime_checkable
class CacheDiff(Protocol):
    """Anything that can describe how it differs from an older value of itself."""

    def diff(self, old: Any) -> list[str]: ...


def cache_diff(
    cls: type[_T] | None = None,
    /,
    *,
    custom: CustomDiffFn | None = None,
    value_style: ValueStyle = "plain",
    name: str | None = None,
) -> Any:
    """Class decorator, applied above ``@dataclass``.

    ``custom(old, new)`` returns extra change entries appended after the
    field-by-field ones. The decorated class gains ``diff(self, old)`` unless
    it defines its own.
    """

    def wrap(target: type[_T]) -> type[_T]:
        return bind_record(target, custom=custom, value_style=value_style, name=name)

    if cls is None:
        return wrap
    return wrap(cls)


def bind_record(
    cls: type[_T],
    *,
    custom: CustomDiffFn | None = None,
    value_style: ValueStyle = "plain",
    name: str | None = None,
) -> type[_T]:
    if not (isinstance(cls, type) and dataclasses.is_dataclass(cls)):
        raise TypeError(
            f"cache_diff can only be applied to dataclasses, got {cls!r}; "
            "put @cache_diff above @dataclass"
        )

    descriptor, binding_issues = build_descriptor(
        cls,
        custom=custom,
        value_style=value_style,
        name=name,
    )
    if binding_issues:
        validate(descriptor, binding_issues=binding_issues)
    else:
        ensure_valid(descriptor)

    setattr(cls, DESCRIPTOR_ATTRIBUTE, descriptor)
    if "diff" not in vars(cls):
        setattr(cls, "diff", _diff_method)
    return cls


def build_descriptor(
    cls: type,
    *,
    custom: CustomDiffFn | None = None,
    value_style: ValueStyle = "plain",
    name: str | None = None,
) -> tuple[RecordDescriptor, list[ValidationIssue]]:
    """Build the descriptor of a dataclass without validating it."""
    shape = name or cls.__qualname__
    hints = _field_types(cls)
    fields = []
    issues: list[ValidationIssue] = []

    for item in dataclasses.fields(cls):
        options, option_issues = parse_field_options(shape, item.name, item.metadata.get(METADATA_KEY))
        issues.extend(option_issues)
        fields.append(options.to_descriptor(item.name, hints.get(item.name, Any)))

    descriptor = RecordDescriptor(
        shape=shape,
        fields=tuple(fields),
        custom_diff=custom,
        type_parameters=tuple(getattr(cls, "__parameters__", ())),
        value_style=value_style,
    )
    return descriptor, issues


def descriptor_for(target: Any) -> RecordDescriptor:
    """Validated descriptor of a bound class or of a parameterized alias like ``Box[int]``."""
    origin = typing.get_origin(target)
    if origin is not None:
        return _specialize(_bound_descriptor(origin), tuple(typing.get_args(target)))
    return _bound_descriptor(target)


def descriptor_of_instance(value: Any) -> RecordDescriptor:
    """Descriptor for a record instance.

    ``Box[int](...)`` construction wins. Otherwise a generic record is bound
    from the runtime types of the values held in fields annotated with a bare
    type parameter, so ``Box(content=Opaque())`` is checked like ``Box[Opaque]``.
    """
    alias = getattr(value, "__orig_class__", None)
    if alias is not None:
        return descriptor_for(alias)
    return bind_instance(_bound_descriptor(type(value)), value)


def bind_instance(descriptor: RecordDescriptor, value: Any) -> RecordDescriptor:
    """Specialize a generic descriptor from the values ``value`` holds."""
    if not descriptor.is_generic:
        return descriptor
    type_arguments = _inferred_type_arguments(descriptor, value)
    if type_arguments is None:
        return descriptor
    return _specialize(descriptor, type_arguments)


def diff_records(old: Any, new: Any) -> list[str]:
    """Diff two instances of a ``@cache_diff`` class."""
    descriptor = descriptor_of_instance(new)
    if type(old) is type(new):
        # The older value's binding must hold as well.
        descriptor_of_instance(old)
    return diff(descriptor, old, new)


def is_bound(target: Any) -> bool:
    cls = typing.get_origin(target) or target
    return isinstance(cls, type) and isinstance(vars(cls).get(DESCRIPTOR_ATTRIBUTE), RecordDescriptor)


def _diff_method(self: Any, old: Any) -> list[str]:
    """Describe what changed from ``old`` to this value."""
    return diff_records(old, self)


def _bound_descriptor(cls: Any) -> RecordDescriptor:
    # Own attribute only: an undecorated subclass must not reuse its parent's fields.
    descriptor = vars(cls).get(DESCRIPTOR_ATTRIBUTE) if isinstance(cls, type) else None
    if not isinstance(descriptor, RecordDescriptor):
        raise TypeError(f"{getattr(cls, '__qualname__', cls)!r} is not bound with @cache_diff")
    return descriptor


def _specialize(descriptor: RecordDescriptor, type_arguments: tuple[Any, ...]) -> RecordDescriptor:
    try:
        hash((descriptor, type_arguments))
    except TypeError:
        # Unhashable annotation metadata such as Annotated[T, {...}], nothing to cache on.
        return ensure_valid(descriptor.specialize(type_arguments))
    return _specialized(descriptor, type_arguments)


@functools.lru_cache(maxsize=256)
def _specialized(descriptor: RecordDescriptor, type_arguments: tuple[Any, ...]) -> RecordDescriptor:
    return ensure_valid(descriptor.specialize(type_arguments))


def _inferred_type_arguments(descriptor: RecordDescriptor, value: Any) -> tuple[Any, ...] | None:
    found: dict[TypeVar, Any] = {}
    for item in descriptor.fields:
        parameter = _bare_type_parameter(item.value_type)
        if parameter is None or parameter in found:
            continue
        try:
            found[parameter] = type(field_value(value, item.name))
        except (AttributeError, KeyError):
            continue
    if any(parameter not in found for parameter in descriptor.type_parameters):
        return None
    return tuple(found[parameter] for parameter in descriptor.type_parameters)


def _bare_type_parameter(tp: Any) -> TypeVar | None:
    if typing.get_origin(tp) is typing.Annotated:
        tp = typing.get_args(tp)[0]
    return tp if isinstance(tp, TypeVar) else None


def _field_types(cls: type) -> dict[str, Any]:
    try:
        return typing.get_type_hints(cls, include_extras=True)
    except (NameError, TypeError):
        # Unresolvable forward references stay as strings; probes treat them as unknown.
        return {item.name: item.type for item in dataclasses.fields(cls)}


def resolve_descriptor(target: Any) -> RecordDescriptor:
    """Accept a descriptor, a bound class, or a parameterized alias of one."""
    if isinstance(target, RecordDescriptor):
        return target
    return descriptor_for(target)
