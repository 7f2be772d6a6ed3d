"""Capability probes standing in for static equality/display type bounds.

A field that is compared with ``==`` needs a value type with a real equality
(not object identity), and a field rendered with the default sentence needs a
value type with a human-readable ``str()`` (not just the default ``repr``).
Probes answer True, False, or None when the annotation cannot be checked
(``Any``, unresolved forward references, unbound type parameters).
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
import types
from typing import Annotated, Any, ForwardRef, Iterator, Literal, Mapping, TypeVar, Union, get_args, get_origin

from cachepack.core.types import Capability

_CAPABILITY_METHODS: dict[str, tuple[str, ...]] = {
    "equality": ("__eq__",),
    "display": ("__str__", "__format__"),
}


@dataclass(frozen=True, slots=True)
class CapabilityGap:
    """A concrete type that lacks a required capability."""

    capability: Capability
    type_name: str
    type_parameter: str | None = None


def supports_equality(tp: Any, *, bindings: Mapping[Any, Any] | None = None) -> bool | None:
    return _supports(tp, "equality", bindings)


def supports_display(tp: Any, *, bindings: Mapping[Any, Any] | None = None) -> bool | None:
    return _supports(tp, "display", bindings)


def find_capability_gap(
    tp: Any,
    capability: Capability,
    *,
    bindings: Mapping[Any, Any] | None = None,
) -> CapabilityGap | None:
    """Return the first member of ``tp`` that lacks ``capability``.

    Type parameters are resolved through ``bindings`` first, then through their
    bound or constraints. A gap reached through a type parameter names it.
    """
    for leaf, parameter in _leaves(tp, bindings or {}, via=None):
        if _probe(leaf, capability) is False:
            return CapabilityGap(
                capability=capability,
                type_name=type_name(leaf),
                type_parameter=parameter.__name__ if parameter is not None else None,
            )
    return None


def type_name(tp: Any) -> str:
    if tp is None or tp is type(None):
        return "None"
    if isinstance(tp, TypeVar):
        return tp.__name__
    if isinstance(tp, type) and get_origin(tp) is None:
        return tp.__qualname__
    return str(tp).replace("typing.", "")


def _supports(tp: Any, capability: Capability, bindings: Mapping[Any, Any] | None) -> bool | None:
    unknown = False
    for leaf, _ in _leaves(tp, bindings or {}, via=None):
        result = _probe(leaf, capability)
        if result is False:
            return False
        if result is None:
            unknown = True
    return None if unknown else True


def _leaves(
    tp: Any,
    bindings: Mapping[Any, Any],
    *,
    via: TypeVar | None,
) -> Iterator[tuple[Any, TypeVar | None]]:
    if isinstance(tp, TypeVar):
        if tp in bindings:
            yield from _leaves(bindings[tp], bindings, via=tp)
        elif tp.__bound__ is not None:
            yield from _leaves(tp.__bound__, bindings, via=tp)
        elif tp.__constraints__:
            for constraint in tp.__constraints__:
                yield from _leaves(constraint, bindings, via=tp)
        else:
            yield tp, tp
        return

    origin = get_origin(tp)
    if origin is Annotated:
        yield from _leaves(get_args(tp)[0], bindings, via=via)
    elif origin is Union or origin is types.UnionType:
        for member in get_args(tp):
            yield from _leaves(member, bindings, via=via)
    elif origin is Literal:
        for value in get_args(tp):
            yield type(value), via
    elif origin is not None:
        yield origin, via
    else:
        yield tp, via


def _probe(tp: Any, capability: Capability) -> bool | None:
    if tp is None or tp is type(None):
        return True
    if tp is Any or isinstance(tp, (TypeVar, ForwardRef, str)):
        return None
    if not isinstance(tp, type):
        return None
    # Enum members and bools are singletons, identity is their equality.
    if capability == "equality" and issubclass(tp, (bool, Enum)):
        return True
    return _defines(tp, _CAPABILITY_METHODS[capability])


def _defines(tp: type, names: tuple[str, ...]) -> bool:
    for klass in tp.__mro__:
        if klass is object:
            continue
        namespace = vars(klass)
        for name in names:
            if name in namespace:
                return namespace[name] is not None
    return False
