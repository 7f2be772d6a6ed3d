from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import Annotated, Any, Literal, Optional, TypeVar, Union

import pytest

from cachepack.core.capabilities import (
    find_capability_gap,
    supports_display,
    supports_equality,
    type_name,
)


class Opaque:
    pass


class ReprOnly:
    def __init__(self, value: int) -> None:
        self.value = value

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ReprOnly) and other.value == self.value

    __hash__ = None  # type: ignore[assignment]


class Labelled:
    def __str__(self) -> str:
        return "labelled"


@dataclass
class Point:
    x: int
    y: int


class Color(Enum):
    RED = "red"
    BLUE = "blue"


T = TypeVar("T")
Bounded = TypeVar("Bounded", bound=str)
OpaqueBounded = TypeVar("OpaqueBounded", bound=Opaque)
Constrained = TypeVar("Constrained", int, Labelled)


@pytest.mark.parametrize(
    "tp",
    [int, str, float, bool, Path, Color, type(None), None],
)
def test_builtin_and_library_types_support_both_capabilities(tp: Any) -> None:
    assert supports_equality(tp) is True
    assert supports_display(tp) is True


def test_plain_class_supports_neither_capability() -> None:
    assert supports_equality(Opaque) is False
    assert supports_display(Opaque) is False
    assert supports_equality(object) is False


def test_dataclass_has_equality_but_only_a_debug_repr() -> None:
    assert supports_equality(Point) is True
    assert supports_display(Point) is False


def test_custom_eq_and_custom_str_are_detected_independently() -> None:
    assert supports_equality(ReprOnly) is True
    assert supports_display(ReprOnly) is False
    assert supports_equality(Labelled) is False
    assert supports_display(Labelled) is True


def test_generic_containers_are_probed_by_their_origin() -> None:
    assert supports_equality(list[int]) is True
    assert supports_display(list[int]) is False
    assert supports_equality(dict[str, int]) is True


def test_unions_need_every_member_to_qualify() -> None:
    assert supports_display(Optional[str]) is True
    assert supports_display(int | None) is True
    assert supports_display(Union[str, Opaque]) is False
    assert supports_equality(Optional[Opaque]) is False


def test_annotated_and_literal_are_unwrapped() -> None:
    assert supports_display(Annotated[int, "meta"]) is True
    assert supports_equality(Literal["a", 1]) is True
    assert supports_display(Annotated[Opaque, "meta"]) is False


def test_unknown_annotations_are_reported_as_none() -> None:
    assert supports_equality(Any) is None
    assert supports_display(T) is None
    assert supports_display("NotYetDefined") is None
    assert supports_equality(Optional[T]) is None


def test_type_parameters_resolve_through_bindings_then_bounds() -> None:
    assert supports_display(T, bindings={T: str}) is True
    assert supports_display(T, bindings={T: Opaque}) is False
    assert supports_display(Bounded) is True
    assert supports_equality(OpaqueBounded) is False
    assert supports_display(Constrained) is True
    assert supports_equality(Constrained) is False


def test_capability_gap_names_type_and_type_parameter() -> None:
    gap = find_capability_gap(T, "equality", bindings={T: Opaque})

    assert gap is not None
    assert gap.capability == "equality"
    assert gap.type_name == "Opaque"
    assert gap.type_parameter == "T"

    direct = find_capability_gap(Optional[Point], "display")
    assert direct is not None
    assert direct.type_name == "Point"
    assert direct.type_parameter is None

    assert find_capability_gap(str, "display") is None
    assert find_capability_gap(T, "display") is None


def test_type_name_is_readable() -> None:
    assert type_name(int) == "int"
    assert type_name(None) == "None"
    assert type_name(T) == "T"
    assert type_name(Point) == "Point"
    assert type_name(Optional[int]) == "Optional[int]"
