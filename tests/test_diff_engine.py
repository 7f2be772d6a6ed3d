from dataclasses import dataclass
import math
from typing import Any

import pytest

from cachepack.core.models import (
    CustomComparator,
    CustomRenderer,
    DefaultDisplay,
    FieldDescriptor,
    Ignored,
    RecordDescriptor,
)
from cachepack.diff import RecordValidationError, diff, field_value, values_equal


@dataclass
class Metadata:
    name: str
    count: int
    secret: str = ""


METADATA = RecordDescriptor(
    shape="Metadata",
    fields=(
        FieldDescriptor(name="name", value_type=str),
        FieldDescriptor(name="count", value_type=int),
        FieldDescriptor(name="secret", value_type=str, participation=Ignored("not cache relevant")),
    ),
)


def test_single_changed_field_produces_one_sentence() -> None:
    old = Metadata(name="x", count=1)
    new = Metadata(name="y", count=1)

    assert diff(METADATA, old, new) == ["name (x to y)"]


def test_equal_records_produce_no_changes() -> None:
    record = Metadata(name="x", count=1)

    assert diff(METADATA, record, Metadata(name="x", count=1)) == []
    assert diff(METADATA, record, record) == []


def test_ignored_field_never_appears() -> None:
    old = Metadata(name="x", count=1, secret="one")
    new = Metadata(name="x", count=1, secret="two")

    assert diff(METADATA, old, new) == []


def test_changes_follow_field_declaration_order() -> None:
    old = Metadata(name="x", count=1)
    new = Metadata(name="y", count=2)

    assert diff(METADATA, old, new) == ["name (x to y)", "count (1 to 2)"]
    assert diff(METADATA, new, old) == ["name (y to x)", "count (2 to 1)"]


def test_diff_is_deterministic() -> None:
    old = Metadata(name="x", count=1)
    new = Metadata(name="y", count=2)

    assert diff(METADATA, old, new) == diff(METADATA, old, new)


def test_custom_diff_entries_follow_field_entries() -> None:
    def custom(old: dict[str, Any], new: dict[str, Any]) -> list[str]:
        if (old["distro"], old["release"]) == (new["distro"], new["release"]):
            return []
        return [f"OS ({old['distro']}-{old['release']} to {new['distro']}-{new['release']})"]

    descriptor = RecordDescriptor(
        shape="Metadata",
        fields=(
            FieldDescriptor(name="ruby", value_type=str, label="Ruby version"),
            FieldDescriptor(name="distro", value_type=str, participation=Ignored("custom")),
            FieldDescriptor(name="release", value_type=str, participation=Ignored("custom")),
        ),
        custom_diff=custom,
    )
    old = {"ruby": "3.3.0", "distro": "ubuntu", "release": "22.04"}
    new = {"ruby": "3.4.0", "distro": "ubuntu", "release": "24.04"}

    assert diff(descriptor, old, new) == [
        "Ruby version (3.3.0 to 3.4.0)",
        "OS (ubuntu-22.04 to ubuntu-24.04)",
    ]
    assert diff(descriptor, old, dict(old)) == []


def test_custom_diff_only_record_returns_its_entries() -> None:
    descriptor = RecordDescriptor(
        shape="CustomOnly",
        fields=(FieldDescriptor(name="a", value_type=str, participation=Ignored("custom")),),
        custom_diff=lambda old, new: ["custom change A"],
    )

    assert diff(descriptor, {"a": 1}, {"a": 1}) == ["custom change A"]


def test_custom_diff_may_return_any_iterable_of_entries() -> None:
    def custom(old: Any, new: Any) -> Any:
        yield "first"
        yield "second"

    descriptor = RecordDescriptor(
        shape="Generated",
        fields=(FieldDescriptor(name="a", value_type=int),),
        custom_diff=custom,
    )

    assert diff(descriptor, {"a": 1}, {"a": 2}) == ["a (1 to 2)", "first", "second"]


def test_custom_comparator_decides_equivalence() -> None:
    descriptor = RecordDescriptor(
        shape="Versions",
        fields=(
            FieldDescriptor(
                name="version",
                value_type=str,
                comparison=CustomComparator(lambda old, new: old.split(".")[:2] == new.split(".")[:2]),
            ),
        ),
    )

    assert diff(descriptor, {"version": "3.3.0"}, {"version": "3.3.5"}) == []
    assert diff(descriptor, {"version": "3.3.0"}, {"version": "3.4.0"}) == [
        "version (3.3.0 to 3.4.0)"
    ]


def test_custom_renderer_and_display_function_shape_the_sentence() -> None:
    descriptor = RecordDescriptor(
        shape="Toolchain",
        fields=(
            FieldDescriptor(
                name="version",
                value_type=str,
                rendering=CustomRenderer(lambda old, new: f"upgraded from {old} to {new}"),
            ),
            FieldDescriptor(
                name="arch",
                value_type=str,
                label="Architecture",
                rendering=DefaultDisplay(display=str.upper),
            ),
        ),
    )

    assert diff(
        descriptor,
        {"version": "1", "arch": "amd64"},
        {"version": "2", "arch": "arm64"},
    ) == ["upgraded from 1 to 2", "Architecture (AMD64 to ARM64)"]


def test_style_override_wraps_values() -> None:
    old = Metadata(name="x", count=1)
    new = Metadata(name="y", count=1)

    assert diff(METADATA, old, new, style="backtick") == ["name (`x` to `y`)"]


def test_identical_nan_object_is_not_a_change() -> None:
    descriptor = RecordDescriptor(shape="Measure", fields=(FieldDescriptor(name="value", value_type=float),))
    nan = math.nan

    assert diff(descriptor, {"value": nan}, {"value": nan}) == []
    assert diff(descriptor, {"value": float("nan")}, {"value": float("nan")}) == ["value (nan to nan)"]


def test_comparator_errors_propagate_unchanged() -> None:
    def explode(old: Any, new: Any) -> bool:
        raise ValueError("cannot compare")

    descriptor = RecordDescriptor(
        shape="Fragile",
        fields=(FieldDescriptor(name="a", value_type=int, comparison=CustomComparator(explode)),),
    )

    with pytest.raises(ValueError, match="cannot compare"):
        diff(descriptor, {"a": 1}, {"a": 2})


def test_invalid_descriptor_is_rejected_before_comparing() -> None:
    descriptor = RecordDescriptor(
        shape="Empty",
        fields=(FieldDescriptor(name="a", value_type=int, participation=Ignored("per build")),),
    )

    with pytest.raises(RecordValidationError) as excinfo:
        diff(descriptor, {"a": 1}, {"a": 2})

    assert excinfo.value.kinds == ["zero_active_fields"]


def test_field_values_come_from_keys_or_attributes() -> None:
    assert field_value({"a": 1}, "a") == 1
    assert field_value(Metadata(name="x", count=3), "count") == 3
    with pytest.raises(AttributeError):
        field_value(Metadata(name="x", count=3), "missing")


def test_values_equal_uses_identity_then_equality() -> None:
    item = FieldDescriptor(name="a", value_type=Any)
    marker = object()

    assert values_equal(item, marker, marker) is True
    assert values_equal(item, [1, 2], [1, 2]) is True
    assert values_equal(item, 1, 2) is False


def test_order_follows_declaration_not_magnitude() -> None:
    descriptor = RecordDescriptor(
        shape="Three",
        fields=(
            FieldDescriptor(name="a", value_type=int),
            FieldDescriptor(name="b", value_type=int),
            FieldDescriptor(name="c", value_type=int),
        ),
    )

    assert diff(descriptor, {"a": 1, "b": 1, "c": 1}, {"a": 2, "b": 1, "c": 100}) == [
        "a (1 to 2)",
        "c (1 to 100)",
    ]


def test_custom_diff_returning_one_string_is_one_entry() -> None:
    descriptor = RecordDescriptor(
        shape="Os",
        fields=(FieldDescriptor(name="distro", value_type=str, participation=Ignored("custom")),),
        custom_diff=lambda old, new: "OS changed" if old["distro"] != new["distro"] else [],
    )

    assert diff(descriptor, {"distro": "ubuntu"}, {"distro": "debian"}) == ["OS changed"]
    assert diff(descriptor, {"distro": "ubuntu"}, {"distro": "ubuntu"}) == []
