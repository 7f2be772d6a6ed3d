"""Lifecycle plugin interface and the event payloads passed to its hooks."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Literal

PLUGIN_API_VERSION = "1.0"
PLUGIN_CONFIG_VERSION = 1
PLUGIN_CONFIG_ENV_VAR = "CACHEKIT_PLUGIN_CONFIG"

LifecycleStatus = Literal["ok", "error"]


class _Event:
    __slots__ = ()

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class ValidateStartEvent(_Event):
    """A record shape is about to be checked."""

    shape: str
    field_count: int
    has_custom_diff: bool


@dataclass(frozen=True, slots=True)
class ValidateEndEvent(_Event):
    """A record shape was checked; ``issue_kinds`` is empty when it is usable."""

    shape: str
    status: LifecycleStatus
    issue_count: int = 0
    issue_kinds: tuple[str, ...] = ()


@dataclass(frozen=True, slots=True)
class DiffStartEvent(_Event):
    shape: str
    active_field_count: int
    has_custom_diff: bool


@dataclass(frozen=True, slots=True)
class DiffEndEvent(_Event):
    """Either ``change_count`` (status ok) or the error raised by an author function."""

    shape: str
    status: LifecycleStatus
    change_count: int | None = None
    error_type: str | None = None
    error_message: str | None = None


class LifecyclePlugin:
    """No-op base for plugins; override the hooks you need (API v1.x)."""

    api_version = PLUGIN_API_VERSION
    name = "lifecycle-plugin"

    def on_validate_start(self, event: ValidateStartEvent) -> None:
        return None

    def on_validate_end(self, event: ValidateEndEvent) -> None:
        return None

    def on_diff_start(self, event: DiffStartEvent) -> None:
        return None

    def on_diff_end(self, event: DiffEndEvent) -> None:
        return None
