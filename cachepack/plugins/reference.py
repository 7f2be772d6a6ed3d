"""Reference plugins: an NDJSON trace writer and an in-memory recorder."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path

from cachepack.plugins.base import (
    DiffEndEvent,
    DiffStartEvent,
    LifecyclePlugin,
    ValidateEndEvent,
    ValidateStartEvent,
)
from cachepack.plugins.manager import LifecycleEvent


class _EventSink(LifecyclePlugin):
    """Routes every lifecycle hook to ``_record(hook, event)``."""

    __slots__ = ()

    def on_validate_start(self, event: ValidateStartEvent) -> None:
        self._record("on_validate_start", event)

    def on_validate_end(self, event: ValidateEndEvent) -> None:
        self._record("on_validate_end", event)

    def on_diff_start(self, event: DiffStartEvent) -> None:
        self._record("on_diff_start", event)

    def on_diff_end(self, event: DiffEndEvent) -> None:
        self._record("on_diff_end", event)

    def _record(self, hook: str, event: LifecycleEvent) -> None:
        return None


@dataclass(slots=True)
class LifecycleTracePlugin(_EventSink):
    """Appends one compact JSON line per hook to ``output_path``."""

    output_path: str = ".cachekit/lifecycle-trace.ndjson"
    name: str = "lifecycle-trace"

    def _record(self, hook: str, event: LifecycleEvent) -> None:
        line = json.dumps(
            {"hook": hook, "plugin": self.name, "event": event.to_dict()},
            ensure_ascii=True,
            sort_keys=True,
            separators=(",", ":"),
        )
        path = Path(self.output_path)
        path.parent.mkdir(parents=True, exist_ok=True)
        with path.open("a", encoding="utf-8") as handle:
            handle.write(line + "\n")


@dataclass(slots=True)
class RecordingPlugin(_EventSink):
    """Keeps ``(hook, event)`` pairs in memory."""

    name: str = "recording"
    events: list[tuple[str, LifecycleEvent]] = field(default_factory=list)

    def _record(self, hook: str, event: LifecycleEvent) -> None:
        self.events.append((hook, event))

    def hooks(self) -> list[str]:
        return [hook for hook, _ in self.events]
