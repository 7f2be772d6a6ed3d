"""Data models for validation diagnostics and diff reports."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from cachepack.core.types import Capability, IssueKind


@dataclass(frozen=True, slots=True)
class ValidationIssue:
    """A single definitional problem with a record shape."""

    kind: IssueKind
    shape: str
    message: str
    field: str | None = None
    capability: Capability | None = None
    type_name: str | None = None
    type_parameter: str | None = None

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "shape": self.shape,
            "field": self.field,
            "capability": self.capability,
            "type_name": self.type_name,
            "type_parameter": self.type_parameter,
            "message": self.message,
        }


@dataclass(slots=True)
class DiffReport:
    """Changes between two records of one shape, for CLI and JSON output."""

    shape: str
    changes: list[str] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.changes)

    def to_dict(self) -> dict[str, Any]:
        return {
            "shape": self.shape,
            "changed": self.changed,
            "change_count": len(self.changes),
            "changes": list(self.changes),
        }
