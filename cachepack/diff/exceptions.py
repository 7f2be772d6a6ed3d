"""Diff subsystem exceptions."""

from __future__ import annotations

from cachepack.diff.models import ValidationIssue
from cachepack.exceptions import CacheDiffError


class RecordValidationError(CacheDiffError):
    """A record shape is not usable for comparison until its issues are fixed."""

    def __init__(self, shape: str, issues: list[ValidationIssue]) -> None:
        self.shape = shape
        self.issues = list(issues)
        lines = [f"{shape} cannot be diffed ({len(self.issues)} issue(s)):"]
        lines.extend(f"- {issue.message}" for issue in self.issues)
        super().__init__("\n".join(lines))

    @property
    def kinds(self) -> list[str]:
        return [issue.kind for issue in self.issues]
