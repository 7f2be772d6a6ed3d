"""Render one field change as a human-readable sentence."""

from __future__ import annotations

from typing import Any

import typer

from cachepack.core.models import CustomRenderer, DefaultDisplay, Renderer
from cachepack.core.types import ValueStyle
from cachepack.diff.models import DiffReport


def format_change(
    name: str,
    old: Any,
    new: Any,
    renderer: Renderer,
    *,
    style: ValueStyle = "plain",
) -> str:
    """Describe a changed field.

    The default renderer produces ``"<name> (<old> to <new>)"``; a custom
    renderer owns the whole sentence.
    """
    if isinstance(renderer, CustomRenderer):
        return renderer.fn(old, new)
    return f"{name} ({render_value(old, renderer, style=style)} to {render_value(new, renderer, style=style)})"


def render_value(value: Any, renderer: DefaultDisplay, *, style: ValueStyle = "plain") -> str:
    text = renderer.display(value) if renderer.display is not None else str(value)
    return style_value(text, style)


def style_value(text: str, style: ValueStyle) -> str:
    if style == "backtick":
        return f"`{text}`"
    if style == "color":
        return typer.style(text, fg=typer.colors.YELLOW)
    return text


def render_diff_report(report: DiffReport) -> str:
    if not report.changes:
        return f"{report.shape}: no changes"
    lines = [f"{report.shape}: {len(report.changes)} change(s)"]
    lines.extend(f"- {change}" for change in report.changes)
    return "\n".join(lines)
