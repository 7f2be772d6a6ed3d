"""Resolve ``module:attribute`` CLI targets to record shapes and instances."""

from __future__ import annotations

import importlib
import json
from pathlib import Path
from typing import Any, Mapping

from cachepack.binding import resolve_descriptor
from cachepack.core.models import RecordDescriptor
from cachepack.exceptions import CacheDiffError


class TargetLoadError(CacheDiffError):
    """A CLI target or record payload could not be loaded."""


def load_target(spec: str) -> Any:
    """Import ``package.module:Attr`` (``Attr`` may be dotted)."""
    module_name, _, attribute = spec.partition(":")
    if not module_name or not attribute:
        raise TargetLoadError(f"target must be 'module:attribute', got {spec!r}")

    try:
        module = importlib.import_module(module_name)
    except ImportError as error:
        raise TargetLoadError(f"cannot import module '{module_name}': {error}") from error

    target: Any = module
    for part in attribute.split("."):
        try:
            target = getattr(target, part)
        except AttributeError as error:
            raise TargetLoadError(f"'{module_name}' has no attribute '{attribute}'") from error
    return target


def target_descriptor(target: Any) -> RecordDescriptor:
    try:
        return resolve_descriptor(target)
    except TypeError as error:
        raise TargetLoadError(str(error)) from error


def read_payload(path: Path) -> dict[str, Any]:
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except FileNotFoundError as error:
        raise TargetLoadError(f"record file not found: {path}") from error
    except json.JSONDecodeError as error:
        raise TargetLoadError(f"invalid JSON in {path}: {error}") from error
    if not isinstance(raw, dict):
        raise TargetLoadError(f"record file must contain a JSON object: {path}")
    return raw


def build_instance(target: Any, payload: Mapping[str, Any]) -> Any:
    """Instantiate the target from a JSON object; bare descriptors diff mappings directly."""
    if isinstance(target, RecordDescriptor):
        missing = [item.name for item in target.active_fields if item.name not in payload]
        if missing:
            raise TargetLoadError(f"record is missing field(s): {', '.join(missing)}")
        return dict(payload)

    # Parameterized aliases are callable and tag the instance with its type arguments.
    try:
        return target(**payload)
    except TypeError as error:
        raise TargetLoadError(f"cannot build {getattr(target, '__qualname__', target)}: {error}") from error
