"""Versioned plugin configuration loader.

Config files are JSON objects::

    {
      "config_version": 1,
      "plugins": [
        {"entrypoint": "cachepack.plugins.reference:LifecycleTracePlugin",
         "options": {"output_path": "trace.ndjson"}}
      ]
    }
"""

from __future__ import annotations

import importlib
import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping

from cachepack.plugins.base import PLUGIN_API_VERSION, PLUGIN_CONFIG_VERSION
from cachepack.plugins.exceptions import PluginConfigError, PluginLoadError
from cachepack.plugins.manager import PluginManager

_ENTRY_KEYS = frozenset({"entrypoint", "options", "enabled"})


@dataclass(frozen=True, slots=True)
class PluginSpec:
    """One validated plugin entry from a config file."""

    index: int
    entrypoint: str
    options: dict[str, Any] = field(default_factory=dict)
    enabled: bool = True

    @property
    def module_name(self) -> str:
        return self.entrypoint.partition(":")[0]

    @property
    def attribute(self) -> str:
        return self.entrypoint.partition(":")[2]


def load_plugin_manager_from_file(path: str | Path) -> PluginManager:
    """Load a plugin manager from a JSON config file."""
    config_path = Path(path)
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as error:
        raise PluginConfigError(f"Invalid plugin config JSON ({config_path}): {error}") from error
    return build_plugin_manager(parse_plugin_config(raw, source=str(config_path)))


def parse_plugin_config(raw: Any, *, source: str = "<memory>") -> list[PluginSpec]:
    """Validate a decoded config payload into plugin specs."""
    if not isinstance(raw, Mapping):
        raise PluginConfigError(f"Plugin config must be a JSON object ({source}).")

    version = raw.get("config_version")
    if version != PLUGIN_CONFIG_VERSION:
        raise PluginConfigError(
            f"Unsupported plugin config version {version!r}; expected {PLUGIN_CONFIG_VERSION}."
        )

    entries = raw.get("plugins")
    if not isinstance(entries, list):
        raise PluginConfigError("Plugin config key 'plugins' must be a JSON array.")

    return [_parse_entry(entry, index=index) for index, entry in enumerate(entries, start=1)]


def build_plugin_manager(specs: list[PluginSpec]) -> PluginManager:
    plugins = tuple(_instantiate(spec) for spec in specs if spec.enabled)
    return PluginManager(plugins=plugins)


def _parse_entry(entry: Any, *, index: int) -> PluginSpec:
    if not isinstance(entry, Mapping):
        raise PluginConfigError(f"Plugin entry #{index} must be a JSON object.")

    unknown = sorted(set(entry) - _ENTRY_KEYS)
    if unknown:
        raise PluginConfigError(
            f"Plugin entry #{index} contains unsupported keys: {', '.join(unknown)}"
        )

    enabled = entry.get("enabled", True)
    if not isinstance(enabled, bool):
        raise PluginConfigError(f"Plugin entry #{index} key 'enabled' must be boolean.")

    entrypoint = entry.get("entrypoint")
    module_name, _, attribute = str(entrypoint).partition(":")
    if not isinstance(entrypoint, str) or not module_name or not attribute:
        raise PluginConfigError(
            f"Plugin entry #{index} key 'entrypoint' must be 'module:attribute'."
        )

    options = entry.get("options", {})
    if not isinstance(options, Mapping):
        raise PluginConfigError(f"Plugin entry #{index} key 'options' must be a JSON object.")

    return PluginSpec(index=index, entrypoint=entrypoint, options=dict(options), enabled=enabled)


def _instantiate(spec: PluginSpec) -> object:
    try:
        module = importlib.import_module(spec.module_name)
    except Exception as error:
        raise PluginLoadError(
            f"Plugin entry #{spec.index} failed to import module '{spec.module_name}': {error}"
        ) from error

    target = getattr(module, spec.attribute, None)
    if target is None:
        raise PluginLoadError(
            f"Plugin entry #{spec.index} could not find attribute "
            f"'{spec.attribute}' in '{spec.module_name}'."
        )

    if callable(target):
        try:
            plugin = target(**spec.options)
        except Exception as error:
            raise PluginLoadError(
                f"Plugin entry #{spec.index} failed to instantiate '{spec.entrypoint}' "
                f"with options {sorted(spec.options)}: {error}"
            ) from error
    elif spec.options:
        raise PluginLoadError(
            f"Plugin entry #{spec.index} uses non-callable '{spec.entrypoint}' "
            "and cannot accept options."
        )
    else:
        plugin = target

    declared = str(getattr(plugin, "api_version", PLUGIN_API_VERSION))
    expected_major = PLUGIN_API_VERSION.split(".", 1)[0]
    if declared.split(".", 1)[0] != expected_major:
        raise PluginLoadError(
            f"Plugin entry #{spec.index} '{spec.entrypoint}' declares unsupported api_version "
            f"{declared!r}; supported major version is {expected_major}."
        )
    return plugin
