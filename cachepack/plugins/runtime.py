"""Which plugin manager validation and diffing report to.

Lookup order: a manager activated with ``use_plugin_manager`` in the current
context, then the config file named by ``CACHEKIT_PLUGIN_CONFIG``, then a
manager with no plugins.
"""

from __future__ import annotations

from contextlib import contextmanager
from contextvars import ContextVar
import os
from pathlib import Path
from typing import Iterable, Iterator

from cachepack.plugins.base import PLUGIN_CONFIG_ENV_VAR
from cachepack.plugins.loader import load_plugin_manager_from_file
from cachepack.plugins.manager import PluginManager

_context_manager: ContextVar[PluginManager | None] = ContextVar("cachekit_plugin_manager", default=None)
_NO_PLUGINS = PluginManager()
# Keyed by config path; only the most recent path is kept.
_env_managers: dict[str, PluginManager] = {}


def get_active_plugin_manager() -> PluginManager:
    active = _context_manager.get()
    if active is not None:
        return active
    return _env_plugin_manager() or _NO_PLUGINS


@contextmanager
def use_plugin_manager(manager: PluginManager | Iterable[object]) -> Iterator[PluginManager]:
    """Report to ``manager`` (or a manager around the given plugins) inside the block."""
    if not isinstance(manager, PluginManager):
        manager = PluginManager(plugins=tuple(manager))
    token = _context_manager.set(manager)
    try:
        yield manager
    finally:
        _context_manager.reset(token)


@contextmanager
def use_plugins_from_config(path: str | Path) -> Iterator[PluginManager]:
    with use_plugin_manager(load_plugin_manager_from_file(path)) as manager:
        yield manager


def reset_plugin_runtime_cache() -> None:
    """Forget managers loaded from the environment (for tests)."""
    _env_managers.clear()


def _env_plugin_manager() -> PluginManager | None:
    config_path = os.environ.get(PLUGIN_CONFIG_ENV_VAR, "").strip()
    if not config_path:
        return None
    if config_path not in _env_managers:
        manager = load_plugin_manager_from_file(config_path)
        _env_managers.clear()
        _env_managers[config_path] = manager
    return _env_managers[config_path]
