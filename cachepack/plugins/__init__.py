"""Plugin subsystem for CacheKit lifecycle extensions."""

from cachepack.plugins.base import (
    PLUGIN_API_VERSION,
    PLUGIN_CONFIG_ENV_VAR,
    PLUGIN_CONFIG_VERSION,
    DiffEndEvent,
    DiffStartEvent,
    LifecyclePlugin,
    ValidateEndEvent,
    ValidateStartEvent,
)
from cachepack.plugins.exceptions import PluginConfigError, PluginError, PluginLoadError
from cachepack.plugins.loader import (
    PluginSpec,
    build_plugin_manager,
    load_plugin_manager_from_file,
    parse_plugin_config,
)
from cachepack.plugins.manager import PluginDiagnostic, PluginManager
from cachepack.plugins.reference import LifecycleTracePlugin, RecordingPlugin
from cachepack.plugins.runtime import (
    get_active_plugin_manager,
    reset_plugin_runtime_cache,
    use_plugin_manager,
    use_plugins_from_config,
)

__all__ = [
    "PLUGIN_API_VERSION",
    "PLUGIN_CONFIG_VERSION",
    "PLUGIN_CONFIG_ENV_VAR",
    "PluginError",
    "PluginConfigError",
    "PluginLoadError",
    "ValidateStartEvent",
    "ValidateEndEvent",
    "DiffStartEvent",
    "DiffEndEvent",
    "LifecyclePlugin",
    "PluginDiagnostic",
    "PluginManager",
    "PluginSpec",
    "LifecycleTracePlugin",
    "RecordingPlugin",
    "build_plugin_manager",
    "load_plugin_manager_from_file",
    "parse_plugin_config",
    "get_active_plugin_manager",
    "use_plugin_manager",
    "use_plugins_from_config",
    "reset_plugin_runtime_cache",
]
