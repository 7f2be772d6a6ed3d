"""Hook dispatch for lifecycle plugins.

A failing plugin never breaks validation or diffing: its exception is kept as
a ``PluginDiagnostic`` on the manager and surfaced as a ``RuntimeWarning``.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
import warnings

from cachepack.plugins.base import (
    DiffEndEvent,
    DiffStartEvent,
    ValidateEndEvent,
    ValidateStartEvent,
)

LifecycleEvent = ValidateStartEvent | ValidateEndEvent | DiffStartEvent | DiffEndEvent


@dataclass(frozen=True, slots=True)
class PluginDiagnostic:
    """One plugin hook that raised."""

    plugin_name: str
    hook: str
    error_type: str
    message: str
    shape: str | None = None

    def to_dict(self) -> dict[str, str | None]:
        return asdict(self)

    def warning_text(self) -> str:
        return (
            f"CacheKit plugin failure: plugin={self.plugin_name} hook={self.hook} "
            f"error={self.error_type}: {self.message}"
        )


@dataclass(slots=True)
class PluginManager:
    """Fans lifecycle events out to plugins in registration order."""

    plugins: tuple[object, ...] = ()
    diagnostics: list[PluginDiagnostic] = field(default_factory=list)

    @property
    def has_failures(self) -> bool:
        return bool(self.diagnostics)

    def clear_diagnostics(self) -> None:
        self.diagnostics.clear()

    def on_validate_start(self, event: ValidateStartEvent) -> None:
        self._dispatch("on_validate_start", event)

    def on_validate_end(self, event: ValidateEndEvent) -> None:
        self._dispatch("on_validate_end", event)

    def on_diff_start(self, event: DiffStartEvent) -> None:
        self._dispatch("on_diff_start", event)

    def on_diff_end(self, event: DiffEndEvent) -> None:
        self._dispatch("on_diff_end", event)

    def _dispatch(self, hook: str, event: LifecycleEvent) -> None:
        # Plugins may implement any subset of hooks.
        callbacks = [
            (plugin, getattr(plugin, hook))
            for plugin in self.plugins
            if callable(getattr(plugin, hook, None))
        ]
        for plugin, callback in callbacks:
            try:
                callback(event)
            except Exception as error:
                self._record_failure(plugin, hook, event, error)

    def _record_failure(
        self,
        plugin: object,
        hook: str,
        event: LifecycleEvent,
        error: Exception,
    ) -> None:
        diagnostic = PluginDiagnostic(
            plugin_name=str(getattr(plugin, "name", type(plugin).__name__)),
            hook=hook,
            error_type=type(error).__name__,
            message=str(error),
            shape=event.shape,
        )
        self.diagnostics.append(diagnostic)
        warnings.warn(diagnostic.warning_text(), RuntimeWarning, stacklevel=4)
