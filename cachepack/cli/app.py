import json
from importlib.metadata import PackageNotFoundError, version as package_version
from dataclasses import dataclass
from pathlib import Path
from typing import Any, NoReturn, Optional

import typer

from cachepack.binding import bind_instance
from cachepack.cli.targets import (
    TargetLoadError,
    build_instance,
    load_target,
    read_payload,
    target_descriptor,
)
from cachepack.core.types import VALUE_STYLES
from cachepack.diff import DiffReport, RecordValidationError, diff, ensure_valid, render_diff_report
from cachepack.plugins import PluginError

app = typer.Typer(help="CacheKit CLI: validate record shapes and explain cache invalidation.")


@dataclass(slots=True)
class _OutputOptions:
    quiet: bool = False
    no_color: bool = False
    stable_json: bool = True


_OUTPUT_OPTIONS = _OutputOptions()


def _resolve_cli_version() -> str:
    try:
        return package_version("cachekit")
    except PackageNotFoundError:
        from cachekit import __version__ as local_version

        return local_version


def _version_callback(value: bool) -> None:
    if not value:
        return
    typer.echo(_resolve_cli_version(), color=False)
    raise typer.Exit()


@app.callback()
def app_options(
    version: bool = typer.Option(
        False,
        "--version",
        callback=_version_callback,
        is_eager=True,
        help="Show CacheKit version and exit.",
    ),
    quiet: bool = typer.Option(
        False,
        "--quiet",
        help="Suppress non-error text output.",
    ),
    no_color: bool = typer.Option(
        False,
        "--no-color",
        help="Disable ANSI color output.",
    ),
    stable_json: bool = typer.Option(
        True,
        "--stable-json/--pretty-json",
        help="Emit stable compact JSON (or pretty JSON).",
    ),
) -> None:
    """Output settings shared by every command."""
    _OUTPUT_OPTIONS.quiet = quiet
    _OUTPUT_OPTIONS.no_color = no_color
    _OUTPUT_OPTIONS.stable_json = stable_json


def _echo(message: str, *, err: bool = False) -> None:
    if _OUTPUT_OPTIONS.quiet and not err:
        return
    typer.echo(message, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _echo_json(payload: dict[str, Any], *, err: bool = False) -> None:
    layout: dict[str, Any] = (
        {"separators": (",", ":")} if _OUTPUT_OPTIONS.stable_json else {"indent": 2}
    )
    rendered = json.dumps(payload, ensure_ascii=True, sort_keys=True, **layout)
    typer.echo(rendered, err=err, color=not _OUTPUT_OPTIONS.no_color)


def _fail(command: str, error: Exception, *, json_output: bool, **context: Any) -> NoReturn:
    message = f"{command} failed: {error}"
    if json_output:
        _echo_json({"status": "error", "exit_code": 1, "message": message, **context})
    else:
        _echo(message, err=True)
    raise typer.Exit(code=1) from error


def _check_target(spec: str) -> dict[str, Any]:
    result: dict[str, Any] = {"target": spec, "shape": None, "valid": True, "issues": []}
    try:
        descriptor = target_descriptor(load_target(spec))
        result["shape"] = descriptor.shape
        ensure_valid(descriptor)
    except RecordValidationError as error:
        result["shape"] = error.shape
        result["valid"] = False
        result["issues"] = [issue.to_dict() for issue in error.issues]
    return result


@app.command()
def check(
    targets: list[str] = typer.Argument(..., help="Record shapes as 'module:attribute'."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable validation output.",
    ),
) -> None:
    """Validate record shapes before any comparison runs."""
    try:
        results = [_check_target(spec) for spec in targets]
    except (TargetLoadError, PluginError) as error:
        _fail("check", error, json_output=json_output, targets=list(targets))

    failed = [result for result in results if not result["valid"]]
    exit_code = 1 if failed else 0

    if json_output:
        _echo_json(
            {
                "status": "fail" if failed else "ok",
                "exit_code": exit_code,
                "results": results,
            }
        )
    else:
        for result in results:
            if result["valid"]:
                _echo(f"ok {result['target']} ({result['shape']})")
                continue
            _echo(f"fail {result['target']}: {len(result['issues'])} issue(s)", err=True)
            for issue in result["issues"]:
                _echo(f"- [{issue['kind']}] {issue['message']}", err=True)

    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command(name="diff")
def diff_command(
    target: str = typer.Argument(..., help="Record shape as 'module:attribute'."),
    old: Path = typer.Argument(..., help="JSON file with the previous record."),
    new: Path = typer.Argument(..., help="JSON file with the current record."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable diff output.",
    ),
    fail_on_change: bool = typer.Option(
        False,
        "--fail-on-change",
        help="Exit with code 1 when the records differ.",
    ),
    style: Optional[str] = typer.Option(
        None,
        "--style",
        help=f"Value style: {', '.join(VALUE_STYLES)} (default: the record's own).",
    ),
) -> None:
    """Explain what changed between two records of one shape."""
    context = {"target": target, "old_path": str(old), "new_path": str(new)}
    if style is not None and style not in VALUE_STYLES:
        message = f"diff failed: invalid style '{style}'. Expected {', '.join(VALUE_STYLES)}."
        if json_output:
            _echo_json({"status": "error", "exit_code": 2, "message": message, **context})
        else:
            _echo(message, err=True)
        raise typer.Exit(code=2)

    try:
        loaded = load_target(target)
        old_record = build_instance(loaded, read_payload(old))
        new_record = build_instance(loaded, read_payload(new))
        # Generic shapes are bound from the values the records hold.
        generic = target_descriptor(loaded)
        bind_instance(generic, old_record)
        descriptor = bind_instance(generic, new_record)
        value_style = style or descriptor.value_style
        if value_style == "color" and (_OUTPUT_OPTIONS.no_color or json_output):
            value_style = "plain"
        report = DiffReport(
            shape=descriptor.shape,
            changes=diff(descriptor, old_record, new_record, style=value_style),
        )
    except (TargetLoadError, RecordValidationError, PluginError) as error:
        _fail("diff", error, json_output=json_output, **context)

    exit_code = 1 if fail_on_change and report.changed else 0
    if json_output:
        _echo_json(
            {
                **report.to_dict(),
                "status": "ok",
                "exit_code": exit_code,
                **context,
            }
        )
    else:
        _echo(render_diff_report(report))

    if exit_code:
        raise typer.Exit(code=exit_code)


@app.command()
def describe(
    target: str = typer.Argument(..., help="Record shape as 'module:attribute'."),
    json_output: bool = typer.Option(
        False,
        "--json",
        help="Emit machine-readable field listing.",
    ),
) -> None:
    """List how each field of a record shape takes part in the diff."""
    try:
        descriptor = target_descriptor(load_target(target))
    except (TargetLoadError, RecordValidationError, PluginError) as error:
        _fail("describe", error, json_output=json_output, target=target)

    payload = descriptor.describe()
    if json_output:
        _echo_json({"status": "ok", "exit_code": 0, **payload})
        return

    _echo(f"shape: {payload['shape']}")
    if payload["type_parameters"]:
        _echo(f"type parameters: {', '.join(payload['type_parameters'])}")
    if payload["type_arguments"]:
        _echo(f"type arguments: {', '.join(payload['type_arguments'])}")
    _echo(f"custom diff: {payload['custom_diff'] or '<none>'}")
    _echo(f"value style: {payload['value_style']}")
    for item in payload["fields"]:
        _echo(
            f"- {item['name']}: {item['type']} [{item['participation']}] "
            f"label={item['label']} compare={item['comparison']} render={item['rendering']}"
        )


def main() -> None:
    app()
