import json
from pathlib import Path

from typer.testing import CliRunner

from cachepack.cli.app import app


def _write_record(path: Path, payload: dict) -> Path:
    path.write_text(json.dumps(payload), encoding="utf-8")
    return path


def test_cli_diff_text_output(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"ruby_version": "3.3.0", "os_version": "22.04"})
    new = _write_record(
        tmp_path / "new.json",
        {"ruby_version": "3.4.0", "os_version": "24.04", "changed_by": "ci"},
    )

    runner = CliRunner()
    result = runner.invoke(app, ["diff", "sample_records:Metadata", str(old), str(new)])

    assert result.exit_code == 0
    assert result.stdout.strip().splitlines() == [
        "Metadata: 2 change(s)",
        "- Ruby version (3.3.0 to 3.4.0)",
        "- OS (ubuntu-22.04 to ubuntu-24.04)",
    ]


def test_cli_diff_reports_no_changes(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"ruby_version": "3.3.0", "changed_by": "alice"})
    new = _write_record(tmp_path / "new.json", {"ruby_version": "3.3.0", "changed_by": "bob"})

    runner = CliRunner()
    result = runner.invoke(app, ["diff", "sample_records:Metadata", str(old), str(new), "--fail-on-change"])

    assert result.exit_code == 0
    assert result.stdout.strip() == "Metadata: no changes"


def test_cli_diff_fail_on_change(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"ruby_version": "3.3.0"})
    new = _write_record(tmp_path / "new.json", {"ruby_version": "3.4.0"})

    runner = CliRunner()
    result = runner.invoke(app, ["diff", "sample_records:Metadata", str(old), str(new), "--fail-on-change"])

    assert result.exit_code == 1
    assert "Ruby version (3.3.0 to 3.4.0)" in result.stdout


def test_cli_diff_json_output(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"stack": "heroku-22", "build_id": "1"})
    new = _write_record(tmp_path / "new.json", {"stack": "heroku-24", "build_id": "2"})

    runner = CliRunner()
    result = runner.invoke(app, ["diff", "sample_records:SETTINGS", str(old), str(new), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "ok"
    assert payload["shape"] == "Settings"
    assert payload["changed"] is True
    assert payload["change_count"] == 1
    assert payload["changes"] == ["stack (heroku-22 to heroku-24)"]
    assert payload["target"] == "sample_records:SETTINGS"


def test_cli_diff_uses_record_value_style_and_override(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"version": "1.0", "install_dir": "/opt/a"})
    new = _write_record(tmp_path / "new.json", {"version": "1.1", "install_dir": "/opt/a"})

    runner = CliRunner()
    styled = runner.invoke(app, ["diff", "sample_records:Toolchain", str(old), str(new)])
    plain = runner.invoke(app, ["diff", "sample_records:Toolchain", str(old), str(new), "--style", "plain"])

    assert styled.exit_code == 0
    assert "- version (`1.0` to `1.1`)" in styled.stdout
    assert "- version (1.0 to 1.1)" in plain.stdout


def test_cli_diff_color_style_respects_no_color(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"ruby_version": "3.3.0"})
    new = _write_record(tmp_path / "new.json", {"ruby_version": "3.4.0"})

    runner = CliRunner()
    colored = runner.invoke(
        app,
        ["diff", "sample_records:Metadata", str(old), str(new), "--style", "color"],
        color=True,
    )
    plain = runner.invoke(
        app,
        ["--no-color", "diff", "sample_records:Metadata", str(old), str(new), "--style", "color"],
    )

    assert colored.exit_code == 0
    assert "\x1b[" in colored.stdout
    assert "3.4.0" in colored.stdout
    assert "\x1b[" not in plain.stdout
    assert "- Ruby version (3.3.0 to 3.4.0)" in plain.stdout


def test_cli_diff_generic_alias_target(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"label": "cache", "content": "a"})
    new = _write_record(tmp_path / "new.json", {"label": "cache", "content": "b"})

    runner = CliRunner()
    result = runner.invoke(app, ["diff", "sample_records:StrBox", str(old), str(new)])

    assert result.exit_code == 0
    assert result.stdout.strip().splitlines() == ["Box[str]: 1 change(s)", "- content (a to b)"]


def test_cli_diff_errors_are_reported(tmp_path: Path) -> None:
    good = _write_record(tmp_path / "good.json", {"stack": "heroku-24"})
    missing_field = _write_record(tmp_path / "missing.json", {"build_id": "3"})
    not_object = _write_record(tmp_path / "list.json", [1, 2])  # type: ignore[arg-type]
    unknown_key = _write_record(tmp_path / "unknown.json", {"ruby_version": "3.4.0", "python": "3.12"})

    runner = CliRunner()
    cases = [
        (["diff", "sample_records:SETTINGS", str(good), str(tmp_path / "absent.json")], "record file not found"),
        (["diff", "sample_records:SETTINGS", str(good), str(missing_field)], "record is missing field(s): stack"),
        (["diff", "sample_records:SETTINGS", str(good), str(not_object)], "must contain a JSON object"),
        (["diff", "sample_records:Metadata", str(unknown_key), str(unknown_key)], "cannot build Metadata"),
        (["diff", "sample_records:EMPTY", str(good), str(good)], "Empty cannot be diffed"),
    ]

    for args, message in cases:
        result = runner.invoke(app, args)
        assert result.exit_code == 1, args
        assert "diff failed:" in result.output
        assert message in result.output


def test_cli_diff_rejects_an_invalid_style_as_usage_error(tmp_path: Path) -> None:
    good = _write_record(tmp_path / "good.json", {"stack": "heroku-24"})

    runner = CliRunner()
    text = runner.invoke(app, ["diff", "sample_records:SETTINGS", str(good), str(good), "--style", "loud"])
    as_json = runner.invoke(
        app,
        ["diff", "sample_records:SETTINGS", str(good), str(good), "--style", "loud", "--json"],
    )

    assert text.exit_code == 2
    assert "diff failed: invalid style 'loud'. Expected plain, backtick, color." in text.output
    assert as_json.exit_code == 2
    payload = json.loads(as_json.stdout.strip())
    assert payload["status"] == "error"
    assert payload["exit_code"] == 2


def test_cli_diff_binds_plain_generic_target_from_values(tmp_path: Path) -> None:
    old = _write_record(tmp_path / "old.json", {"label": "cache", "content": "a"})
    new = _write_record(tmp_path / "new.json", {"label": "cache", "content": "b"})

    runner = CliRunner()
    result = runner.invoke(app, ["diff", "sample_records:Box", str(old), str(new)])

    assert result.exit_code == 0
    assert result.stdout.strip().splitlines() == ["Box[str]: 1 change(s)", "- content (a to b)"]


def test_cli_diff_error_json_payload(tmp_path: Path) -> None:
    good = _write_record(tmp_path / "good.json", {"stack": "heroku-24"})

    runner = CliRunner()
    result = runner.invoke(
        app,
        ["diff", "sample_records:SETTINGS", str(good), str(tmp_path / "absent.json"), "--json"],
    )

    assert result.exit_code == 1
    payload = json.loads(result.stdout.strip())
    assert payload["status"] == "error"
    assert payload["exit_code"] == 1
    assert payload["target"] == "sample_records:SETTINGS"
    assert payload["new_path"].endswith("absent.json")
