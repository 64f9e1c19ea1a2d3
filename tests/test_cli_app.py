import importlib
from pathlib import Path

import pytest
from typer.testing import CliRunner

cli_app_module = importlib.import_module("jeko.cli.app")


@pytest.fixture(autouse=True)
def _quiet_logging(monkeypatch) -> None:
    monkeypatch.setattr(cli_app_module, "configure_logging", lambda **_kwargs: None)


def _script(tmp_path: Path, source: str) -> str:
    path = tmp_path / "script.jeko"
    path.write_text(source, encoding="utf-8")
    return str(path)


def test_run_prints_program_output(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", _script(tmp_path, 'print "hello"; print 1 + 1;')])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["hello", "2"]


def test_run_reports_runtime_errors_with_status_one(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", _script(tmp_path, "print missing;")])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Undefined variable 'missing'" in result.output


def test_run_reports_syntax_errors(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", _script(tmp_path, "print 1")])
    assert result.exit_code == 65
    assert "Syntax error" in result.output


def test_run_treats_resolve_errors_as_fatal(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", _script(tmp_path, 'print "never"; return 1;')])
    assert result.exit_code == 70
    assert "Fatal:" in result.output
    assert "never" not in result.output


def test_error_statement_sets_exit_status(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", _script(tmp_path, 'error "boom";')])
    assert result.exit_code == 1
    assert "boom" in result.output


def test_exit_statement_stops_cleanly(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", _script(tmp_path, 'print "a"; exit; print "b";')])
    assert result.exit_code == 0
    assert result.output.splitlines() == ["a"]


def test_run_rejects_missing_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["run", str(tmp_path / "missing.jeko")])
    assert result.exit_code == 2


def test_eval_runs_source_string() -> None:
    result = CliRunner().invoke(cli_app_module.app, ["eval", "var x = 20; print x + 22;", "--no-color"])
    assert result.exit_code == 0
    assert result.output.strip() == "42"


def test_check_resolves_without_running(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["check", _script(tmp_path, 'print "should not run";')])
    assert result.exit_code == 0
    assert result.output.strip() == "ok"


def test_check_reports_resolve_errors(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_app_module.app, ["check", _script(tmp_path, "{ var a; var a; }")])
    assert result.exit_code == 70
    assert "already in scope" in result.output


def test_no_command_starts_the_repl(monkeypatch, tmp_path: Path) -> None:
    called: dict[str, object] = {}

    class _FakeRepl:
        def __init__(self, settings) -> None:
            called["home"] = settings.resolve_home()

        def run(self) -> None:
            called["run"] = True

    monkeypatch.setenv("JEKO_HOME", str(tmp_path / "state"))
    monkeypatch.setattr(cli_app_module, "Repl", _FakeRepl)

    result = CliRunner().invoke(cli_app_module.app, [])
    assert result.exit_code == 0
    assert called == {"home": (tmp_path / "state").resolve(), "run": True}


def test_repl_home_option(monkeypatch, tmp_path: Path) -> None:
    homes: list[Path] = []

    class _FakeRepl:
        def __init__(self, settings) -> None:
            homes.append(settings.resolve_home())

        def run(self) -> None:
            return None

    monkeypatch.setattr(cli_app_module, "Repl", _FakeRepl)

    result = CliRunner().invoke(cli_app_module.app, ["repl", "--home", str(tmp_path / "custom")])
    assert result.exit_code == 0
    assert homes == [(tmp_path / "custom").resolve()]


def test_stack_overflow_is_a_runtime_error() -> None:
    result = CliRunner().invoke(cli_app_module.app, ["eval", "fun down(n) { return down(n + 1); } down(0);"])
    assert result.exit_code == 1
    assert "Error:" in result.output
    assert "Stack overflow" in result.output
