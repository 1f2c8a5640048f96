"""CLI behaviour coverage for the click command group."""

from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import lib_cli_exit_tools
import pytest
from click.testing import CliRunner

from logpipe import __init__conf__
from logpipe import cli as cli_mod
from logpipe import runtime
from logpipe.application.use_cases import FailurePolicy
from logpipe.config import EXAMPLE_CONFIG

WriteConfig = Callable[[str], Path]


def test_info_command_prints_metadata() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["info"])

    assert result.exit_code == 0
    assert result.output == runtime.summary_info()
    assert "Info for logpipe" in result.output


def test_version_option() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["--version"])

    assert result.exit_code == 0
    assert result.output.strip() == f"logpipe version {__init__conf__.version}"


def test_without_subcommand_runs_forwarding(recorded_runs: list[dict[str, Any]], write_config: WriteConfig) -> None:
    path = write_config(EXAMPLE_CONFIG)

    result = CliRunner().invoke(cli_mod.cli, ["--config", str(path)])

    assert result.exit_code == 0
    assert recorded_runs == [{"config_path": path, "sink": "syslog", "policy": FailurePolicy.ISOLATE, "reopen": True}]


def test_run_options_are_forwarded(recorded_runs: list[dict[str, Any]], write_config: WriteConfig) -> None:
    path = write_config(EXAMPLE_CONFIG)

    result = CliRunner().invoke(cli_mod.cli, ["--config", str(path), "--sink", "journald", "--fail-fast", "run", "--once"])

    assert result.exit_code == 0
    assert recorded_runs[0]["sink"] == "journald"
    assert recorded_runs[0]["policy"] is FailurePolicy.FAIL_FAST
    assert recorded_runs[0]["reopen"] is False


def test_config_path_comes_from_environment(recorded_runs: list[dict[str, Any]], write_config: WriteConfig) -> None:
    path = write_config(EXAMPLE_CONFIG)

    result = CliRunner().invoke(cli_mod.cli, ["run"], env={"LOGPIPE_CONFIG": str(path)})

    assert result.exit_code == 0
    assert recorded_runs[0]["config_path"] == path


def test_worker_failure_maps_to_exit_code(monkeypatch: pytest.MonkeyPatch, write_config: WriteConfig) -> None:
    monkeypatch.setattr(runtime, "run", lambda *args, **kwargs: runtime.EXIT_WORKER_FAILED)

    result = CliRunner().invoke(cli_mod.cli, ["--config", str(write_config(EXAMPLE_CONFIG)), "run"])

    assert result.exit_code == runtime.EXIT_WORKER_FAILED


def test_invalid_configuration_prints_usage_and_exits_1(write_config: WriteConfig) -> None:
    path = write_config('[[pipe]]\npath = "/tmp/p"\nfacility = "local6"\nseverity = "loud"\n')

    result = CliRunner().invoke(cli_mod.cli, ["--config", str(path), "run"])

    assert result.exit_code == 1
    assert "Configuration error: /tmp/p has unknown severity (loud)" in result.output
    assert "Write configuration file like this:" in result.output
    assert f"save in {path}" in result.output


def test_missing_configuration_prints_usage_and_exits_1(tmp_path: Path) -> None:
    result = CliRunner().invoke(cli_mod.cli, ["--config", str(tmp_path / "absent.conf")])

    assert result.exit_code == 1
    assert "Cannot read configuration" in result.output
    assert "[[pipe]]" in result.output


def test_check_lists_pipes_with_priorities(write_config: WriteConfig) -> None:
    result = CliRunner().invoke(cli_mod.cli, ["--config", str(write_config(EXAMPLE_CONFIG)), "check"])

    assert result.exit_code == 0
    assert "local6" in result.output
    assert "182" in result.output
    assert "179" in result.output


def test_check_reports_invalid_configuration(write_config: WriteConfig) -> None:
    path = write_config('[[pipe]]\npath = "/tmp/p"\nseverity = "info"\n')

    result = CliRunner().invoke(cli_mod.cli, ["--config", str(path), "check"])

    assert result.exit_code == 1
    assert "/tmp/p has no facility set" in result.output


def test_example_config_command() -> None:
    result = CliRunner().invoke(cli_mod.cli, ["--config", "/etc/logpipe.conf", "example-config"])

    assert result.exit_code == 0
    assert EXAMPLE_CONFIG in result.output
    assert result.output.rstrip().endswith("save in /etc/logpipe.conf")


def test_traceback_option_updates_exit_tools_config(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", False, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", False, raising=False)

    result = CliRunner().invoke(cli_mod.cli, ["--traceback", "info"])

    assert result.exit_code == 0
    assert lib_cli_exit_tools.config.traceback is True
    assert lib_cli_exit_tools.config.traceback_force_color is True


def test_main_restores_traceback_preferences(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback", False, raising=False)
    monkeypatch.setattr(lib_cli_exit_tools.config, "traceback_force_color", False, raising=False)

    recorded: dict[str, bool] = {}

    def fake_run_cli(command: Callable[..., int], argv: list[str] | None = None, *, prog_name: str | None = None, **_: object) -> int:
        result = CliRunner().invoke(command, argv or [])
        if result.exception is not None and not isinstance(result.exception, SystemExit):
            raise result.exception
        recorded["traceback"] = lib_cli_exit_tools.config.traceback
        recorded["prog_name"] = prog_name
        return result.exit_code

    monkeypatch.setattr(lib_cli_exit_tools, "run_cli", fake_run_cli)

    exit_code = cli_mod.main(["--traceback", "info"])

    assert exit_code == 0
    assert recorded == {"traceback": True, "prog_name": __init__conf__.shell_command}
    assert lib_cli_exit_tools.config.traceback is False
    assert lib_cli_exit_tools.config.traceback_force_color is False
