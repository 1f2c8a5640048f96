from __future__ import annotations

from collections.abc import Callable
from pathlib import Path
from typing import Any

import pytest

from logpipe import runtime
from logpipe.domain import PipeSpec, validate_pipe
from tests.fakes import RecordingSink


@pytest.fixture
def recording_sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def spec_factory() -> Callable[..., PipeSpec]:
    def _build(path: str = "/tmp/access_log", facility: str = "local6", severity: str = "info", tag: str = "nginx") -> PipeSpec:
        return validate_pipe(path, facility, severity, tag)

    return _build


@pytest.fixture
def fifo_path(tmp_path: Path) -> Path:
    return tmp_path / "pipe"


@pytest.fixture
def write_config(tmp_path: Path) -> Callable[[str], Path]:
    def _write(text: str) -> Path:
        path = tmp_path / "logpipe.conf"
        path.write_text(text, encoding="utf-8")
        return path

    return _write


@pytest.fixture
def recorded_runs(monkeypatch: pytest.MonkeyPatch) -> list[dict[str, Any]]:
    """Replace :func:`logpipe.runtime.run` and record how the CLI called it."""

    calls: list[dict[str, Any]] = []

    def fake_run(config_path: Path, **kwargs: Any) -> int:
        calls.append({"config_path": config_path, **kwargs})
        return runtime.EXIT_OK

    monkeypatch.setattr(runtime, "run", fake_run)
    return calls
