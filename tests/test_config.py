from __future__ import annotations

from collections.abc import Callable
from pathlib import Path

import pytest

from logpipe import config as config_module
from logpipe.config import EXAMPLE_CONFIG, RawPipe, load_config, load_pipe_specs, parse_config, resolve_config_path, usage_text
from logpipe.domain import ConfigurationError, Facility, Severity
from tests.os_markers import OS_AGNOSTIC

pytestmark = [OS_AGNOSTIC]

WriteConfig = Callable[[str], Path]


def test_example_config_parses_into_two_pipes() -> None:
    pipes = parse_config(EXAMPLE_CONFIG)

    assert pipes == [
        RawPipe(path="/tmp/access_log", facility="local6", severity="info", tag="nginx"),
        RawPipe(path="/tmp/error_log", facility="local6", severity="err", tag="nginx"),
    ]


def test_load_pipe_specs_validates_every_entry(write_config: WriteConfig) -> None:
    specs = load_pipe_specs(write_config(EXAMPLE_CONFIG))

    assert [(spec.facility, spec.severity) for spec in specs] == [
        (Facility.LOCAL6, Severity.INFO),
        (Facility.LOCAL6, Severity.ERR),
    ]
    assert [spec.priority for spec in specs] == [182, 179]


def test_unknown_facility_rejects_the_whole_configuration(write_config: WriteConfig) -> None:
    path = write_config(EXAMPLE_CONFIG + '\n\n[[pipe]]\npath = "/tmp/x"\nfacility = "local9"\nseverity = "info"\n')

    with pytest.raises(ConfigurationError, match=r"/tmp/x has unknown facility \(local9\)"):
        load_pipe_specs(path)


def test_empty_configuration_yields_no_pipes(write_config: WriteConfig) -> None:
    assert load_pipe_specs(write_config("")) == []


def test_missing_file_is_a_configuration_error(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError, match="Cannot read configuration"):
        load_config(tmp_path / "absent.conf")


def test_invalid_toml_is_a_configuration_error(write_config: WriteConfig) -> None:
    with pytest.raises(ConfigurationError, match="not valid TOML"):
        load_config(write_config("[[pipe]\npath = "))


def test_pipe_must_be_an_array_of_tables(write_config: WriteConfig) -> None:
    with pytest.raises(ConfigurationError, match="array of tables"):
        load_config(write_config('pipe = "nope"\n'))


def test_non_string_fields_are_rejected(write_config: WriteConfig) -> None:
    with pytest.raises(ConfigurationError, match="non-string severity"):
        load_config(write_config('[[pipe]]\npath = "/tmp/p"\nfacility = "user"\nseverity = 6\n'))


def test_missing_tag_is_allowed(write_config: WriteConfig) -> None:
    (spec,) = load_pipe_specs(write_config('[[pipe]]\npath = "/tmp/p"\nfacility = "user"\nseverity = "info"\n'))

    assert spec.tag == ""


def test_config_path_precedence(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv(config_module.CONFIG_ENV_VAR, raising=False)
    assert resolve_config_path() == Path("/etc/logpipe.conf")

    monkeypatch.setenv(config_module.CONFIG_ENV_VAR, "/srv/logpipe.toml")
    assert resolve_config_path() == Path("/srv/logpipe.toml")
    assert resolve_config_path("/opt/explicit.conf") == Path("/opt/explicit.conf")


def test_usage_text_shows_example_and_location() -> None:
    text = usage_text("/etc/logpipe.conf")

    assert text.startswith("Write configuration file like this:\n---\n[[pipe]]")
    assert 'tag = "nginx"\n---\nsave in /etc/logpipe.conf\n' in text
