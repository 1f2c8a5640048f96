"""Configuration loading for logpipe.

Purpose
-------
Read the TOML pipe configuration, turn it into validated
:class:`~logpipe.domain.PipeSpec` values, and provide the example template
printed when configuration is missing or wrong. Also hosts the optional
``.env`` support shared by the CLI and helper scripts.

Contents
--------
* :data:`DEFAULT_CONFIG_PATH`, :data:`CONFIG_ENV_VAR`, :data:`DOTENV_ENV_VAR`.
* :class:`RawPipe` - unvalidated ``[[pipe]]`` entry.
* :func:`load_config` / :func:`load_pipe_specs` - file parsing and validation.
* :func:`usage_text` - example configuration with the expected location.
* :func:`enable_dotenv` / :func:`should_use_dotenv` - ``.env`` handling.

Example configuration::

    [[pipe]]
    path = "/tmp/access_log"
    facility = "local6"
    severity = "info"
    tag = "nginx"
"""

from __future__ import annotations

import logging
import os
import tomllib
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

from dotenv import find_dotenv, load_dotenv

from logpipe.domain import ConfigurationError, PipeSpec, validate_pipe

LOGGER = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("/etc/logpipe.conf")
CONFIG_ENV_VAR = "LOGPIPE_CONFIG"
DOTENV_ENV_VAR = "LOGPIPE_USE_DOTENV"

EXAMPLE_CONFIG = """\
[[pipe]]
path = "/tmp/access_log"
facility = "local6"
severity = "info"
tag = "nginx"

[[pipe]]
path = "/tmp/error_log"
facility = "local6"
severity = "err"
tag = "nginx\""""

_FIELDS = ("path", "facility", "severity", "tag")
_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}

_DOTENV_LOADED: Path | None = None


@dataclass(frozen=True, slots=True)
class RawPipe:
    """One ``[[pipe]]`` table as written by the operator."""

    path: str | None
    facility: str | None
    severity: str | None
    tag: str | None

    def validate(self) -> PipeSpec:
        return validate_pipe(self.path, self.facility, self.severity, self.tag)


def resolve_config_path(explicit: str | os.PathLike[str] | None = None) -> Path:
    """Return the configuration path: explicit value, environment, then default."""

    if explicit:
        return Path(explicit)
    from_env = os.getenv(CONFIG_ENV_VAR)
    if from_env:
        return Path(from_env)
    return DEFAULT_CONFIG_PATH


def usage_text(config_path: str | os.PathLike[str] = DEFAULT_CONFIG_PATH) -> str:
    """Return the corrective guidance printed on configuration errors.

    Examples
    --------
    >>> print(usage_text("/etc/logpipe.conf").splitlines()[-1])
    save in /etc/logpipe.conf
    """

    return f"Write configuration file like this:\n---\n{EXAMPLE_CONFIG}\n---\nsave in {config_path}\n"


def parse_config(text: str, *, source: str = "<string>") -> list[RawPipe]:
    """Parse TOML ``text`` into :class:`RawPipe` entries.

    Examples
    --------
    >>> [pipe.tag for pipe in parse_config(EXAMPLE_CONFIG)]
    ['nginx', 'nginx']
    >>> parse_config("")
    []
    """

    try:
        document = tomllib.loads(text)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"{source} is not valid TOML: {exc}") from exc

    tables = document.get("pipe", [])
    if not isinstance(tables, list) or not all(isinstance(table, dict) for table in tables):
        raise ConfigurationError(f"{source}: 'pipe' must be an array of tables ([[pipe]])")
    return [_raw_pipe(table, source=source) for table in tables]


def load_config(config_path: str | os.PathLike[str]) -> list[RawPipe]:
    """Read and parse the configuration file at ``config_path``."""

    path = Path(config_path)
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise ConfigurationError(f"Cannot read configuration {path}: {exc.strerror or exc}") from exc
    return parse_config(text, source=str(path))


def load_pipe_specs(config_path: str | os.PathLike[str]) -> list[PipeSpec]:
    """Load ``config_path`` and validate every pipe before returning."""

    specs = [raw.validate() for raw in load_config(config_path)]
    LOGGER.debug("Loaded %d pipe(s) from %s", len(specs), config_path)
    return specs


def _raw_pipe(table: Mapping[str, Any], *, source: str) -> RawPipe:
    path = table.get("path")
    where = path if isinstance(path, str) else "pipe"
    values: dict[str, str | None] = {}
    for field in _FIELDS:
        value = table.get(field)
        if value is not None and not isinstance(value, str):
            raise ConfigurationError(f"{source}: {where} has non-string {field} ({value!r})", path=where)
        values[field] = value
    return RawPipe(**values)


def should_use_dotenv(*, explicit: bool | None = None, env_value: str | None = None) -> bool:
    """Decide whether ``.env`` should be loaded; an explicit flag wins.

    Examples
    --------
    >>> should_use_dotenv(explicit=False, env_value="1")
    False
    >>> should_use_dotenv(env_value="yes")
    True
    >>> should_use_dotenv()
    False
    """

    if explicit is not None:
        return explicit
    if env_value is None:
        return False
    normalised = env_value.strip().lower()
    if normalised in _TRUTHY:
        return True
    if normalised in _FALSY or not normalised:
        return False
    LOGGER.warning("Ignoring unrecognised %s value %r", DOTENV_ENV_VAR, env_value)
    return False


def enable_dotenv(search_from: str | os.PathLike[str] | None = None) -> Path | None:
    """Load the nearest ``.env`` without overriding existing variables.

    Returns the resolved file path, or ``None`` when none was found. The file
    is loaded at most once per process.
    """

    global _DOTENV_LOADED
    if _DOTENV_LOADED is not None:
        return _DOTENV_LOADED

    if search_from is not None:
        candidate = _search_upwards(Path(search_from))
    else:
        found = find_dotenv(usecwd=True)
        candidate = Path(found) if found else None
    if candidate is None:
        return None

    load_dotenv(candidate, override=False)
    _DOTENV_LOADED = candidate.resolve()
    LOGGER.debug("Loaded environment from %s", _DOTENV_LOADED)
    return _DOTENV_LOADED


def _search_upwards(start: Path) -> Path | None:
    directory = start if start.is_dir() else start.parent
    for folder in (directory, *directory.parents):
        candidate = folder / ".env"
        if candidate.is_file():
            return candidate
    return None


def _reset_dotenv_state_for_testing() -> None:
    global _DOTENV_LOADED
    _DOTENV_LOADED = None


__all__ = [
    "CONFIG_ENV_VAR",
    "DEFAULT_CONFIG_PATH",
    "DOTENV_ENV_VAR",
    "EXAMPLE_CONFIG",
    "RawPipe",
    "enable_dotenv",
    "load_config",
    "load_pipe_specs",
    "parse_config",
    "resolve_config_path",
    "should_use_dotenv",
    "usage_text",
]
