"""Syslog facility and severity vocabulary.

Purpose
-------
Translate the operator-facing facility/severity names found in pipe
configuration into the numeric codes understood by the local log sink.

Contents
--------
* :class:`Facility` and :class:`Severity` enums with name lookups.
* :data:`PRIORITY_TABLE` - read-only name lookup built once at import time.
* :func:`encode_priority` - combine both codes into one encoded priority.

System Role
-----------
Shared, immutable state read concurrently by every forwarding worker. No
locking is needed because nothing writes to the table after import.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import IntEnum
from types import MappingProxyType
from typing import Mapping


class Facility(IntEnum):
    """Syslog facilities, already shifted into the high bits of the priority."""

    KERN = 0 << 3
    USER = 1 << 3
    MAIL = 2 << 3
    DAEMON = 3 << 3
    AUTH = 4 << 3
    SYSLOG = 5 << 3
    LPR = 6 << 3
    NEWS = 7 << 3
    UUCP = 8 << 3
    CRON = 9 << 3
    AUTHPRIV = 10 << 3
    FTP = 11 << 3
    LOCAL0 = 16 << 3
    LOCAL1 = 17 << 3
    LOCAL2 = 18 << 3
    LOCAL3 = 19 << 3
    LOCAL4 = 20 << 3
    LOCAL5 = 21 << 3
    LOCAL6 = 22 << 3
    LOCAL7 = 23 << 3

    @property
    def label(self) -> str:
        """Return the configuration name, e.g. ``local6``."""

        return self.name.lower()


class Severity(IntEnum):
    """Syslog severities occupying the low three bits of the priority."""

    EMERG = 0
    ALERT = 1
    CRIT = 2
    ERR = 3
    WARNING = 4
    NOTICE = 5
    INFO = 6
    DEBUG = 7

    @property
    def label(self) -> str:
        """Return the configuration name, e.g. ``info``."""

        return self.name.lower()


@dataclass(frozen=True, slots=True)
class PriorityTable:
    """Immutable lookup from configuration names to syslog codes.

    Names are matched exactly (lowercase) like the names syslog itself uses.

    Examples
    --------
    >>> PRIORITY_TABLE.resolve_facility("local6")
    <Facility.LOCAL6: 176>
    >>> PRIORITY_TABLE.resolve_severity("bogus") is None
    True
    """

    facilities: Mapping[str, Facility]
    severities: Mapping[str, Severity]

    def resolve_facility(self, name: str) -> Facility | None:
        """Return the facility called ``name`` or ``None`` when unknown."""

        return self.facilities.get(name)

    def resolve_severity(self, name: str) -> Severity | None:
        """Return the severity called ``name`` or ``None`` when unknown."""

        return self.severities.get(name)


def encode_priority(facility: Facility, severity: Severity) -> int:
    """Return the encoded priority ``facility | severity``.

    Examples
    --------
    >>> encode_priority(Facility.LOCAL6, Severity.INFO)
    182
    >>> encode_priority(Facility.KERN, Severity.EMERG)
    0
    """

    return int(facility) | int(severity)


def _build_table() -> PriorityTable:
    return PriorityTable(
        facilities=MappingProxyType({member.label: member for member in Facility}),
        severities=MappingProxyType({member.label: member for member in Severity}),
    )


#: Process-wide lookup; built once, never mutated.
PRIORITY_TABLE = _build_table()


__all__ = ["Facility", "PRIORITY_TABLE", "PriorityTable", "Severity", "encode_priority"]
