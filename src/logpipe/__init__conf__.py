"""Static package metadata surfaced by the CLI ``info`` command."""

from __future__ import annotations

from typing import Callable

name = "logpipe"
title = "Forward named-pipe output to the local system log"
version = "1.0.0"
author = "logpipe maintainers"
shell_command = "logpipe"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Write the metadata banner, one ``key = value`` line per field."""

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("author", author),
        ("shell_command", shell_command),
    ]
    pad = max(len(key) for key, _ in fields)
    lines = [f"Info for {name}:\n\n"]
    lines.extend(f"    {key.ljust(pad)} = {value}\n" for key, value in fields)
    banner = "".join(lines)
    if writer is None:
        print(banner, end="")
    else:
        writer(banner)
