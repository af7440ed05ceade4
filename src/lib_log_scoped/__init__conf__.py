"""Static package metadata surfaced by the CLI ``info`` command."""

from __future__ import annotations

from typing import Callable

name = "lib_log_scoped"
title = "Scope-aware log level filtering for Python applications"
version = "0.1.0"
homepage = "https://github.com/bitranox/lib_log_scoped"
author = "bitranox"
author_email = "bitranox@gmail.com"
shell_command = "lib_log_scoped"


def print_info(writer: Callable[[str], None] | None = None) -> None:
    """Write the metadata banner, one ``key = value`` line per field.

    Examples
    --------
    >>> lines = []
    >>> print_info(writer=lines.append)
    >>> lines[0]
    'Info for lib_log_scoped:\\n\\n'
    """

    fields = [
        ("name", name),
        ("title", title),
        ("version", version),
        ("homepage", homepage),
        ("author", author),
        ("author_email", author_email),
        ("shell_command", shell_command),
    ]
    width = max(len(label) for label, _ in fields)
    emit = writer if writer is not None else _stdout_writer
    emit(f"Info for {name}:\n\n")
    for label, value in fields:
        emit(f"    {label:<{width}} = {value}\n")


def _stdout_writer(text: str) -> None:
    print(text, end="")


__all__ = ["author", "author_email", "homepage", "name", "print_info", "shell_command", "title", "version"]
