"""Workflow-runner adapter: environment export, step outputs, and failure reporting.

This is the only module that writes to the process environment or the runner's
command files. Everything else returns values.
"""

from __future__ import annotations

import os
import sys
import uuid
from collections.abc import MutableMapping
from typing import TextIO


def _escape_data(value: str) -> str:
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def _file_command_block(name: str, value: str) -> str:
    # Note 1: The heredoc form (`name<<DELIM ... DELIM`) lets values contain newlines.
    # A random delimiter guarantees the value cannot terminate the block early.
    delimiter = f"ghadelimiter_{uuid.uuid4()}"
    if delimiter in name or delimiter in value:
        msg = f"Unexpected input: name or value contains the delimiter {delimiter!r}"
        raise ValueError(msg)
    return f"{name}<<{delimiter}\n{value}\n{delimiter}\n"


def _append_file_command(file_env: str, block: str, environ: MutableMapping[str, str]) -> bool:
    path = environ.get(file_env)
    if not path:
        return False
    with open(path, "a", encoding="utf-8") as f:
        f.write(block)
    return True


def export_variable(
    name: str,
    value: str,
    environ: MutableMapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Set ``name`` for this process and for every later step of the job."""
    environ = os.environ if environ is None else environ
    environ[name] = value
    if not _append_file_command("GITHUB_ENV", _file_command_block(name, value), environ):
        print(f"::set-env name={name}::{_escape_data(value)}", file=stream or sys.stdout)


def set_output(
    name: str,
    value: str,
    environ: MutableMapping[str, str] | None = None,
    stream: TextIO | None = None,
) -> None:
    """Set a named step output."""
    environ = os.environ if environ is None else environ
    if not _append_file_command("GITHUB_OUTPUT", _file_command_block(name, value), environ):
        print(f"::set-output name={name}::{_escape_data(value)}", file=stream or sys.stdout)


def warning(message: str, stream: TextIO | None = None) -> None:
    print(f"::warning::{_escape_data(message)}", file=stream or sys.stdout)


def set_failed(message: str, stream: TextIO | None = None) -> None:
    """Report the run's terminal error. The caller sets the exit code."""
    print(f"::error::{_escape_data(message)}", file=stream or sys.stdout)
