"""GitHub Actions runtime helpers: log lines, step outputs and failure status."""

from __future__ import annotations

import os
import uuid
from dataclasses import dataclass
from pathlib import Path

import typer

GITHUB_OUTPUT_ENV_VAR = "GITHUB_OUTPUT"


def escape_command_data(value: str) -> str:
    """Escape a message for use in a workflow command."""
    return value.replace("%", "%25").replace("\r", "%0D").replace("\n", "%0A")


def write_github_output(key: str, value: str, *, output_file: str | None = None) -> None:
    """Append a key-value pair to GITHUB_OUTPUT for job outputs.

    Multiline values use heredoc syntax with a random delimiter.
    """
    output_path = output_file or os.environ.get(GITHUB_OUTPUT_ENV_VAR)
    if not output_path:
        typer.echo(f"{GITHUB_OUTPUT_ENV_VAR} not set, would output: {key}={value}")
        return
    with Path(output_path).open("a", encoding="utf-8") as f:
        if "\n" in value:
            delimiter = f"ghadelimiter_{uuid.uuid4()}"
            f.write(f"{key}<<{delimiter}\n{value}\n{delimiter}\n")
        else:
            f.write(f"{key}={value}\n")


@dataclass
class ActionsRuntime:
    """Reports run progress the way a GitHub Actions step does."""

    output_file: str | None = None
    failed: bool = False
    failure_message: str | None = None

    def info(self, message: str) -> None:
        typer.echo(message)

    def set_output(self, name: str, value: object) -> None:
        write_github_output(name, str(value), output_file=self.output_file)

    def set_failed(self, message: str) -> None:
        """Mark the step as failed; the CLI turns this into a non-zero exit."""
        self.failed = True
        self.failure_message = message
        typer.echo(f"::error::{escape_command_data(message)}")
