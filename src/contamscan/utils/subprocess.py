from __future__ import annotations

import logging
import shlex
import subprocess
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence


@dataclass(frozen=True, slots=True)
class CommandResult:
    command: list[str]
    returncode: int
    stdout: str
    stderr: str
    elapsed_seconds: float = 0.0


class CommandExecutionError(RuntimeError):
    """A tool could not be started or exited non-zero."""

    def __init__(self, message: str, *, returncode: int | None = None, stderr: str = "") -> None:
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


def shell_join(command: Sequence[str]) -> str:
    return shlex.join(list(command))


def run_command(
    command: Sequence[str],
    *,
    cwd: Path | None = None,
    check: bool = True,
    logger: logging.Logger | None = None,
) -> CommandResult:
    """Run ``command`` capturing text output; raise on failure when ``check``."""

    command_list = list(command)
    cmd_text = shell_join(command_list)

    if logger is not None:
        logger.debug("Executing command: %s", cmd_text)

    started = time.perf_counter()
    try:
        completed = subprocess.run(
            command_list,
            cwd=str(cwd) if cwd is not None else None,
            capture_output=True,
            text=True,
            check=False,
        )
    except OSError as exc:
        raise CommandExecutionError(f"Could not execute {cmd_text}: {exc}") from exc
    elapsed = time.perf_counter() - started

    if logger is not None:
        logger.debug("Command exited with %d after %.2fs", completed.returncode, elapsed)

    if check and completed.returncode != 0:
        stderr = completed.stderr.strip()
        raise CommandExecutionError(
            f"{command_list[0]} exited with code {completed.returncode}: {stderr or cmd_text}",
            returncode=completed.returncode,
            stderr=stderr,
        )

    return CommandResult(
        command=command_list,
        returncode=completed.returncode,
        stdout=completed.stdout,
        stderr=completed.stderr,
        elapsed_seconds=elapsed,
    )
