from __future__ import annotations

import logging
import shutil
from pathlib import Path
from typing import Sequence

from contamscan.utils.subprocess import CommandResult, run_command


class ToolRunner:
    """Base abstraction for external command-line tools."""

    def __init__(self, executable: str, *, logger: logging.Logger | None = None) -> None:
        self.executable = executable
        self.logger = logger

    def is_available(self) -> bool:
        return shutil.which(self.executable) is not None

    def version(self) -> str:
        result = self.run(["--version"], check=False)
        version_line = result.stdout.strip() or result.stderr.strip()
        return version_line or "unknown"

    def command(self, args: Sequence[str | Path]) -> list[str]:
        return [self.executable, *[str(arg) for arg in args]]

    def run(
        self,
        args: Sequence[str | Path],
        *,
        cwd: Path | None = None,
        check: bool = True,
    ) -> CommandResult:
        return run_command(
            self.command(args),
            cwd=cwd,
            check=check,
            logger=self.logger,
        )
