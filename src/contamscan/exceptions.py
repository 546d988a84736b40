from __future__ import annotations

from pathlib import Path
from typing import Sequence


class ContamScanError(Exception):
    """Base class for contamscan exceptions."""

    exit_code: int = 1


class ContamScanUsageError(ContamScanError):
    """Raised when command arguments or inputs are invalid."""

    exit_code = 2


class InputFileError(ContamScanError):
    """Raised when an input file is missing or cannot be opened."""


class AssemblyParseError(ContamScanError):
    """Raised when an assembly data report record cannot be decoded or validated."""

    def __init__(self, index: int, line_number: int, message: str) -> None:
        self.index = index
        self.line_number = line_number
        self.reason = message
        super().__init__(f"Failed to parse assembly record {index} (line {line_number}): {message}")


class MissingGenomesError(ContamScanError):
    """Raised when one or more resolved genome files are absent."""

    def __init__(self, missing: Sequence[str | Path]) -> None:
        self.missing = tuple(str(path) for path in missing)
        super().__init__(f"{len(self.missing)} genome file(s) do not exist")


class EngineError(ContamScanError):
    """Raised when sketching or distance estimation fails during a run."""


class SketchEngineError(RuntimeError):
    """Raised by sketch engines for unreadable genomes or incompatible sketches."""
