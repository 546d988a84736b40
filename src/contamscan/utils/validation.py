from __future__ import annotations

from pathlib import Path

from contamscan.exceptions import InputFileError


def is_gzipped(path: Path) -> bool:
    return path.name.lower().endswith(".gz")


def validate_existing_file(path: Path, label: str) -> None:
    if not path.exists():
        raise InputFileError(f"{label} does not exist: {path}")
    if not path.is_file():
        raise InputFileError(f"{label} is not a file: {path}")
