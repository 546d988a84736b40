from __future__ import annotations

import gzip
from pathlib import Path
from typing import IO, Iterable

from contamscan.utils.validation import is_gzipped


def ensure_dir(path: Path) -> Path:
    path.mkdir(parents=True, exist_ok=True)
    return path


def open_text(path: Path) -> IO[str]:
    """Open a plain or gzip-compressed text file for reading."""

    if is_gzipped(path):
        return gzip.open(path, "rt", encoding="utf-8")
    return path.open("r", encoding="utf-8")


def write_lines(path: Path, lines: Iterable[str]) -> Path:
    ensure_dir(path.parent)
    with path.open("w", encoding="utf-8", newline="") as handle:
        for line in lines:
            handle.write(f"{line}\n")
    return path
