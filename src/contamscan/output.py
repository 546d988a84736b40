from __future__ import annotations

import contextlib
import logging
import os
from decimal import Decimal
from pathlib import Path
from typing import Iterator, Sequence, TextIO

from contamscan.exceptions import ContamScanError
from contamscan.utils.io import ensure_dir

logger = logging.getLogger(__name__)

PARTIAL_SUFFIX = ".partial"


def format_distance(value: float) -> str:
    """Shortest round-trip decimal text, never in exponent form: 0, 0.05, 1."""

    text = format(Decimal(repr(float(value))), "f")
    if "." in text:
        text = text.rstrip("0").rstrip(".")
    if text in ("", "-0"):
        return "0"
    return text


class MatrixWriter:
    """Tab-separated matrix rows: name, then every value followed by a tab."""

    def __init__(self, handle: TextIO) -> None:
        self.handle = handle
        self.rows_written = 0

    def write_row(self, name: str, values: Sequence[float]) -> None:
        cells = "".join(f"{format_distance(value)}\t" for value in values)
        self.handle.write(f"{name}\t{cells}\n")
        self.rows_written += 1


@contextlib.contextmanager
def open_matrix_writer(path: Path) -> Iterator[MatrixWriter]:
    """Write a matrix to ``path`` atomically.

    Rows go to ``<path>.partial``; the file replaces ``path`` only when the
    block exits cleanly, otherwise the partial file is deleted.
    """

    ensure_dir(path.parent)
    partial = path.with_name(f"{path.name}{PARTIAL_SUFFIX}")
    try:
        handle = partial.open("w", encoding="utf-8", newline="")
    except OSError as exc:
        raise ContamScanError(f"Could not create output file {partial}: {exc}") from exc

    try:
        with handle:
            yield MatrixWriter(handle)
    except BaseException:
        partial.unlink(missing_ok=True)
        logger.debug("Removed incomplete matrix file %s", partial)
        raise

    try:
        os.replace(partial, path)
    except OSError as exc:
        partial.unlink(missing_ok=True)
        raise ContamScanError(f"Could not write output file {path}: {exc}") from exc
