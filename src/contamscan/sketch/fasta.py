from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Iterator

from contamscan.utils.io import open_text


@dataclass(frozen=True, slots=True)
class FastaRecord:
    """Simple FASTA record."""

    header: str
    sequence: str


def iter_fasta_records(path: Path) -> Iterator[FastaRecord]:
    """Stream FASTA records one at a time, preserving order."""

    header: str | None = None
    seq_chunks: list[str] = []

    with open_text(path) as handle:
        for raw_line in handle:
            line = raw_line.strip()
            if not line:
                continue
            if line.startswith(">"):
                if header is not None:
                    yield FastaRecord(header=header, sequence="".join(seq_chunks).upper())
                header = line[1:].split()[0] if line[1:].strip() else ""
                seq_chunks = []
            elif header is None:
                raise ValueError(f"Sequence data before the first FASTA header in {path}")
            else:
                seq_chunks.append(line)

    if header is not None:
        yield FastaRecord(header=header, sequence="".join(seq_chunks).upper())
