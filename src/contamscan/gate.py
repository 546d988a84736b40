from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from contamscan.exceptions import MissingGenomesError
from contamscan.paths import ResolvedGenome


@dataclass(frozen=True, slots=True)
class ExistenceReport:
    checked: int
    missing: tuple[str, ...]

    @property
    def ok(self) -> bool:
        return not self.missing


def check_genomes_exist(genomes: Sequence[ResolvedGenome]) -> ExistenceReport:
    """Check every genome path and collect all missing ones, in input order."""

    missing = tuple(genome.file_path for genome in genomes if not Path(genome.file_path).is_file())
    return ExistenceReport(checked=len(genomes), missing=missing)


def require_genomes_exist(genomes: Sequence[ResolvedGenome]) -> ExistenceReport:
    report = check_genomes_exist(genomes)
    if not report.ok:
        raise MissingGenomesError(report.missing)
    return report
