from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

from contamscan.models import AssemblyRecord

logger = logging.getLogger(__name__)

MATRIX_FILENAME = "contamination_matrix.tsv"


@dataclass(frozen=True, slots=True)
class ResolvedGenome:
    display_name: str
    file_path: str
    accession: str = ""


def sanitize_name(organism_name: str) -> str:
    """Make an organism name safe for file names and Cactus seqFiles.

    Spaces and hyphens become underscores and periods are dropped, so
    ``"Trissoscelio sp. ZL-2020"`` becomes ``"Trissoscelio_sp_ZL_2020"``.
    """

    return organism_name.replace(" ", "_").replace(".", "").replace("-", "_")


def resolve_path(root_directory: str | Path, accession: str, assembly_name: str) -> str:
    """Return the NCBI Datasets download path of an assembly's genomic FASTA."""

    file_stem = f"{accession}_{assembly_name.replace(' ', '_')}"
    return f"{root_directory}/data/{accession}/{file_stem}_genomic.fna"


def resolve_genome(record: AssemblyRecord, root_directory: str | Path) -> ResolvedGenome:
    return ResolvedGenome(
        display_name=sanitize_name(record.organism_name),
        file_path=resolve_path(root_directory, record.accession, record.assembly_name),
        accession=record.accession,
    )


def resolve_genomes(
    records: Iterable[AssemblyRecord],
    root_directory: str | Path,
) -> list[ResolvedGenome]:
    """Resolve records in input order; repeated accessions are kept but reported."""

    genomes: list[ResolvedGenome] = []
    seen: dict[str, int] = {}
    for index, record in enumerate(records):
        genome = resolve_genome(record, root_directory)
        if genome.accession in seen:
            logger.warning(
                "Accession %s appears again at record %d (first seen at record %d)",
                genome.accession,
                index,
                seen[genome.accession],
            )
        else:
            seen[genome.accession] = index
        genomes.append(genome)
    return genomes
