from __future__ import annotations

import json
import random
from pathlib import Path
from typing import Any, Sequence

import pytest

from contamscan.exceptions import SketchEngineError
from contamscan.sketch.base import DistanceResult, SketchEngine

DATA_DIR = Path(__file__).parent / "data"


def report_payload(accession: str, assembly_name: str, organism_name: str) -> dict[str, Any]:
    return {
        "accession": accession,
        "assemblyInfo": {
            "assemblyLevel": "Contig",
            "assemblyName": assembly_name,
            "assemblyStatus": "current",
        },
        "assemblyStats": {"contigN50": 1200, "totalSequenceLength": "2000"},
        "organism": {"organismName": organism_name, "taxId": 1},
        "sourceDatabase": "SOURCE_DATABASE_GENBANK",
    }


def write_report(path: Path, payloads: Sequence[dict[str, Any]]) -> Path:
    path.write_text("".join(json.dumps(payload) + "\n" for payload in payloads), encoding="utf-8")
    return path


def random_dna(length: int, seed: int) -> str:
    rng = random.Random(seed)
    return "".join(rng.choice("ACGT") for _ in range(length))


def write_genome(data_root: Path, accession: str, assembly_name: str, sequence: str) -> Path:
    genome_dir = data_root / "data" / accession
    genome_dir.mkdir(parents=True, exist_ok=True)
    fasta = genome_dir / f"{accession}_{assembly_name.replace(' ', '_')}_genomic.fna"
    wrapped = "\n".join(sequence[start : start + 80] for start in range(0, len(sequence), 80))
    fasta.write_text(f">{accession} contig_1\n{wrapped}\n", encoding="utf-8")
    return fasta


class FakeEngine(SketchEngine):
    """Engine returning distances from a lookup keyed by file name."""

    name = "fake"

    def __init__(self, distances: dict[tuple[str, str], float] | None = None, default: float = 0.05) -> None:
        self.distances = distances or {}
        self.default = default
        self.sketch_calls = 0
        self.distance_calls: list[tuple[str, str]] = []
        self.closed = False
        self.fail_on: tuple[str, str] | None = None

    def sketch(self, paths, sketch_config, filter_config) -> list[str]:  # type: ignore[no-untyped-def]
        self.sketch_calls += 1
        return [Path(path).name for path in paths]

    def distance(self, left: str, right: str) -> DistanceResult:
        self.distance_calls.append((left, right))
        if self.fail_on == (left, right):
            raise SketchEngineError(f"incompatible sketches {left} {right}")
        value = self.distances.get((left, right), self.default)
        return DistanceResult(estimated_distance=value, jaccard=1.0 - value, shared_hashes=0, total_hashes=0)

    def close(self) -> None:
        self.closed = True


@pytest.fixture
def fake_engine() -> FakeEngine:
    return FakeEngine()
