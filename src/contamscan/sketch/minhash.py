"""In-process bottom-k MinHash engine producing Mash-compatible distance estimates."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from contamscan.config import FilterConfig, SketchConfig
from contamscan.exceptions import SketchEngineError
from contamscan.sketch.base import DistanceResult, SketchEngine, mash_distance
from contamscan.sketch.fasta import iter_fasta_records
from contamscan.sketch.kmer import BottomSketcher, iter_canonical_kmers, stable_hash64

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MinHashSketch:
    path: str
    kmer_size: int
    sketch_size: int
    seed: int
    hashes: tuple[int, ...]


def _apply_filter(counts: dict[int, int], filter_config: FilterConfig) -> list[int]:
    low = filter_config.min_abundance
    high = filter_config.max_abundance
    return sorted(
        value
        for value, count in counts.items()
        if (low is None or count >= low) and (high is None or count <= high)
    )


def sketch_file(path: Path, sketch_config: SketchConfig, filter_config: FilterConfig) -> MinHashSketch:
    k = sketch_config.kmer_size
    capacity = sketch_config.candidate_count if filter_config.enabled else sketch_config.sketch_size
    sketcher = BottomSketcher(capacity)

    try:
        for record in iter_fasta_records(path):
            for kmer in iter_canonical_kmers(record.sequence, k):
                sketcher.add(stable_hash64(kmer, sketch_config.seed))
    except (OSError, EOFError, UnicodeDecodeError, ValueError) as exc:
        raise SketchEngineError(f"Could not read genome {path}: {exc}") from exc

    hashes = _apply_filter(sketcher.counts(), filter_config)[: sketch_config.sketch_size]
    if not hashes:
        raise SketchEngineError(f"No valid {k}-mers found in {path}")

    logger.debug("Sketched %s with %d hashes", path, len(hashes))
    return MinHashSketch(
        path=str(path),
        kmer_size=k,
        sketch_size=sketch_config.sketch_size,
        seed=sketch_config.seed,
        hashes=tuple(hashes),
    )


def compare_sketches(left: MinHashSketch, right: MinHashSketch) -> DistanceResult:
    """Estimate Jaccard over the bottom-s union of two sketches, as Mash does."""

    if left.kmer_size != right.kmer_size:
        raise SketchEngineError(
            f"Incompatible k-mer sizes: {left.path} (k={left.kmer_size}) "
            f"vs {right.path} (k={right.kmer_size})"
        )
    if left.seed != right.seed:
        raise SketchEngineError(
            f"Incompatible hash seeds: {left.path} (seed={left.seed}) "
            f"vs {right.path} (seed={right.seed})"
        )

    limit = min(left.sketch_size, right.sketch_size)
    a, b = left.hashes, right.hashes
    i = j = shared = total = 0
    while i < len(a) and j < len(b) and total < limit:
        if a[i] < b[j]:
            i += 1
        elif a[i] > b[j]:
            j += 1
        else:
            shared += 1
            i += 1
            j += 1
        total += 1
    if total < limit:
        total += min(limit - total, (len(a) - i) + (len(b) - j))

    if total == 0:
        raise SketchEngineError(f"Empty sketches cannot be compared: {left.path}, {right.path}")

    jaccard = shared / total
    return DistanceResult(
        estimated_distance=mash_distance(jaccard, left.kmer_size),
        jaccard=jaccard,
        shared_hashes=shared,
        total_hashes=total,
    )


class MinHashEngine(SketchEngine):
    name = "minhash"

    def sketch(
        self,
        paths: Sequence[Path],
        sketch_config: SketchConfig,
        filter_config: FilterConfig,
    ) -> list[MinHashSketch]:
        return [sketch_file(Path(path), sketch_config, filter_config) for path in paths]

    def distance(self, left: MinHashSketch, right: MinHashSketch) -> DistanceResult:
        return compare_sketches(left, right)

    def version(self) -> str:
        return "builtin"
