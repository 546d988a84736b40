from __future__ import annotations

import logging
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Sequence

from contamscan.config import FilterConfig, SketchConfig
from contamscan.exceptions import SketchEngineError
from contamscan.runners.mash import MashRunner
from contamscan.sketch.base import DistanceResult, SketchEngine
from contamscan.utils.subprocess import CommandExecutionError

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MashSketch:
    path: str
    sketch_file: Path
    kmer_size: int
    sketch_size: int
    seed: int


def parse_mash_dist_line(stdout: str) -> DistanceResult:
    """Parse the single line printed by ``mash dist ref.msh query.msh``."""

    for raw_line in stdout.splitlines():
        line = raw_line.strip()
        if not line:
            continue
        fields = line.split("\t")
        if len(fields) < 5:
            break
        try:
            distance = float(fields[2])
            shared_raw, total_raw = fields[4].split("/", 1)
            shared, total = int(shared_raw), int(total_raw)
        except ValueError:
            break
        jaccard = shared / total if total else 0.0
        return DistanceResult(
            estimated_distance=distance,
            jaccard=jaccard,
            shared_hashes=shared,
            total_hashes=total,
        )
    raise SketchEngineError(f"Unexpected `mash dist` output: {stdout.strip()!r}")


class MashEngine(SketchEngine):
    """Sketch and compare genomes with the external `mash` binary.

    Sketch files live in a temporary directory that is removed on ``close()``.
    """

    name = "mash"

    def __init__(self, runner: MashRunner | None = None) -> None:
        self.runner = runner or MashRunner(logger=logger)
        self._workdir: Path | None = None

    def _sketch_dir(self) -> Path:
        if self._workdir is None:
            self._workdir = Path(tempfile.mkdtemp(prefix="contamscan_mash_"))
        return self._workdir

    def sketch(
        self,
        paths: Sequence[Path],
        sketch_config: SketchConfig,
        filter_config: FilterConfig,
    ) -> list[MashSketch]:
        if filter_config.max_abundance is not None:
            raise SketchEngineError("Mash does not support a maximum k-mer abundance filter.")
        if sketch_config.kmers_to_sketch is not None:
            raise SketchEngineError("Mash does not support `kmers_to_sketch`; use the minhash engine.")

        sketch_dir = self._sketch_dir()
        sketches: list[MashSketch] = []
        for idx, path in enumerate(paths):
            out_prefix = sketch_dir / f"genome_{idx:06d}"
            try:
                self.runner.sketch(
                    input_fasta=Path(path),
                    out_prefix=out_prefix,
                    kmer_size=sketch_config.kmer_size,
                    sketch_size=sketch_config.sketch_size,
                    seed=sketch_config.seed,
                    min_copies=filter_config.min_abundance,
                )
            except CommandExecutionError as exc:
                raise SketchEngineError(f"mash sketch failed for {path}: {exc}") from exc
            sketches.append(
                MashSketch(
                    path=str(path),
                    sketch_file=out_prefix.with_name(f"{out_prefix.name}.msh"),
                    kmer_size=sketch_config.kmer_size,
                    sketch_size=sketch_config.sketch_size,
                    seed=sketch_config.seed,
                )
            )
        return sketches

    def distance(self, left: MashSketch, right: MashSketch) -> DistanceResult:
        if (left.kmer_size, left.seed) != (right.kmer_size, right.seed):
            raise SketchEngineError(
                f"Incompatible sketch parameters: {left.path} vs {right.path}"
            )
        try:
            result = self.runner.dist(reference=left.sketch_file, query=right.sketch_file)
        except CommandExecutionError as exc:
            raise SketchEngineError(f"mash dist failed for {left.path} vs {right.path}: {exc}") from exc
        return parse_mash_dist_line(result.stdout)

    def version(self) -> str:
        return self.runner.version()

    def close(self) -> None:
        if self._workdir is not None:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None
