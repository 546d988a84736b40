"""Pairwise distance matrix orchestration.

Every genome is sketched once in a single batch, then rows are computed and
streamed one at a time, so memory holds the sketches plus a single row no
matter how many genomes are compared. Row and column order always follow the
order of the input genomes.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Iterator, Sequence

from contamscan.config import FilterConfig, SketchConfig
from contamscan.exceptions import EngineError, SketchEngineError
from contamscan.output import MatrixWriter, format_distance
from contamscan.paths import ResolvedGenome
from contamscan.sketch.base import SketchEngine

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MatrixRow:
    index: int
    name: str
    values: tuple[float, ...]


class MatrixOrchestrator:
    def __init__(
        self,
        engine: SketchEngine,
        *,
        sketch_config: SketchConfig | None = None,
        filter_config: FilterConfig | None = None,
    ) -> None:
        self.engine = engine
        self.sketch_config = sketch_config or SketchConfig()
        self.filter_config = filter_config or FilterConfig()

    def sketch_all(self, genomes: Sequence[ResolvedGenome]) -> list[Any]:
        paths = [Path(genome.file_path) for genome in genomes]
        logger.info("Sketching %d files", len(paths))
        try:
            sketches = self.engine.sketch(paths, self.sketch_config, self.filter_config)
        except SketchEngineError as exc:
            raise EngineError(f"Sketching failed: {exc}") from exc

        if len(sketches) != len(genomes):
            raise EngineError(
                f"Engine `{self.engine.name}` returned {len(sketches)} sketches for {len(genomes)} genomes"
            )
        return sketches

    def _distance(
        self,
        genomes: Sequence[ResolvedGenome],
        sketches: Sequence[Any],
        i: int,
        j: int,
    ) -> float:
        try:
            result = self.engine.distance(sketches[i], sketches[j])
        except SketchEngineError as exc:
            raise EngineError(
                f"Distance failed for {genomes[i].display_name} ({genomes[i].file_path}) "
                f"vs {genomes[j].display_name} ({genomes[j].file_path}): {exc}"
            ) from exc
        return result.estimated_distance

    def iter_rows(
        self,
        genomes: Sequence[ResolvedGenome],
        sketches: Sequence[Any],
    ) -> Iterator[MatrixRow]:
        """Yield one row per genome; both directions of each pair are computed."""

        count = len(genomes)
        for i in range(count):
            values: list[float] = []
            for j in range(count):
                if i == j:
                    values.append(0.0)
                    continue
                distance = self._distance(genomes, sketches, i, j)
                logger.info(
                    "%s %s %s",
                    genomes[i].display_name,
                    genomes[j].display_name,
                    format_distance(distance),
                    extra={
                        "row": i,
                        "column": j,
                        "left": genomes[i].accession,
                        "right": genomes[j].accession,
                        "distance": distance,
                    },
                )
                values.append(distance)
            yield MatrixRow(index=i, name=genomes[i].display_name, values=tuple(values))

    def run(
        self,
        genomes: Sequence[ResolvedGenome],
        writer: MatrixWriter,
        *,
        on_row: Callable[[MatrixRow], None] | None = None,
    ) -> int:
        """Sketch all genomes and stream the full matrix into ``writer``."""

        sketches = self.sketch_all(genomes)
        count = len(sketches)
        logger.info(
            "Comparing %d sketches - %d total pairwise comparisons",
            count,
            count * (count - 1),
        )

        rows = 0
        for row in self.iter_rows(genomes, sketches):
            writer.write_row(row.name, row.values)
            rows += 1
            if on_row is not None:
                on_row(row)
        return rows
