from __future__ import annotations

import math
from abc import ABC, abstractmethod
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Sequence

from contamscan.config import FilterConfig, SketchConfig


@dataclass(frozen=True, slots=True)
class DistanceResult:
    estimated_distance: float
    jaccard: float
    shared_hashes: int
    total_hashes: int


class SketchEngine(ABC):
    """Interface for genome sketching and pairwise distance estimation.

    ``sketch`` returns one opaque sketch per input path, in input order.
    Both methods raise :class:`~contamscan.exceptions.SketchEngineError`.
    """

    name: str = "engine"

    @abstractmethod
    def sketch(
        self,
        paths: Sequence[Path],
        sketch_config: SketchConfig,
        filter_config: FilterConfig,
    ) -> list[Any]:
        raise NotImplementedError

    @abstractmethod
    def distance(self, left: Any, right: Any) -> DistanceResult:
        raise NotImplementedError

    def version(self) -> str:
        return "unknown"

    def close(self) -> None:
        """Release resources held for the lifetime of a run."""

    def __enter__(self) -> "SketchEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def mash_distance(jaccard: float, kmer_size: int) -> float:
    """Convert a Jaccard estimate to the Mash distance, clamped to [0, 1]."""

    if jaccard <= 0.0:
        return 1.0
    distance = (-1.0 / float(kmer_size)) * math.log((2.0 * jaccard) / (1.0 + jaccard))
    return max(0.0, min(1.0, distance))
