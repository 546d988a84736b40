"""Genome sketching and distance estimation engines."""

from __future__ import annotations

import logging

from contamscan.exceptions import ContamScanUsageError
from contamscan.runners.mash import MashRunner
from contamscan.sketch.base import DistanceResult, SketchEngine
from contamscan.sketch.mash import MashEngine
from contamscan.sketch.minhash import MinHashEngine

ENGINES = ("minhash", "mash")


def build_engine(name: str, *, mash_executable: str = "mash") -> SketchEngine:
    """Instantiate a sketch engine by name, checking external binaries up front."""

    if name == "minhash":
        return MinHashEngine()
    if name == "mash":
        runner = MashRunner(mash_executable, logger=logging.getLogger("contamscan.sketch.mash"))
        if not runner.is_available():
            raise ContamScanUsageError(
                f"Required external tool not found in PATH: {mash_executable}. "
                "Install mash or use --engine minhash."
            )
        return MashEngine(runner)
    raise ContamScanUsageError(f"Unknown sketch engine: {name} (choose from {', '.join(ENGINES)})")


__all__ = ["DistanceResult", "ENGINES", "MashEngine", "MinHashEngine", "SketchEngine", "build_engine"]
