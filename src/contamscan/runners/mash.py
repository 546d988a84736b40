from __future__ import annotations

import logging
from pathlib import Path

from contamscan.runners.base import ToolRunner
from contamscan.utils.subprocess import CommandResult


class MashRunner(ToolRunner):
    """Wrapper around the Mash `sketch` and `dist` subcommands."""

    def __init__(self, executable: str = "mash", *, logger: logging.Logger | None = None) -> None:
        super().__init__(executable, logger=logger)

    def sketch(
        self,
        *,
        input_fasta: Path,
        out_prefix: Path,
        kmer_size: int,
        sketch_size: int,
        seed: int = 42,
        min_copies: int | None = None,
    ) -> CommandResult:
        args: list[str | Path] = [
            "sketch",
            "-k",
            str(kmer_size),
            "-s",
            str(sketch_size),
            "-S",
            str(seed),
        ]
        if min_copies is not None:
            # `-m` implies read mode (`-r`) in Mash.
            args.extend(["-m", str(min_copies)])
        args.extend(["-o", out_prefix, input_fasta])
        return self.run(args)

    def dist(self, *, reference: Path, query: Path) -> CommandResult:
        return self.run(["dist", reference, query])
