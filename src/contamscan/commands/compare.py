from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape
from rich.progress import BarColumn, Progress, SpinnerColumn, TextColumn, TimeElapsedColumn

from contamscan.config import CompareConfig, merge_command_config
from contamscan.exceptions import ContamScanError, ContamScanUsageError, MissingGenomesError
from contamscan.gate import require_genomes_exist
from contamscan.ingest import iter_assembly_records
from contamscan.logging import configure_logging, get_logger
from contamscan.matrix import MatrixOrchestrator
from contamscan.output import open_matrix_writer
from contamscan.paths import MATRIX_FILENAME, resolve_genomes
from contamscan.sketch import ENGINES, build_engine

console = Console()


def run_ncbi_assembly_compare(
    *,
    config_path: Path | None,
    metadata_file: Path | None,
    data_path: Path | None,
    output: Path | None,
    engine: str | None,
    skip_invalid: bool | None,
    dry_run: bool | None,
    log_file: Path | None,
    verbose: bool | None,
    quiet: bool | None,
) -> int:
    try:
        cfg = merge_command_config(
            config_path=config_path,
            section="ncbi_assembly_compare",
            model_cls=CompareConfig,
            cli_overrides={
                "metadata_file": metadata_file,
                "data_path": data_path,
                "output": output,
                "engine": engine,
                "skip_invalid": skip_invalid,
                "dry_run": dry_run,
                "log_file": log_file,
                "verbose": verbose,
                "quiet": quiet,
            },
        )

        configure_logging(verbose=cfg.verbose, quiet=cfg.quiet, log_file=cfg.log_file)
        logger = get_logger("contamscan.ncbi_assembly_compare")

        if cfg.metadata_file is None or cfg.data_path is None:
            raise ContamScanUsageError("Both the assembly data report and the data path are required.")

        genomes = resolve_genomes(
            iter_assembly_records(cfg.metadata_file, skip_invalid=cfg.skip_invalid),
            cfg.data_path,
        )
        if not genomes:
            raise ContamScanError(f"No assembly records found in {cfg.metadata_file}")
        logger.info("Resolved %d genomes from %s", len(genomes), cfg.metadata_file)

        try:
            report = require_genomes_exist(genomes)
        except MissingGenomesError as exc:
            for path in exc.missing:
                console.print(f"File {escape(path)} does not exist", soft_wrap=True)
            raise

        if cfg.dry_run:
            logger.info("Dry-run requested; all %d genome files exist, stopping before sketching.", report.checked)
            return 0

        sketch_engine = build_engine(cfg.engine, mash_executable=cfg.mash_executable)
        with sketch_engine:
            logger.debug("Using %s engine (%s)", sketch_engine.name, sketch_engine.version())
            orchestrator = MatrixOrchestrator(
                sketch_engine,
                sketch_config=cfg.sketch,
                filter_config=cfg.filter,
            )
            with Progress(
                SpinnerColumn(),
                TextColumn("[progress.description]{task.description}"),
                BarColumn(),
                TimeElapsedColumn(),
                console=console,
                disable=cfg.quiet,
            ) as progress:
                task = progress.add_task("Computing distance rows", total=len(genomes))
                with open_matrix_writer(cfg.output) as writer:
                    rows = orchestrator.run(
                        genomes,
                        writer,
                        on_row=lambda _row: progress.advance(task),
                    )

        logger.info("Wrote %d x %d distance matrix to %s", rows, rows, cfg.output)
        return 0

    except ContamScanError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        return exc.exit_code
    except OSError as exc:
        console.print(f"[red]I/O error:[/red] {escape(str(exc))}", soft_wrap=True)
        return 1
    except Exception as exc:  # pragma: no cover - defensive catch-all
        get_logger("contamscan.ncbi_assembly_compare").exception("Unhandled comparison error")
        console.print(f"[red]Unexpected error:[/red] {escape(str(exc))}", soft_wrap=True)
        return 1


def ncbi_assembly_compare_command(
    metadata_file: Path = typer.Argument(..., help="NCBI Datasets assembly_data_report.jsonl file."),
    data_path: Path = typer.Argument(..., help="Root of the downloaded NCBI Datasets package."),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help=f"Distance matrix TSV (default: ./{MATRIX_FILENAME}).",
    ),
    engine: str | None = typer.Option(
        None,
        "--engine",
        help=f"Sketch engine: {', '.join(ENGINES)}.",
    ),
    skip_invalid: bool | None = typer.Option(
        None,
        "--skip-invalid/--no-skip-invalid",
        help="Skip records that fail validation instead of aborting.",
    ),
    dry_run: bool | None = typer.Option(None, "--dry-run", help="Resolve and check genome files only."),
    config: Path | None = typer.Option(None, "--config", help="YAML config file."),
    log_file: Path | None = typer.Option(None, "--log-file", help="Write JSON logs to this file."),
    verbose: bool | None = typer.Option(None, "--verbose", help="Enable verbose logging."),
    quiet: bool | None = typer.Option(None, "--quiet", help="Only show errors."),
) -> None:
    """Compute the all-pairs distance matrix for every assembly in a report."""

    exit_code = run_ncbi_assembly_compare(
        config_path=config,
        metadata_file=metadata_file,
        data_path=data_path,
        output=output,
        engine=engine,
        skip_invalid=skip_invalid,
        dry_run=dry_run,
        log_file=log_file,
        verbose=verbose,
        quiet=quiet,
    )
    raise typer.Exit(exit_code)
