from __future__ import annotations

from pathlib import Path

import typer
from rich.console import Console
from rich.markup import escape

from contamscan.config import ListingConfig, merge_command_config
from contamscan.exceptions import ContamScanError, ContamScanUsageError
from contamscan.ingest import iter_assembly_records
from contamscan.logging import configure_logging, get_logger
from contamscan.paths import resolve_genome
from contamscan.utils.io import write_lines

console = Console()


def run_ncbi_to_cactus(
    *,
    config_path: Path | None,
    metadata_file: Path | None,
    data_path: Path | None,
    output: Path | None,
    log_file: Path | None,
    verbose: bool | None,
    quiet: bool | None,
) -> int:
    try:
        cfg = merge_command_config(
            config_path=config_path,
            section="ncbi_to_cactus",
            model_cls=ListingConfig,
            cli_overrides={
                "metadata_file": metadata_file,
                "data_path": data_path,
                "output": output,
                "log_file": log_file,
                "verbose": verbose,
                "quiet": quiet,
            },
        )

        configure_logging(verbose=cfg.verbose, quiet=cfg.quiet, log_file=cfg.log_file)
        logger = get_logger("contamscan.ncbi_to_cactus")

        if cfg.metadata_file is None or cfg.data_path is None:
            raise ContamScanUsageError("Both the assembly data report and the data path are required.")

        lines = [
            f"{genome.display_name} {genome.file_path}"
            for genome in (
                resolve_genome(record, cfg.data_path)
                for record in iter_assembly_records(cfg.metadata_file)
            )
        ]

        if cfg.output is not None:
            write_lines(cfg.output, lines)
            logger.info("Wrote Cactus seqFile entries to %s", cfg.output)
        else:
            for line in lines:
                typer.echo(line)

        return 0

    except ContamScanError as exc:
        console.print(f"[red]Error:[/red] {escape(str(exc))}", soft_wrap=True)
        return exc.exit_code
    except Exception as exc:  # pragma: no cover - defensive catch-all
        get_logger("contamscan.ncbi_to_cactus").exception("Unhandled ncbi-to-cactus error")
        console.print(f"[red]Unexpected error:[/red] {escape(str(exc))}", soft_wrap=True)
        return 1


def ncbi_to_cactus_command(
    metadata_file: Path = typer.Argument(..., help="NCBI Datasets assembly_data_report.jsonl file."),
    data_path: Path = typer.Argument(..., help="Root of the downloaded NCBI Datasets package."),
    output: Path | None = typer.Option(None, "--output", "-o", help="Write entries to this file instead of stdout."),
    config: Path | None = typer.Option(None, "--config", help="YAML config file."),
    log_file: Path | None = typer.Option(None, "--log-file", help="Write JSON logs to this file."),
    verbose: bool | None = typer.Option(None, "--verbose", help="Enable verbose logging."),
    quiet: bool | None = typer.Option(None, "--quiet", help="Only show errors."),
) -> None:
    """Print one `<name> <genome path>` line per assembly record."""

    exit_code = run_ncbi_to_cactus(
        config_path=config,
        metadata_file=metadata_file,
        data_path=data_path,
        output=output,
        log_file=log_file,
        verbose=verbose,
        quiet=quiet,
    )
    raise typer.Exit(exit_code)
