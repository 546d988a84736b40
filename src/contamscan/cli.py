from __future__ import annotations

import platform
import sys

import typer
from rich import box
from rich.console import Console
from rich.table import Table

from contamscan import __version__
from contamscan.commands.compare import ncbi_assembly_compare_command
from contamscan.commands.listing import ncbi_to_cactus_command

console = Console(stderr=True)
SUBCOMMANDS = ["ncbi-to-cactus", "ncbi-assembly-compare"]

app = typer.Typer(
    add_completion=False,
    no_args_is_help=True,
    rich_markup_mode="rich",
    help=(
        "contamscan resolves NCBI Datasets assembly reports to genome files and computes "
        "all-pairs Mash distance matrices to expose misclassified or duplicated assemblies."
    ),
)

app.command(
    "ncbi-to-cactus",
    help="Convert an NCBI Datasets assembly data report to Cactus seqFile entries.",
)(ncbi_to_cactus_command)
app.command(
    "ncbi-assembly-compare",
    help="Find assembly-level contamination: write an all-pairs distance matrix.",
)(ncbi_assembly_compare_command)


def _print_session_summary(command_name: str) -> None:
    stats = Table(
        title=f"[bold]contamscan {__version__}[/bold]",
        box=box.SIMPLE_HEAVY,
        show_header=False,
        expand=False,
    )
    stats.add_column("Key", style="bold cyan")
    stats.add_column("Value", style="white")
    stats.add_row("Command", command_name)
    stats.add_row("Python", sys.version.split()[0])
    stats.add_row("Platform", f"{platform.system()} {platform.release()}")
    console.print(stats)


@app.callback(invoke_without_command=True)
def main(
    ctx: typer.Context,
    version: bool = typer.Option(False, "--version", help="Show contamscan version and exit."),
) -> None:
    if version:
        typer.echo(f"contamscan {__version__}")
        raise typer.Exit()
    if ctx.invoked_subcommand is None:
        typer.echo(ctx.get_help())
        raise typer.Exit()

    # ncbi-to-cactus output is meant to be redirected, so the summary goes to stderr.
    _print_session_summary(ctx.invoked_subcommand)
