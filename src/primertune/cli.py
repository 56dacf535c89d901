# ================================================================================
# Command-line interface for primer scoring, tuning and SLIC primer design
#
# Thin wrapper around the engine: sequences come in as arguments, results go
# out as rich tables.
# ================================================================================

from pathlib import Path
from typing import Annotated

import typer
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.table import Table

from primertune.config import EngineConfig, load_config
from primertune.designer.cloning import generate_pair
from primertune.designer.primer import Direction, EndTuning, FixedRange, Primer
from primertune.designer.quality import evaluate
from primertune.errors import PrimerEngineError
from primertune.logging import configure_file_logging, configure_logging
from primertune.reporting.qc import metrics_table
from primertune.selector.tuner import tune
from primertune.sequence import Sequence, Topology
from primertune.version import __version__

app = typer.Typer(
    name="primertune",
    help="Score, tune and design PCR primers.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

console = Console()

ConfigOption = Annotated[
    Path | None,
    typer.Option(
        "--config",
        "-c",
        help="Path to a JSON engine configuration. Overrides --preset.",
    ),
]
PresetOption = Annotated[
    str,
    typer.Option(
        "--preset",
        "-p",
        help="Configuration preset: 'default' or 'lenient'.",
    ),
]


def version_callback(value: bool) -> None:
    """Show version and exit."""
    if value:
        console.print(f"[bold green]primertune[/bold green] version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool,
        typer.Option(
            "--version",
            "-v",
            callback=version_callback,
            is_eager=True,
            help="Show version and exit.",
        ),
    ] = False,
    log_level: Annotated[
        str,
        typer.Option("--log-level", help="Minimum log level written to stderr."),
    ] = "WARNING",
    log_dir: Annotated[
        Path | None,
        typer.Option(
            "--log-dir",
            help="Also write a DEBUG log file to this directory.",
            file_okay=False,
        ),
    ] = None,
) -> None:
    """primertune - Primer quality scoring and end tuning."""
    configure_logging(log_level)
    if log_dir is not None:
        log_dir.mkdir(parents=True, exist_ok=True)
        log_file = configure_file_logging(log_dir)
        logger.info(f"Log file: {log_file}")


def _load(config_file: Path | None, preset: str) -> EngineConfig:
    try:
        return load_config(preset=preset, config_path=config_file)
    except (FileNotFoundError, ValidationError) as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e


def _print_metrics(named_metrics: dict, title: str) -> None:
    df = metrics_table(named_metrics)
    columns = ["name", "bases", "length", "tm", "gc_percent", "end_stability",
               "repeat_count", "dimer_risk", "score"]

    table = Table(title=title)
    for column in columns:
        table.add_column(column, justify="left" if column in ("name", "bases") else "right")
    for _, row in df[columns].iterrows():
        table.add_row(*(str(value) for value in row))
    console.print(table)


@app.command()
def score(
    primers: Annotated[
        list[str],
        typer.Argument(help="Primer sequences, 5'->3'."),
    ],
    config_file: ConfigOption = None,
    preset: PresetOption = "default",
) -> None:
    """Score one or more primer sequences."""
    config = _load(config_file, preset)

    try:
        named = {
            f"primer_{i + 1}": evaluate(
                bases, config.ion_concentrations, config.scoring_parameters
            )
            for i, bases in enumerate(primers)
        }
    except PrimerEngineError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    _print_metrics(named, "Primer quality")


@app.command(name="tune")
def tune_command(
    template: Annotated[str, typer.Argument(help="Template sequence, 5'->3'.")],
    start: Annotated[int, typer.Option("--start", help="Primer start (0-based).")],
    end: Annotated[int, typer.Option("--end", help="Primer end (exclusive).")],
    reverse: Annotated[
        bool, typer.Option("--reverse", help="Primer reads along the reverse strand.")
    ] = False,
    extend_5p: Annotated[
        int, typer.Option("--extend-5p", help="Maximum 5' extension (0 = fixed).")
    ] = 0,
    extend_3p: Annotated[
        int, typer.Option("--extend-3p", help="Maximum 3' extension (0 = fixed).")
    ] = 0,
    anchor: Annotated[
        int | None,
        typer.Option("--anchor", help="Junction index; required when both ends extend."),
    ] = None,
    min_length: Annotated[int, typer.Option("--min-length")] = 10,
    max_length: Annotated[int, typer.Option("--max-length")] = 60,
    circular: Annotated[
        bool, typer.Option("--circular", help="Treat the template as circular.")
    ] = False,
    config_file: ConfigOption = None,
    preset: PresetOption = "default",
) -> None:
    """Tune the ends of a primer on a template for the best quality score."""
    config = _load(config_file, preset)

    try:
        sequence = Sequence(template, Topology.CIRCULAR if circular else Topology.LINEAR)
        primer = Primer(
            match=FixedRange(start, end),
            name="primer",
            direction=Direction.REVERSE if reverse else Direction.FORWARD,
            five_prime=EndTuning.up_to(extend_5p) if extend_5p else EndTuning(),
            three_prime=EndTuning.up_to(extend_3p) if extend_3p else EndTuning(),
            min_length=min_length,
            max_length=max_length,
            anchor=anchor,
        )
        result = tune(
            primer,
            sequence,
            config.ion_concentrations,
            config.scoring_parameters,
            config.tuning_parameters,
        )
    except PrimerEngineError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    _print_metrics({"primer": result.metrics}, "Tuned primer")
    console.print(
        f"  Range: {result.resolved.start}..{result.resolved.end} "
        f"({result.evaluated} candidates evaluated)"
    )


@app.command()
def clone(
    vector: Annotated[str, typer.Argument(help="Circular vector sequence.")],
    insert: Annotated[str, typer.Argument(help="Insert sequence.")],
    at: Annotated[int, typer.Option("--at", help="Vector index the insert goes before.")],
    overlap: Annotated[
        int, typer.Option("--overlap", help="Target homology arm length (nt).")
    ] = 20,
    config_file: ConfigOption = None,
    preset: PresetOption = "default",
) -> None:
    """Design SLIC/FastCloning primers for inserting a sequence into a vector."""
    config = _load(config_file, preset)

    try:
        vector_seq = Sequence(vector, Topology.CIRCULAR)
        insert_seq = Sequence(insert)
        primers = generate_pair(
            vector_seq,
            insert_seq,
            at,
            overlap,
            config.ion_concentrations,
            config.scoring_parameters,
            config.cloning_parameters,
            config.tuning_parameters,
        )
    except PrimerEngineError as e:
        console.print(f"[bold red]Error: {e}[/bold red]")
        raise typer.Exit(code=1) from e

    _print_metrics(
        {name: result.metrics for name, result in primers.primers().items()},
        "SLIC primers",
    )
    console.print(f"  Product: {len(primers.predicted_product)} nt (circular)")
    if primers.verify(vector_seq, insert_seq, config.cloning_parameters.min_anneal):
        console.print("  [green]✓[/green] Simulated assembly matches the predicted product")
    else:
        console.print("  [yellow]Simulated assembly differs from the predicted product[/yellow]")


if __name__ == "__main__":
    app()
