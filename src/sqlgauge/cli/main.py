"""CLI for SQLGauge."""

from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.markup import escape
from rich.syntax import Syntax
from rich.table import Table

from sqlgauge.errors import SqlGaugeError
from sqlgauge.logs import configure_logging
from sqlgauge.models.config import RelayConfig
from sqlgauge.models.query import BatchResult
from sqlgauge.parser.loader import DEFAULT_CONFIG_PATH, load_config
from sqlgauge.relay import Relay

app = typer.Typer(
    name="sqlgauge",
    help="SQLGauge - relay warehouse query results to SignalFx as gauges",
    no_args_is_help=True,
)
console = Console(soft_wrap=True)
err_console = Console(stderr=True, soft_wrap=True)

ConfigOption = Annotated[
    Path, typer.Option("--config", "-c", help="Path to the relay config YAML")
]
VerboseOption = Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")]


def _fail(e: SqlGaugeError) -> typer.Exit:
    # one line, stage first, so it greps well in job logs
    err_console.print(f"[red]{e.stage} error: {escape(str(e))}[/red]", highlight=False)
    return typer.Exit(1)


def _load(config_path: Path) -> RelayConfig:
    try:
        return load_config(config_path)
    except SqlGaugeError as e:
        raise _fail(e)


def _print_batch(batch: BatchResult) -> None:
    if batch.ok:
        console.print(f"Ingest response: {batch.status}", highlight=False)
    else:
        reason = escape(batch.error or "")
        err_console.print(f"[yellow]Query #{batch.index} skipped: {reason}[/yellow]")


@app.command()
def run(
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    keep_going: Annotated[
        bool, typer.Option("--keep-going", help="Log failed queries and carry on")
    ] = False,
    verbose: VerboseOption = False,
) -> None:
    """Run every query once and send the results."""
    configure_logging(verbose)
    config = _load(config_path)

    try:
        with Relay(config) as relay:
            report = relay.run(fail_fast=not keep_going, on_batch=_print_batch)
    except SqlGaugeError as e:
        raise _fail(e)

    if not report.ok:
        err_console.print(
            f"[red]{len(report.failed)} of {len(report.batches)} queries failed[/red]"
        )
        raise typer.Exit(1)


@app.command()
def validate(
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Validate the config file without touching the database."""
    configure_logging(verbose)
    config = _load(config_path)

    table = Table(title=f"Queries ({config.sql.db_driver})")
    table.add_column("#", style="cyan")
    table.add_column("Metric", style="green")
    table.add_column("Value column", style="yellow")
    table.add_column("Dimensions")

    for index, spec in enumerate(config.sql.queries):
        for metric in spec.metrics:
            table.add_row(
                str(index),
                metric.metric_name,
                metric.value_column,
                ", ".join(metric.dimension_columns) or "-",
            )

    console.print(table)
    metric_count = sum(len(q.metrics) for q in config.sql.queries)
    console.print(
        f"[green]Validated {len(config.sql.queries)} queries and "
        f"{metric_count} metrics successfully![/green]"
    )


@app.command()
def preview(
    config_path: ConfigOption = DEFAULT_CONFIG_PATH,
    verbose: VerboseOption = False,
) -> None:
    """Run the queries and show the payloads without sending them."""
    configure_logging(verbose)
    config = _load(config_path)

    try:
        with Relay(config) as relay:
            batches = relay.collect()
            bodies = [relay.client.preview(points) for points in batches]
    except SqlGaugeError as e:
        raise _fail(e)

    for index, body in enumerate(bodies):
        console.print(f"[cyan]Query #{index}[/cyan]")
        console.print(Syntax(body, "json", theme="monokai"))


if __name__ == "__main__":
    app()
