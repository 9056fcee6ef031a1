"""CLI for ReportForge."""

import csv
import io
import logging
import os
import re
from pathlib import Path
from typing import Annotated

import typer
from rich.console import Console
from rich.table import Table

from reportforge.builder.request_builder import RequestBuilder
from reportforge.client import ReportingService
from reportforge.errors import ReportingError
from reportforge.executor.duckdb_executor import ReportWarehouse
from reportforge.models.report import ReportData, ReportResult
from reportforge.models.request import DEFAULT_MAX_RESULTS, RequestConfiguration
from reportforge.parser.loader import load_request, load_service_configuration, save_request

app = typer.Typer(
    name="rf",
    help="ReportForge - Google Analytics reporting CLI",
    no_args_is_help=True,
)
console = Console()

CONFIG_ENV_VAR = "REPORTFORGE_CONFIG"
DEFAULT_SERVICE_CONFIG = Path("./reporting.yaml")

# "country==Germany", "ga:sessions>=10" - longest operators first
_FILTER_RE = re.compile(r"^(?P<field>[\w:]+?)(?P<op>==|!=|>=|<=|=@|!@|=~|!~|>|<)(?P<value>.+)$")


def resolve_service_path(service: Path | None) -> Path:
    if service is not None:
        return service
    return Path(os.environ.get(CONFIG_ENV_VAR) or DEFAULT_SERVICE_CONFIG)


def get_service(service_path: Path) -> ReportingService:
    return ReportingService(load_service_configuration(service_path))


def _split(value: str | None) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()] if value else []


def _parse_filter(expression: str) -> tuple[str, str, str]:
    match = _FILTER_RE.match(expression.strip())
    if not match:
        raise typer.BadParameter(
            f"Can't parse filter {expression!r}, expected e.g. 'country==Germany'"
        )
    return match["field"], match["op"], match["value"]


@app.command()
def build(
    profile: Annotated[str, typer.Option("--profile", "-p", help="View (profile) id")],
    start_date: Annotated[str, typer.Option("--start", help="Start date (YYYY-MM-DD)")],
    metrics: Annotated[str, typer.Option("--metrics", "-m", help="Comma-separated metrics")],
    end_date: Annotated[
        str | None, typer.Option("--end", help="End date (YYYY-MM-DD), defaults to today")
    ] = None,
    dimensions: Annotated[
        str | None, typer.Option("--dimensions", "-g", help="Comma-separated dimensions")
    ] = None,
    filters: Annotated[
        list[str] | None,
        typer.Option("--filter", "-f", help="Filter term like 'country==Germany', repeat to AND"),
    ] = None,
    sorts: Annotated[
        list[str] | None,
        typer.Option("--sort", "-s", help="Sort field, '-' prefix for descending, repeatable"),
    ] = None,
    segment: Annotated[str | None, typer.Option("--segment", help="Segment id")] = None,
    max_results: Annotated[
        int, typer.Option("--max-results", "-l", help="Maximum rows (1-10000)")
    ] = DEFAULT_MAX_RESULTS,
    out: Annotated[Path | None, typer.Option("--out", "-o", help="Write json here")] = None,
) -> None:
    """Build a request configuration and print or save it as json."""
    try:
        configurer = (
            RequestBuilder()
            .with_profile_id(profile)
            .for_date_range(start_date, end_date)
            .with_metrics(*_split(metrics))
            .with_dimensions(*_split(dimensions))
        )

        for index, expression in enumerate(filters or []):
            field, op, value = _parse_filter(expression)
            if index == 0:
                configurer = configurer.filter_by(field, op, value)
            else:
                configurer = configurer.and_filter_by(field, op, value)

        for term in sorts or []:
            configurer = configurer.sort_by(term.lstrip("-"), descending=term.startswith("-"))

        config = configurer.custom(lambda c: c.segment(segment).max_results(max_results)).build()
    except ReportingError as e:
        console.print(f"[red]Invalid request: {e}[/red]")
        raise typer.Exit(1)

    if out is not None:
        try:
            save_request(config, out)
        except OSError as e:
            console.print(f"[red]Error saving request: {e}[/red]")
            raise typer.Exit(1)
        console.print(f"[green]Saved request to {out}[/green]")
    else:
        typer.echo(config.to_json())


@app.command()
def show(
    request_file: Annotated[Path, typer.Argument(help="Request configuration json")],
) -> None:
    """Show a saved request configuration."""
    try:
        config = load_request(request_file)
    except (ReportingError, OSError) as e:
        console.print(f"[red]Error loading request: {e}[/red]")
        raise typer.Exit(1)

    _print_request(config)


def _print_request(config: RequestConfiguration) -> None:
    table = Table(title="Request")
    table.add_column("Field", style="cyan")
    table.add_column("Value")

    table.add_row("Profile", config.profile_id)
    table.add_row("Date range", f"{config.start_date} - {config.end_date}")
    table.add_row("Metrics", ", ".join(config.metrics) or "-")
    table.add_row("Dimensions", ", ".join(config.dimensions) or "-")
    table.add_row("Filter", config.filter or "-")
    table.add_row("Sort", config.sort or "-")
    table.add_row("Segment", config.segment or "-")
    table.add_row("Max results", str(config.max_results))

    console.print(table)


@app.command()
def query(
    request_file: Annotated[Path, typer.Argument(help="Request configuration json")],
    service: Annotated[
        Path | None,
        typer.Option("--service", "-c", help=f"Service config yaml (default ${CONFIG_ENV_VAR})"),
    ] = None,
    output: Annotated[
        str, typer.Option("--output", "-o", help="Output format: table, json, csv")
    ] = "table",
    sql: Annotated[
        str | None, typer.Option("--sql", help="SQL to run over the result (table 'report')")
    ] = None,
    timeout: Annotated[
        float | None, typer.Option("--timeout", help="Seconds allowed per page")
    ] = None,
    verbose: Annotated[bool, typer.Option("--verbose", "-v", help="Debug logging")] = False,
) -> None:
    """Run a saved request against the reporting api."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
    )

    try:
        config = load_request(request_file)
        reporting = get_service(resolve_service_path(service))
    except (ReportingError, OSError) as e:
        console.print(f"[red]Error loading configuration: {e}[/red]")
        raise typer.Exit(1)

    result: ReportResult = reporting.query(config, timeout=timeout)
    if not result.success:
        console.print(f"[red]Query error: {result.error.message}[/red]")
        raise typer.Exit(1)

    data = result.data
    if sql:
        try:
            with ReportWarehouse() as warehouse:
                warehouse.load("report", data)
                data = warehouse.execute(sql)
        except Exception as e:
            console.print(f"[red]SQL error: {e}[/red]")
            raise typer.Exit(1)

    if result.is_sampled:
        console.print("[yellow]Warning: the api returned sampled data[/yellow]")

    _output_result(data, output)


def _output_result(data: ReportData, output_format: str) -> None:
    """Output a report in the specified format."""
    if output_format == "json":
        typer.echo(data.as_json(indent=2))
    elif output_format == "csv":
        buffer = io.StringIO()
        writer = csv.writer(buffer)
        writer.writerow(data.column_names)
        writer.writerows(data.rows)
        typer.echo(buffer.getvalue(), nl=False)
    else:
        table = Table(title=f"Report ({data.row_count} rows)")
        for col in data.column_names:
            table.add_column(col)
        for row in data.rows:
            table.add_row(*["" if v is None else str(v) for v in row])
        console.print(table)


if __name__ == "__main__":
    app()
