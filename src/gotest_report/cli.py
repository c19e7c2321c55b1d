"""
Command line entry point for gotest-report.

Reads a `go test -json` event stream from a file or stdin, aggregates it into
a package/test report and writes the report in the configured format.

Example:
    ```bash
    go test -json ./... | gotest-report --format html --output report.html

    # Default: XML report under <tmpdir>/cov/cov.xml
    gotest-report events.json --summary
    ```
"""

import sys
from pathlib import Path
from typing import List, Optional

import typer
from loguru import logger
from rich.console import Console
from rich.table import Table

from .assembler import build_report
from .config import ReportConfig, load_config
from .decoder import read_events
from .errors import ConfigurationError, ReportError
from .logging_config import setup_logging
from .models import TestEvent, TestReport
from .writers import render_report, write_report

STDIO = "-"

app = typer.Typer(add_completion=False, help="Aggregate go test -json output into a report.")


def read_input(source: str) -> List[TestEvent]:
    """Decode events from a path, or from stdin when source is '-'."""
    if source == STDIO:
        return read_events(sys.stdin)
    with open(source, "r", encoding="utf-8") as f:
        return read_events(f)


def print_summary(report: TestReport, console: Console) -> None:
    """Print per-package counts as a table."""
    table = Table(title="Test summary")
    table.add_column("Package")
    table.add_column("Result")
    for header in ("Total", "Pass", "Fail", "Skip", "Bench"):
        table.add_column(header, justify="right")
    table.add_column("Duration", justify="right")

    for package in report.packages:
        counts = package.counts
        table.add_row(
            package.name or "(none)",
            package.action,
            str(counts.total),
            str(counts.passed),
            str(counts.failed),
            str(counts.skipped),
            str(counts.bench),
            package.timing.duration if package.timing else "",
        )

    totals = report.counts
    table.add_row(
        "[bold]all[/bold]",
        "",
        str(totals.total),
        str(totals.passed),
        str(totals.failed),
        str(totals.skipped),
        str(totals.bench),
        "",
    )
    console.print(table)


def _fail(message: str) -> None:
    typer.echo(f"Error: {message}", err=True)
    raise typer.Exit(code=1)


@app.command()
def generate(
    input_path: str = typer.Argument(STDIO, help="Event stream file, '-' for stdin"),
    output: Optional[str] = typer.Option(
        None, "--output", "-o", help="Report path, '-' for stdout"
    ),
    report_format: Optional[str] = typer.Option(
        None, "--format", "-f", help="Report format (xml, json, html)"
    ),
    config_file: Optional[str] = typer.Option(None, "--config", help="Path to YAML configuration file"),
    log_level: Optional[str] = typer.Option(None, "--log-level", help="Log level"),
    summary: bool = typer.Option(False, "--summary/--no-summary", help="Print a summary table"),
) -> None:
    """Build a package/test report from a go test -json event stream.

    Any malformed record, unknown action or unfinished test aborts the run
    with exit code 1 and no report is written.
    """
    try:
        config: ReportConfig = load_config(
            config_file,
            output_path=output,
            output_format=report_format,
            log_level=log_level,
        )
    except ConfigurationError as e:
        _fail(str(e))

    setup_logging(config.log_level, config.log_file)
    logger.enable("gotest_report")
    to_stdout = str(config.output_path) == STDIO

    try:
        events = read_input(input_path)
        report = build_report(events)
        if to_stdout:
            content = render_report(report, config.output_format)
        else:
            written: Path = write_report(report, config.output_path, config.output_format)
    except ReportError as e:
        logger.error("Report generation failed: {}", e)
        _fail(str(e))
    except OSError as e:
        logger.error("Cannot read or write report files: {}", e)
        _fail(str(e))

    if to_stdout:
        typer.echo(content, nl=False)
    else:
        typer.echo(str(written))

    if summary:
        print_summary(report, Console(stderr=to_stdout))


def main() -> None:
    """Console script entry point."""
    app()


if __name__ == "__main__":
    main()
