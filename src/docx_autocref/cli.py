"""Command-line interface for docx-autocref.

Provides commands for turning footnote cross-references into fields from the terminal.
"""

import json
import logging
from enum import Enum
from pathlib import Path
from typing import Annotated

import typer
import yaml

from . import __version__
from .constants import DEFAULT_VERBOSITY, FIELD_STYLE_COMPLEX, FIELD_STYLE_SIMPLE, VERBOSITY_ENV
from .converter import ConversionOptions, convert_docx, scan_docx
from .errors import AutocrefError

app = typer.Typer(
    name="autocref",
    help="Turn 'supra note N' cross-references in Word documents into NOTEREF fields.",
    no_args_is_help=True,
)

# Verbosity 0..5 mapped onto logging levels
_LOG_LEVELS = {
    0: logging.CRITICAL,
    1: logging.ERROR,
    2: logging.WARNING,
    3: logging.INFO,
    4: logging.DEBUG,
    5: logging.DEBUG,
}


class ReportFormat(str, Enum):
    yaml = "yaml"
    json = "json"


def configure_logging(verbosity: int) -> None:
    """Configure the root logger for a verbosity level (0 quietest, 5 loudest)."""
    level = _LOG_LEVELS[max(0, min(verbosity, 5))]
    fmt = "%(levelname)s: %(message)s"
    if verbosity >= 5:
        fmt = "%(levelname)s %(name)s: %(message)s"
    logging.basicConfig(level=level, format=fmt, force=True)


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"autocref version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Annotated[
        bool | None,
        typer.Option(
            "--version",
            "-V",
            help="Show version and exit.",
            callback=version_callback,
            is_eager=True,
        ),
    ] = None,
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            min=0,
            max=5,
            envvar=VERBOSITY_ENV,
            help="Log level: 0 critical, 1 error, 2 warning, 3 info, 4-5 debug.",
        ),
    ] = DEFAULT_VERBOSITY,
) -> None:
    """Turn 'supra note N' cross-references in Word documents into NOTEREF fields."""
    configure_logging(verbose)


@app.command()
def convert(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
    output: Annotated[Path | None, typer.Option("--output", "-o", help="Output file path")] = None,
    hyperlink: Annotated[
        bool, typer.Option("--hyperlink", help="Make each reference link to its footnote")
    ] = False,
    complex_fields: Annotated[
        bool,
        typer.Option("--complex-fields", help="Write fldChar fields instead of fldSimple"),
    ] = False,
    first_note: Annotated[
        int, typer.Option("--first-note", min=0, help="Number of the first footnote")
    ] = 1,
) -> None:
    """Convert cross-references into NOTEREF fields."""
    options = ConversionOptions(
        hyperlink=hyperlink,
        field_style=FIELD_STYLE_COMPLEX if complex_fields else FIELD_STYLE_SIMPLE,
        first_note=first_note,
    )
    try:
        result = convert_docx(file, output, options)
    except AutocrefError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    output_path = output or file
    typer.echo(f"{result}, saved to {output_path}")
    for part in result.parts:
        if part.matches:
            typer.echo(f"  {part}")


@app.command()
def scan(
    file: Annotated[Path, typer.Argument(help="Path to the .docx file")],
    report_format: Annotated[
        ReportFormat, typer.Option("--format", "-f", help="Report format")
    ] = ReportFormat.yaml,
) -> None:
    """List cross-references without changing the document."""
    try:
        found = scan_docx(file)
    except AutocrefError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(1)

    report = [{"part": part_name, **match.to_dict()} for part_name, match in found]
    if report_format == ReportFormat.json:
        typer.echo(json.dumps(report, indent=2, ensure_ascii=False))
    else:
        typer.echo(yaml.safe_dump(report, sort_keys=False, allow_unicode=True), nl=False)


if __name__ == "__main__":
    app()
