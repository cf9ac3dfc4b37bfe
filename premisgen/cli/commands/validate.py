"""Validate command: check a written record against an XSD."""

from pathlib import Path

import typer

from ...errors import ConfigurationError
from ...record import validate_document
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output


@app.command("validate")
def validate_command(
    xml_file: Path = typer.Argument(..., help="PREMIS document to check"),
    xsd_file: Path = typer.Argument(..., help="XML Schema (e.g. premis-3-0.xsd)"),
):
    """Validate a document against an XML Schema.

    Example:
        premisgen validate sip-0042/premis.xml premis-3-0.xsd
    """
    out = Output(console=console, json_mode=get_json_mode())

    for path in (xml_file, xsd_file):
        if not path.is_file():
            out.error(f"File not found: {path}", exit_code=ExitCode.FILE_NOT_FOUND)
            raise typer.Exit(out.finish())

    try:
        errors = validate_document(xml_file, xsd_file)
    except ConfigurationError as e:
        out.error(str(e), exit_code=ExitCode.VALIDATION_ERROR)
        raise typer.Exit(out.finish())

    out.set_data("error_count", len(errors))
    if errors:
        for message in errors:
            out.error(message, exit_code=ExitCode.VALIDATION_ERROR)
        out.text(f"[red]{len(errors)} error(s)[/red] in {xml_file}")
    else:
        out.success(f"{xml_file} is valid", valid=True)
    raise typer.Exit(out.finish())
