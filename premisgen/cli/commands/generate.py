"""Generate command: build and write the PREMIS record for a package."""

from pathlib import Path

import typer

from ...config import apply_profile, get_config
from ...errors import BindingError, ConfigurationError, SerializationError
from ...record import generate_record
from ...record.assembler import SUMMARY_KINDS
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output, setup_logging


@app.command("generate")
def generate_command(
    source_root: Path = typer.Argument(..., help="Package directory to scan"),
    output_file: Path | None = typer.Argument(
        None, help="Output document (default: <source-root>/premis.xml)"
    ),
    profile: Path | None = typer.Option(
        None, "--profile", "-p", help="YAML build profile (agents, rights, build keys)"
    ),
    package_id: str | None = typer.Option(
        None, "--package-id", help="Package identifier (default: source root name)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show INFO logs"),
    debug: bool = typer.Option(False, "--debug", help="Show DEBUG logs"),
):
    """Scan a package directory and write its PREMIS record.

    Example:
        premisgen generate ./sip-0042
        premisgen generate ./sip-0042 out/premis.xml --profile court.yaml
    """
    setup_logging(console, verbose=verbose, debug=debug)
    out = Output(console=console, json_mode=get_json_mode())

    config = get_config()
    if profile is not None:
        try:
            config = apply_profile(config, profile)
        except ConfigurationError as e:
            out.error(str(e), exit_code=ExitCode.VALIDATION_ERROR)
            raise typer.Exit(out.finish())

    try:
        result = generate_record(
            source_root, output_file, config=config, package_id=package_id
        )
    except ConfigurationError as e:
        out.error(
            str(e),
            suggestion="Pass the package directory that holds representation/",
            exit_code=ExitCode.FILE_NOT_FOUND,
        )
        raise typer.Exit(out.finish())
    except BindingError as e:
        out.error(
            str(e),
            suggestion="Run `premisgen kinds` to see which element kinds are unavailable",
            exit_code=ExitCode.BINDING_ERROR,
        )
        raise typer.Exit(out.finish())
    except SerializationError as e:
        out.error(str(e), exit_code=ExitCode.SERIALIZATION_ERROR)
        raise typer.Exit(out.finish())

    report = result.report
    out.success(
        f"Wrote {result.output}",
        output=str(result.output),
        package_id=report.package_id,
        source_files=result.source_count,
    )
    for message in report.warnings:
        out.warning(message)
    if get_json_mode():
        out.set_data("summary", report.summary)
    else:
        out.table(
            "Summary",
            ["Section", "Count"],
            [[SUMMARY_KINDS[kind], str(count)] for kind, count in report.summary.items()],
        )
    raise typer.Exit(out.finish())
