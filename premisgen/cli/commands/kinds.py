"""Kinds command: list element kinds and how each is synthesized."""

import typer

from ...binding import InstanceSynthesizer
from ..app import app, console, get_json_mode
from ..utils import ExitCode, Output


@app.command("kinds")
def kinds_command():
    """List every element kind and the strategy that currently creates it.

    Example:
        premisgen kinds
        premisgen --json kinds
    """
    out = Output(console=console, json_mode=get_json_mode())
    synthesizer = InstanceSynthesizer()

    rows = []
    unavailable = 0
    for kind in synthesizer.registry.kinds():
        instance, strategy = synthesizer.resolve(kind)
        if instance is None:
            unavailable += 1
        rows.append(
            [
                kind.name,
                kind.type_name,
                type(instance).__name__ if instance is not None else "-",
                strategy or "unavailable",
            ]
        )

    out.table("Element kinds", ["Kind", "Expected type", "Instance", "Strategy"], rows, data_key="kinds")
    if unavailable:
        out.warning(f"{unavailable} kind(s) cannot be synthesized")
        out.error("Some element kinds are unavailable", exit_code=ExitCode.VALIDATION_ERROR)
    raise typer.Exit(out.finish())
