"""Config command for viewing and managing premisgen configuration."""

from typing import Any

import typer

from ...config import CONFIG_FILE, PremisgenConfig, get_config, reset_config
from ...errors import ConfigurationError
from ..app import app, console


def _flatten(data: dict[str, Any], prefix: str = "") -> dict[str, Any]:
    flat: dict[str, Any] = {}
    for key, value in data.items():
        name = f"{prefix}{key}"
        if isinstance(value, dict):
            flat.update(_flatten(value, f"{name}."))
        else:
            flat[name] = value
    return flat


VALID_KEYS = set(_flatten(PremisgenConfig().to_dict()))


@app.command("config")
def config_command(
    action: str = typer.Argument(
        ...,
        help="Action: show, set, reset",
    ),
    key: str | None = typer.Argument(
        None,
        help="Config key (e.g. rights.basis, agents.depositor.name)",
    ),
    value: str | None = typer.Argument(
        None,
        help="Value to set",
    ),
):
    """View or modify premisgen configuration.

    Examples:
        premisgen config show
        premisgen config set agents.depositor.name "Records Office"
        premisgen config set build.hash_chunk_size 1048576
        premisgen config reset
    """
    if action == "show":
        _show_config()
    elif action == "set":
        if not key or value is None:
            console.print("[red]Usage:[/red] premisgen config set <key> <value>")
            _print_keys()
            raise typer.Exit(1)
        _set_config(key, value)
    elif action == "reset":
        _reset_config()
    else:
        console.print(f"[red]Unknown action:[/red] {action}")
        console.print("Valid actions: show, set, reset")
        raise typer.Exit(1)


def _print_keys() -> None:
    console.print()
    console.print("Available keys:")
    for k in sorted(VALID_KEYS):
        console.print(f"  {k}")


def _show_config():
    """Display current resolved configuration."""
    config = get_config()

    console.print()
    console.print("[bold]premisgen Configuration[/bold]")
    console.print("─" * 40)

    for section, values in config.to_dict().items():
        console.print()
        console.print(f"[bold cyan]{section.capitalize()}[/bold cyan]")
        flat = _flatten(values)
        width = max(len(k) for k in flat)
        for name, val in flat.items():
            console.print(f"  {name.ljust(width)} = {val}", markup=False, highlight=False)

    console.print()
    if CONFIG_FILE.exists():
        console.print(f"Config file: {CONFIG_FILE}")
    else:
        console.print(f"Config file: [dim]not created yet[/dim] ({CONFIG_FILE})")
    console.print()


def _set_config(key: str, value: str):
    """Set a config value and save."""
    if key not in VALID_KEYS:
        console.print(f"[red]Unknown key:[/red] {key}")
        _print_keys()
        raise typer.Exit(1)

    # Build a nested mapping from the dotted key
    update: dict[str, Any] = {}
    node = update
    parts = key.split(".")
    for part in parts[:-1]:
        node = node.setdefault(part, {})
    node[parts[-1]] = value

    try:
        config = get_config().with_profile(update)
    except ConfigurationError as e:
        console.print(f"[red]Invalid value:[/red] {e}")
        raise typer.Exit(1)

    config.save()
    reset_config()  # Clear cached singleton so next get_config() reloads

    console.print(f"[green]✓[/green] Set {key} = {value}")
    console.print(f"  Saved to {CONFIG_FILE}")


def _reset_config():
    """Reset config to defaults."""
    if CONFIG_FILE.exists():
        CONFIG_FILE.unlink()
        reset_config()
        console.print("[green]✓[/green] Config reset to defaults")
        console.print(f"  Removed {CONFIG_FILE}")
    else:
        console.print("Config already at defaults (no config file exists)")
