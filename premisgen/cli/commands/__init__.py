"""CLI commands for premisgen."""

from . import (
    generate,
    validate,
    kinds,
    config_cmd,
)

__all__ = [
    "generate",
    "validate",
    "kinds",
    "config_cmd",
]
