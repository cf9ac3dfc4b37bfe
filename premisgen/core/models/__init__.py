"""Pydantic models for premisgen.

- record.py: scanned source files, phase results and the build report
"""

from .record import (
    BuildReport,
    FileRole,
    PhaseResult,
    SourceFile,
)

__all__ = [
    "BuildReport",
    "FileRole",
    "PhaseResult",
    "SourceFile",
]
