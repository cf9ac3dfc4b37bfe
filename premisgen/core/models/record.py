"""Record models for premisgen.

This module contains:
- Sources: FileRole, SourceFile
- Build results: PhaseResult, BuildReport
"""

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field


# =============================================================================
# Sources
# =============================================================================


class FileRole(str, Enum):
    """Role of a scanned file in the package, in record order."""

    METADATA = "metadata"
    ORIGINAL = "original"
    DERIVED = "derived"
    SCHEMA = "schema"


ROLE_ORDER = [FileRole.METADATA, FileRole.ORIGINAL, FileRole.DERIVED, FileRole.SCHEMA]


class SourceFile(BaseModel):
    """A file found in the source tree."""

    path: Path = Field(description="Absolute path on disk")
    role: FileRole
    index: int = Field(default=1, ge=1, description="1-based position within its role")

    @property
    def name(self) -> str:
        return self.path.name


# =============================================================================
# Build results
# =============================================================================


class PhaseResult(BaseModel):
    """Outcome of one assembly phase."""

    phase: str
    attached: int = Field(default=0, description="Sections attached to the graph")
    warnings: list[str] = Field(default_factory=list)
    failed: bool = False

    def warn(self, message: str) -> None:
        self.warnings.append(message)


class BuildReport(BaseModel):
    """Aggregated phase results of one record build."""

    package_id: str
    phases: list[PhaseResult] = Field(default_factory=list)
    summary: dict[str, int] = Field(default_factory=dict)

    @property
    def warnings(self) -> list[str]:
        return [f"{p.phase}: {w}" for p in self.phases for w in p.warnings]

    @property
    def ok(self) -> bool:
        return not any(p.failed for p in self.phases)

    def phase(self, name: str) -> PhaseResult | None:
        for result in self.phases:
            if result.phase == name:
                return result
        return None
