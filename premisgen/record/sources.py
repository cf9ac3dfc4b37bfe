"""Source tree scanning.

Directory convention of a submission package:

    <root>/
        ...*metadata*...             metadata (anywhere outside representation/)
        representation/rep1/data/**  originals
        representation/rep2/data/**  derived (converted) files
        ...*.xsd                     schema (first one found)

When rep1 holds nothing, up to ``fallback_originals`` PDFs found elsewhere
in the tree stand in for the originals.
"""

import logging
from pathlib import Path
from typing import Iterable

from ..core.models import FileRole, SourceFile
from ..core.models.record import ROLE_ORDER

logger = logging.getLogger(__name__)

REP1_MARKER = "representation/rep1/data/"
REP2_MARKER = "representation/rep2/data/"


def _relative(path: Path, root: Path) -> str:
    return "/" + path.relative_to(root).as_posix().lower()


def scan_sources(
    root: Path,
    exclude: Iterable[Path] = (),
    fallback_originals: int = 2,
) -> list[SourceFile]:
    """Classify the files under ``root`` by role.

    Args:
        root: Source tree root
        exclude: Paths never reported (e.g. the output document)
        fallback_originals: PDFs to treat as originals when rep1 is empty

    Returns:
        Source files ordered metadata, original, derived, schema; each role
        in path order with 1-based indexes.
    """
    root = Path(root)
    excluded = {Path(p).resolve() for p in exclude}
    by_role: dict[FileRole, list[Path]] = {role: [] for role in ROLE_ORDER}
    unclassified: list[Path] = []

    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.name.startswith("."):
            continue
        if path.resolve() in excluded:
            logger.debug("Skipping excluded %s", path)
            continue
        rel = _relative(path, root)
        if "/" + REP1_MARKER in rel:
            by_role[FileRole.ORIGINAL].append(path)
        elif "/" + REP2_MARKER in rel:
            by_role[FileRole.DERIVED].append(path)
        elif path.suffix.lower() == ".xsd" and not by_role[FileRole.SCHEMA]:
            by_role[FileRole.SCHEMA].append(path)
        elif "metadata" in path.name.lower() and "/representation/" not in rel:
            by_role[FileRole.METADATA].append(path)
        else:
            unclassified.append(path)

    if not by_role[FileRole.ORIGINAL] and fallback_originals > 0:
        pdfs = [
            p
            for p in unclassified
            if p.suffix.lower() == ".pdf" and "/representation/rep2/" not in _relative(p, root)
        ]
        if pdfs:
            picked = pdfs[:fallback_originals]
            logger.info(
                "No files in %s; using %d PDF(s) as originals", REP1_MARKER, len(picked)
            )
            by_role[FileRole.ORIGINAL].extend(picked)

    sources = []
    for role in ROLE_ORDER:
        for index, path in enumerate(by_role[role], start=1):
            sources.append(SourceFile(path=path, role=role, index=index))
    logger.debug(
        "Scanned %s: %s",
        root,
        ", ".join(f"{len(by_role[r])} {r.value}" for r in ROLE_ORDER),
    )
    return sources
