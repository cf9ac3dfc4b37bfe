"""Digest, size and coarse format detection for source files."""

import hashlib
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path

logger = logging.getLogger(__name__)

DEFAULT_CHUNK_SIZE = 65536

# Suffix -> format label. Unknown suffixes fall back to the upper-cased suffix.
FORMAT_LABELS = {
    ".pdf": "PDF",
    ".xml": "XML",
    ".xsd": "XSD",
    ".json": "JSON",
    ".txt": "Plain text",
    ".csv": "CSV",
    ".tif": "TIFF",
    ".tiff": "TIFF",
    ".jpg": "JPEG",
    ".jpeg": "JPEG",
    ".png": "PNG",
}


@dataclass(frozen=True)
class FileFacts:
    """What the record needs to know about one file."""

    digest: str
    size: int
    format_name: str
    modified: str
    algorithm: str = "SHA-256"


def sha256_file(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> str:
    """Hex SHA-256 of a file, read in ``chunk_size`` pieces."""
    digest = hashlib.sha256()
    with open(path, "rb") as f:
        while chunk := f.read(chunk_size):
            digest.update(chunk)
    return digest.hexdigest()


def format_label(path: Path) -> str:
    suffix = Path(path).suffix.lower()
    if suffix in FORMAT_LABELS:
        return FORMAT_LABELS[suffix]
    return suffix.lstrip(".").upper() or "Unknown"


def detect(path: Path, chunk_size: int = DEFAULT_CHUNK_SIZE) -> FileFacts:
    """Digest, size, format label and modification time of ``path``.

    Raises:
        OSError: if the file cannot be read.
    """
    path = Path(path)
    stat = path.stat()
    modified = datetime.fromtimestamp(stat.st_mtime, tz=timezone.utc)
    facts = FileFacts(
        digest=sha256_file(path, chunk_size),
        size=stat.st_size,
        format_name=format_label(path),
        modified=modified.isoformat(timespec="seconds"),
    )
    logger.debug("%s: %d bytes, %s", path.name, facts.size, facts.format_name)
    return facts
