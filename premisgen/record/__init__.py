"""Record assembly, source scanning, serialization and validation."""

from .assembler import BuildResult, RecordAssembler
from .pipeline import GenerationResult, generate_record
from .serializer import DocumentSerializer, write_atomic
from .sources import scan_sources
from .validator import validate_document

__all__ = [
    "BuildResult",
    "DocumentSerializer",
    "GenerationResult",
    "RecordAssembler",
    "generate_record",
    "scan_sources",
    "validate_document",
    "write_atomic",
]
