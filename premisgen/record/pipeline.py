"""One-call record generation: scan, build, write."""

import logging
from dataclasses import dataclass
from pathlib import Path

from ..config import PremisgenConfig, get_config
from ..core.models import BuildReport
from ..errors import ConfigurationError
from .assembler import RecordAssembler
from .serializer import DocumentSerializer
from .sources import scan_sources

logger = logging.getLogger(__name__)


@dataclass
class GenerationResult:
    output: Path
    report: BuildReport
    source_count: int


def generate_record(
    source_root: Path,
    output: Path | None = None,
    *,
    config: PremisgenConfig | None = None,
    package_id: str | None = None,
    assembler: RecordAssembler | None = None,
) -> GenerationResult:
    """Generate the PREMIS record for a source tree.

    Args:
        source_root: Package directory to scan
        output: Output document (default: ``<source_root>/<output.filename>``)
        config: Settings (default: global config)
        package_id: Package identifier (default: the source root's name)
        assembler: Assembler to use (default: one built from ``config``)

    Raises:
        ConfigurationError: if the source root is missing or not a directory.
        BindingError: if the record root cannot be synthesized.
        SerializationError: if the output cannot be written.
    """
    config = config or get_config()
    source_root = Path(source_root)
    if not source_root.exists():
        raise ConfigurationError(f"Source root not found: {source_root}")
    if not source_root.is_dir():
        raise ConfigurationError(f"Source root is not a directory: {source_root}")

    output = Path(output) if output is not None else source_root / config.output.filename
    package_id = package_id or source_root.resolve().name

    sources = scan_sources(
        source_root,
        exclude=[output],
        fallback_originals=config.build.fallback_originals,
    )
    logger.info("Found %d source file(s) in %s", len(sources), source_root)

    assembler = assembler or RecordAssembler(config=config)
    result = assembler.build(sources, package_id)

    DocumentSerializer(output=config.output).write_document(result.root, output)
    return GenerationResult(output=output, report=result.report, source_count=len(sources))
