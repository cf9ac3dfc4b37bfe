"""Document serialization and atomic output."""

import logging
import os
import tempfile
from pathlib import Path
from typing import Any

from lxml import etree

from ..config import OutputConfig
from ..errors import SerializationError
from ..schema.codec import XSI_NS, BindingCodec

logger = logging.getLogger(__name__)


class DocumentSerializer:
    """Turns a root graph into a PREMIS XML document."""

    def __init__(self, codec: BindingCodec | None = None, output: OutputConfig | None = None):
        self.codec = codec or BindingCodec()
        self.output = output or OutputConfig()

    def to_tree(self, root: Any) -> etree._Element:
        element = self.codec.to_element(root, "premis")
        if self.output.schema_location:
            element.set(f"{{{XSI_NS}}}schemaLocation", self.output.schema_location)
        return element

    def serialize(self, root: Any) -> bytes:
        """Encode ``root`` as a UTF-8 document with an XML declaration.

        Raises:
            SerializationError: if the graph cannot be encoded.
        """
        try:
            element = self.to_tree(root)
        except (TypeError, ValueError, AttributeError) as exc:
            raise SerializationError(f"Cannot encode record: {exc}") from exc
        return etree.tostring(
            element,
            xml_declaration=True,
            encoding="UTF-8",
            pretty_print=self.output.pretty_print,
        )

    def write_document(self, root: Any, path: Path) -> Path:
        """Serialize ``root`` and write it atomically to ``path``."""
        path = Path(path)
        write_atomic(path, self.serialize(root))
        logger.info("Wrote %s", path)
        return path


def write_atomic(path: Path, data: bytes) -> None:
    """Write ``data`` to ``path`` through a temp file in the same directory.

    Raises:
        SerializationError: if the file cannot be written. No partial file
            is left behind.
    """
    path = Path(path)
    tmp_name: str | None = None
    try:
        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{path.name}.", suffix=".tmp", dir=path.parent
        )
        with os.fdopen(fd, "wb") as f:
            f.write(data)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_name, path)
    except OSError as exc:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except FileNotFoundError:
                pass
        raise SerializationError(f"Cannot write {path}: {exc}") from exc
