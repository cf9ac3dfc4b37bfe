"""Schema validation of written records."""

import logging
from pathlib import Path

from lxml import etree

from ..errors import ConfigurationError

logger = logging.getLogger(__name__)


def load_schema(xsd: Path) -> etree.XMLSchema:
    """Compile an XSD.

    Raises:
        ConfigurationError: if the schema is missing or does not compile.
    """
    try:
        return etree.XMLSchema(etree.parse(str(xsd)))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read schema {xsd}: {exc}") from exc
    except (etree.XMLSyntaxError, etree.XMLSchemaParseError) as exc:
        raise ConfigurationError(f"Invalid schema {xsd}: {exc}") from exc


def validate_document(xml: Path, xsd: Path) -> list[str]:
    """Validate ``xml`` against ``xsd``.

    Returns:
        Error messages as ``line X, col Y: message``; empty when valid.
    """
    schema = load_schema(xsd)
    parser = etree.XMLParser(resolve_entities=False, no_network=True)
    try:
        document = etree.parse(str(xml), parser)
    except OSError as exc:
        raise ConfigurationError(f"Cannot read {xml}: {exc}") from exc
    except etree.XMLSyntaxError as exc:
        return [f"line {exc.lineno}, col {exc.offset}: {exc.msg}"]

    if schema.validate(document):
        logger.info("%s is valid against %s", xml, xsd)
        return []
    errors = [
        f"line {entry.line}, col {entry.column}: {entry.message}"
        for entry in schema.error_log
    ]
    logger.info("%s: %d validation error(s)", xml, len(errors))
    return errors
