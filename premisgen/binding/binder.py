"""Property binding by name, with value adaptation.

``PropertyBinder.bind`` sets a scalar property when the instance has one
matching the name, otherwise appends to a repeated property of that name.
The value is adapted to the declared type first; a value that cannot be
adapted is rejected without touching the instance.
"""

from __future__ import annotations

import logging
import numbers
from typing import Any

from pydantic import BaseModel

from ..schema.premis_v3 import BoundElement
from .capabilities import describe, find_slot

logger = logging.getLogger(__name__)


class _Incompatible:
    def __repr__(self) -> str:
        return "<incompatible>"


INCOMPATIBLE = _Incompatible()


def adapt_value(value: Any, declared_type: type | None) -> Any:
    """Adapt ``value`` to ``declared_type``, or return ``INCOMPATIBLE``.

    - an instance of the declared type (or an untyped slot) passes through
    - ``int`` accepts integral numbers and numeric strings
    - ``str`` accepts scalars, and models that carry a text value
    - a ``BoundElement`` is unwrapped when its value fits
    """
    if declared_type is None:
        return value
    if isinstance(value, BoundElement):
        if isinstance(value.value, declared_type):
            return value.value
        return adapt_value(value.value, declared_type)
    if isinstance(value, declared_type) and not (
        declared_type is int and isinstance(value, bool)
    ):
        return value

    if declared_type is int:
        if isinstance(value, bool):
            return INCOMPATIBLE
        if isinstance(value, numbers.Integral):
            return int(value)
        if isinstance(value, numbers.Real) and float(value).is_integer():
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                return INCOMPATIBLE
        return INCOMPATIBLE

    if declared_type is str:
        if isinstance(value, BaseModel):
            if getattr(type(value), "xml_text", None):
                return str(value)
            return INCOMPATIBLE
        if isinstance(value, (numbers.Number, str)):
            return str(value)
        return INCOMPATIBLE

    return INCOMPATIBLE


class PropertyBinder:
    """Sets or appends property values on binding instances."""

    def bind(self, instance: Any, property_name: str, value: Any) -> bool:
        """Bind ``value`` to the property named ``property_name``.

        Returns:
            True if exactly one mutation happened, False otherwise.
        """
        try:
            return self._bind(instance, property_name, value)
        except Exception as exc:
            logger.debug(
                "bind %s.%s failed: %s", type(instance).__name__, property_name, exc
            )
            return False

    def _bind(self, instance: Any, property_name: str, value: Any) -> bool:
        caps = describe(instance)
        if caps is None:
            logger.debug("bind: %s exposes no properties", type(instance).__name__)
            return False
        slot = find_slot(caps, property_name)
        if slot is None:
            logger.debug("bind: %s has no property %s", type(instance).__name__, property_name)
            return False

        adapted = adapt_value(value, slot.declared_type)
        if adapted is INCOMPATIBLE:
            logger.debug(
                "bind: %r does not fit %s.%s (%s)",
                value,
                type(instance).__name__,
                slot.name,
                getattr(slot.declared_type, "__name__", slot.declared_type),
            )
            return False

        if slot.repeated:
            caps.append(slot.name, adapted)
        else:
            caps.assign(slot.name, adapted)
        return True
