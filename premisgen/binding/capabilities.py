"""Capability interface over schema-binding instances.

Every binding object is seen through the same small surface: a list of
property slots (scalar or repeated, with the declared type), plus read,
assign and append. Pydantic binding models are adapted once per class by
``ModelCapabilities``; any other object that implements the
``Capabilities`` protocol itself is used as-is.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Iterator, Protocol, runtime_checkable

from pydantic import BaseModel

from ..schema.introspect import field_shape
from ..schema.premis_v3 import BoundElement

logger = logging.getLogger(__name__)

SCALAR = "scalar"
REPEATED = "repeated"


@dataclass(frozen=True)
class PropertySlot:
    """One settable or appendable property of a binding type."""

    name: str
    kind: str
    declared_type: type | None = None
    xml_name: str | None = None

    @property
    def repeated(self) -> bool:
        return self.kind == REPEATED


@dataclass
class CollectionDescriptor:
    """A repeated slot as seen by the attachment heuristics."""

    name: str
    element_type: type | None
    items: list[Any] = field(default_factory=list)


@runtime_checkable
class Capabilities(Protocol):
    """Uniform property access for one binding instance."""

    def slots(self) -> list[PropertySlot]: ...

    def read(self, slot: str) -> Any: ...

    def assign(self, slot: str, value: Any) -> None: ...

    def append(self, slot: str, value: Any) -> None: ...


@lru_cache(maxsize=None)
def model_slots(cls: type[BaseModel]) -> tuple[PropertySlot, ...]:
    slots = []
    for name, info in cls.model_fields.items():
        repeated, element_type = field_shape(info.annotation)
        slots.append(
            PropertySlot(
                name=name,
                kind=REPEATED if repeated else SCALAR,
                declared_type=element_type,
                xml_name=info.alias or name,
            )
        )
    return tuple(slots)


class ModelCapabilities:
    """Capabilities of a pydantic binding model, derived from its fields."""

    def __init__(self, instance: BaseModel):
        self.instance = instance

    def slots(self) -> list[PropertySlot]:
        return list(model_slots(type(self.instance)))

    def read(self, slot: str) -> Any:
        return getattr(self.instance, slot)

    def assign(self, slot: str, value: Any) -> None:
        setattr(self.instance, slot, value)

    def append(self, slot: str, value: Any) -> None:
        items = getattr(self.instance, slot)
        if items is None:
            items = []
            setattr(self.instance, slot, items)
        items.append(value)


def describe(instance: Any) -> Capabilities | None:
    """Capabilities for ``instance``, or None when it exposes none."""
    if instance is None:
        return None
    if isinstance(instance, Capabilities):
        return instance
    if isinstance(instance, BaseModel):
        return ModelCapabilities(instance)
    return None


# =============================================================================
# Slot lookup helpers
# =============================================================================


def normalize_property(name: str) -> str:
    """Case- and separator-insensitive key: ``objectIdentifier_Value`` -> ``objectidentifiervalue``."""
    return name.replace("_", "").replace("-", "").lower()


def find_slot(caps: Capabilities, name: str) -> PropertySlot | None:
    """The slot whose attribute or XML name matches ``name``."""
    key = normalize_property(name)
    for slot in caps.slots():
        if normalize_property(slot.name) == key:
            return slot
        if slot.xml_name and normalize_property(slot.xml_name) == key:
            return slot
    return None


def collections_of(caps: Capabilities) -> list[CollectionDescriptor]:
    """Describe every repeated slot with its live contents."""
    descriptors = []
    for slot in caps.slots():
        if not slot.repeated:
            continue
        items = caps.read(slot.name)
        descriptors.append(
            CollectionDescriptor(slot.name, slot.declared_type, items if items is not None else [])
        )
    return descriptors


def iter_children(instance: Any) -> Iterator[Any]:
    """Direct structural children of ``instance`` (scalar and repeated)."""
    caps = describe(instance)
    if caps is None:
        return
    for slot in caps.slots():
        value = caps.read(slot.name)
        values = value if isinstance(value, list) else [value]
        for item in values:
            if isinstance(item, BoundElement):
                item = item.value
            if describe(item) is not None:
                yield item
