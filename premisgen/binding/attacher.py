"""Attaching children to parents when the destination property is unknown.

Lookup order, first match wins:

0. ``AttachmentTable``: (parent type, child type) -> repeated slot, derived
   once from the binding module's field declarations
1. a collection whose declared element type accepts the child
2. a non-empty collection whose items are type-compatible with the child
3. an empty collection whose name hints at the child's section
4. a fixed list of fallback collection names

Tiers 1-3 are pure functions over ``CollectionDescriptor`` lists. The
attacher keeps the graph a tree: a child is attached at most once and
never to itself or to one of its own descendants.
"""

from __future__ import annotations

import inspect
import logging
import types
from typing import Any, Iterable

from pydantic import BaseModel

from ..schema import premis_v3
from ..schema.introspect import binding_classes
from .capabilities import (
    Capabilities,
    CollectionDescriptor,
    collections_of,
    describe,
    find_slot,
    iter_children,
    model_slots,
    normalize_property,
)

logger = logging.getLogger(__name__)

NAME_HINTS = ("intellectual", "object", "agent", "rights", "relationship")

FALLBACK_COLLECTIONS = (
    "relationship",
    "intellectual_entity",
    "intellectual_object",
    "agent",
    "rights",
    "object",
)


# =============================================================================
# Tier functions
# =============================================================================


def _compatible(child_type: type, element_type: type) -> bool:
    return issubclass(child_type, element_type) or issubclass(element_type, child_type)


def match_declared(collections: Iterable[CollectionDescriptor], child: Any) -> str | None:
    """Collection whose declared element type is assignable from the child."""
    for desc in collections:
        if desc.element_type is not None and isinstance(child, desc.element_type):
            return desc.name
    return None


def match_contents(collections: Iterable[CollectionDescriptor], child: Any) -> str | None:
    """Non-empty collection whose first item is compatible with the child."""
    for desc in collections:
        if desc.items and _compatible(type(child), type(desc.items[0])):
            return desc.name
    return None


def match_name_hint(collections: Iterable[CollectionDescriptor], child: Any) -> str | None:
    """Empty collection whose name contains one of ``NAME_HINTS``."""
    for desc in collections:
        if desc.items:
            continue
        name = normalize_property(desc.name)
        if any(hint in name for hint in NAME_HINTS):
            return desc.name
    return None


# =============================================================================
# Declarative table
# =============================================================================


class AttachmentTable:
    """Declared parent/child containment: (parent type, child type) -> slot name."""

    def __init__(self, entries: dict[tuple[type, type], str] | None = None):
        self._entries: dict[tuple[type, type], str] = dict(entries or {})

    @classmethod
    def from_classes(cls, classes: Iterable[type[BaseModel]]) -> "AttachmentTable":
        entries: dict[tuple[type, type], str] = {}
        for parent in classes:
            for slot in model_slots(parent):
                if slot.repeated and inspect.isclass(slot.declared_type):
                    if issubclass(slot.declared_type, BaseModel):
                        entries.setdefault((parent, slot.declared_type), slot.name)
        return cls(entries)

    @classmethod
    def from_module(cls, module: types.ModuleType) -> "AttachmentTable":
        return cls.from_classes(binding_classes(module))

    @classmethod
    def default(cls) -> "AttachmentTable":
        return cls.from_module(premis_v3)

    def lookup(self, parent_type: type, child_type: type) -> str | None:
        for parent in inspect.getmro(parent_type):
            for child in inspect.getmro(child_type):
                slot = self._entries.get((parent, child))
                if slot is not None:
                    return slot
        return None

    def __len__(self) -> int:
        return len(self._entries)


# =============================================================================
# Attacher
# =============================================================================


class GraphAttacher:
    """Places children into parent collections, keeping the graph a tree.

    One attacher per build: it remembers every child it has attached so the
    same instance is never inserted twice.
    """

    def __init__(self, table: AttachmentTable | None = None):
        self.table = table if table is not None else AttachmentTable.default()
        self._attached: dict[int, Any] = {}

    def attach(self, parent: Any, child: Any) -> bool:
        """Attach ``child`` into a collection of ``parent``.

        Returns:
            True when the child was inserted exactly once, False otherwise.
        """
        if child is None or parent is None:
            return False
        if child is parent:
            logger.warning("Refusing to attach %s to itself", type(child).__name__)
            return False
        if id(child) in self._attached:
            logger.warning("%s is already attached", type(child).__name__)
            return False

        caps = describe(parent)
        if caps is None:
            logger.warning("Cannot attach to %s: no properties", type(parent).__name__)
            return False

        collections = collections_of(caps)
        if any(item is child for desc in collections for item in desc.items):
            logger.warning(
                "%s is already present in %s", type(child).__name__, type(parent).__name__
            )
            return False
        if _reaches(child, parent):
            logger.warning(
                "Refusing to attach %s to %s: would create a cycle",
                type(child).__name__,
                type(parent).__name__,
            )
            return False

        slot = self._choose(caps, collections, parent, child)
        if slot is None:
            logger.warning(
                "No collection on %s accepts %s; dropped",
                type(parent).__name__,
                type(child).__name__,
            )
            return False

        caps.append(slot, child)
        self._attached[id(child)] = child
        logger.debug("Attached %s to %s.%s", type(child).__name__, type(parent).__name__, slot)
        return True

    def _choose(
        self,
        caps: Capabilities,
        collections: list[CollectionDescriptor],
        parent: Any,
        child: Any,
    ) -> str | None:
        slot = self.table.lookup(type(parent), type(child))
        if slot is not None:
            return slot

        slot = match_declared(collections, child)
        if slot is not None:
            return slot

        # Heuristic tiers only consider collections able to hold the child.
        open_collections = [
            d for d in collections
            if d.element_type is None or isinstance(child, d.element_type)
        ]
        for tier in (match_contents, match_name_hint):
            slot = tier(open_collections, child)
            if slot is not None:
                return slot

        open_names = {d.name for d in open_collections}
        for name in FALLBACK_COLLECTIONS:
            fallback = find_slot(caps, name)
            if fallback is not None and fallback.repeated and fallback.name in open_names:
                return fallback.name
        return None


def _reaches(start: Any, target: Any) -> bool:
    """True when ``target`` is ``start`` or one of its descendants."""
    stack = [start]
    seen: set[int] = set()
    while stack:
        node = stack.pop()
        if node is target:
            return True
        if id(node) in seen:
            continue
        seen.add(id(node))
        stack.extend(iter_children(node))
    return False
