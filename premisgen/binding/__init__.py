"""Adaptive graph building over schema-binding instances.

Capability probing, multi-strategy instance synthesis, property binding
and heuristic attachment of children to parents.
"""

from .attacher import AttachmentTable, GraphAttacher
from .binder import PropertyBinder
from .capabilities import Capabilities, CollectionDescriptor, PropertySlot, describe
from .strategies import KINDS, STRATEGY_ORDER, ElementKind, StrategyRegistry
from .synthesizer import InstanceSynthesizer

__all__ = [
    "AttachmentTable",
    "Capabilities",
    "CollectionDescriptor",
    "ElementKind",
    "GraphAttacher",
    "InstanceSynthesizer",
    "KINDS",
    "PropertyBinder",
    "PropertySlot",
    "STRATEGY_ORDER",
    "StrategyRegistry",
    "describe",
]
