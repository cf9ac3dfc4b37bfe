"""Annotation helpers shared by the codec and the capability layer."""

from __future__ import annotations

import inspect
import types
from typing import Any, Union, get_args, get_origin

from pydantic import BaseModel


def field_shape(annotation: Any) -> tuple[bool, type | None]:
    """Split a field annotation into (repeated, element type).

    ``list[X]`` is repeated with element type X; ``X | None`` unwraps to X.
    The element type is None when it is not a single concrete class
    (``Any``, multi-member unions, parametrized generics).

    Examples:
        list[FixityComplexType]      -> (True, FixityComplexType)
        StringPlusAuthority | None   -> (False, StringPlusAuthority)
        list[Any]                    -> (True, None)
    """
    origin = get_origin(annotation)
    if origin is list:
        args = get_args(annotation)
        return True, _concrete(args[0]) if args else None
    if origin is Union or origin is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        if len(members) == 1:
            return field_shape(members[0])
        return False, None
    return False, _concrete(annotation)


def _concrete(annotation: Any) -> type | None:
    if inspect.isclass(annotation) and get_origin(annotation) is None:
        return annotation
    if get_origin(annotation) is Union or get_origin(annotation) is types.UnionType:
        members = [a for a in get_args(annotation) if a is not type(None)]
        if len(members) == 1 and inspect.isclass(members[0]):
            return members[0]
    return None


def binding_classes(module: types.ModuleType) -> list[type[BaseModel]]:
    """All pydantic model classes defined in a binding module."""
    return [
        value
        for value in vars(module).values()
        if inspect.isclass(value)
        and issubclass(value, BaseModel)
        and value.__module__ == module.__name__
    ]


def derive_local_name(cls: type) -> str:
    """Element local name for a binding class.

    Strips the ``ComplexType`` / ``Type`` suffix and lower-cases the first
    letter: ``FixityComplexType`` -> ``fixity``, ``AgentType`` -> ``agent``.
    """
    name = cls.__name__
    for suffix in ("ComplexType", "Type"):
        if name.endswith(suffix) and len(name) > len(suffix):
            name = name[: -len(suffix)]
            break
    return name[:1].lower() + name[1:]
