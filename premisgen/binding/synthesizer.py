"""Instance synthesis with ordered fallback strategies.

The binding module is not trusted to expose one fixed way of creating a
given element. For each kind the synthesizer tries the registry's
strategies in order and returns the first instance of the expected type:

1. ``factory_scan``: every zero-argument ``create*`` operation on the factory
2. ``factory_candidates``: the kind's named factory operations
3. ``default_constructor``: the expected class called with no arguments
4. ``sibling_class``: ``<Type>J`` / ``<Type>Impl`` / ``<Type>Impl_`` classes
5. ``fragment_roundtrip``: a minimal ``<local xmlns="..."/>`` fragment
   decoded back into the expected type

Factory results wrapped in a ``BoundElement`` are unwrapped before the
type check. When every strategy fails the result is None.
"""

from __future__ import annotations

import inspect
import logging
import sys
import types
from typing import Any, Callable

from ..schema import premis_v3
from ..schema.codec import BindingCodec
from ..schema.introspect import derive_local_name
from ..schema.premis_v3 import BoundElement
from .strategies import ElementKind, StrategyRegistry

logger = logging.getLogger(__name__)

SIBLING_SUFFIXES = ("J", "Impl", "Impl_")

Strategy = Callable[[ElementKind, type, "str | None"], Any]


class InstanceSynthesizer:
    """Produces binding instances for element kinds.

    Args:
        bindings: Module holding the binding classes (and ``ObjectFactory``)
        factory: Factory object; defaults to the module's ``ObjectFactory()``
        registry: Kind lookup and per-kind strategy order
        codec: Codec used by the fragment strategy
    """

    def __init__(
        self,
        bindings: types.ModuleType = premis_v3,
        factory: Any | None = None,
        registry: StrategyRegistry | None = None,
        codec: BindingCodec | None = None,
    ):
        self.bindings = bindings
        self.factory = factory if factory is not None else _default_factory(bindings)
        self.registry = registry or StrategyRegistry()
        self.codec = codec or BindingCodec(bindings)
        self._strategies: dict[str, Strategy] = {
            "factory_scan": self._factory_scan,
            "factory_candidates": self._factory_candidates,
            "default_constructor": self._default_constructor,
            "sibling_class": self._sibling_class,
            "fragment_roundtrip": self._fragment_roundtrip,
        }

    def expected_type(self, kind: ElementKind) -> type | None:
        cls = getattr(self.bindings, kind.type_name, None)
        return cls if inspect.isclass(cls) else None

    def synthesize(self, kind: ElementKind | str, local_name_hint: str | None = None) -> Any | None:
        """Create an instance for ``kind``, or None when no strategy works."""
        instance, _ = self.resolve(kind, local_name_hint)
        return instance

    def resolve(
        self, kind: ElementKind | str, local_name_hint: str | None = None
    ) -> tuple[Any | None, str | None]:
        """Like ``synthesize`` but also report which strategy succeeded."""
        element_kind = self._lookup(kind)
        if element_kind is None:
            return None, None
        expected = self.expected_type(element_kind)
        if expected is None:
            logger.warning(
                "Cannot synthesize %s: binding type %s not found",
                element_kind.name,
                element_kind.type_name,
            )
            return None, None

        for name in self.registry.strategies_for(element_kind):
            strategy = self._strategies[name]
            try:
                instance = strategy(element_kind, expected, local_name_hint)
            except Exception as exc:
                logger.debug("%s: strategy %s raised %s: %s", element_kind.name, name, type(exc).__name__, exc)
                continue
            if instance is not None:
                logger.debug("%s: synthesized via %s", element_kind.name, name)
                return instance, name
            logger.debug("%s: strategy %s produced nothing", element_kind.name, name)

        logger.warning(
            "Cannot synthesize %s (%s): all strategies exhausted",
            element_kind.name,
            element_kind.type_name,
        )
        return None, None

    def from_fragment(self, kind: ElementKind | str, xml: str | bytes) -> Any | None:
        """Decode an arbitrary fragment into the kind's expected type."""
        element_kind = self._lookup(kind)
        if element_kind is None:
            return None
        expected = self.expected_type(element_kind)
        if expected is None:
            return None
        try:
            return _accept(self.codec.parse_fragment(xml, expected), expected)
        except Exception as exc:
            logger.warning("Cannot decode %s fragment: %s", element_kind.name, exc)
            return None

    def _lookup(self, kind: ElementKind | str) -> ElementKind | None:
        if isinstance(kind, ElementKind):
            return kind
        try:
            return self.registry.kind(kind)
        except KeyError:
            logger.warning("Cannot synthesize %r: unknown element kind", kind)
            return None

    # ── strategies ──

    def _factory_scan(self, kind: ElementKind, expected: type, hint: str | None) -> Any:
        if self.factory is None:
            return None
        for name in sorted(dir(self.factory)):
            if not name.startswith("create"):
                continue
            instance = self._call_factory(name, expected)
            if instance is not None:
                return instance
        return None

    def _factory_candidates(self, kind: ElementKind, expected: type, hint: str | None) -> Any:
        if self.factory is None:
            return None
        for name in kind.factory_names:
            instance = self._call_factory(name, expected)
            if instance is not None:
                return instance
        return None

    def _default_constructor(self, kind: ElementKind, expected: type, hint: str | None) -> Any:
        return _accept(expected(), expected)

    def _sibling_class(self, kind: ElementKind, expected: type, hint: str | None) -> Any:
        module = sys.modules.get(expected.__module__)
        if module is None:
            return None
        for suffix in SIBLING_SUFFIXES:
            sibling = getattr(module, expected.__name__ + suffix, None)
            if not inspect.isclass(sibling):
                continue
            try:
                instance = _accept(sibling(), expected)
            except Exception as exc:
                logger.debug("%s: sibling %s failed: %s", kind.name, sibling.__name__, exc)
                continue
            if instance is not None:
                return instance
        return None

    def _fragment_roundtrip(self, kind: ElementKind, expected: type, hint: str | None) -> Any:
        local = hint or kind.local_name or derive_local_name(expected)
        fragment = f'<{local} xmlns="{self.codec.namespace}"/>'
        return _accept(self.codec.parse_fragment(fragment, expected), expected)

    def _call_factory(self, name: str, expected: type) -> Any:
        method = getattr(self.factory, name, None)
        if not callable(method) or not _takes_no_arguments(method):
            return None
        try:
            return _accept(method(), expected)
        except Exception as exc:
            logger.debug("factory %s raised %s", name, exc)
            return None


def _accept(result: Any, expected: type) -> Any:
    if isinstance(result, BoundElement):
        result = result.value
    return result if isinstance(result, expected) else None


def _takes_no_arguments(method: Callable) -> bool:
    try:
        signature = inspect.signature(method)
    except (TypeError, ValueError):
        return False
    return all(
        p.default is not inspect.Parameter.empty
        or p.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD)
        for p in signature.parameters.values()
    )


def _default_factory(bindings: types.ModuleType) -> Any | None:
    factory_cls = getattr(bindings, "ObjectFactory", None)
    return factory_cls() if inspect.isclass(factory_cls) else None
