"""Element kinds and the per-kind strategy order.

An element kind names something the record assembler wants to build
("file", "fixity", "relationship_element", ...) together with the binding
class expected to represent it, the XML local name used when it has to be
produced from a document fragment, and the factory operations that may
create it directly.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

# Strategy names, in the order they are tried by default.
STRATEGY_ORDER: tuple[str, ...] = (
    "factory_scan",
    "factory_candidates",
    "default_constructor",
    "sibling_class",
    "fragment_roundtrip",
)


@dataclass(frozen=True)
class ElementKind:
    """A buildable element: expected binding type plus creation hints."""

    name: str
    type_name: str
    local_name: str | None = None
    factory_names: tuple[str, ...] = ()


KINDS: tuple[ElementKind, ...] = (
    ElementKind("premis", "PremisComplexType", "premis", ("create_premis", "create_premis_complex_type")),
    ElementKind("intellectual_entity", "IntellectualEntity", "object", ("create_intellectual_entity",)),
    ElementKind("representation", "Representation", "object", ("create_representation",)),
    ElementKind("file", "File", "object", ("create_file",)),
    ElementKind(
        "object_identifier",
        "ObjectIdentifierComplexType",
        "objectIdentifier",
        ("create_object_identifier_complex_type", "create_object_identifier"),
    ),
    ElementKind(
        "significant_properties",
        "SignificantPropertiesComplexType",
        "significantProperties",
        ("create_significant_properties_complex_type", "create_significant_properties"),
    ),
    ElementKind(
        "object_characteristics",
        "ObjectCharacteristicsComplexType",
        "objectCharacteristics",
        ("create_object_characteristics_complex_type", "create_object_characteristics"),
    ),
    ElementKind(
        "composition_level",
        "CompositionLevelComplexType",
        "compositionLevel",
        ("create_composition_level_complex_type", "create_composition_level"),
    ),
    ElementKind("fixity", "FixityComplexType", "fixity", ("create_fixity_complex_type", "create_fixity")),
    ElementKind("format", "FormatComplexType", "format", ("create_format_complex_type", "create_format")),
    ElementKind(
        "format_designation",
        "FormatDesignationComplexType",
        "formatDesignation",
        ("create_format_designation_complex_type", "create_format_designation"),
    ),
    ElementKind(
        "creating_application",
        "CreatingApplicationComplexType",
        "creatingApplication",
        ("create_creating_application_complex_type", "create_creating_application"),
    ),
    ElementKind(
        "extension",
        "ExtensionComplexType",
        "objectCharacteristicsExtension",
        ("create_extension_complex_type", "create_object_characteristics_extension"),
    ),
    ElementKind(
        "relationship",
        "RelationshipComplexType",
        "relationship",
        ("create_relationship_complex_type", "create_relationship"),
    ),
    ElementKind(
        "relationship_element",
        "RelationshipElementComplexType",
        "relationshipElement",
        ("create_relationship_element_complex_type", "create_relationship_element"),
    ),
    ElementKind(
        "related_object_identifier",
        "RelatedObjectIdentifierComplexType",
        "relatedObjectIdentifier",
        ("create_related_object_identifier_complex_type", "create_related_object_identifier"),
    ),
    ElementKind("event", "EventComplexType", "event", ("create_event_complex_type", "create_event")),
    ElementKind(
        "event_identifier",
        "EventIdentifierComplexType",
        "eventIdentifier",
        ("create_event_identifier_complex_type",),
    ),
    ElementKind(
        "event_detail_information",
        "EventDetailInformationComplexType",
        "eventDetailInformation",
        ("create_event_detail_information_complex_type",),
    ),
    ElementKind(
        "event_outcome_information",
        "EventOutcomeInformationComplexType",
        "eventOutcomeInformation",
        ("create_event_outcome_information_complex_type",),
    ),
    ElementKind(
        "linking_agent_identifier",
        "LinkingAgentIdentifierComplexType",
        "linkingAgentIdentifier",
        ("create_linking_agent_identifier_complex_type",),
    ),
    ElementKind("agent", "AgentComplexType", "agent", ("create_agent_complex_type", "create_agent")),
    ElementKind(
        "agent_identifier",
        "AgentIdentifierComplexType",
        "agentIdentifier",
        ("create_agent_identifier_complex_type", "create_agent_identifier"),
    ),
    ElementKind("rights", "RightsComplexType", "rights", ("create_rights_complex_type", "create_rights")),
    ElementKind(
        "rights_statement",
        "RightsStatementComplexType",
        "rightsStatement",
        ("create_rights_statement_complex_type", "create_rights_statement"),
    ),
    ElementKind(
        "rights_granted",
        "RightsGrantedComplexType",
        "rightsGranted",
        ("create_rights_granted_complex_type", "create_rights_granted"),
    ),
    ElementKind(
        "string_plus_authority",
        "StringPlusAuthority",
        None,
        ("create_string_plus_authority",),
    ),
)


class StrategyRegistry:
    """Known element kinds and the strategy order used for each.

    The default order is ``STRATEGY_ORDER`` for every kind. ``override``
    replaces it for one kind, e.g. to restrict a kind to the fragment
    strategy or to disable synthesis of it altogether.
    """

    def __init__(self, kinds: Iterable[ElementKind] = KINDS):
        self._kinds: dict[str, ElementKind] = {}
        self._overrides: dict[str, tuple[str, ...]] = {}
        for kind in kinds:
            self.register(kind)

    def register(self, kind: ElementKind) -> None:
        self._kinds[kind.name] = kind

    def kind(self, name: str) -> ElementKind:
        """Look up a kind by name.

        Raises:
            KeyError: if no kind with that name is registered.
        """
        try:
            return self._kinds[name]
        except KeyError:
            raise KeyError(f"Unknown element kind: {name!r}") from None

    def kinds(self) -> list[ElementKind]:
        return list(self._kinds.values())

    def strategies_for(self, kind: ElementKind | str) -> tuple[str, ...]:
        name = kind if isinstance(kind, str) else kind.name
        return self._overrides.get(name, STRATEGY_ORDER)

    def override(self, kind_name: str, strategies: Iterable[str]) -> None:
        """Replace the strategy order for one kind.

        Raises:
            KeyError: if the kind is unknown.
            ValueError: if a strategy name is unknown.
        """
        self.kind(kind_name)
        order = tuple(strategies)
        unknown = [s for s in order if s not in STRATEGY_ORDER]
        if unknown:
            raise ValueError(
                f"Unknown strategies for {kind_name!r}: {', '.join(unknown)}. "
                f"Valid: {', '.join(STRATEGY_ORDER)}"
            )
        self._overrides[kind_name] = order

    def reset(self, kind_name: str | None = None) -> None:
        """Drop one override, or all of them."""
        if kind_name is None:
            self._overrides.clear()
        else:
            self._overrides.pop(kind_name, None)
