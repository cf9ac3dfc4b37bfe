"""PREMIS v3 schema binding.

Pydantic models mirroring the complex types of the PREMIS 3.0 XSD, in the
shape a schema compiler emits them: one class per complex type, repeatable
elements as lists, an ``ObjectFactory`` with ``create_*`` operations and a
``BoundElement`` wrapper for element declarations.

Field aliases carry the XML local names. Class variables describe the XML
mapping used by the codec:

- ``xml_name``: default element local name
- ``xsi_type``: value written to ``xsi:type`` for concrete object subtypes
- ``xml_text``: field holding the element's text content
- ``xml_attributes``: fields written as attributes
- ``xml_wildcard``: field holding ``xs:any`` content
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, ClassVar, Generic, TypeVar

from pydantic import BaseModel, ConfigDict, Field

PREMIS_NS = "http://www.loc.gov/premis/v3"

T = TypeVar("T")


@dataclass
class BoundElement(Generic[T]):
    """A value bound to an element name (one-level generic wrapper)."""

    name: str
    value: T
    namespace: str = PREMIS_NS


class PremisElement(BaseModel):
    """Base for all generated complex types."""

    model_config = ConfigDict(populate_by_name=True, arbitrary_types_allowed=True)

    xml_name: ClassVar[str] = ""
    xsi_type: ClassVar[str | None] = None
    xml_text: ClassVar[str | None] = None
    xml_attributes: ClassVar[tuple[str, ...]] = ()
    xml_wildcard: ClassVar[str | None] = None


# =============================================================================
# Simple content types
# =============================================================================


class StringPlusAuthority(PremisElement):
    """String value with optional controlled-vocabulary authority."""

    xml_text: ClassVar[str | None] = "value"
    xml_attributes: ClassVar[tuple[str, ...]] = (
        "authority",
        "authority_uri",
        "value_uri",
    )

    value: str = ""
    authority: str | None = None
    authority_uri: str | None = Field(default=None, alias="authorityURI")
    value_uri: str | None = Field(default=None, alias="valueURI")

    def __str__(self) -> str:
        return self.value


class CompositionLevelComplexType(PremisElement):
    xml_name: ClassVar[str] = "compositionLevel"
    xml_text: ClassVar[str | None] = "value"
    xml_attributes: ClassVar[tuple[str, ...]] = ("unknown",)

    value: int = 0
    unknown: str | None = None


# =============================================================================
# Object sub-structures
# =============================================================================


class ObjectIdentifierComplexType(PremisElement):
    xml_name: ClassVar[str] = "objectIdentifier"

    object_identifier_type: StringPlusAuthority | None = Field(
        default=None, alias="objectIdentifierType"
    )
    object_identifier_value: str | None = Field(
        default=None, alias="objectIdentifierValue"
    )


class SignificantPropertiesComplexType(PremisElement):
    xml_name: ClassVar[str] = "significantProperties"

    significant_properties_type: StringPlusAuthority | None = Field(
        default=None, alias="significantPropertiesType"
    )
    significant_properties_value: list[str] = Field(
        default_factory=list, alias="significantPropertiesValue"
    )


class FixityComplexType(PremisElement):
    xml_name: ClassVar[str] = "fixity"

    message_digest_algorithm: StringPlusAuthority | None = Field(
        default=None, alias="messageDigestAlgorithm"
    )
    message_digest: str | None = Field(default=None, alias="messageDigest")
    message_digest_originator: StringPlusAuthority | None = Field(
        default=None, alias="messageDigestOriginator"
    )


class FormatDesignationComplexType(PremisElement):
    xml_name: ClassVar[str] = "formatDesignation"

    format_name: StringPlusAuthority | None = Field(default=None, alias="formatName")
    format_version: str | None = Field(default=None, alias="formatVersion")


class FormatComplexType(PremisElement):
    xml_name: ClassVar[str] = "format"

    format_designation: list[FormatDesignationComplexType] = Field(
        default_factory=list, alias="formatDesignation"
    )
    format_note: list[str] = Field(default_factory=list, alias="formatNote")


class CreatingApplicationComplexType(PremisElement):
    xml_name: ClassVar[str] = "creatingApplication"

    creating_application_name: StringPlusAuthority | None = Field(
        default=None, alias="creatingApplicationName"
    )
    creating_application_version: str | None = Field(
        default=None, alias="creatingApplicationVersion"
    )
    date_created_by_application: str | None = Field(
        default=None, alias="dateCreatedByApplication"
    )


class ExtensionComplexType(PremisElement):
    """Open content container (``xs:any``)."""

    xml_name: ClassVar[str] = "objectCharacteristicsExtension"
    xml_wildcard: ClassVar[str | None] = "any_"

    any_: list[Any] = Field(default_factory=list, alias="any")


class ObjectCharacteristicsComplexType(PremisElement):
    xml_name: ClassVar[str] = "objectCharacteristics"

    composition_level: CompositionLevelComplexType | None = Field(
        default=None, alias="compositionLevel"
    )
    fixity: list[FixityComplexType] = Field(default_factory=list)
    size: int | None = None
    format_: list[FormatComplexType] = Field(default_factory=list, alias="format")
    creating_application: list[CreatingApplicationComplexType] = Field(
        default_factory=list, alias="creatingApplication"
    )
    object_characteristics_extension: list[ExtensionComplexType] = Field(
        default_factory=list, alias="objectCharacteristicsExtension"
    )


# =============================================================================
# Relationships
# =============================================================================


class RelatedObjectIdentifierComplexType(PremisElement):
    xml_name: ClassVar[str] = "relatedObjectIdentifier"

    related_object_identifier_type: StringPlusAuthority | None = Field(
        default=None, alias="relatedObjectIdentifierType"
    )
    related_object_identifier_value: str | None = Field(
        default=None, alias="relatedObjectIdentifierValue"
    )
    related_object_sequence: int | None = Field(
        default=None, alias="relatedObjectSequence"
    )


class RelationshipElementComplexType(PremisElement):
    """Typed link inside a relationship: one subtype, its related objects."""

    xml_name: ClassVar[str] = "relationshipElement"

    relationship_sub_type: StringPlusAuthority | None = Field(
        default=None, alias="relationshipSubType"
    )
    related_object_identifier: list[RelatedObjectIdentifierComplexType] = Field(
        default_factory=list, alias="relatedObjectIdentifier"
    )


class RelationshipComplexType(PremisElement):
    xml_name: ClassVar[str] = "relationship"

    relationship_type: StringPlusAuthority | None = Field(
        default=None, alias="relationshipType"
    )
    relationship_element: list[RelationshipElementComplexType] = Field(
        default_factory=list, alias="relationshipElement"
    )


# =============================================================================
# Objects
# =============================================================================


class ObjectComplexType(PremisElement):
    """Abstract PREMIS object; use one of the concrete subtypes."""

    xml_name: ClassVar[str] = "object"

    object_identifier: list[ObjectIdentifierComplexType] = Field(
        default_factory=list, alias="objectIdentifier"
    )
    significant_properties: list[SignificantPropertiesComplexType] = Field(
        default_factory=list, alias="significantProperties"
    )
    object_characteristics: list[ObjectCharacteristicsComplexType] = Field(
        default_factory=list, alias="objectCharacteristics"
    )
    original_name: str | None = Field(default=None, alias="originalName")
    relationship: list[RelationshipComplexType] = Field(default_factory=list)

    def __init__(self, **data: Any) -> None:
        if type(self) is ObjectComplexType:
            raise TypeError("ObjectComplexType is abstract; use a concrete object type")
        super().__init__(**data)


class IntellectualEntity(ObjectComplexType):
    xsi_type: ClassVar[str | None] = "intellectualEntity"


class Representation(ObjectComplexType):
    xsi_type: ClassVar[str | None] = "representation"


class File(ObjectComplexType):
    xsi_type: ClassVar[str | None] = "file"


class Bitstream(ObjectComplexType):
    xsi_type: ClassVar[str | None] = "bitstream"


# =============================================================================
# Events, agents, rights
# =============================================================================


class EventIdentifierComplexType(PremisElement):
    xml_name: ClassVar[str] = "eventIdentifier"

    event_identifier_type: StringPlusAuthority | None = Field(
        default=None, alias="eventIdentifierType"
    )
    event_identifier_value: str | None = Field(
        default=None, alias="eventIdentifierValue"
    )


class EventDetailInformationComplexType(PremisElement):
    xml_name: ClassVar[str] = "eventDetailInformation"

    event_detail: str | None = Field(default=None, alias="eventDetail")


class EventOutcomeInformationComplexType(PremisElement):
    xml_name: ClassVar[str] = "eventOutcomeInformation"

    event_outcome: list[StringPlusAuthority] = Field(
        default_factory=list, alias="eventOutcome"
    )


class LinkingAgentIdentifierComplexType(PremisElement):
    xml_name: ClassVar[str] = "linkingAgentIdentifier"

    linking_agent_identifier_type: StringPlusAuthority | None = Field(
        default=None, alias="linkingAgentIdentifierType"
    )
    linking_agent_identifier_value: str | None = Field(
        default=None, alias="linkingAgentIdentifierValue"
    )
    linking_agent_role: list[StringPlusAuthority] = Field(
        default_factory=list, alias="linkingAgentRole"
    )


class EventComplexType(PremisElement):
    xml_name: ClassVar[str] = "event"

    event_identifier: list[EventIdentifierComplexType] = Field(
        default_factory=list, alias="eventIdentifier"
    )
    event_type: StringPlusAuthority | None = Field(default=None, alias="eventType")
    event_date_time: str | None = Field(default=None, alias="eventDateTime")
    event_detail_information: list[EventDetailInformationComplexType] = Field(
        default_factory=list, alias="eventDetailInformation"
    )
    event_outcome_information: list[EventOutcomeInformationComplexType] = Field(
        default_factory=list, alias="eventOutcomeInformation"
    )
    linking_agent_identifier: list[LinkingAgentIdentifierComplexType] = Field(
        default_factory=list, alias="linkingAgentIdentifier"
    )


class AgentIdentifierComplexType(PremisElement):
    xml_name: ClassVar[str] = "agentIdentifier"

    agent_identifier_type: StringPlusAuthority | None = Field(
        default=None, alias="agentIdentifierType"
    )
    agent_identifier_value: str | None = Field(
        default=None, alias="agentIdentifierValue"
    )


class AgentComplexType(PremisElement):
    xml_name: ClassVar[str] = "agent"

    agent_identifier: list[AgentIdentifierComplexType] = Field(
        default_factory=list, alias="agentIdentifier"
    )
    agent_name: list[StringPlusAuthority] = Field(
        default_factory=list, alias="agentName"
    )
    agent_type: StringPlusAuthority | None = Field(default=None, alias="agentType")


class RightsGrantedComplexType(PremisElement):
    xml_name: ClassVar[str] = "rightsGranted"

    act: StringPlusAuthority | None = None
    restriction: list[StringPlusAuthority] = Field(default_factory=list)
    rights_granted_note: list[str] = Field(
        default_factory=list, alias="rightsGrantedNote"
    )


class RightsStatementComplexType(PremisElement):
    xml_name: ClassVar[str] = "rightsStatement"

    rights_basis: StringPlusAuthority | None = Field(default=None, alias="rightsBasis")
    rights_granted: list[RightsGrantedComplexType] = Field(
        default_factory=list, alias="rightsGranted"
    )


class RightsComplexType(PremisElement):
    xml_name: ClassVar[str] = "rights"

    rights_statement: list[RightsStatementComplexType] = Field(
        default_factory=list, alias="rightsStatement"
    )


class PremisComplexType(PremisElement):
    """Document root: objects, then events, agents and rights."""

    xml_name: ClassVar[str] = "premis"
    xml_attributes: ClassVar[tuple[str, ...]] = ("version",)

    object_: list[ObjectComplexType] = Field(default_factory=list, alias="object")
    event: list[EventComplexType] = Field(default_factory=list)
    agent: list[AgentComplexType] = Field(default_factory=list)
    rights: list[RightsComplexType] = Field(default_factory=list)
    version: str | None = None


# =============================================================================
# Factory
# =============================================================================


class ObjectFactory:
    """Factory operations for the binding types and element declarations."""

    def create_premis(self) -> BoundElement[PremisComplexType]:
        return BoundElement("premis", PremisComplexType())

    def create_premis_complex_type(self) -> PremisComplexType:
        return PremisComplexType()

    def create_string_plus_authority(self) -> StringPlusAuthority:
        return StringPlusAuthority()

    def create_intellectual_entity(self) -> IntellectualEntity:
        return IntellectualEntity()

    def create_representation(self) -> Representation:
        return Representation()

    def create_file(self) -> File:
        return File()

    def create_bitstream(self) -> Bitstream:
        return Bitstream()

    def create_object_identifier_complex_type(self) -> ObjectIdentifierComplexType:
        return ObjectIdentifierComplexType()

    def create_significant_properties_complex_type(
        self,
    ) -> SignificantPropertiesComplexType:
        return SignificantPropertiesComplexType()

    def create_significant_properties_value(self, value: str) -> BoundElement[str]:
        return BoundElement("significantPropertiesValue", value)

    def create_object_characteristics_complex_type(
        self,
    ) -> ObjectCharacteristicsComplexType:
        return ObjectCharacteristicsComplexType()

    def create_composition_level_complex_type(self) -> CompositionLevelComplexType:
        return CompositionLevelComplexType()

    def create_fixity_complex_type(self) -> FixityComplexType:
        return FixityComplexType()

    def create_format_complex_type(self) -> FormatComplexType:
        return FormatComplexType()

    def create_format_designation_complex_type(self) -> FormatDesignationComplexType:
        return FormatDesignationComplexType()

    def create_creating_application_complex_type(
        self,
    ) -> CreatingApplicationComplexType:
        return CreatingApplicationComplexType()

    def create_extension_complex_type(self) -> ExtensionComplexType:
        return ExtensionComplexType()

    def create_relationship_complex_type(self) -> RelationshipComplexType:
        return RelationshipComplexType()

    def create_relationship_element(
        self, value: RelatedObjectIdentifierComplexType
    ) -> BoundElement[RelationshipElementComplexType]:
        return BoundElement(
            "relationshipElement",
            RelationshipElementComplexType(related_object_identifier=[value]),
        )

    def create_related_object_identifier_complex_type(
        self,
    ) -> RelatedObjectIdentifierComplexType:
        return RelatedObjectIdentifierComplexType()

    def create_event_complex_type(self) -> EventComplexType:
        return EventComplexType()

    def create_event_identifier_complex_type(self) -> EventIdentifierComplexType:
        return EventIdentifierComplexType()

    def create_event_outcome_information_complex_type(
        self,
    ) -> EventOutcomeInformationComplexType:
        return EventOutcomeInformationComplexType()

    def create_linking_agent_identifier_complex_type(
        self,
    ) -> LinkingAgentIdentifierComplexType:
        return LinkingAgentIdentifierComplexType()

    def create_agent_complex_type(self) -> AgentComplexType:
        return AgentComplexType()

    def create_agent_identifier_complex_type(self) -> AgentIdentifierComplexType:
        return AgentIdentifierComplexType()

    def create_rights_complex_type(self) -> RightsComplexType:
        return RightsComplexType()

    def create_rights_statement_complex_type(self) -> RightsStatementComplexType:
        return RightsStatementComplexType()

    def create_rights_granted_complex_type(self) -> RightsGrantedComplexType:
        return RightsGrantedComplexType()
