"""Tests for the binding <-> XML codec."""

import pytest
from lxml import etree

from premisgen.schema import PREMIS_NS, XSI_NS, BindingCodec, BoundElement
from premisgen.schema.premis_v3 import (
    CompositionLevelComplexType,
    ExtensionComplexType,
    File,
    FixityComplexType,
    IntellectualEntity,
    ObjectCharacteristicsComplexType,
    ObjectComplexType,
    ObjectIdentifierComplexType,
    PremisComplexType,
    StringPlusAuthority,
)

P = f"{{{PREMIS_NS}}}"


@pytest.fixture
def codec():
    return BindingCodec()


def _file_object() -> File:
    return File(
        object_identifier=[
            ObjectIdentifierComplexType(
                object_identifier_type=StringPlusAuthority(value="local"),
                object_identifier_value="data/metadata/case.xml",
            )
        ],
        object_characteristics=[
            ObjectCharacteristicsComplexType(
                composition_level=CompositionLevelComplexType(value=0),
                fixity=[
                    FixityComplexType(
                        message_digest_algorithm=StringPlusAuthority(value="SHA-256"),
                        message_digest="ab12",
                    )
                ],
                size=42,
            )
        ],
        original_name="case.xml",
    )


class TestEncoding:
    def test_object_subtype_writes_xsi_type(self, codec):
        element = codec.to_element(_file_object(), "object")
        assert element.tag == f"{P}object"
        assert element.get(f"{{{XSI_NS}}}type") == "premis:file"

    def test_children_follow_field_order(self, codec):
        element = codec.to_element(_file_object(), "object")
        names = [etree.QName(child).localname for child in element]
        assert names == ["objectIdentifier", "objectCharacteristics", "originalName"]

        characteristics = element.find(f"{P}objectCharacteristics")
        inner = [etree.QName(child).localname for child in characteristics]
        assert inner == ["compositionLevel", "fixity", "size"]
        assert characteristics.findtext(f"{P}size") == "42"
        assert characteristics.findtext(f"{P}compositionLevel") == "0"

    def test_string_plus_authority_text_and_attributes(self, codec):
        value = StringPlusAuthority(value="ingest", authority="eventType", value_uri="http://id.loc.gov/x")
        element = codec.to_element(value, "eventType")
        assert element.text == "ingest"
        assert element.get("authority") == "eventType"
        assert element.get("valueURI") == "http://id.loc.gov/x"
        assert element.get("authorityURI") is None

    def test_root_version_attribute(self, codec):
        element = codec.to_element(PremisComplexType(version="3.0"))
        assert element.tag == f"{P}premis"
        assert element.get("version") == "3.0"
        assert element.nsmap["premis"] == PREMIS_NS

    def test_wildcard_bound_element(self, codec):
        extension = ExtensionComplexType(any_=[BoundElement("receivingDate", "2024-05-01T10:00:00+00:00")])
        element = codec.to_element(extension)
        child = element[0]
        assert child.tag == f"{P}receivingDate"
        assert child.text == "2024-05-01T10:00:00+00:00"

    def test_wildcard_lxml_element_is_copied(self, codec):
        foreign = etree.Element("{urn:example}note")
        foreign.text = "kept"
        element = codec.to_element(ExtensionComplexType(any_=[foreign]))
        assert element[0].tag == "{urn:example}note"
        assert element[0].text == "kept"


class TestDecoding:
    def test_roundtrip_preserves_subtype_and_values(self, codec):
        element = codec.to_element(_file_object(), "object")
        decoded = codec.from_element(element, ObjectComplexType)

        assert isinstance(decoded, File)
        assert decoded.object_identifier[0].object_identifier_value == "data/metadata/case.xml"
        assert str(decoded.object_identifier[0].object_identifier_type) == "local"
        characteristics = decoded.object_characteristics[0]
        assert characteristics.size == 42
        assert characteristics.composition_level.value == 0
        assert characteristics.fixity[0].message_digest == "ab12"

    def test_abstract_type_without_xsi_type_fails(self, codec):
        with pytest.raises(TypeError):
            codec.parse_fragment(f'<object xmlns="{PREMIS_NS}"/>', ObjectComplexType)

    def test_empty_fragment_builds_default_instance(self, codec):
        fixity = codec.parse_fragment(f'<fixity xmlns="{PREMIS_NS}"/>', FixityComplexType)
        assert isinstance(fixity, FixityComplexType)
        assert fixity.message_digest is None

    def test_fragment_into_concrete_subtype(self, codec):
        entity = codec.parse_fragment(f'<object xmlns="{PREMIS_NS}"/>', IntellectualEntity)
        assert isinstance(entity, IntellectualEntity)

    def test_unknown_children_land_in_wildcard(self, codec):
        xml = (
            f'<objectCharacteristicsExtension xmlns="{PREMIS_NS}">'
            "<receivingDate>2024-05-01</receivingDate>"
            "</objectCharacteristicsExtension>"
        )
        extension = codec.parse_fragment(xml, ExtensionComplexType)
        assert extension.any_ == [BoundElement("receivingDate", "2024-05-01", PREMIS_NS)]

    def test_malformed_fragment_raises(self, codec):
        with pytest.raises(etree.XMLSyntaxError):
            codec.parse_fragment("<fixity", FixityComplexType)
