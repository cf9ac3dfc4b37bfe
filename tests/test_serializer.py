"""Tests for document serialization, atomic writes and validation."""

import os

import pytest
from lxml import etree

from premisgen.binding import InstanceSynthesizer
from premisgen.config import OutputConfig, PremisgenConfig
from premisgen.errors import ConfigurationError, SerializationError
from premisgen.record import DocumentSerializer, RecordAssembler, generate_record, scan_sources
from premisgen.record.serializer import write_atomic
from premisgen.record.validator import validate_document
from premisgen.schema import PREMIS_NS, XSI_NS
from premisgen.schema.premis_v3 import File, IntellectualEntity, PremisComplexType

XSD = b"""<?xml version="1.0" encoding="UTF-8"?>
<xs:schema xmlns:xs="http://www.w3.org/2001/XMLSchema"
           targetNamespace="http://www.loc.gov/premis/v3"
           elementFormDefault="qualified">
  <xs:element name="premis">
    <xs:complexType>
      <xs:sequence>
        <xs:any processContents="skip" minOccurs="0" maxOccurs="unbounded"/>
      </xs:sequence>
      <xs:attribute name="version" type="xs:string" use="required"/>
      <xs:anyAttribute namespace="##other" processContents="skip"/>
    </xs:complexType>
  </xs:element>
</xs:schema>
"""


@pytest.fixture
def record(make_sip):
    root = make_sip(originals=1, derived=1)
    assembler = RecordAssembler(config=PremisgenConfig(), synthesizer=InstanceSynthesizer())
    return assembler.build(scan_sources(root), "sip").root


class TestSerialize:
    def test_document_header(self, record):
        data = DocumentSerializer().serialize(record)
        assert data.startswith(b"<?xml version='1.0' encoding='UTF-8'?>")

    def test_root_element(self, record):
        document = etree.fromstring(DocumentSerializer().serialize(record))
        assert document.tag == f"{{{PREMIS_NS}}}premis"
        assert document.get("version") == "3.0"
        assert document.get(f"{{{XSI_NS}}}schemaLocation").startswith(PREMIS_NS)

    def test_objects_before_agents(self, record):
        document = etree.fromstring(DocumentSerializer().serialize(record))
        names = [etree.QName(child).localname for child in document]
        assert names.index("object") < names.index("event") < names.index("agent")
        assert names[-1] == "rights"

    def test_object_types(self, record):
        document = etree.fromstring(DocumentSerializer().serialize(record))
        types = [
            o.get(f"{{{XSI_NS}}}type")
            for o in document.iterfind(f"{{{PREMIS_NS}}}object")
        ]
        assert types[0].endswith("intellectualEntity")
        assert all(t.endswith("file") for t in types[1:])

    def test_schema_location_can_be_disabled(self, record):
        serializer = DocumentSerializer(output=OutputConfig(schema_location=""))
        document = etree.fromstring(serializer.serialize(record))
        assert document.get(f"{{{XSI_NS}}}schemaLocation") is None

    def test_roundtrip_through_synthesizer(self, record):
        data = DocumentSerializer().serialize(record)
        decoded = InstanceSynthesizer().from_fragment("premis", data)
        assert isinstance(decoded, PremisComplexType)
        assert decoded.version == "3.0"
        assert isinstance(decoded.object_[0], IntellectualEntity)

        def files_of(root):
            return {
                o.object_identifier[0].object_identifier_value: o
                for o in root.object_
                if isinstance(o, File)
            }

        originals = files_of(record)
        files = files_of(decoded)
        assert list(files) == list(originals)
        for identifier, original in originals.items():
            assert files[identifier] == original

    def test_unencodable_graph(self):
        with pytest.raises(SerializationError):
            DocumentSerializer().serialize(object())


class TestWriteAtomic:
    def test_writes_and_replaces(self, tmp_path):
        target = tmp_path / "premis.xml"
        target.write_bytes(b"old")
        write_atomic(target, b"new")
        assert target.read_bytes() == b"new"
        assert os.listdir(tmp_path) == ["premis.xml"]

    def test_missing_directory(self, tmp_path):
        with pytest.raises(SerializationError):
            write_atomic(tmp_path / "missing" / "premis.xml", b"data")
        assert os.listdir(tmp_path) == []

    def test_failed_replace_leaves_no_temp_file(self, tmp_path, monkeypatch):
        def broken_replace(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", broken_replace)
        target = tmp_path / "premis.xml"
        with pytest.raises(SerializationError, match="disk full"):
            write_atomic(target, b"data")
        assert os.listdir(tmp_path) == []


class TestGenerateRecord:
    def test_writes_into_source_root(self, make_sip):
        root = make_sip(originals=2)
        result = generate_record(root, config=PremisgenConfig())
        assert result.output == root / "premis.xml"
        assert result.output.exists()
        assert result.source_count == 3
        assert result.report.package_id == "sip"

    def test_regeneration_ignores_previous_output(self, make_sip):
        root = make_sip()
        first = generate_record(root, config=PremisgenConfig())
        second = generate_record(root, config=PremisgenConfig())
        assert first.source_count == second.source_count
        assert first.report.summary["file"] == second.report.summary["file"]

    def test_explicit_output_and_package_id(self, make_sip, tmp_path):
        root = make_sip()
        output = tmp_path / "out.xml"
        result = generate_record(root, output, config=PremisgenConfig(), package_id="case-7")
        assert result.output == output
        assert b"data/representation/rep1/case-7_1.pdf" in output.read_bytes()

    def test_missing_root(self, tmp_path):
        with pytest.raises(ConfigurationError):
            generate_record(tmp_path / "nope", config=PremisgenConfig())

    def test_root_is_a_file(self, tmp_path):
        path = tmp_path / "file.txt"
        path.write_text("x")
        with pytest.raises(ConfigurationError):
            generate_record(path, config=PremisgenConfig())


class TestValidate:
    def test_valid_document(self, make_sip, tmp_path):
        result = generate_record(make_sip(), config=PremisgenConfig())
        xsd = tmp_path / "premis.xsd"
        xsd.write_bytes(XSD)
        assert validate_document(result.output, xsd) == []

    def test_invalid_document(self, tmp_path):
        xml = tmp_path / "bad.xml"
        xml.write_bytes(f'<premis xmlns="{PREMIS_NS}"/>'.encode())
        xsd = tmp_path / "premis.xsd"
        xsd.write_bytes(XSD)
        errors = validate_document(xml, xsd)
        assert len(errors) == 1
        assert errors[0].startswith("line 1, col")
        assert "version" in errors[0]

    def test_malformed_document(self, tmp_path):
        xml = tmp_path / "broken.xml"
        xml.write_bytes(b"<premis>")
        xsd = tmp_path / "premis.xsd"
        xsd.write_bytes(XSD)
        assert len(validate_document(xml, xsd)) == 1

    def test_bad_schema(self, tmp_path):
        xml = tmp_path / "doc.xml"
        xml.write_bytes(b"<premis/>")
        xsd = tmp_path / "premis.xsd"
        xsd.write_bytes(b"<not-a-schema/>")
        with pytest.raises(ConfigurationError):
            validate_document(xml, xsd)
