"""Tests for record assembly."""

import hashlib

import pytest

from premisgen.binding import InstanceSynthesizer, StrategyRegistry
from premisgen.config import PremisgenConfig
from premisgen.errors import BindingError
from premisgen.record import RecordAssembler, scan_sources
from premisgen.record.assembler import (
    derived_identifier,
    metadata_identifier,
    original_identifier,
    schema_identifier,
)
from premisgen.record.fixity import detect
from premisgen.schema.premis_v3 import File, IntellectualEntity, PremisComplexType


def _assembler(registry: StrategyRegistry | None = None, **kwargs) -> RecordAssembler:
    return RecordAssembler(
        config=PremisgenConfig(),
        synthesizer=InstanceSynthesizer(registry=registry or StrategyRegistry()),
        **kwargs,
    )


def _files(root: PremisComplexType) -> dict[str, File]:
    return {
        f.object_identifier[0].object_identifier_value: f
        for f in root.object_
        if isinstance(f, File)
    }


def _entity(root: PremisComplexType) -> IntellectualEntity:
    return next(o for o in root.object_ if isinstance(o, IntellectualEntity))


class TestIdentifiers:
    def test_patterns(self, make_sip):
        root = make_sip(schema=True)
        metadata, original, schema = scan_sources(root)
        assert metadata_identifier(metadata) == "data/metadata/case-metadata.xml"
        assert original_identifier("sip", 1, ".PDF") == "data/representation/rep1/sip_1.pdf"
        assert derived_identifier("sip", 3) == "data/representation/rep2/sip_3_converted.pdf"
        assert schema_identifier(schema) == "data/schema/case.xsd"


class TestRep1OnlyTree:
    @pytest.fixture
    def built(self, make_sip):
        root = make_sip(originals=1, derived=0)
        return _assembler().build(scan_sources(root), "sip"), root

    def test_root(self, built):
        result, _ = built
        assert isinstance(result.root, PremisComplexType)
        assert result.root.version == "3.0"
        assert result.report.ok
        assert result.report.warnings == []

    def test_summary_counts(self, built):
        result, _ = built
        assert result.report.summary == {
            "intellectual_entity": 1,
            "file": 3,
            "agent": 2,
            "rights": 1,
            "relationship": 2,
            "event": 1,
        }

    def test_sections_in_record_order(self, built):
        result, _ = built
        assert list(_files(result.root)) == [
            "data/metadata/case-metadata.xml",
            "data/representation/rep1/sip_1.pdf",
            "data/representation/rep2/sip_1_converted.pdf",
        ]

    def test_original_fixity_and_format(self, built):
        result, root = built
        original = _files(result.root)["data/representation/rep1/sip_1.pdf"]
        characteristics = original.object_characteristics[0]
        data = (root / "representation" / "rep1" / "data" / "doc1.pdf").read_bytes()

        assert characteristics.composition_level.value == 0
        assert characteristics.fixity[0].message_digest_algorithm.value == "SHA-256"
        assert characteristics.fixity[0].message_digest == hashlib.sha256(data).hexdigest()
        assert characteristics.size == len(data)
        assert characteristics.format_[0].format_designation[0].format_name.value == "PDF"
        assert characteristics.creating_application == []
        assert characteristics.object_characteristics_extension[0].any_[0].name == "receivingDate"
        assert original.original_name == "doc1.pdf"

    def test_synthesized_derived_section(self, built):
        result, _ = built
        derived = _files(result.root)["data/representation/rep2/sip_1_converted.pdf"]
        characteristics = derived.object_characteristics[0]
        assert characteristics.format_[0].format_designation[0].format_name.value == "PDF/A-1B"
        assert characteristics.creating_application[0].creating_application_name.value == "premisgen"

        relationship = derived.relationship[0]
        assert relationship.relationship_type.value == "derivation"
        element = relationship.relationship_element[0]
        assert element.relationship_sub_type.value == "derivedFrom"
        related = element.related_object_identifier[0]
        assert related.related_object_identifier_type.value == "FilePath"
        assert related.related_object_identifier_value == "data/representation/rep1/sip_1.pdf"

    def test_entity(self, built):
        result, _ = built
        entity = _entity(result.root)
        assert entity.object_identifier[0].object_identifier_value == "sip"
        assert entity.object_identifier[0].object_identifier_type.value == "local"
        assert entity.significant_properties[0].significant_properties_value == ["Case SIP"]

    def test_structural_relationship(self, built):
        result, _ = built
        relationship = _entity(result.root).relationship[0]
        assert relationship.relationship_type.value == "structural"
        links = [
            (
                e.relationship_sub_type.value,
                e.related_object_identifier[0].related_object_identifier_value,
            )
            for e in relationship.relationship_element
        ]
        assert links == [
            ("hasRepresentation", "representation/rep1/"),
            ("hasRepresentation", "representation/rep2/"),
            ("hasMetadata", "data/metadata/case-metadata.xml"),
        ]

    def test_agents_rights_and_event(self, built):
        result, _ = built
        system, depositor = result.root.agent
        assert system.agent_type.value == "software"
        assert depositor.agent_name[0].value == "Case Uploader"
        assert depositor.agent_identifier[0].agent_identifier_value == "uploader@example.org"

        statement = result.root.rights[0].rights_statement[0]
        assert statement.rights_basis.value == "statute"
        assert statement.rights_granted[0].restriction[0].value == "Access restricted to authorized user"

        event = result.root.event[0]
        assert event.event_type.value == "ingest"
        assert event.event_outcome_information[0].event_outcome[0].value == "success"
        assert event.linking_agent_identifier[0].linking_agent_identifier_value == "premisgen"
        assert event.event_identifier[0].event_identifier_value.startswith("EVT-INGEST-sip-")


class TestOtherTrees:
    def test_existing_derived_files_link_to_matching_original(self, make_sip):
        root = make_sip(originals=2, derived=2, schema=True)
        result = _assembler().build(scan_sources(root), "pkg")
        files = _files(result.root)
        derived = files["data/representation/rep2/pkg_2_converted.pdf"]
        related = derived.relationship[0].relationship_element[0].related_object_identifier[0]
        assert related.related_object_identifier_value == "data/representation/rep1/pkg_2.pdf"
        assert "data/schema/case.xsd" in files
        assert result.report.summary["file"] == 6

    def test_empty_tree(self, tmp_path):
        root = tmp_path / "empty"
        root.mkdir()
        result = _assembler().build(scan_sources(root), "empty")
        assert result.report.ok
        assert result.report.summary["file"] == 0
        assert result.report.summary["intellectual_entity"] == 1
        assert result.report.summary["agent"] == 2

    def test_ingest_event_can_be_disabled(self, make_sip):
        config = PremisgenConfig()
        config.build.ingest_event = False
        assembler = RecordAssembler(config=config, synthesizer=InstanceSynthesizer())
        result = assembler.build(scan_sources(make_sip()), "sip")
        assert result.root.event == []

    def test_extra_derived_file_has_no_derivation_link(self, make_sip):
        result = _assembler().build(scan_sources(make_sip(originals=1, derived=2)), "sip")
        files = _files(result.root)
        first = files["data/representation/rep2/sip_1_converted.pdf"]
        second = files["data/representation/rep2/sip_2_converted.pdf"]
        related = first.relationship[0].relationship_element[0].related_object_identifier[0]
        assert related.related_object_identifier_value == "data/representation/rep1/sip_1.pdf"
        assert second.relationship == []
        assert (
            "objects: no original 2 for data/representation/rep2/sip_2_converted.pdf; "
            "derivation link omitted" in result.report.warnings
        )


class TestDegradation:
    def test_relationship_element_exhausted(self, make_sip):
        registry = StrategyRegistry()
        registry.override("relationship_element", [])
        result = _assembler(registry).build(scan_sources(make_sip()), "sip")

        files = _files(result.root)
        derived = files["data/representation/rep2/sip_1_converted.pdf"]
        assert len(derived.relationship) == 1
        assert derived.relationship[0].relationship_type.value == "derivation"
        assert derived.relationship[0].relationship_element == []

        structural = _entity(result.root).relationship
        assert len(structural) == 1
        assert structural[0].relationship_type.value == "structural"
        assert structural[0].relationship_element == []

        assert result.report.summary["relationship"] == 2
        assert result.report.summary["file"] == 3
        warnings = result.report.warnings
        assert any("relationship_element not available" in w for w in warnings)
        assert (
            "objects: derivation link omitted for data/representation/rep2/sip_1_converted.pdf"
            in warnings
        )
        assert "relationships: structural relationship has no relationship elements" in warnings
        assert result.report.ok

    def test_failing_phase_does_not_stop_the_build(self, make_sip):
        def broken_detector(path, chunk_size=65536):
            raise RuntimeError("detector crashed")

        result = _assembler(detector=broken_detector).build(scan_sources(make_sip()), "sip")
        objects = result.report.phase("objects")
        assert objects.failed
        assert not result.report.ok
        assert result.report.summary["agent"] == 2
        assert result.report.summary["event"] == 1

    def test_unreadable_file_is_skipped(self, make_sip):
        def flaky_detector(path, chunk_size=65536):
            raise PermissionError("denied")

        result = _assembler(detector=flaky_detector).build(scan_sources(make_sip()), "sip")
        assert result.report.summary["file"] == 0
        assert result.report.phase("objects").failed is False
        assert any("cannot read" in w for w in result.report.warnings)

    def test_unreadable_original_is_not_linked(self, make_sip):
        def detector(path, chunk_size=65536):
            if path.name == "doc1.pdf":
                raise PermissionError("denied")
            return detect(path, chunk_size=chunk_size)

        result = _assembler(detector=detector).build(
            scan_sources(make_sip(originals=1, derived=1)), "sip"
        )
        files = _files(result.root)
        assert "data/representation/rep1/sip_1.pdf" not in files
        assert files["data/representation/rep2/sip_1_converted.pdf"].relationship == []
        assert any("no original 1" in w for w in result.report.warnings)

    def test_missing_root_is_fatal(self):
        registry = StrategyRegistry()
        registry.override("premis", [])
        with pytest.raises(BindingError):
            _assembler(registry).build([], "sip")
