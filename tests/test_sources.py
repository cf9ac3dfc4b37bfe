"""Tests for source tree scanning."""

from premisgen.core.models import FileRole
from premisgen.record import scan_sources


def _summary(sources):
    return [(s.role, s.path.name, s.index) for s in sources]


class TestScanSources:
    def test_roles_in_record_order(self, make_sip):
        root = make_sip(originals=2, derived=1, schema=True)
        sources = scan_sources(root)
        assert _summary(sources) == [
            (FileRole.METADATA, "case-metadata.xml", 1),
            (FileRole.ORIGINAL, "doc1.pdf", 1),
            (FileRole.ORIGINAL, "doc2.pdf", 2),
            (FileRole.DERIVED, "doc1_converted.pdf", 1),
            (FileRole.SCHEMA, "case.xsd", 1),
        ]

    def test_only_first_schema(self, make_sip):
        root = make_sip(schema=True)
        (root / "schema" / "extra.xsd").write_bytes(b"<xs:schema/>")
        schemas = [s for s in scan_sources(root) if s.role == FileRole.SCHEMA]
        assert [s.name for s in schemas] == ["case.xsd"]

    def test_metadata_inside_representation_is_not_metadata(self, make_sip):
        root = make_sip(metadata=False)
        (root / "representation" / "rep1" / "metadata.json").write_text("{}")
        assert all(s.role != FileRole.METADATA for s in scan_sources(root))

    def test_fallback_originals_when_rep1_empty(self, make_sip):
        root = make_sip(originals=0, loose_pdfs=3)
        originals = [s for s in scan_sources(root) if s.role == FileRole.ORIGINAL]
        assert [s.name for s in originals] == ["scan1.pdf", "scan2.pdf"]
        assert [s.index for s in originals] == [1, 2]

    def test_fallback_count_is_configurable(self, make_sip):
        root = make_sip(originals=0, loose_pdfs=3)
        originals = [s for s in scan_sources(root, fallback_originals=0) if s.role == FileRole.ORIGINAL]
        assert originals == []

    def test_no_fallback_when_rep1_has_files(self, make_sip):
        root = make_sip(originals=1, loose_pdfs=2)
        originals = [s for s in scan_sources(root) if s.role == FileRole.ORIGINAL]
        assert [s.name for s in originals] == ["doc1.pdf"]

    def test_excluded_and_hidden_files_are_skipped(self, make_sip):
        root = make_sip()
        output = root / "premis-metadata.xml"
        output.write_text("<premis/>")
        (root / ".premis.xml.tmp").write_text("partial")
        names = [s.name for s in scan_sources(root, exclude=[output])]
        assert "premis-metadata.xml" not in names
        assert ".premis.xml.tmp" not in names

    def test_empty_tree(self, tmp_path):
        root = tmp_path / "empty"
        root.mkdir()
        assert scan_sources(root) == []
