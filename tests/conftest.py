"""Shared fixtures: isolated configuration and package trees on disk."""

import logging
from pathlib import Path

import pytest

import premisgen.config as config_module
from premisgen.cli.commands import config_cmd


@pytest.fixture(autouse=True)
def isolated_config(tmp_path, monkeypatch):
    """Keep tests away from ~/.config/premisgen, .env files and PREMISGEN_* vars."""
    config_dir = tmp_path / "config-home"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(config_cmd, "CONFIG_FILE", config_dir / "config.json")
    monkeypatch.setattr(config_module, "_dotenv_loaded", True)
    for var in config_module.ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    config_module.reset_config()
    yield config_dir
    config_module.reset_config()
    logging.getLogger("premisgen").setLevel(logging.NOTSET)


def _write(path: Path, content: bytes) -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def make_sip(tmp_path):
    """Factory for package trees.

    make_sip(originals=2, derived=1, metadata=True, schema=True) lays out
    <tmp>/sip with the representation/repN/data convention.
    """

    def _make(
        name: str = "sip",
        originals: int = 1,
        derived: int = 0,
        metadata: bool = True,
        schema: bool = False,
        loose_pdfs: int = 0,
    ) -> Path:
        root = tmp_path / name
        root.mkdir()
        if metadata:
            _write(root / "case-metadata.xml", b"<case><id>42</id></case>")
        for i in range(1, originals + 1):
            _write(
                root / "representation" / "rep1" / "data" / f"doc{i}.pdf",
                f"%PDF-1.4 original {i}".encode(),
            )
        for i in range(1, derived + 1):
            _write(
                root / "representation" / "rep2" / "data" / f"doc{i}_converted.pdf",
                f"%PDF-1.4 converted {i}".encode(),
            )
        if schema:
            _write(root / "schema" / "case.xsd", b"<xs:schema/>")
        for i in range(1, loose_pdfs + 1):
            _write(root / "scans" / f"scan{i}.pdf", f"%PDF-1.4 scan {i}".encode())
        return root

    return _make
