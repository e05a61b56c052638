"""Packaging regression tests.

Tests that verify the package structure and behavior.
"""

from pathlib import Path


def test_source_layout():
    """Check the src/ layout shipped by the package."""
    here = Path(__file__).resolve().parent
    repo_root = here.parent
    src_assocdoc = repo_root / "src" / "assocdoc"

    assert src_assocdoc.exists(), "assocdoc package should exist in src/"
    assert (src_assocdoc / "kernel").exists(), "assocdoc.kernel package should exist in src/"
    assert (src_assocdoc / "_internal").exists(), "assocdoc._internal should exist"
    assert (src_assocdoc / "inventory").exists(), "assocdoc.inventory should exist"
    assert (repo_root / "pyproject.toml").exists()


def test_import_boundary():
    import assocdoc
    import assocdoc.kernel  # noqa: F401
    import assocdoc.inventory  # noqa: F401

    # Check version: in dev mode it's "dev", in installed mode it's "1.0.0"
    assert assocdoc.__version__ in ("1.0.0", "dev")


def test_every_schema_version_has_a_parser():
    from assocdoc._internal.schemas import PARSERS
    from assocdoc.kernel.schema_version import SchemaVersion

    assert set(PARSERS) == set(SchemaVersion)
