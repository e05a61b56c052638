"""Pytest configuration for tests.

No sys.path hacks - tests should import from installed assocdoc package.
"""

import os
from pathlib import Path
from typing import Dict, List, Optional

import pytest

from assocdoc.contracts import AssociationInfo, RawAssociation
from assocdoc.settings import NormalizerSettings, reset_settings

HERE = Path(__file__).resolve().parent
FIXTURES = HERE.parent / "fixtures"


@pytest.fixture(autouse=True)
def _isolated_settings(monkeypatch):
    """Keep ASSOCDOC_* variables from the host out of every test."""
    for key in list(os.environ):
        if key.startswith("ASSOCDOC_"):
            monkeypatch.delenv(key, raising=False)
    reset_settings()
    yield
    reset_settings()


@pytest.fixture
def fixtures_dir() -> Path:
    return FIXTURES


@pytest.fixture
def settings() -> NormalizerSettings:
    return NormalizerSettings(_env_file=None)


def read_document(name: str) -> str:
    return (FIXTURES / "documents" / name).read_text(encoding="utf-8")


def make_raw(
    document: str,
    parameters: Optional[Dict[str, List[str]]] = None,
    command_id: str = "command-1",
    instance_id: str = "i-test",
    name: str = "test-association",
) -> RawAssociation:
    return RawAssociation(
        id=command_id,
        create_date="2016-10-10",
        document=document,
        association=AssociationInfo(name=name, instance_id=instance_id),
        parameters=parameters or {},
    )
