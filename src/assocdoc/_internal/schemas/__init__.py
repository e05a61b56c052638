"""Version-specific document parsers.

Each supported SchemaVersion maps to exactly one parser. Adding a version
means adding an entry here, not another branch in the normalizer.
"""

from typing import Any, Callable, Dict

from assocdoc.kernel.schema_version import SchemaVersion

from .common import ParameterDeclaration, ParsedDocument, StepDefinition
from .runtime_config_schema import parse_runtime_config_document
from .main_steps_schema import parse_main_steps_document

DocumentParser = Callable[[Dict[str, Any], SchemaVersion], ParsedDocument]

PARSERS: Dict[SchemaVersion, DocumentParser] = {
    SchemaVersion.V1_0: parse_runtime_config_document,
    SchemaVersion.V1_2: parse_runtime_config_document,
    SchemaVersion.V2_0: parse_main_steps_document,
    SchemaVersion.V2_2: parse_main_steps_document,
}

if set(PARSERS) != set(SchemaVersion):
    raise RuntimeError("every SchemaVersion needs a parser")


def parse_document(obj: Dict[str, Any], version: SchemaVersion) -> ParsedDocument:
    """Parse a document tree with the parser registered for ``version``."""
    return PARSERS[version](obj, version)


__all__ = [
    "PARSERS",
    "ParameterDeclaration",
    "ParsedDocument",
    "StepDefinition",
    "parse_document",
]
