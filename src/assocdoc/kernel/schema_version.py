"""Schema version detection for association documents.

Detection only inspects the declared ``schemaVersion``; the structural parse
belongs to the version-specific parsers in ``assocdoc._internal.schemas``.
"""

import json
from enum import Enum
from typing import Any, Dict, Tuple

import yaml

from assocdoc.errors import MalformedDocument, UnsupportedSchemaVersion


# Documents without a schemaVersion predate versioning and are treated as 1.0
LEGACY_SCHEMA_VERSION = "1.0"


class SchemaFamily(str, Enum):
    """Shape of the runnable section of a document."""
    MAP_KEYED = "map_keyed"  # runtimeConfig: plugin name -> configuration block
    MULTI_STEP = "multi_step"  # mainSteps: ordered list of named steps


class SchemaVersion(str, Enum):
    """Supported association document schema versions."""
    V1_0 = "1.0"
    V1_2 = "1.2"
    V2_0 = "2.0"
    V2_2 = "2.2"

    @property
    def family(self) -> SchemaFamily:
        return _FAMILIES[self]


_FAMILIES = {
    SchemaVersion.V1_0: SchemaFamily.MAP_KEYED,
    SchemaVersion.V1_2: SchemaFamily.MAP_KEYED,
    SchemaVersion.V2_0: SchemaFamily.MULTI_STEP,
    SchemaVersion.V2_2: SchemaFamily.MULTI_STEP,
}


def load_document_tree(text: str) -> Dict[str, Any]:
    """Parse document text (JSON or YAML) into a generic mapping.

    Text whose first non-blank character is ``{`` is parsed as JSON, anything
    else as YAML.

    Raises:
        MalformedDocument: If the text does not parse, or the top level is not a mapping
    """
    if not isinstance(text, str) or not text.strip():
        raise MalformedDocument("Document text is empty")

    if text.lstrip().startswith("{"):
        try:
            tree = json.loads(text)
        except json.JSONDecodeError as e:
            raise MalformedDocument(f"Invalid JSON document: {e}") from e
    else:
        try:
            tree = yaml.safe_load(text)
        except yaml.YAMLError as e:
            raise MalformedDocument(f"Invalid YAML document: {e}") from e

    if not isinstance(tree, dict):
        raise MalformedDocument(
            f"Document must be a mapping at the top level, got {type(tree).__name__}"
        )
    return tree


def _version_string(value: Any) -> str:
    # YAML reads `schemaVersion: 2.2` as a float
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float):
        return repr(value)
    return str(value)


def resolve_schema_version(tree: Dict[str, Any]) -> Tuple[SchemaVersion, bool]:
    """Return the declared version of a parsed document tree.

    Returns:
        (version, declared) where ``declared`` is False when the legacy
        default was assumed because ``schemaVersion`` is absent

    Raises:
        UnsupportedSchemaVersion: If the declared version is not supported
    """
    raw = tree.get("schemaVersion")
    if raw is None:
        return SchemaVersion(LEGACY_SCHEMA_VERSION), False

    found = _version_string(raw).strip()
    try:
        return SchemaVersion(found), True
    except ValueError:
        raise UnsupportedSchemaVersion(found) from None


def detect_schema_version(text: str) -> SchemaVersion:
    """Return the schema version declared by a raw document."""
    version, _ = resolve_schema_version(load_document_tree(text))
    return version
