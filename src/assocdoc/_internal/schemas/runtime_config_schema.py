"""Parser for map-keyed association documents (v1.0, v1.2)."""

from typing import Any, Dict, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from assocdoc.errors import MalformedDocument, MissingRequiredField
from assocdoc.kernel.schema_version import SchemaVersion

from .common import ParameterDeclaration, ParsedDocument, StepDefinition, split_known_fields


class PluginConfigV1(BaseModel):
    """One runtimeConfig entry: the configuration block of a plugin type."""
    properties: Any = None  # object, list of objects, or (v1.0) an encoded string
    settings: Any = None
    description: Optional[str] = None

    model_config = ConfigDict(extra="ignore")


class RuntimeConfigDocument(BaseModel):
    """v1.x document schema: plugin-type name -> configuration block."""
    description: Optional[str] = None
    parameters: Dict[str, ParameterDeclaration] = Field(default_factory=dict)
    runtime_config: Dict[str, PluginConfigV1] = Field(alias="runtimeConfig")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


def parse_runtime_config_document(
    obj: Dict[str, Any],
    version: SchemaVersion,
) -> ParsedDocument:
    """
    Parse a map-keyed document into one step per runtimeConfig entry.

    Entries are emitted in lexicographic order of plugin-type name so that
    index-based ids do not depend on the key order of the source text.

    Args:
        obj: Raw document tree
        version: Detected schema version (1.0 or 1.2)

    Returns:
        ParsedDocument with one StepDefinition per plugin type

    Raises:
        MissingRequiredField: If runtimeConfig is absent or empty
        MalformedDocument: If the document structure is invalid
    """
    if "runtimeConfig" not in obj or obj["runtimeConfig"] is None:
        raise MissingRequiredField("runtimeConfig")

    # schemaVersion was consumed by detection
    body = {k: v for k, v in obj.items() if k != "schemaVersion"}
    known, extra_fields = split_known_fields(body, RuntimeConfigDocument)
    try:
        model = RuntimeConfigDocument(**known)
    except ValidationError as e:
        raise MalformedDocument(f"Invalid v{version.value} document structure: {e}") from e

    if not model.runtime_config:
        raise MissingRequiredField("runtimeConfig", "runtimeConfig must declare at least one plugin")

    steps = [
        StepDefinition(
            action=plugin_name,
            properties=model.runtime_config[plugin_name].properties,
            settings=model.runtime_config[plugin_name].settings,
        )
        for plugin_name in sorted(model.runtime_config)
    ]

    warnings = []
    if extra_fields:
        warnings.append(f"Unknown top-level fields preserved: {sorted(extra_fields)}")

    return ParsedDocument(
        schema_version=version,
        description=model.description,
        parameters=model.parameters,
        steps=steps,
        extra=extra_fields or None,
        warnings=warnings,
    )
