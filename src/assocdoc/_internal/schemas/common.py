"""Common types for document parsing."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field

from assocdoc.kernel.schema_version import SchemaVersion


class ParameterDeclaration(BaseModel):
    """A document-level parameter declaration (``parameters`` block)."""
    type: str = "String"  # String | StringList | ...
    default: Any = None
    description: Optional[str] = None
    allowed_values: Optional[List[Any]] = Field(default=None, alias="allowedValues")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    @property
    def is_list(self) -> bool:
        return self.type == "StringList"


class StepDefinition(BaseModel):
    """One scheduled action, before parameters are merged."""
    action: str
    name: Optional[str] = None  # only in multi-step documents
    properties: Any = None
    settings: Any = None
    precondition: Optional[Dict[str, Any]] = None  # 2.2 only


class ParsedDocument(BaseModel):
    """Result of parsing a document with its version-specific parser.

    This represents a normalized in-memory view of the document text. Steps
    keep document order for multi-step documents and lexicographic plugin
    order for map-keyed documents.
    """
    schema_version: SchemaVersion
    declared_version: bool = True  # False when the legacy default was assumed
    description: Optional[str] = None
    parameters: Dict[str, ParameterDeclaration] = Field(default_factory=dict)
    steps: List[StepDefinition]
    extra: Optional[Dict[str, Any]] = None  # Unknown top-level fields, preserved
    warnings: List[str] = Field(default_factory=list)


def split_known_fields(obj: Dict[str, Any], model: type) -> tuple:
    """Split a raw document into (known, unknown) top-level fields for ``model``.

    Known fields are matched on alias and on field name. Top-level only, not recursive.
    """
    known_names = set()
    for name, field in model.model_fields.items():
        known_names.add(name)
        if field.alias:
            known_names.add(field.alias)
    known = {k: v for k, v in obj.items() if k in known_names}
    unknown = {k: v for k, v in obj.items() if k not in known_names}
    return known, unknown
