"""Public API for the assocdoc package.

High-level functions that return complete, structured results.
Callers should use these functions instead of importing from _internal.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Union

from pydantic import BaseModel, ValidationError

from assocdoc.contracts import NormalizationIssue, RawAssociation
from assocdoc.errors import (
    MalformedDocument,
    MissingRequiredField,
    NormalizationError,
    ParameterMergeConflict,
    UnsupportedSchemaVersion,
)
from assocdoc.kernel.document_state import DocumentState
from assocdoc.kernel.normalizer import DocumentNormalizer
from assocdoc.kernel.plugin_catalog import PluginCatalog
from assocdoc.kernel.schema_version import SchemaVersion
from assocdoc.kernel.schema_version import detect_schema_version as _detect_schema_version
from assocdoc.settings import NormalizerSettings, get_settings


PathLike = Union[str, os.PathLike, Path]


def _normalize_path(path: PathLike) -> Path:
    """Normalize path input to Path object."""
    return Path(path) if not isinstance(path, Path) else path


class NormalizationResult(BaseModel):
    """Result of a preflight normalization."""
    ok: bool  # True if a DocumentState was produced (warnings don't block)
    errors: List[NormalizationIssue]
    warnings: List[NormalizationIssue]
    document_state: Optional[DocumentState] = None


def _coerce_parameters(data: Mapping[str, Any]) -> Dict[str, List[str]]:
    """Accept "name": "value" as shorthand for "name": ["value"]."""
    parameters: Dict[str, List[str]] = {}
    for name, value in data.items():
        if isinstance(value, list):
            parameters[name] = [str(v) for v in value]
        else:
            parameters[name] = [str(value)]
    return parameters


def load_raw_association(
    association: Union[PathLike, Dict[str, Any]],
    document: Optional[PathLike] = None,
    parameters: Optional[Union[PathLike, Dict[str, Any]]] = None,
) -> RawAssociation:
    """
    Build a RawAssociation from files or dicts.

    Args:
        association: Association JSON (path or dict) using either wire names
                     (ID, CreateDate, Document, Association, Parameters) or snake_case
        document: Optional document file whose text replaces ``Document``
        parameters: Optional parameter mapping (path or dict) replacing ``Parameters``

    Returns:
        RawAssociation

    Raises:
        FileNotFoundError: If a path does not exist
        MalformedDocument: If the association record is invalid
    """
    if isinstance(association, dict):
        data = dict(association)
    else:
        with open(_normalize_path(association), "r", encoding="utf-8") as f:
            data = json.load(f)

    if document is not None:
        data.pop("document", None)
        data["Document"] = _normalize_path(document).read_text(encoding="utf-8")

    if parameters is not None:
        if not isinstance(parameters, dict):
            with open(_normalize_path(parameters), "r", encoding="utf-8") as f:
                parameters = json.load(f)
        data.pop("parameters", None)
        data["Parameters"] = _coerce_parameters(parameters)
    else:
        for key in ("Parameters", "parameters"):
            if isinstance(data.get(key), dict):
                data[key] = _coerce_parameters(data[key])

    try:
        return RawAssociation.model_validate(data)
    except ValidationError as e:
        raise MalformedDocument(f"Invalid association record: {e}") from e


def detect_schema_version(document: str) -> SchemaVersion:
    """Return the schema version declared by raw document text."""
    return _detect_schema_version(document)


def _effective_settings(
    settings: Optional[NormalizerSettings],
    strict: Optional[bool],
) -> NormalizerSettings:
    settings = settings or get_settings()
    if strict is not None and strict != settings.strict_parameters:
        settings = settings.model_copy(update={"strict_parameters": strict})
    return settings


def normalize(
    raw: RawAssociation,
    settings: Optional[NormalizerSettings] = None,
    strict: Optional[bool] = None,
    catalog: Optional[PluginCatalog] = None,
) -> DocumentState:
    """
    Normalize a raw association into a DocumentState.

    Args:
        raw: Raw association
        settings: Optional settings (defaults to environment-derived settings)
        strict: Override ``settings.strict_parameters``
        catalog: Optional plugin catalog

    Returns:
        DocumentState

    Raises:
        NormalizationError: (subclass) on any failure; no partial result
    """
    normalizer = DocumentNormalizer(settings=_effective_settings(settings, strict), catalog=catalog)
    return normalizer.normalize(raw)


def _issue_from_error(error: NormalizationError) -> NormalizationIssue:
    issue = NormalizationIssue(code=error.code.value, message=str(error))
    if isinstance(error, MissingRequiredField):
        issue.field = error.field
    elif isinstance(error, UnsupportedSchemaVersion):
        issue.version = error.version
    elif isinstance(error, ParameterMergeConflict):
        issue.parameters = list(error.parameters)
    return issue


def preflight(
    raw: RawAssociation,
    settings: Optional[NormalizerSettings] = None,
    strict: Optional[bool] = None,
    catalog: Optional[PluginCatalog] = None,
) -> NormalizationResult:
    """
    Normalize without raising: errors and warnings come back as issues.

    Returns:
        NormalizationResult with ok=True and the DocumentState on success,
        ok=False and exactly one error otherwise
    """
    normalizer = DocumentNormalizer(settings=_effective_settings(settings, strict), catalog=catalog)
    try:
        document_state, warnings = normalizer.normalize_with_report(raw)
    except NormalizationError as e:
        return NormalizationResult(ok=False, errors=[_issue_from_error(e)], warnings=[])

    return NormalizationResult(
        ok=True,
        errors=[],
        warnings=warnings,
        document_state=document_state,
    )
