"""assocdoc: versioned association document normalization."""

from importlib.metadata import version, PackageNotFoundError

try:
    __version__ = version("assocdoc")
except PackageNotFoundError:
    __version__ = "dev"

# Public API exports
from assocdoc.api import normalize, preflight, load_raw_association, NormalizationResult
from assocdoc.contracts import AssociationInfo, NormalizationIssue, RawAssociation
from assocdoc.codes import ErrorCode
from assocdoc.errors import (
    MalformedDocument,
    MissingRequiredField,
    NormalizationError,
    ParameterMergeConflict,
    UnsupportedSchemaVersion,
)
from assocdoc.kernel.document_state import DocumentState, PluginState
from assocdoc.kernel.schema_version import SchemaVersion

__all__ = [
    "__version__",
    "normalize",
    "preflight",
    "load_raw_association",
    "NormalizationResult",
    "NormalizationIssue",
    "AssociationInfo",
    "RawAssociation",
    "DocumentState",
    "PluginState",
    "SchemaVersion",
    "ErrorCode",
    "NormalizationError",
    "MalformedDocument",
    "UnsupportedSchemaVersion",
    "MissingRequiredField",
    "ParameterMergeConflict",
]
