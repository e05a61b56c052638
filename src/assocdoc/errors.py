"""Typed normalization errors.

Every failure surfaced by the normalizer is a ``NormalizationError``
(itself a ``ValueError``) carrying a stable ``ErrorCode``.
"""

from typing import Iterable, List

from assocdoc.codes import ErrorCode


class NormalizationError(ValueError):
    """Base class for all normalization failures."""
    code: ErrorCode = ErrorCode.MALFORMED_DOCUMENT


class MalformedDocument(NormalizationError):
    """Raised when the document text or its structure is invalid."""
    code = ErrorCode.MALFORMED_DOCUMENT


class UnsupportedSchemaVersion(NormalizationError):
    """Raised when the declared schemaVersion is not supported."""
    code = ErrorCode.UNSUPPORTED_SCHEMA_VERSION

    def __init__(self, version: str):
        self.version = version
        super().__init__(f"Unsupported schemaVersion: {version}")


class MissingRequiredField(NormalizationError):
    """Raised when a required field (or parameter value) is absent."""
    code = ErrorCode.MISSING_REQUIRED_FIELD

    def __init__(self, field: str, message: str = ""):
        self.field = field
        super().__init__(message or f"Missing required field: {field}")


class ParameterMergeConflict(NormalizationError):
    """Raised in strict mode when legacy parameters match no step."""
    code = ErrorCode.PARAMETER_MERGE_CONFLICT

    def __init__(self, parameters: Iterable[str]):
        self.parameters: List[str] = sorted(parameters)
        super().__init__(
            f"Legacy parameters match no step: {self.parameters}"
        )
