"""Error code constants for assocdoc normalization.

These constants prevent stringly-typed error codes and ensure
client code uses the correct codes when inspecting preflight results.
"""

from enum import Enum


class ErrorCode(str, Enum):
    """Normalization error and warning codes."""

    # Errors (blocking)
    MALFORMED_DOCUMENT = "MALFORMED_DOCUMENT"
    UNSUPPORTED_SCHEMA_VERSION = "UNSUPPORTED_SCHEMA_VERSION"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"
    PARAMETER_MERGE_CONFLICT = "PARAMETER_MERGE_CONFLICT"

    # Warnings (non-blocking)
    SCHEMA_VERSION_MISSING = "SCHEMA_VERSION_MISSING"
    UNMATCHED_PARAMETER = "UNMATCHED_PARAMETER"
    UNKNOWN_FIELDS_PRESENT = "UNKNOWN_FIELDS_PRESENT"
