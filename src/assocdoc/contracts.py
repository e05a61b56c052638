"""Public input models for the assocdoc package."""

from typing import Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field


class AssociationInfo(BaseModel):
    """Association metadata attached to a raw association."""
    name: str = Field(alias="Name")  # document name
    instance_id: str = Field(alias="InstanceId")  # target instance, used as destination
    association_id: Optional[str] = Field(default=None, alias="AssociationId")
    document_version: Optional[str] = Field(default=None, alias="DocumentVersion")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class RawAssociation(BaseModel):
    """An association as fetched by the poller, before normalization.

    ``document`` is opaque text until the normalizer parses it.
    ``parameters`` is the legacy side-channel: parameter name -> ordered values.
    """
    id: str = Field(alias="ID")  # command id
    create_date: str = Field(alias="CreateDate")
    document: str = Field(alias="Document")
    association: AssociationInfo = Field(alias="Association")
    parameters: Dict[str, List[str]] = Field(default_factory=dict, alias="Parameters")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


class NormalizationIssue(BaseModel):
    """A single normalization issue (error or warning)."""
    code: str  # ErrorCode value
    message: str
    field: Optional[str] = None  # For MISSING_REQUIRED_FIELD
    version: Optional[str] = None  # For UNSUPPORTED_SCHEMA_VERSION
    parameters: List[str] = Field(default_factory=list)  # For PARAMETER_MERGE_CONFLICT / UNMATCHED_PARAMETER
