"""Inventory gatherer models."""

from enum import Enum
from typing import Any, List, Optional
from pydantic import BaseModel, ConfigDict, Field


# CaptureTime must look like 2016-07-30T18:15:37Z
CAPTURE_TIME_FORMAT = "%Y-%m-%dT%H:%M:%SZ"


class StopType(str, Enum):
    """How urgently a stop was requested."""
    SOFT = "Soft"
    HARD = "Hard"


class GathererConfig(BaseModel):
    """Per-gatherer configuration from the inventory policy document."""
    collection: str = Field(default="Enabled", alias="Collection")
    filters: Optional[str] = Field(default=None, alias="Filters")
    location: Optional[str] = Field(default=None, alias="Location")

    model_config = ConfigDict(populate_by_name=True, frozen=True)

    @property
    def enabled(self) -> bool:
        return self.collection.lower() == "enabled"


class Item(BaseModel):
    """One inventory item: the gathered content plus its envelope."""
    name: str = Field(alias="Name")
    schema_version: str = Field(alias="SchemaVersion")
    content: Any = Field(default=None, alias="Content")
    capture_time: str = Field(alias="CaptureTime")

    model_config = ConfigDict(populate_by_name=True, frozen=True)


class ServiceData(BaseModel):
    """Windows service inventory record."""
    name: str = Field(alias="Name")
    display_name: Optional[str] = Field(default=None, alias="DisplayName")
    status: Optional[str] = Field(default=None, alias="Status")
    dependent_services: Optional[str] = Field(default=None, alias="DependentServices")
    services_depended_on: Optional[str] = Field(default=None, alias="ServicesDependedOn")
    service_type: Optional[str] = Field(default=None, alias="ServiceType")
    start_type: Optional[str] = Field(default=None, alias="StartType")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="ignore")


def dump_items(items: List[Item]) -> List[dict]:
    """Dump items in the wire field layout, including nested content models."""
    return [item.model_dump(by_alias=True, mode="json") for item in items]
