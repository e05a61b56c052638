"""Canonical document state models handed to the execution engine."""

from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from assocdoc._internal.canonical_json import canonical_dumps


ASSOCIATION_DOCUMENT_TYPE = "association"


class PluginConfiguration(BaseModel):
    """Execution configuration of one plugin."""
    properties: Any = Field(default=None, alias="Properties")
    settings: Any = Field(default=None, alias="Settings")
    message_id: str = Field(alias="MessageId")  # same as the document's message id
    plugin_id: str = Field(alias="PluginID")
    plugin_name: str = Field(alias="PluginName")
    preconditions: Optional[Dict[str, Any]] = Field(default=None, alias="Preconditions")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class PluginState(BaseModel):
    """One schedulable unit of work within a document state."""
    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    configuration: PluginConfiguration = Field(alias="Configuration")
    has_executed: bool = Field(default=False, alias="HasExecuted")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class PluginMap(BaseModel):
    """Plugins of a map-keyed document, keyed by plugin-type name."""
    kind: Literal["map"] = "map"
    plugins: Dict[str, PluginState]

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("plugins")
    @classmethod
    def validate_plugins(cls, v: Dict[str, PluginState]) -> Dict[str, PluginState]:
        if not v:
            raise ValueError("plugin map must contain at least one plugin")
        for key, plugin in v.items():
            if plugin.id != key:
                raise ValueError(f"plugin map key '{key}' does not match plugin id '{plugin.id}'")
        return v

    def ordered(self) -> List[PluginState]:
        return [self.plugins[key] for key in sorted(self.plugins)]


class PluginSequence(BaseModel):
    """Plugins of a multi-step document, in step order."""
    kind: Literal["sequence"] = "sequence"
    plugins: List[PluginState]

    model_config = ConfigDict(frozen=True, extra="forbid")

    @field_validator("plugins")
    @classmethod
    def validate_plugins(cls, v: List[PluginState]) -> List[PluginState]:
        if not v:
            raise ValueError("plugin sequence must contain at least one plugin")
        seen = set()
        duplicates = set()
        for plugin in v:
            if plugin.id in seen:
                duplicates.add(plugin.id)
            seen.add(plugin.id)
        if duplicates:
            raise ValueError(f"Duplicate plugin ids not allowed: {sorted(duplicates)}")
        return v

    def ordered(self) -> List[PluginState]:
        return list(self.plugins)


PluginLayout = Annotated[Union[PluginMap, PluginSequence], Field(discriminator="kind")]


class DocumentInfo(BaseModel):
    """Document-level identity and correlation fields."""
    document_id: str = Field(alias="DocumentID")
    command_id: str = Field(alias="CommandID")
    association_id: Optional[str] = Field(default=None, alias="AssociationID")
    instance_id: str = Field(alias="InstanceID")
    destination: str = Field(alias="Destination")
    message_id: str = Field(alias="MessageID")  # "<namespace>.<command-id>.<destination>"
    document_name: str = Field(alias="DocumentName")
    document_version: Optional[str] = Field(default=None, alias="DocumentVersion")
    created_date: str = Field(alias="CreatedDate")

    model_config = ConfigDict(populate_by_name=True, frozen=True, extra="forbid")


class DocumentState(BaseModel):
    """Canonical execution plan produced by normalization.

    Exactly one plugin layout is populated: a ``PluginMap`` for map-keyed
    documents or a ``PluginSequence`` for multi-step documents.
    """
    document_information: DocumentInfo
    document_type: Literal["association"] = ASSOCIATION_DOCUMENT_TYPE
    schema_version: str
    plugins: PluginLayout

    model_config = ConfigDict(frozen=True, extra="forbid")

    @model_validator(mode="after")
    def validate_correlation(self) -> "DocumentState":
        message_id = self.document_information.message_id
        for plugin in self.plugins.ordered():
            if plugin.configuration.message_id != message_id:
                raise ValueError(
                    f"plugin '{plugin.id}' message id '{plugin.configuration.message_id}' "
                    f"does not match document message id '{message_id}'"
                )
        return self

    @property
    def plugins_information(self) -> Optional[Dict[str, PluginState]]:
        """Plugin map of a map-keyed document, else None."""
        if isinstance(self.plugins, PluginMap):
            return self.plugins.plugins
        return None

    @property
    def instance_plugins_information(self) -> Optional[List[PluginState]]:
        """Ordered plugins of a multi-step document, else None."""
        if isinstance(self.plugins, PluginSequence):
            return self.plugins.plugins
        return None

    def to_engine_payload(self) -> Dict[str, Any]:
        """Dump in the field layout the execution engine reads.

        Values are JSON-safe: YAML dates and timestamps become ISO strings.
        """
        plugins_information = self.plugins_information
        instance_plugins = self.instance_plugins_information
        return {
            "DocumentInformation": self.document_information.model_dump(by_alias=True, mode="json"),
            "DocumentType": self.document_type,
            "SchemaVersion": self.schema_version,
            "PluginsInformation": (
                {k: v.model_dump(by_alias=True, mode="json") for k, v in plugins_information.items()}
                if plugins_information is not None else None
            ),
            "InstancePluginsInformation": (
                [p.model_dump(by_alias=True, mode="json") for p in instance_plugins]
                if instance_plugins is not None else None
            ),
        }

    def canonical_json(self) -> str:
        """Byte-stable JSON form of the engine payload."""
        return canonical_dumps(self.to_engine_payload())
