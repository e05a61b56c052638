"""Normalization of raw associations into document state.

The normalizer is a pure function of its input plus read-only settings and
catalog: it holds no per-call state and can be shared between threads.
"""

from typing import Any, Dict, List, Optional, Tuple

import structlog
from pydantic import ValidationError

from assocdoc._internal.schemas import ParsedDocument, parse_document
from assocdoc.codes import ErrorCode
from assocdoc.contracts import NormalizationIssue, RawAssociation
from assocdoc.errors import MalformedDocument, ParameterMergeConflict
from assocdoc.kernel.document_state import (
    DocumentInfo,
    DocumentState,
    PluginConfiguration,
    PluginMap,
    PluginSequence,
    PluginState,
)
from assocdoc.kernel.parameters import MergeResult, merge_parameters
from assocdoc.kernel.plugin_catalog import DEFAULT_CATALOG, PluginCatalog
from assocdoc.kernel.schema_version import (
    SchemaFamily,
    load_document_tree,
    resolve_schema_version,
)
from assocdoc.settings import NormalizerSettings, get_settings

logger = structlog.get_logger(__name__)


def build_message_id(namespace: str, command_id: str, destination: str) -> str:
    """Correlation id shared by a document and all of its plugins."""
    return f"{namespace}.{command_id}.{destination}"


def properties_id(position: int, alias: str) -> str:
    return f"{position}.{alias}"


def _with_properties_id(properties: Any, plugin_properties_id: str) -> Any:
    if isinstance(properties, dict):
        return {**properties, "id": plugin_properties_id}
    if isinstance(properties, list):
        return [
            {**item, "id": plugin_properties_id} if isinstance(item, dict) else item
            for item in properties
        ]
    return properties


class DocumentNormalizer:
    """Turns a RawAssociation into a DocumentState.

    Args:
        settings: Normalizer settings; defaults to the process-wide settings
        catalog: Plugin catalog; defaults to the built-in catalog
    """

    def __init__(
        self,
        settings: Optional[NormalizerSettings] = None,
        catalog: Optional[PluginCatalog] = None,
    ):
        self.settings = settings or get_settings()
        self.catalog = catalog or DEFAULT_CATALOG

    def parse(self, raw: RawAssociation) -> ParsedDocument:
        """Detect the schema version and run the matching parser."""
        tree = load_document_tree(raw.document)
        version, declared = resolve_schema_version(tree)
        parsed = parse_document(tree, version)
        if not declared:
            logger.warning(
                "schema_version_missing",
                command_id=raw.id,
                assumed_version=version.value,
            )
            parsed = parsed.model_copy(update={"declared_version": False})
        return parsed

    def normalize(self, raw: RawAssociation) -> DocumentState:
        """
        Normalize a raw association.

        Args:
            raw: Raw association from the poller

        Returns:
            Complete DocumentState

        Raises:
            MalformedDocument: Document text or structure is invalid
            UnsupportedSchemaVersion: Declared schemaVersion is not supported
            MissingRequiredField: A required field or parameter value is absent
            ParameterMergeConflict: Strict mode and some legacy parameter matched no step
        """
        document_state, _ = self.normalize_with_report(raw)
        return document_state

    def normalize_with_report(
        self,
        raw: RawAssociation,
    ) -> Tuple[DocumentState, List[NormalizationIssue]]:
        """Normalize and also return the non-blocking issues found on the way.

        Returns:
            (DocumentState, warnings)
        """
        parsed = self.parse(raw)
        merge = merge_parameters(parsed, raw.parameters, self.catalog)

        warnings: List[NormalizationIssue] = []
        if not parsed.declared_version:
            warnings.append(NormalizationIssue(
                code=ErrorCode.SCHEMA_VERSION_MISSING.value,
                message=f"Missing schemaVersion, treating as legacy v{parsed.schema_version.value}",
                version=parsed.schema_version.value,
            ))
        for message in parsed.warnings:
            warnings.append(NormalizationIssue(
                code=ErrorCode.UNKNOWN_FIELDS_PRESENT.value,
                message=message,
            ))

        if merge.unmatched:
            if self.settings.strict_parameters:
                raise ParameterMergeConflict(merge.unmatched)
            for name in merge.unmatched:
                logger.warning(
                    "legacy_parameter_unmatched",
                    command_id=raw.id,
                    parameter=name,
                    schema_version=parsed.schema_version.value,
                )
                warnings.append(NormalizationIssue(
                    code=ErrorCode.UNMATCHED_PARAMETER.value,
                    message=f"Legacy parameter matched no step: {name}",
                    parameters=[name],
                ))

        document_info = self._document_info(raw)
        try:
            document_state = DocumentState(
                document_information=document_info,
                schema_version=parsed.schema_version.value,
                plugins=self._plugins(parsed, merge, document_info.message_id),
            )
        except ValidationError as e:
            raise MalformedDocument(f"Invalid document state: {e}") from e

        logger.debug(
            "association_normalized",
            command_id=raw.id,
            document_name=document_info.document_name,
            schema_version=document_state.schema_version,
            layout=document_state.plugins.kind,
            plugin_count=len(parsed.steps),
        )
        return document_state, warnings

    def _document_info(self, raw: RawAssociation) -> DocumentInfo:
        destination = raw.association.instance_id
        return DocumentInfo(
            document_id=raw.id,
            command_id=raw.id,
            association_id=raw.association.association_id,
            instance_id=destination,
            destination=destination,
            message_id=build_message_id(self.settings.message_namespace, raw.id, destination),
            document_name=raw.association.name,
            document_version=raw.association.document_version,
            created_date=raw.create_date,
        )

    def _plugins(self, parsed: ParsedDocument, merge: MergeResult, message_id: str):
        if parsed.schema_version.family == SchemaFamily.MAP_KEYED:
            plugins: Dict[str, PluginState] = {}
            for position, (step, properties) in enumerate(zip(parsed.steps, merge.properties)):
                plugins[step.action] = PluginState(
                    id=step.action,
                    name=step.action,
                    configuration=PluginConfiguration(
                        properties=_with_properties_id(
                            properties, properties_id(position, step.action)
                        ),
                        settings=step.settings,
                        message_id=message_id,
                        plugin_id=step.action,
                        plugin_name=step.action,
                    ),
                )
            return PluginMap(plugins=plugins)

        sequence: List[PluginState] = []
        for position, (step, properties) in enumerate(zip(parsed.steps, merge.properties)):
            alias = self.catalog.get(step.action).alias
            sequence.append(
                PluginState(
                    id=step.name,
                    name=step.action,
                    configuration=PluginConfiguration(
                        properties=_with_properties_id(properties, properties_id(position, alias)),
                        settings=step.settings,
                        message_id=message_id,
                        plugin_id=step.name,
                        plugin_name=step.action,
                        preconditions=step.precondition,
                    ),
                )
            )
        return PluginSequence(plugins=sequence)
