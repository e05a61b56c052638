"""Parser for multi-step association documents (v2.0, v2.2)."""

from typing import Any, Dict, List, Optional
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from assocdoc.errors import MalformedDocument, MissingRequiredField
from assocdoc.kernel.schema_version import SchemaVersion

from .common import ParameterDeclaration, ParsedDocument, StepDefinition, split_known_fields


class MainStep(BaseModel):
    """One mainSteps entry."""
    action: Optional[str] = None  # required; checked explicitly for a typed error
    name: Optional[str] = None  # required; becomes the plugin id
    inputs: Dict[str, Any] = Field(default_factory=dict)
    settings: Any = None
    precondition: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")


class MainStepsDocument(BaseModel):
    """v2.x document schema: ordered list of named steps."""
    description: Optional[str] = None
    parameters: Dict[str, ParameterDeclaration] = Field(default_factory=dict)
    main_steps: List[MainStep] = Field(alias="mainSteps")

    model_config = ConfigDict(populate_by_name=True, extra="forbid")


def parse_main_steps_document(
    obj: Dict[str, Any],
    version: SchemaVersion,
) -> ParsedDocument:
    """
    Parse a multi-step document into one step per mainSteps entry, in order.

    Args:
        obj: Raw document tree
        version: Detected schema version (2.0 or 2.2)

    Returns:
        ParsedDocument with one StepDefinition per step

    Raises:
        MissingRequiredField: If mainSteps is absent or empty, or a step lacks action or name
        MalformedDocument: If the structure is invalid, step names repeat,
                           or a precondition appears before v2.2
    """
    if "mainSteps" not in obj or obj["mainSteps"] is None:
        raise MissingRequiredField("mainSteps")

    # schemaVersion was consumed by detection
    body = {k: v for k, v in obj.items() if k != "schemaVersion"}
    known, extra_fields = split_known_fields(body, MainStepsDocument)
    try:
        model = MainStepsDocument(**known)
    except ValidationError as e:
        raise MalformedDocument(f"Invalid v{version.value} document structure: {e}") from e

    if not model.main_steps:
        raise MissingRequiredField("mainSteps", "mainSteps must contain at least one step")

    steps: List[StepDefinition] = []
    seen_names = set()
    for index, step in enumerate(model.main_steps):
        if not step.action:
            raise MissingRequiredField(f"mainSteps[{index}].action")
        if not step.name:
            raise MissingRequiredField(f"mainSteps[{index}].name")
        if step.name in seen_names:
            raise MalformedDocument(f"Duplicate step name: {step.name}")
        seen_names.add(step.name)

        if step.precondition is not None and version != SchemaVersion.V2_2:
            raise MalformedDocument(
                f"Step {step.name} declares a precondition, which requires schemaVersion 2.2"
            )

        steps.append(
            StepDefinition(
                action=step.action,
                name=step.name,
                properties=dict(step.inputs),
                settings=step.settings,
                precondition=step.precondition,
            )
        )

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
