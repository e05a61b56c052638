"""Merge of legacy association parameters into step properties.

Merge order for one document:

1. Resolve values: declared defaults, overlaid by legacy values.
2. Substitute ``{{ name }}`` placeholders in every step's properties.
3. Inject legacy parameters that no placeholder consumed:
   map-keyed documents by input key (``source``) into the first accepting
   plugin in plugin-name order, multi-step documents
   positionally by ``<key><N>`` (``runCommand1`` -> step 1, key ``runCommand``).
4. Fill catalog defaults for keys still absent.

Anything left over is reported as unmatched; the caller decides the policy.
"""

import copy
import re
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Set, Tuple

import structlog

from assocdoc._internal.schemas import ParameterDeclaration, ParsedDocument
from assocdoc.errors import MissingRequiredField
from assocdoc.kernel.plugin_catalog import PluginCatalog
from assocdoc.kernel.schema_version import SchemaFamily

logger = structlog.get_logger(__name__)

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*([^{}\s]+)\s*\}\}")
WHOLE_PLACEHOLDER_PATTERN = re.compile(r"^\s*\{\{\s*([^{}\s]+)\s*\}\}\s*$")
POSITIONAL_PATTERN = re.compile(r"^(?P<key>[A-Za-z_]+)(?P<index>\d+)$")

# Resolved outside the agent (e.g. {{ssm:/path}}); never substituted here
EXTERNAL_REFERENCE_PREFIXES = ("ssm:", "ssm-secure:", "resolve:")


@dataclass
class MergeResult:
    """Per-step merged properties plus the legacy parameters that matched nothing."""
    properties: List[Any]
    unmatched: List[str] = field(default_factory=list)


def coerce_legacy_value(values: List[str], declaration: Optional[ParameterDeclaration]) -> Any:
    """A single value becomes a scalar unless the parameter is declared StringList."""
    if declaration is not None and declaration.is_list:
        return list(values)
    if len(values) == 1:
        return values[0]
    return list(values)


def resolve_parameter_values(
    declarations: Mapping[str, ParameterDeclaration],
    legacy: Mapping[str, List[str]],
) -> Dict[str, Any]:
    """Declared defaults overlaid with legacy values (legacy wins)."""
    values: Dict[str, Any] = {}
    for name, declaration in declarations.items():
        if declaration.default is not None:
            values[name] = copy.deepcopy(declaration.default)
    for name, raw_values in legacy.items():
        values[name] = coerce_legacy_value(raw_values, declarations.get(name))
    return values


def _is_external(name: str) -> bool:
    return name.startswith(EXTERNAL_REFERENCE_PREFIXES)


def _render(value: Any) -> str:
    if isinstance(value, list):
        return ",".join(str(v) for v in value)
    return str(value)


def substitute_placeholders(obj: Any, values: Mapping[str, Any], consumed: Set[str]) -> Any:
    """Return ``obj`` with ``{{ name }}`` placeholders replaced from ``values``.

    A string that is exactly one placeholder takes the value unchanged (lists
    stay lists); embedded placeholders are string-interpolated. Names used are
    added to ``consumed``.

    Raises:
        MissingRequiredField: If a placeholder names a parameter with no value
    """
    if isinstance(obj, dict):
        return {k: substitute_placeholders(v, values, consumed) for k, v in obj.items()}
    if isinstance(obj, list):
        return [substitute_placeholders(v, values, consumed) for v in obj]
    if not isinstance(obj, str) or "{{" not in obj:
        return obj

    whole = WHOLE_PLACEHOLDER_PATTERN.match(obj)
    if whole and not _is_external(whole.group(1)):
        name = whole.group(1)
        if name not in values:
            raise MissingRequiredField(name, f"No value supplied for parameter '{name}'")
        consumed.add(name)
        return copy.deepcopy(values[name])

    def _replace(match: "re.Match[str]") -> str:
        name = match.group(1)
        if _is_external(name):
            return match.group(0)
        if name not in values:
            raise MissingRequiredField(name, f"No value supplied for parameter '{name}'")
        consumed.add(name)
        return _render(values[name])

    return PLACEHOLDER_PATTERN.sub(_replace, obj)


def property_targets(properties: Any) -> Tuple[Any, List[Dict[str, Any]]]:
    """Return (properties, dicts that keys can be written into).

    ``None`` becomes an empty dict; a list yields its dict items; strings and
    other scalars have no targets.
    """
    if properties is None:
        properties = {}
    if isinstance(properties, dict):
        return properties, [properties]
    if isinstance(properties, list):
        return properties, [item for item in properties if isinstance(item, dict)]
    return properties, []


def _set_property(target: Dict[str, Any], key: str, value: Any, parameter: str) -> None:
    if key in target and target[key] != value:
        logger.debug(
            "legacy_parameter_overrode_property",
            parameter=parameter,
            key=key,
        )
    target[key] = copy.deepcopy(value)


def merge_parameters(
    parsed: ParsedDocument,
    legacy: Mapping[str, List[str]],
    catalog: PluginCatalog,
) -> MergeResult:
    """
    Merge legacy parameters into the properties of ``parsed``'s steps.

    Args:
        parsed: Document parsed by its version-specific parser
        legacy: Legacy parameter mapping (name -> ordered values)
        catalog: Plugin catalog supplying input keys and defaults

    Returns:
        MergeResult with one merged properties value per step, in step order

    Raises:
        MissingRequiredField: If a placeholder cannot be resolved
    """
    values = resolve_parameter_values(parsed.parameters, legacy)
    consumed: Set[str] = set()

    merged: List[Any] = [
        substitute_placeholders(copy.deepcopy(step.properties), values, consumed)
        for step in parsed.steps
    ]

    targets: List[List[Dict[str, Any]]] = []
    for index, properties in enumerate(merged):
        merged[index], step_targets = property_targets(properties)
        targets.append(step_targets)

    matched: Set[str] = set(consumed)
    pending = [name for name in sorted(legacy) if name not in consumed]

    if parsed.schema_version.family == SchemaFamily.MAP_KEYED:
        # Steps arrive in plugin-name order; the first accepting plugin takes the value
        for name in pending:
            for index, step in enumerate(parsed.steps):
                if not catalog.get(step.action).accepts(name) or not targets[index]:
                    continue
                for target in targets[index]:
                    _set_property(target, name, values[name], name)
                matched.add(name)
                break
    else:
        for name in pending:
            match = POSITIONAL_PATTERN.match(name)
            if match is None:
                continue
            key = match.group("key")
            index = int(match.group("index"))
            if index >= len(parsed.steps):
                continue
            if not catalog.get(parsed.steps[index].action).accepts(key):
                continue
            for target in targets[index]:
                _set_property(target, key, values[name], name)
            matched.add(name)

    for index, step in enumerate(parsed.steps):
        defaults = catalog.get(step.action).defaults
        for target in targets[index]:
            for key, default in defaults.items():
                target.setdefault(key, copy.deepcopy(default))

    unmatched = [name for name in sorted(legacy) if name not in matched]
    return MergeResult(properties=merged, unmatched=unmatched)
