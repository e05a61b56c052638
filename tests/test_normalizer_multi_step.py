"""Normalization of multi-step (v2.0 / v2.2) association documents."""

import json

import pytest

from assocdoc.errors import MalformedDocument, MissingRequiredField, ParameterMergeConflict
from assocdoc.kernel.document_state import PluginSequence
from assocdoc.kernel.normalizer import DocumentNormalizer

from conftest import make_raw, read_document


def _steps_document(*steps, version="2.0", **extra):
    return json.dumps({"schemaVersion": version, "mainSteps": list(steps), **extra})


def test_parse_association_version_2_0(settings):
    raw = make_raw(
        read_document("sampleVersion2_0.json"),
        parameters={"runCommand0": ["ls"], "runCommand1": ["pwd"]},
        command_id="commandV2.0",
        instance_id="i-test",
        name="testV2.0",
    )

    doc_state = DocumentNormalizer(settings=settings).normalize(raw)

    assert doc_state.plugins_information is None
    assert isinstance(doc_state.plugins, PluginSequence)
    assert doc_state.schema_version == "2.0"
    assert doc_state.document_type == "association"
    assert doc_state.document_information.message_id == "aws.ssm.commandV2.0.i-test"

    plugins = doc_state.instance_plugins_information
    assert len(plugins) == 2
    assert [p.id for p in plugins] == ["runPowerShellScript1", "runPowerShellScript2"]
    assert [p.name for p in plugins] == ["aws:runPowerShellScript", "aws:runPowerShellScript"]

    assert plugins[0].configuration.properties == {"id": "0.aws:psModule", "runCommand": "ls"}
    assert plugins[1].configuration.properties == {"id": "1.aws:psModule", "runCommand": "pwd"}
    for plugin in plugins:
        assert plugin.configuration.message_id == "aws.ssm.commandV2.0.i-test"
        assert plugin.has_executed is False


def test_version_2_2_yaml_with_preconditions(settings):
    raw = make_raw(read_document("sampleVersion2_2.yaml"))

    doc_state = DocumentNormalizer(settings=settings).normalize(raw)

    assert doc_state.schema_version == "2.2"
    shell, powershell = doc_state.instance_plugins_information
    assert shell.configuration.properties == {
        "id": "0.aws:runShellScript",
        "runCommand": ["echo hello"],
        "workingDirectory": "",
    }
    assert shell.configuration.preconditions == {"StringEquals": ["platformType", "Linux"]}
    assert powershell.configuration.properties == {
        "id": "1.aws:psModule",
        "runCommand": ["echo hello"],
    }


def test_string_list_parameter_keeps_single_value_as_list(settings):
    raw = make_raw(read_document("sampleVersion2_2.yaml"), parameters={"commands": ["whoami"]})

    doc_state = DocumentNormalizer(settings=settings).normalize(raw)

    for plugin in doc_state.instance_plugins_information:
        assert plugin.configuration.properties["runCommand"] == ["whoami"]


def test_positional_parameter_out_of_range_is_unmatched(settings):
    raw = make_raw(
        read_document("sampleVersion2_0.json"),
        parameters={"runCommand0": ["ls"], "runCommand5": ["rm"]},
    )
    doc_state, warnings = DocumentNormalizer(settings=settings).normalize_with_report(raw)

    plugins = doc_state.instance_plugins_information
    assert plugins[0].configuration.properties["runCommand"] == "ls"
    assert "runCommand" not in plugins[1].configuration.properties
    assert [w.parameters for w in warnings] == [["runCommand5"]]


def test_positional_key_not_accepted_by_action_is_unmatched(settings):
    strict = settings.model_copy(update={"strict_parameters": True})
    raw = make_raw(read_document("sampleVersion2_0.json"), parameters={"directoryId0": ["d-1"]})
    with pytest.raises(ParameterMergeConflict) as excinfo:
        DocumentNormalizer(settings=strict).normalize(raw)
    assert excinfo.value.parameters == ["directoryId0"]


def test_unknown_action_uses_action_as_alias(settings):
    document = _steps_document(
        {"action": "custom:doThing", "name": "first", "inputs": {"x": 1}},
        {"action": "custom:doThing", "name": "second"},
    )
    plugins = DocumentNormalizer(settings=settings).normalize(make_raw(document)) \
        .instance_plugins_information
    assert plugins[0].configuration.properties == {"x": 1, "id": "0.custom:doThing"}
    assert plugins[1].configuration.properties == {"id": "1.custom:doThing"}


def test_step_without_action(settings):
    document = _steps_document({"name": "noAction", "inputs": {}})
    with pytest.raises(MissingRequiredField) as excinfo:
        DocumentNormalizer(settings=settings).normalize(make_raw(document))
    assert excinfo.value.field == "mainSteps[0].action"


def test_step_without_name(settings):
    document = _steps_document(
        {"action": "aws:runShellScript", "name": "ok"},
        {"action": "aws:runShellScript"},
    )
    with pytest.raises(MissingRequiredField) as excinfo:
        DocumentNormalizer(settings=settings).normalize(make_raw(document))
    assert excinfo.value.field == "mainSteps[1].name"


def test_duplicate_step_names(settings):
    document = _steps_document(
        {"action": "aws:runShellScript", "name": "same"},
        {"action": "aws:runShellScript", "name": "same"},
    )
    with pytest.raises(MalformedDocument, match="Duplicate step name"):
        DocumentNormalizer(settings=settings).normalize(make_raw(document))


def test_empty_main_steps(settings):
    with pytest.raises(MissingRequiredField):
        DocumentNormalizer(settings=settings).normalize(make_raw(_steps_document()))


def test_missing_main_steps(settings):
    raw = make_raw(json.dumps({"schemaVersion": "2.0"}))
    with pytest.raises(MissingRequiredField) as excinfo:
        DocumentNormalizer(settings=settings).normalize(raw)
    assert excinfo.value.field == "mainSteps"


def test_precondition_requires_2_2(settings):
    document = _steps_document({
        "action": "aws:runShellScript",
        "name": "linuxOnly",
        "precondition": {"StringEquals": ["platformType", "Linux"]},
    })
    with pytest.raises(MalformedDocument, match="2.2"):
        DocumentNormalizer(settings=settings).normalize(make_raw(document))


def test_step_settings_are_independent_of_properties(settings):
    document = _steps_document({
        "action": "aws:runShellScript",
        "name": "withSettings",
        "inputs": {"runCommand": ["date"]},
        "settings": {"timeoutSeconds": 60},
    })
    plugin = DocumentNormalizer(settings=settings).normalize(make_raw(document)) \
        .instance_plugins_information[0]
    assert plugin.configuration.settings == {"timeoutSeconds": 60}
    assert "timeoutSeconds" not in plugin.configuration.properties


def test_embedded_placeholder_is_interpolated(settings):
    document = _steps_document(
        {
            "action": "aws:runShellScript",
            "name": "greet",
            "inputs": {"runCommand": ["echo {{ greeting }}, {{ target }}"]},
        },
        parameters={"greeting": {"type": "String", "default": "hello"}},
    )
    raw = make_raw(document, parameters={"target": ["world"]})
    plugin = DocumentNormalizer(settings=settings).normalize(raw).instance_plugins_information[0]
    assert plugin.configuration.properties["runCommand"] == ["echo hello, world"]


def test_external_references_are_left_alone(settings):
    document = _steps_document({
        "action": "aws:runShellScript",
        "name": "secret",
        "inputs": {"runCommand": ["echo {{ssm:/app/token}}"], "workingDirectory": "{{ssm:/app/dir}}"},
    })
    plugin = DocumentNormalizer(settings=settings).normalize(make_raw(document)) \
        .instance_plugins_information[0]
    assert plugin.configuration.properties["runCommand"] == ["echo {{ssm:/app/token}}"]
    assert plugin.configuration.properties["workingDirectory"] == "{{ssm:/app/dir}}"
