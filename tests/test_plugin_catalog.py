"""Tests for the plugin catalog."""

import json

import pytest

from assocdoc.kernel.normalizer import DocumentNormalizer
from assocdoc.kernel.plugin_catalog import DEFAULT_CATALOG, PluginCatalog, PluginProfile

from conftest import make_raw


def test_builtin_aliases():
    assert DEFAULT_CATALOG.get("aws:runPowerShellScript").alias == "aws:psModule"
    assert DEFAULT_CATALOG.get("aws:runShellScript").alias == "aws:runShellScript"
    assert DEFAULT_CATALOG.get("aws:applications").defaults["action"] == "Install"


def test_unknown_action_passes_through():
    profile = DEFAULT_CATALOG.get("custom:x")
    assert profile.alias == "custom:x"
    assert profile.input_keys == ()
    assert profile.defaults == {}


def test_duplicate_profiles_rejected():
    profile = PluginProfile(name="custom:x", alias="custom:x")
    with pytest.raises(ValueError, match="duplicate plugin profile"):
        PluginCatalog([profile, profile])


def test_extended_catalog_leaves_default_untouched():
    extra = PluginProfile(
        name="custom:deploy",
        alias="custom:deployModule",
        input_keys=("artifact",),
        defaults={"mode": "rolling"},
    )
    catalog = DEFAULT_CATALOG.extended([extra])

    assert catalog.get("custom:deploy").alias == "custom:deployModule"
    assert catalog.get("aws:runPowerShellScript").alias == "aws:psModule"
    assert DEFAULT_CATALOG.get("custom:deploy").alias == "custom:deploy"


def test_normalizer_uses_injected_catalog(settings):
    catalog = DEFAULT_CATALOG.extended([
        PluginProfile(
            name="custom:deploy",
            alias="custom:deployModule",
            input_keys=("artifact",),
            defaults={"mode": "rolling"},
        )
    ])
    document = json.dumps({
        "schemaVersion": "2.0",
        "mainSteps": [{"action": "custom:deploy", "name": "deploy"}],
    })
    raw = make_raw(document, parameters={"artifact0": ["s3://bucket/app.zip"]})

    plugin = DocumentNormalizer(settings=settings, catalog=catalog).normalize(raw) \
        .instance_plugins_information[0]

    assert plugin.configuration.properties == {
        "id": "0.custom:deployModule",
        "artifact": "s3://bucket/app.zip",
        "mode": "rolling",
    }
