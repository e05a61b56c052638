"""Catalog of known plugin action types.

A profile tells the normalizer three things about an action type:
the internal alias used in synthesized properties ids, the input keys
that legacy parameters may be injected under, and the property defaults
filled in when a document leaves them out.
"""

from typing import Any, Dict, Iterable, Tuple

from pydantic import BaseModel, ConfigDict, Field


class PluginProfile(BaseModel):
    """Normalization profile of one action type."""
    name: str  # user-facing action type, e.g. "aws:runPowerShellScript"
    alias: str  # internal module alias, e.g. "aws:psModule"
    input_keys: Tuple[str, ...] = ()
    defaults: Dict[str, Any] = Field(default_factory=dict)

    model_config = ConfigDict(frozen=True, extra="forbid")

    def accepts(self, key: str) -> bool:
        return key in self.input_keys


_SCRIPT_INPUTS = ("runCommand", "workingDirectory", "timeoutSeconds")

BUILTIN_PROFILES: Tuple[PluginProfile, ...] = (
    PluginProfile(
        name="aws:applications",
        alias="aws:applications",
        input_keys=("action", "parameters", "source", "sourceHash"),
        defaults={"action": "Install", "parameters": "", "sourceHash": ""},
    ),
    PluginProfile(
        name="aws:runPowerShellScript",
        alias="aws:psModule",
        input_keys=_SCRIPT_INPUTS,
    ),
    PluginProfile(
        name="aws:psModule",
        alias="aws:psModule",
        input_keys=("source", "sourceHash") + _SCRIPT_INPUTS,
        defaults={"sourceHash": ""},
    ),
    PluginProfile(
        name="aws:runShellScript",
        alias="aws:runShellScript",
        input_keys=_SCRIPT_INPUTS,
    ),
    PluginProfile(
        name="aws:configurePackage",
        alias="aws:configurePackage",
        input_keys=("name", "action", "version"),
        defaults={"action": "Install"},
    ),
    PluginProfile(
        name="aws:domainJoin",
        alias="aws:domainJoin",
        input_keys=("directoryId", "directoryName", "directoryOU", "dnsIpAddresses"),
    ),
    PluginProfile(
        name="aws:cloudWatch",
        alias="aws:cloudWatch",
        input_keys=("properties", "status"),
        defaults={"status": "Enabled"},
    ),
    PluginProfile(
        name="aws:softwareInventory",
        alias="aws:softwareInventory",
        input_keys=(
            "applications",
            "awsComponents",
            "networkConfig",
            "windowsUpdates",
            "services",
            "customInventory",
        ),
    ),
)


class PluginCatalog:
    """Immutable lookup of plugin profiles by action type."""

    def __init__(self, profiles: Iterable[PluginProfile] = BUILTIN_PROFILES):
        self._profiles: Dict[str, PluginProfile] = {}
        for profile in profiles:
            if profile.name in self._profiles:
                raise ValueError(f"duplicate plugin profile: {profile.name}")
            self._profiles[profile.name] = profile

    def get(self, action: str) -> PluginProfile:
        """Return the profile for ``action``; unknown actions pass through unchanged."""
        profile = self._profiles.get(action)
        if profile is None:
            return PluginProfile(name=action, alias=action)
        return profile

    def extended(self, profiles: Iterable[PluginProfile]) -> "PluginCatalog":
        """Return a new catalog where ``profiles`` replace or add entries."""
        merged = dict(self._profiles)
        for profile in profiles:
            merged[profile.name] = profile
        return PluginCatalog(merged.values())


DEFAULT_CATALOG = PluginCatalog()
