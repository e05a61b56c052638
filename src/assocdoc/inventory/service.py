"""Windows service inventory gatherer."""

import json
import subprocess
import sys
from typing import Any, List, Optional

from assocdoc.inventory.gatherer import Clock, CollectFunction, CollectingGatherer, GatherContext
from assocdoc.inventory.model import GathererConfig, ServiceData

GATHERER_NAME = "AWS:WindowsService"
SCHEMA_VERSION_OF_SERVICE_GATHERER = "1.0"

_POWERSHELL_QUERY = (
    "Get-Service | Select-Object Name, DisplayName, "
    "@{n='Status';e={$_.Status.ToString()}}, "
    "@{n='DependentServices';e={($_.DependentServices | ForEach-Object { $_.Name }) -join ','}}, "
    "@{n='ServicesDependedOn';e={($_.ServicesDependedOn | ForEach-Object { $_.Name }) -join ','}}, "
    "@{n='ServiceType';e={$_.ServiceType.ToString()}}, "
    "@{n='StartType';e={$_.StartType.ToString()}} | ConvertTo-Json -Compress"
)


def parse_service_output(output: str) -> List[ServiceData]:
    """Parse ConvertTo-Json output (an object for one service, a list otherwise)."""
    if not output.strip():
        return []
    decoded: Any = json.loads(output)
    if isinstance(decoded, dict):
        decoded = [decoded]
    return [ServiceData.model_validate(entry) for entry in decoded]


def collect_service_data(context: GatherContext, config: GathererConfig) -> List[ServiceData]:
    """Query installed Windows services; other platforms have none."""
    if sys.platform != "win32" or context.stop_requested():
        return []
    completed = subprocess.run(
        ["powershell", "-NoProfile", "-NonInteractive", "-Command", _POWERSHELL_QUERY],
        capture_output=True,
        text=True,
        check=True,
    )
    return parse_service_output(completed.stdout)


class ServiceGatherer(CollectingGatherer):
    """Gatherer for the AWS:WindowsService inventory type."""

    def __init__(
        self,
        collect: CollectFunction = collect_service_data,
        clock: Optional[Clock] = None,
    ):
        super().__init__(
            name=GATHERER_NAME,
            schema_version=SCHEMA_VERSION_OF_SERVICE_GATHERER,
            collect=collect,
            clock=clock,
        )
