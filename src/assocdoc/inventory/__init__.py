"""Inventory gatherers."""

from assocdoc.inventory.gatherer import CollectingGatherer, GatherContext, Gatherer, GatherResult
from assocdoc.inventory.model import GathererConfig, Item, ServiceData, StopType
from assocdoc.inventory.service import ServiceGatherer

__all__ = [
    "CollectingGatherer",
    "GatherContext",
    "Gatherer",
    "GatherResult",
    "GathererConfig",
    "Item",
    "ServiceData",
    "ServiceGatherer",
    "StopType",
]
