"""Inventory gatherer interface and the collecting base implementation."""

import threading
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, List, Optional, Protocol

import structlog

from assocdoc.inventory.model import CAPTURE_TIME_FORMAT, GathererConfig, Item, StopType

logger = structlog.get_logger(__name__)


@dataclass
class GatherContext:
    """What a collection function may consult while it runs."""
    stop_event: threading.Event = field(default_factory=threading.Event)

    def stop_requested(self) -> bool:
        return self.stop_event.is_set()


@dataclass
class GatherResult:
    """Items of one run plus the collection function's error, if any.

    The error is carried, not raised: ``items`` always holds exactly one Item
    (with whatever content was gathered), so callers must check ``error``
    independently.
    """
    items: List[Item]
    error: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.error is None


CollectFunction = Callable[[GatherContext, GathererConfig], Any]
Clock = Callable[[], datetime]


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Gatherer(Protocol):
    """Capability set shared by all inventory gatherers."""

    def name(self) -> str:
        ...

    def run(self, context: GatherContext, config: GathererConfig) -> GatherResult:
        ...

    def request_stop(self, stop_type: StopType) -> None:
        ...


class CollectingGatherer:
    """Gatherer that wraps an injected collection function.

    Args:
        name: Inventory type name, e.g. "AWS:WindowsService"
        schema_version: Schema version stamped on every Item
        collect: Collection function ``(context, config) -> content``
        clock: Returns the current time; defaults to UTC now
    """

    def __init__(
        self,
        name: str,
        schema_version: str,
        collect: CollectFunction,
        clock: Optional[Clock] = None,
    ):
        self._name = name
        self.schema_version = schema_version
        self._collect = collect
        self._clock = clock or _utc_now
        self._active_context: Optional[GatherContext] = None

    def name(self) -> str:
        return self._name

    def run(self, context: Optional[GatherContext], config: GathererConfig) -> GatherResult:
        """Collect once and wrap the content in a single Item."""
        context = context or GatherContext()
        self._active_context = context

        capture_time = self._clock().astimezone(timezone.utc).strftime(CAPTURE_TIME_FORMAT)
        content: Any = None
        error: Optional[Exception] = None
        try:
            content = self._collect(context, config)
        except Exception as e:
            # Passed back to the caller in GatherResult.error, unchanged
            logger.warning("gatherer_collect_failed", gatherer=self._name, error=str(e))
            error = e
        finally:
            self._active_context = None

        item = Item(
            name=self._name,
            schema_version=self.schema_version,
            content=content if content is not None else [],
            capture_time=capture_time,
        )
        return GatherResult(items=[item], error=error)

    def request_stop(self, stop_type: StopType = StopType.SOFT) -> None:
        """Best-effort, non-blocking stop signal for the run in progress.

        A running collection is not preempted, and later runs are unaffected.
        """
        logger.info("gatherer_stop_requested", gatherer=self._name, stop_type=stop_type.value)
        context = self._active_context
        if context is not None:
            context.stop_event.set()

    @property
    def stop_requested(self) -> bool:
        """True while the run in progress has been asked to stop."""
        context = self._active_context
        return context is not None and context.stop_requested()
