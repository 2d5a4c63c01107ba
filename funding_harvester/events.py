"""Structured run events handed to whatever observability sink is plugged in."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from enum import Enum
from typing import Any, Iterable, Protocol

import structlog


class Stage(str, Enum):
    FETCH = "fetch"
    EXTRACT = "extract"
    NORMALIZE = "normalize"
    RECONCILE = "reconcile"
    RUN = "run"


class Outcome(str, Enum):
    OK = "ok"
    EMPTY = "empty"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(slots=True)
class HarvestEvent:
    """One observation about a source run."""

    source: str
    stage: Stage
    outcome: Outcome
    counts: dict[str, int] = field(default_factory=dict)
    detail: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        payload["stage"] = self.stage.value
        payload["outcome"] = self.outcome.value
        return payload


class EventSink(Protocol):
    """Receiver of harvest events."""

    def emit(self, event: HarvestEvent) -> None:
        """Handle a single event. Must not raise."""


class NullEventSink:
    def emit(self, event: HarvestEvent) -> None:
        return


class StructlogEventSink:
    """Forward events to structlog, failures at warning level."""

    def __init__(self, logger: structlog.BoundLogger | None = None) -> None:
        self.logger = logger or structlog.get_logger("funding_harvester.events")

    def emit(self, event: HarvestEvent) -> None:
        log = self.logger.warning if event.outcome is Outcome.FAILED else self.logger.info
        log(
            f"{event.stage.value}_{event.outcome.value}",
            source=event.source,
            **event.counts,
            **event.detail,
        )


class CompositeEventSink:
    """Fan an event out to several sinks."""

    def __init__(self, sinks: Iterable[EventSink]) -> None:
        self.sinks = list(sinks)

    def emit(self, event: HarvestEvent) -> None:
        for sink in self.sinks:
            sink.emit(event)


__all__ = [
    "CompositeEventSink",
    "EventSink",
    "HarvestEvent",
    "NullEventSink",
    "Outcome",
    "Stage",
    "StructlogEventSink",
]
