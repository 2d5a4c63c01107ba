"""Response bodies for the manual-trigger surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import structlog

from .errors import UnknownSource
from .orchestrator import Orchestrator

logger = structlog.get_logger("funding_harvester.trigger")


@dataclass(slots=True)
class TriggerResponse:
    status_code: int
    body: dict[str, Any]

    @property
    def ok(self) -> bool:
        return self.status_code == 200


def trigger_source(orchestrator: Orchestrator, name: str) -> TriggerResponse:
    """Run one source and map the outcome to an HTTP-style response."""

    try:
        result = orchestrator.run_source(name)
    except UnknownSource as exc:
        return TriggerResponse(404, {"success": False, "error": str(exc), "source": name})
    except Exception as exc:
        logger.error("trigger_source_failed", source=name, error=str(exc), exc_info=True)
        return TriggerResponse(500, {"success": False, "error": str(exc), "source": name})
    return TriggerResponse(200 if result.success else 500, result.to_dict())


def trigger_all(orchestrator: Orchestrator) -> TriggerResponse:
    """Run every source; individual failures stay inside the 200 body."""

    try:
        report = orchestrator.run_all()
    except Exception as exc:
        logger.error("trigger_all_failed", error=str(exc), exc_info=True)
        return TriggerResponse(500, {"success": False, "error": str(exc)})
    return TriggerResponse(200, report.to_dict())


__all__ = ["TriggerResponse", "trigger_all", "trigger_source"]
