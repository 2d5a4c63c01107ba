"""Insert-or-touch reconciliation against the opportunity store."""

from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from enum import Enum
from typing import Callable

import structlog

from ..errors import DuplicateFingerprint, StoreError
from ..models import CanonicalOpportunity, utcnow
from ..store import OpportunityStore
from .fingerprint import fingerprint_of


class ReconcileOutcome(str, Enum):
    NEW = "new"
    UPDATED = "updated"
    ERROR = "error"


class Reconciler:
    """Persist first sightings and refresh ``last_seen_at`` on repeats.

    Stored fields are never overwritten. A concurrent insert of the same
    fingerprint is absorbed by the store's unique constraint and handled as a
    repeat sighting.
    """

    def __init__(
        self,
        store: OpportunityStore,
        clock: Callable[[], datetime] = utcnow,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.store = store
        self.clock = clock
        self.logger = logger or structlog.get_logger("funding_harvester.reconciler")

    def reconcile(self, opportunity: CanonicalOpportunity) -> ReconcileOutcome:
        fingerprint = opportunity.fingerprint or fingerprint_of(opportunity)
        now = self.clock()
        try:
            existing = self.store.find_id_by_fingerprint(fingerprint)
            if existing is not None:
                self.store.touch(existing, now)
                return ReconcileOutcome.UPDATED
            record = replace(
                opportunity, fingerprint=fingerprint, created_at=now, last_seen_at=now
            )
            try:
                self.store.insert(record)
            except DuplicateFingerprint:
                self.logger.info("reconcile_insert_race", fingerprint=fingerprint)
                return self._touch_after_race(fingerprint, now)
            return ReconcileOutcome.NEW
        except StoreError as exc:
            self.logger.error(
                "reconcile_failed",
                site=opportunity.site,
                fingerprint=fingerprint,
                error=str(exc),
            )
            return ReconcileOutcome.ERROR

    def _touch_after_race(self, fingerprint: str, now: datetime) -> ReconcileOutcome:
        existing = self.store.find_id_by_fingerprint(fingerprint)
        if existing is None:
            raise StoreError(f"Fingerprint {fingerprint} reported duplicate but not found")
        self.store.touch(existing, now)
        return ReconcileOutcome.UPDATED


__all__ = ["ReconcileOutcome", "Reconciler"]
