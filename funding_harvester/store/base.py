"""Opportunity store contract used by the reconciler."""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime

from ..models import CanonicalOpportunity


class OpportunityStore(ABC):
    """Key-indexed persistence for opportunities.

    Implementations must enforce uniqueness of ``fingerprint`` and raise
    :class:`~funding_harvester.errors.DuplicateFingerprint` when an insert
    violates it; any other engine failure surfaces as
    :class:`~funding_harvester.errors.StoreError`.
    """

    @abstractmethod
    def find_id_by_fingerprint(self, fingerprint: str) -> int | None:
        """Return the id of the row holding ``fingerprint``, if any."""

    @abstractmethod
    def insert(self, opportunity: CanonicalOpportunity) -> int:
        """Persist the full record and return its id."""

    @abstractmethod
    def touch(self, record_id: int, seen_at: datetime) -> None:
        """Refresh ``last_seen_at`` of an existing row."""

    def search(
        self,
        site: str | None = None,
        query: str | None = None,
        limit: int = 50,
    ) -> list[CanonicalOpportunity]:
        raise NotImplementedError(f"{type(self).__name__} does not support listing")

    def close(self) -> None:
        """Release underlying resources."""


__all__ = ["OpportunityStore"]
