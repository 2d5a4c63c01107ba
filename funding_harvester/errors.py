"""Exception hierarchy shared across the harvesting pipeline."""

from __future__ import annotations

from typing import Any


class HarvesterError(Exception):
    """Base class for all harvester failures."""

    def to_dict(self) -> dict[str, Any]:
        return {"error_type": self.__class__.__name__, "message": str(self)}


class FetchExhausted(HarvesterError):
    """Raised when every fetch attempt for a URL has failed."""

    def __init__(
        self,
        url: str,
        attempts: int,
        last_status: int | None = None,
        last_error: str | None = None,
    ) -> None:
        self.url = url
        self.attempts = attempts
        self.last_status = last_status
        self.last_error = last_error
        detail = f"status {last_status}" if last_status is not None else (last_error or "unknown error")
        super().__init__(f"Failed to fetch {url} after {attempts} attempts ({detail})")


class ValidationFailure(HarvesterError):
    """A normalized candidate did not pass the name/url gate."""

    def __init__(self, reason: str, value: Any = None) -> None:
        self.reason = reason
        self.value = value
        super().__init__(f"{reason}: {value!r}")


class StoreError(HarvesterError):
    """Lookup, insert or update against the opportunity store failed."""


class DuplicateFingerprint(StoreError):
    """Insert hit the unique fingerprint constraint."""

    def __init__(self, fingerprint: str) -> None:
        self.fingerprint = fingerprint
        super().__init__(f"Fingerprint already stored: {fingerprint}")


class UnknownSource(HarvesterError):
    """No configuration exists for the requested source."""

    def __init__(self, name: str) -> None:
        self.name = name
        super().__init__(f"Unknown source: {name}")


__all__ = [
    "DuplicateFingerprint",
    "FetchExhausted",
    "HarvesterError",
    "StoreError",
    "UnknownSource",
    "ValidationFailure",
]
