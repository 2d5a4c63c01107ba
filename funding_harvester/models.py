"""Records flowing out of the pipeline: opportunities, per-source results, reports."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone
from typing import Any, Iterable


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def isoformat_utc(value: datetime) -> str:
    return value.isoformat(timespec="milliseconds").replace("+00:00", "Z")


@dataclass(slots=True)
class CanonicalOpportunity:
    """One funding opportunity in the shared schema."""

    site: str
    name: str
    url: str
    deadline: str | None = None
    locale: str | None = None
    category: str | None = None
    description: str | None = None
    target_audience: str | None = None
    public_info: str | None = None
    fingerprint: str = ""
    created_at: datetime | None = None
    last_seen_at: datetime | None = None

    def to_dict(self) -> dict[str, Any]:
        payload = asdict(self)
        for key in ("created_at", "last_seen_at"):
            value = payload[key]
            payload[key] = isoformat_utc(value) if value is not None else None
        return payload


@dataclass(slots=True)
class SourceResult:
    """Outcome of one source run."""

    source: str
    total: int = 0
    new: int = 0
    updated: int = 0
    skipped: int = 0
    errors: int = 0
    elapsed: float = 0.0
    success: bool = True
    error: str | None = None
    strategy: str | None = None
    finished_at: datetime = field(default_factory=utcnow)

    @property
    def execution_time_ms(self) -> int:
        return int(round(self.elapsed * 1000))

    def to_dict(self) -> dict[str, Any]:
        if not self.success:
            return {
                "success": False,
                "error": self.error or "unknown error",
                "source": self.source,
                "execution_time_ms": self.execution_time_ms,
            }
        return {
            "success": True,
            "source": self.source,
            "total": self.total,
            "new": self.new,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": self.errors,
            "execution_time_ms": self.execution_time_ms,
            "timestamp": isoformat_utc(self.finished_at),
        }


@dataclass(slots=True)
class AggregateReport:
    """All source results of one orchestrated run plus field-wise totals."""

    results: list[SourceResult]
    success: bool = True
    timestamp: datetime = field(default_factory=utcnow)

    @classmethod
    def from_results(cls, results: Iterable[SourceResult]) -> "AggregateReport":
        return cls(results=list(results))

    @property
    def totals(self) -> dict[str, int]:
        return {
            "total": sum(result.total for result in self.results),
            "new": sum(result.new for result in self.results),
            "updated": sum(result.updated for result in self.results),
        }

    @property
    def failed_sources(self) -> list[str]:
        return [result.source for result in self.results if not result.success]

    def to_dict(self) -> dict[str, Any]:
        return {
            "success": self.success,
            "timestamp": isoformat_utc(self.timestamp),
            "scrapers": [result.to_dict() for result in self.results],
            "totals": self.totals,
        }


__all__ = [
    "AggregateReport",
    "CanonicalOpportunity",
    "SourceResult",
    "isoformat_utc",
    "utcnow",
]
