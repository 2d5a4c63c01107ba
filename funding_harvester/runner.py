"""Per-source pipeline: fetch → extract → normalize → reconcile."""

from __future__ import annotations

import time
from dataclasses import replace
from typing import Callable

import structlog

from .config import SourceConfig
from .engine import (
    ExtractionPipeline,
    Fetcher,
    FieldNormalizer,
    RawCandidate,
    ReconcileOutcome,
    Reconciler,
    fingerprint_of,
)
from .errors import FetchExhausted, ValidationFailure
from .events import EventSink, HarvestEvent, NullEventSink, Outcome, Stage
from .logging_conf import source_logger
from .models import SourceResult, utcnow


class SourceRunner:
    """Run the full pipeline for one source and summarise it.

    Pages are fetched in configuration order and their candidates processed
    strictly one after another. A page whose fetch is exhausted is skipped as
    long as another page of the same source succeeds. Nothing raised inside
    :meth:`run` escapes it; failures become ``SourceResult(success=False)``.
    """

    def __init__(
        self,
        source: SourceConfig,
        fetcher: Fetcher,
        reconciler: Reconciler,
        pipeline: ExtractionPipeline | None = None,
        normalizer: FieldNormalizer | None = None,
        events: EventSink | None = None,
        logger: structlog.BoundLogger | None = None,
        timer: Callable[[], float] = time.perf_counter,
    ) -> None:
        self.source = source
        self.fetcher = fetcher
        self.reconciler = reconciler
        self.pipeline = pipeline or ExtractionPipeline()
        self.normalizer = normalizer or FieldNormalizer()
        self.events = events or NullEventSink()
        self.logger = logger or source_logger(source.name)
        self._timer = timer

    def run(self) -> SourceResult:
        started = self._timer()
        result = SourceResult(source=self.source.name)
        self.logger.info("source_run_started", urls=len(self.source.urls))
        try:
            candidates = self._collect(result)
            result.total = len(candidates)
            seen: set[str] = set()
            for candidate in candidates:
                try:
                    self._process(candidate, seen, result)
                except Exception as exc:
                    result.errors += 1
                    self.logger.error("candidate_failed", error=str(exc), exc_info=True)
                    self._emit(
                        Stage.RECONCILE,
                        Outcome.FAILED,
                        detail={"error": str(exc), "strategy": candidate.strategy},
                    )
        except Exception as exc:
            elapsed = self._timer() - started
            self.logger.error("source_run_failed", error=str(exc), exc_info=True)
            self._emit(Stage.RUN, Outcome.FAILED, detail={"error": str(exc)})
            return SourceResult(
                source=self.source.name,
                success=False,
                error=str(exc),
                elapsed=elapsed,
            )

        result.elapsed = self._timer() - started
        result.finished_at = utcnow()
        counts = {
            "total": result.total,
            "new": result.new,
            "updated": result.updated,
            "skipped": result.skipped,
            "errors": result.errors,
        }
        self._emit(Stage.RECONCILE, Outcome.OK if result.total else Outcome.EMPTY, counts=counts)
        self._emit(
            Stage.RUN,
            Outcome.OK,
            counts=counts,
            detail={"elapsed_ms": result.execution_time_ms},
        )
        return result

    # ------------------------------------------------------------------
    def _collect(self, result: SourceResult) -> list[RawCandidate]:
        candidates: list[RawCandidate] = []
        failures: list[FetchExhausted] = []
        for url in self.source.urls:
            try:
                response = self.fetcher.fetch(url, headers=self.source.headers)
            except FetchExhausted as exc:
                failures.append(exc)
                self._emit(
                    Stage.FETCH,
                    Outcome.FAILED,
                    detail={"url": url, "attempts": exc.attempts, "error": str(exc)},
                )
                continue
            self._emit(
                Stage.FETCH,
                Outcome.OK,
                detail={"url": url, "status": response.status_code},
            )

            extraction = self.pipeline.extract(
                response.text, response.content_type, self.source, page_url=response.url
            )
            self._emit(
                Stage.EXTRACT,
                Outcome.EMPTY if extraction.empty else Outcome.OK,
                counts={"candidates": len(extraction.candidates)},
                detail={
                    "url": url,
                    "strategy": extraction.strategy,
                    "attempted": extraction.attempted,
                },
            )
            if extraction.strategy and result.strategy is None:
                result.strategy = extraction.strategy
            candidates.extend(extraction.candidates)

        if failures and len(failures) == len(self.source.urls):
            raise failures[-1]
        return candidates

    def _process(self, candidate: RawCandidate, seen: set[str], result: SourceResult) -> None:
        try:
            opportunity = self.normalizer.normalize(candidate, self.source)
        except ValidationFailure as exc:
            result.errors += 1
            self.logger.debug("candidate_rejected", reason=exc.reason, value=str(exc.value)[:120])
            self._emit(
                Stage.NORMALIZE,
                Outcome.FAILED,
                detail={"reason": exc.reason, "strategy": candidate.strategy},
            )
            return

        fingerprint = fingerprint_of(opportunity)
        if fingerprint in seen:
            result.skipped += 1
            self._emit(Stage.RECONCILE, Outcome.SKIPPED, detail={"fingerprint": fingerprint})
            return
        seen.add(fingerprint)

        outcome = self.reconciler.reconcile(replace(opportunity, fingerprint=fingerprint))
        if outcome is ReconcileOutcome.NEW:
            result.new += 1
        elif outcome is ReconcileOutcome.UPDATED:
            result.updated += 1
        else:
            result.errors += 1
            self._emit(Stage.RECONCILE, Outcome.FAILED, detail={"fingerprint": fingerprint})

    def _emit(
        self,
        stage: Stage,
        outcome: Outcome,
        counts: dict[str, int] | None = None,
        detail: dict | None = None,
    ) -> None:
        self.events.emit(
            HarvestEvent(
                source=self.source.name,
                stage=stage,
                outcome=outcome,
                counts=counts or {},
                detail=detail or {},
            )
        )


__all__ = ["SourceRunner"]
