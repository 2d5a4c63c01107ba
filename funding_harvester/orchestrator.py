"""Orchestrator running every configured source concurrently."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from typing import Callable, Iterable

import structlog

from .config import ConfigRepository, GlobalConfig, SourceConfig
from .engine import ExtractionPipeline, Fetcher, FieldNormalizer, Reconciler
from .events import EventSink, StructlogEventSink
from .infra import UserAgentPool
from .logging_conf import source_logger
from .models import AggregateReport, SourceResult
from .runner import SourceRunner
from .store import OpportunityStore, SQLiteOpportunityStore

FetcherFactory = Callable[[SourceConfig], Fetcher]


class Orchestrator:
    """Central coordinator fanning sources out to a thread pool."""

    def __init__(
        self,
        config_repository: ConfigRepository,
        store: OpportunityStore,
        events: EventSink | None = None,
        fetcher_factory: FetcherFactory | None = None,
        max_workers: int | None = None,
    ) -> None:
        self.config_repository = config_repository
        self.global_config: GlobalConfig = config_repository.load_global_config()
        self.store = store
        self.events = events or StructlogEventSink()
        self.fetcher_factory = fetcher_factory or self._default_fetcher
        self.max_workers = max_workers or self.global_config.max_workers
        self.ua_pool = UserAgentPool(self.global_config.fetch.user_agents)
        self.pipeline = ExtractionPipeline()
        self.normalizer = FieldNormalizer()
        self.reconciler = Reconciler(store)
        self.logger = structlog.get_logger("funding_harvester.orchestrator").bind(
            component="orchestrator"
        )

    # ------------------------------------------------------------------
    def run_source(self, source_name: str) -> SourceResult:
        """Run one source by name; raises :class:`UnknownSource` if absent."""

        source = self.config_repository.load_source(source_name)
        return self._run(source)

    def run_all(self, names: Iterable[str] | None = None) -> AggregateReport:
        """Run the given (default: every enabled) source and wait for all of them.

        A failed source shows up as a failed entry; it never stops the others
        and never flips the report's ``success`` flag.
        """

        if names is None:
            sources = self.config_repository.list_sources()
        else:
            sources = [self.config_repository.load_source(name) for name in names]
        if not sources:
            self.logger.warning("run_all_no_sources")
            return AggregateReport.from_results([])

        self.logger.info("run_all_started", sources=[source.name for source in sources])
        workers = min(self.max_workers, len(sources))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="SourceRunner") as executor:
            futures = [executor.submit(self._run, source) for source in sources]
            results: list[SourceResult] = []
            for source, future in zip(sources, futures):
                try:
                    results.append(future.result())
                except Exception as exc:
                    self.logger.error("source_future_failed", source=source.name, error=str(exc))
                    results.append(SourceResult(source=source.name, success=False, error=str(exc)))

        report = AggregateReport.from_results(results)
        self.logger.info(
            "run_all_finished",
            failed=report.failed_sources,
            **report.totals,
        )
        return report

    # ------------------------------------------------------------------
    def _run(self, source: SourceConfig) -> SourceResult:
        fetcher = self.fetcher_factory(source)
        try:
            runner = SourceRunner(
                source,
                fetcher=fetcher,
                reconciler=self.reconciler,
                pipeline=self.pipeline,
                normalizer=self.normalizer,
                events=self.events,
            )
            return runner.run()
        finally:
            fetcher.close()

    def _default_fetcher(self, source: SourceConfig) -> Fetcher:
        return Fetcher(
            self.global_config.fetch,
            ua_pool=self.ua_pool,
            logger=source_logger(source.name),
        )


def build_orchestrator(
    config_repository: ConfigRepository | None = None,
    events: EventSink | None = None,
) -> Orchestrator:
    """Wire the default SQLite store and config repository into an orchestrator."""

    repository = config_repository or ConfigRepository()
    store = SQLiteOpportunityStore(repository.store_path())
    return Orchestrator(repository, store, events=events)


__all__ = ["FetcherFactory", "Orchestrator", "build_orchestrator"]
