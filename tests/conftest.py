"""Shared fixtures: config builders, temporary store, scripted fetcher."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from funding_harvester.config import (
    ConfigLocator,
    ConfigRepository,
    DomStrategyConfig,
    FetchSettings,
    GlobalConfig,
    RegexStrategyConfig,
    SourceConfig,
)
from funding_harvester.engine import FetchResponse
from funding_harvester.errors import FetchExhausted
from funding_harvester.events import HarvestEvent
from funding_harvester.store import SQLiteOpportunityStore

LISTING_HTML = """
<html><body>
  <div class="edital-card">
    <h3>Chamada Pública de Inovação 01/2025</h3>
    <a href="/editais/inovacao-01">Ver edital</a>
    <span>Inscrições até 25/12/2025</span>
  </div>
  <div class="edital-card">
    <h3>Programa de Bolsas de Pesquisa</h3>
    <a href="https://example.org/editais/bolsas">Detalhes</a>
    <span>Prazo: 2026-01-15</span>
  </div>
  <div class="edital-card">
    <h3>Edital Energia Limpa</h3>
    <a href="/editais/energia">Saiba mais</a>
    <span>Encerra em 10 de mar. de 2026</span>
  </div>
</body></html>
"""


class FakeFetcher:
    """Serve canned pages per URL; an exception instance is raised instead."""

    def __init__(self, pages: dict[str, Any]) -> None:
        self.pages = pages
        self.calls: list[tuple[str, dict[str, str] | None]] = []
        self.closed = False

    def fetch(self, url: str, headers: dict[str, str] | None = None) -> FetchResponse:
        self.calls.append((url, headers))
        page = self.pages.get(url)
        if page is None:
            raise FetchExhausted(url, attempts=3, last_status=404)
        if isinstance(page, BaseException):
            raise page
        if isinstance(page, FetchResponse):
            return page
        return FetchResponse(
            url=url,
            status_code=200,
            text=page,
            headers={"content-type": "text/html; charset=utf-8"},
        )

    def close(self) -> None:
        self.closed = True


class RecordingEventSink:
    def __init__(self) -> None:
        self.events: list[HarvestEvent] = []

    def emit(self, event: HarvestEvent) -> None:
        self.events.append(event)

    def of(self, stage: str) -> list[HarvestEvent]:
        return [event for event in self.events if event.stage.value == stage]


@pytest.fixture
def fetch_settings() -> FetchSettings:
    return FetchSettings()


@pytest.fixture
def sample_global_config(tmp_path: Path) -> GlobalConfig:
    return GlobalConfig(store_path=tmp_path / "opportunities.db", max_workers=4)


@pytest.fixture
def sample_source_config() -> Callable[..., SourceConfig]:
    def _builder(**overrides: Any) -> SourceConfig:
        base: dict[str, Any] = {
            "name": "example",
            "locale": "BR",
            "base_url": "https://example.org",
            "urls": ["https://example.org/editais"],
            "strategies": ["dom", "regex"],
            "dom": DomStrategyConfig(card_selectors=[".missing-card", ".edital-card"]),
            "regex": RegexStrategyConfig(class_keywords=["edital"]),
        }
        base.update(overrides)
        return SourceConfig(**base)

    return _builder


@pytest.fixture
def store(tmp_path: Path) -> Iterable[SQLiteOpportunityStore]:
    opportunity_store = SQLiteOpportunityStore(tmp_path / "store" / "opportunities.db")
    yield opportunity_store
    opportunity_store.close()


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("FUNDING_HARVESTER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator, builtin_dir=None)
    yield repository


@pytest.fixture
def fake_fetcher() -> type[FakeFetcher]:
    return FakeFetcher


@pytest.fixture
def event_sink() -> RecordingEventSink:
    return RecordingEventSink()


@pytest.fixture
def listing_html() -> str:
    return LISTING_HTML
