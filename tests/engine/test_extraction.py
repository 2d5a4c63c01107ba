from __future__ import annotations

import json

import pytest

from funding_harvester.config import (
    ApiStrategyConfig,
    DomStrategyConfig,
    EmbeddedJsonConfig,
    OpenRule,
    RegexStrategyConfig,
    StrategyName,
)
from funding_harvester.engine.extraction import (
    DomQueryStrategy,
    EmbeddedJsonStrategy,
    ExtractionPipeline,
    RawCandidate,
    RegexFallbackStrategy,
    StructuredApiStrategy,
    lookup_path,
)
from funding_harvester.engine.extraction.embedded import balanced_json

API_PAYLOAD = {
    "data": [
        {"id": 10, "fields": {"titulo": "Chamada 01/2025", "status": "Abertas ", "ativo": "SIM"}},
        {"id": 11, "fields": {"titulo": "Chamada 02/2024", "status": "encerradas", "ativo": "sim"}},
        {"id": 12, "fields": {"titulo": "Chamada 03/2025", "status": "abertas", "ativo": "nao"}},
        "not-a-dict",
    ]
}


@pytest.fixture
def api_source(sample_source_config):
    return sample_source_config(
        strategies=["api"],
        api=ApiStrategyConfig(
            items_path="data",
            open_when=[
                OpenRule(field="fields.status", equals="abertas"),
                OpenRule(field="fields.ativo", equals="sim"),
            ],
        ),
    )


class SpyStrategy:
    def __init__(self, result=None, error: Exception | None = None) -> None:
        self.result = result or []
        self.error = error
        self.calls = 0

    def extract(self, body, content_type, source):
        self.calls += 1
        if self.error is not None:
            raise self.error
        return list(self.result)


def test_lookup_path_walks_dicts_and_list_indices() -> None:
    data = {"fields": {"submissao": [{"fim_date": "2025-12-25"}]}}
    assert lookup_path(data, "fields.submissao.0.fim_date") == "2025-12-25"
    assert lookup_path(data, "fields.submissao.3.fim_date") is None
    assert lookup_path(data, "fields.missing.value") is None
    assert lookup_path(data, None) is data


def test_api_strategy_keeps_only_open_items(api_source) -> None:
    candidates = StructuredApiStrategy().extract(
        json.dumps(API_PAYLOAD), "application/json", api_source
    )
    assert [candidate.data["id"] for candidate in candidates] == [10]
    assert candidates[0].strategy == "api"
    assert candidates[0].get("fields.titulo") == "Chamada 01/2025"


def test_api_strategy_treats_malformed_or_html_body_as_empty(api_source) -> None:
    strategy = StructuredApiStrategy()
    assert strategy.extract('{"data": [', "application/json", api_source) == []
    assert strategy.extract("<html></html>", "text/html", api_source) == []


def test_api_strategy_detects_json_without_content_type(sample_source_config) -> None:
    source = sample_source_config(strategies=["api"], api=ApiStrategyConfig())
    candidates = StructuredApiStrategy().extract('  [{"title": "Edital A"}]', "", source)
    assert len(candidates) == 1


def test_balanced_json_ignores_braces_inside_strings() -> None:
    text = 'x = {"a": "}{", "b": [1, {"c": "\\"}"}]}; trailing'
    raw = balanced_json(text, 3)
    assert json.loads(raw) == {"a": "}{", "b": [1, {"c": '"}'}]}
    assert balanced_json("x = 42", 3) is None
    assert balanced_json('x = {"open": true', 3) is None


def test_embedded_json_strategy_reads_items_from_global_state(sample_source_config) -> None:
    html = """
    <script>window.__INITIAL_STATE__ = {"chamadas": [
        {"title": "Chamada {especial}", "link": "/c/1"},
        3,
        {"title": "Outra chamada", "link": "/c/2"}
    ]};</script>
    """
    source = sample_source_config(
        strategies=["embedded_json"],
        embedded_json=EmbeddedJsonConfig(
            patterns=[r"window\.__NUXT__\s*=\s*", r"window\.__INITIAL_STATE__\s*=\s*"],
            path="chamadas",
        ),
    )
    candidates = EmbeddedJsonStrategy().extract(html, "text/html", source)
    assert [candidate.data["title"] for candidate in candidates] == [
        "Chamada {especial}",
        "Outra chamada",
    ]


def test_dom_strategy_uses_first_matching_selector(sample_source_config, listing_html) -> None:
    candidates = DomQueryStrategy().extract(listing_html, "text/html", sample_source_config())

    assert [candidate.data["title"] for candidate in candidates] == [
        "Chamada Pública de Inovação 01/2025",
        "Programa de Bolsas de Pesquisa",
        "Edital Energia Limpa",
    ]
    assert [candidate.data["deadline"] for candidate in candidates] == [
        "25/12/2025",
        "2026-01-15",
        "10 de mar. de 2026",
    ]
    assert candidates[0].data["link"] == "/editais/inovacao-01"


def test_dom_strategy_skips_cards_without_title_or_link(sample_source_config) -> None:
    html = """
    <ul>
      <li class="item"><h4>Sem link aqui</h4></li>
      <li class="item"><a href="/only-link">x</a></li>
      <li class="item"><h4>Link inválido</h4><a href="javascript:void(0)">x</a></li>
      <li class="item"><h4>Edital completo</h4><a href="/ok">ver</a>
          <span class="area">Saúde</span></li>
    </ul>
    """
    source = sample_source_config(
        dom=DomStrategyConfig(card_selectors=["li.item"], field_selectors={"area": ".area"})
    )
    candidates = DomQueryStrategy().extract(html, "text/html", source)
    assert len(candidates) == 1
    assert candidates[0].data["title"] == "Edital completo"
    assert candidates[0].data["area"] == "Saúde"
    assert candidates[0].data["deadline"] is None


def test_regex_strategy_extracts_from_containers(sample_source_config) -> None:
    html = """
    <div class="box card-edital destaque">
      <h2>Edital P&amp;D <em>Petróleo</em></h2>
      <p>Inscrições até 30/06/2026</p>
      <a class="btn" href="/editais/pd?x=1&amp;y=2">Ver</a>
    </div>
    <div class="card-edital"><h2>Edital P&amp;D <em>Petróleo</em></h2><a href="/editais/pd?x=1&amp;y=2">dup</a></div>
    <div class="card-edital"><p>sem título</p><a href="/x">x</a></div>
    """
    candidates = RegexFallbackStrategy().extract(html, "text/html", sample_source_config())

    assert len(candidates) == 1
    data = candidates[0].data
    assert data["title"] == "Edital P&D Petróleo"
    assert data["link"] == "/editais/pd?x=1&y=2"
    assert data["deadline"] == "30/06/2026"


def test_regex_strategy_accepts_explicit_container_patterns(sample_source_config) -> None:
    source = sample_source_config(
        regex=RegexStrategyConfig(container_patterns=[r"<section>(?P<body>.*?)</section>"])
    )
    html = '<section><h3>Chamada Aberta</h3><a href="/a">a</a></section>'
    candidates = RegexFallbackStrategy().extract(html, "text/html", source)
    assert candidates[0].data["title"] == "Chamada Aberta"


def test_pipeline_first_non_empty_strategy_wins(sample_source_config) -> None:
    source = sample_source_config(
        strategies=["api", "embedded_json", "dom", "regex"],
        api=ApiStrategyConfig(),
        embedded_json=EmbeddedJsonConfig(patterns=["x"]),
    )
    api = SpyStrategy()
    embedded = SpyStrategy([RawCandidate(data={"title": "A"}, strategy="embedded_json")])
    dom = SpyStrategy([RawCandidate(data={"title": "B"}, strategy="dom")])
    regex = SpyStrategy()
    pipeline = ExtractionPipeline(
        {
            StrategyName.API: api,
            StrategyName.EMBEDDED_JSON: embedded,
            StrategyName.DOM: dom,
            StrategyName.REGEX: regex,
        }
    )

    result = pipeline.extract("<html>", "text/html", source, page_url="https://example.org/p")

    assert result.strategy == "embedded_json"
    assert result.attempted == ["api", "embedded_json"]
    assert [candidate.data["title"] for candidate in result.candidates] == ["A"]
    assert result.candidates[0].page_url == "https://example.org/p"
    assert dom.calls == 0 and regex.calls == 0


def test_pipeline_api_hit_short_circuits_the_cascade(sample_source_config) -> None:
    source = sample_source_config(
        strategies=["api", "embedded_json", "dom", "regex"],
        api=ApiStrategyConfig(),
        embedded_json=EmbeddedJsonConfig(patterns=["x"]),
    )
    api = SpyStrategy([RawCandidate(data={"title": "Via API"}, strategy="api")])
    embedded = SpyStrategy([RawCandidate(data={"title": "A"}, strategy="embedded_json")])
    dom = SpyStrategy([RawCandidate(data={"title": "B"}, strategy="dom")])
    regex = SpyStrategy([RawCandidate(data={"title": "C"}, strategy="regex")])
    pipeline = ExtractionPipeline(
        {
            StrategyName.API: api,
            StrategyName.EMBEDDED_JSON: embedded,
            StrategyName.DOM: dom,
            StrategyName.REGEX: regex,
        }
    )

    result = pipeline.extract('[{"title": "Via API"}]', "application/json", source)

    assert result.strategy == "api"
    assert result.attempted == ["api"]
    assert [candidate.data["title"] for candidate in result.candidates] == ["Via API"]
    assert api.calls == 1
    assert embedded.calls == 0 and dom.calls == 0 and regex.calls == 0


def test_pipeline_skips_strategies_without_config(sample_source_config) -> None:
    source = sample_source_config(strategies=["api", "dom"])
    api = SpyStrategy([RawCandidate(data={}, strategy="api")])
    dom = SpyStrategy()
    pipeline = ExtractionPipeline({StrategyName.API: api, StrategyName.DOM: dom})

    result = pipeline.extract("", "text/html", source)

    assert api.calls == 0
    assert result.attempted == ["dom"]
    assert result.empty and result.strategy is None


def test_pipeline_treats_parse_errors_as_empty(sample_source_config, listing_html) -> None:
    broken = SpyStrategy(error=ValueError("bad markup"))
    pipeline = ExtractionPipeline(
        {StrategyName.DOM: broken, StrategyName.REGEX: RegexFallbackStrategy()}
    )
    result = pipeline.extract(listing_html, "text/html", sample_source_config())

    assert broken.calls == 1
    assert result.strategy == "regex"
    assert len(result.candidates) == 3


def test_pipeline_all_empty_is_a_valid_result(sample_source_config) -> None:
    result = ExtractionPipeline().extract("<html><body></body></html>", "text/html", sample_source_config())
    assert result.candidates == []
    assert result.attempted == ["dom", "regex"]
