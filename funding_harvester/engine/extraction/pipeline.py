"""Ordered cascade of extraction strategies."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

import structlog

from ...config import SourceConfig, StrategyName
from .api import StructuredApiStrategy
from .base import ExtractionStrategy, RawCandidate
from .dom import DomQueryStrategy
from .embedded import EmbeddedJsonStrategy
from .regex import RegexFallbackStrategy


@dataclass
class ExtractionResult:
    candidates: list[RawCandidate] = field(default_factory=list)
    strategy: str | None = None
    attempted: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.candidates


def default_strategies() -> dict[StrategyName, ExtractionStrategy]:
    return {
        StrategyName.API: StructuredApiStrategy(),
        StrategyName.EMBEDDED_JSON: EmbeddedJsonStrategy(),
        StrategyName.DOM: DomQueryStrategy(),
        StrategyName.REGEX: RegexFallbackStrategy(),
    }


class ExtractionPipeline:
    """Run the source's strategies in order; the first non-empty result wins.

    A strategy that chokes on malformed content (ValueError, TypeError,
    KeyError, IndexError) counts as producing nothing. When every strategy
    comes back empty the result is empty, which is a valid zero-item outcome.
    """

    def __init__(
        self,
        strategies: Mapping[StrategyName, ExtractionStrategy] | None = None,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.strategies = dict(strategies) if strategies is not None else default_strategies()
        self.logger = logger or structlog.get_logger("funding_harvester.extraction")

    def extract(
        self,
        body: str,
        content_type: str,
        source: SourceConfig,
        page_url: str | None = None,
    ) -> ExtractionResult:
        result = ExtractionResult()
        for name in source.configured_strategies():
            strategy = self.strategies.get(name)
            if strategy is None:
                continue
            result.attempted.append(name.value)
            try:
                candidates = strategy.extract(body, content_type, source)
            except (ValueError, TypeError, KeyError, IndexError) as exc:
                self.logger.warning(
                    "extraction_strategy_failed",
                    source=source.name,
                    strategy=name.value,
                    error=str(exc),
                )
                continue
            if candidates:
                for candidate in candidates:
                    candidate.page_url = page_url
                result.candidates = candidates
                result.strategy = name.value
                return result
            self.logger.debug("extraction_strategy_empty", source=source.name, strategy=name.value)
        return result


__all__ = ["ExtractionPipeline", "ExtractionResult", "default_strategies"]
