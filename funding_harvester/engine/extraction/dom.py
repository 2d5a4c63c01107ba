"""CSS-selector based card extraction."""

from __future__ import annotations

from typing import Iterable

from selectolax.parser import HTMLParser, Node

from ...config import DomStrategyConfig, SourceConfig, StrategyName
from .base import ExtractionStrategy, RawCandidate, compile_patterns, match_date


class DomQueryStrategy(ExtractionStrategy):
    """Locate listing cards with fallback selectors and read title, link and date."""

    name = StrategyName.DOM

    def extract(self, body: str, content_type: str, source: SourceConfig) -> list[RawCandidate]:
        config = source.dom
        if config is None or not body.strip():
            return []
        tree = HTMLParser(body)
        cards = self.find_cards(tree, config.card_selectors)
        if not cards:
            return []
        patterns = compile_patterns(config.date_patterns)
        candidates: list[RawCandidate] = []
        for card in cards:
            data = self._read_card(card, config)
            if data is None:
                continue
            data["deadline"] = match_date(data["text"], patterns)
            candidates.append(RawCandidate(data=data, strategy=self.name.value))
        return candidates

    @staticmethod
    def find_cards(tree: HTMLParser, selectors: Iterable[str]) -> list[Node]:
        """Nodes for the first selector that matches anything."""

        for selector in selectors:
            nodes = tree.css(selector)
            if nodes:
                return list(nodes)
        return []

    def _read_card(self, card: Node, config: DomStrategyConfig) -> dict[str, str] | None:
        title_node = self._first(card, config.title_selectors)
        link_node = card if card.tag == "a" else card.css_first(config.link_selector)
        if title_node is None or link_node is None:
            return None
        title = title_node.text(separator=" ", strip=True)
        href = (link_node.attributes.get("href") or "").strip()
        if not title or not href or href.startswith(("javascript:", "#")):
            return None
        data = {
            "title": title,
            "link": href,
            "text": card.text(separator=" ", strip=True),
        }
        for field, selector in config.field_selectors.items():
            node = card.css_first(selector)
            if node is not None:
                value = node.text(separator=" ", strip=True)
                if value:
                    data[field] = value
        return data

    @staticmethod
    def _first(card: Node, selectors: Iterable[str]) -> Node | None:
        for selector in selectors:
            node = card.css_first(selector)
            if node is not None:
                return node
        return None


__all__ = ["DomQueryStrategy"]
