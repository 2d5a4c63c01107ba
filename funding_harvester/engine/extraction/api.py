"""Structured JSON API extraction."""

from __future__ import annotations

import json
from typing import Any, Iterable

from ...config import OpenRule, SourceConfig, StrategyName
from .base import ExtractionStrategy, RawCandidate, lookup_path


class StructuredApiStrategy(ExtractionStrategy):
    """Parse a typed JSON endpoint and keep the items that are still open."""

    name = StrategyName.API

    def extract(self, body: str, content_type: str, source: SourceConfig) -> list[RawCandidate]:
        config = source.api
        if config is None or not self._looks_like_json(body, content_type):
            return []
        try:
            payload = json.loads(body)
        except json.JSONDecodeError:
            return []
        items = lookup_path(payload, config.items_path)
        if not isinstance(items, list):
            return []
        return [
            RawCandidate(data=item, strategy=self.name.value)
            for item in items
            if isinstance(item, dict) and self.is_open(item, config.open_when)
        ]

    @staticmethod
    def is_open(item: dict[str, Any], rules: Iterable[OpenRule]) -> bool:
        """Every rule must match, compared as trimmed case-insensitive text."""

        for rule in rules:
            value = lookup_path(item, rule.field)
            text = "" if value is None else str(value)
            if text.strip().lower() != rule.equals.strip().lower():
                return False
        return True

    @staticmethod
    def _looks_like_json(body: str, content_type: str) -> bool:
        if "json" in (content_type or "").lower():
            return True
        return body.lstrip()[:1] in ("{", "[")


__all__ = ["StructuredApiStrategy"]
