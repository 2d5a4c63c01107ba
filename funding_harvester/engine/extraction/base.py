"""Shared types and helpers for the extraction strategies."""

from __future__ import annotations

import re
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from html import unescape
from typing import Any, Iterable, Pattern

from ...config import SourceConfig, StrategyName

_TAG_RE = re.compile(r"<[^>]+>")
_WS_RE = re.compile(r"\s+")


@dataclass(slots=True)
class RawCandidate:
    """Site-specific bag of extracted values, consumed by the normalizer."""

    data: dict[str, Any]
    strategy: str
    page_url: str | None = field(default=None)

    def get(self, path: str) -> Any:
        return lookup_path(self.data, path)


class ExtractionStrategy(ABC):
    """Turn one response body into raw candidates."""

    name: StrategyName

    @abstractmethod
    def extract(self, body: str, content_type: str, source: SourceConfig) -> list[RawCandidate]:
        """Return every candidate found; an empty list lets the cascade continue."""


def lookup_path(data: Any, path: str | None) -> Any:
    """Descend a dotted path through dicts and lists (``fields.items.0.date``)."""

    if not path:
        return data
    current = data
    for part in path.split("."):
        if isinstance(current, dict):
            current = current.get(part)
        elif isinstance(current, list) and part.lstrip("-").isdigit():
            index = int(part)
            if not -len(current) <= index < len(current):
                return None
            current = current[index]
        else:
            return None
        if current is None:
            return None
    return current


def clean_text(fragment: str | None) -> str:
    """Strip tags, unescape entities and collapse whitespace."""

    if not fragment:
        return ""
    text = unescape(_TAG_RE.sub(" ", fragment))
    return _WS_RE.sub(" ", text).strip()


def compile_patterns(patterns: Iterable[str]) -> list[Pattern[str]]:
    return [re.compile(pattern, re.IGNORECASE) for pattern in patterns]


def match_date(text: str, patterns: Iterable[Pattern[str]]) -> str | None:
    """First date-looking fragment of ``text``; group 1 when the pattern has one."""

    for pattern in patterns:
        match = pattern.search(text)
        if match:
            return (match.group(1) if pattern.groups else match.group(0)).strip()
    return None


__all__ = [
    "ExtractionStrategy",
    "RawCandidate",
    "clean_text",
    "compile_patterns",
    "lookup_path",
    "match_date",
]
