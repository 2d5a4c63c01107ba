"""Extraction of JSON state embedded in page scripts."""

from __future__ import annotations

import json
import re

from ...config import SourceConfig, StrategyName
from .base import ExtractionStrategy, RawCandidate, lookup_path

_OPENERS = {"{": "}", "[": "]"}


def balanced_json(text: str, start: int) -> str | None:
    """Return the JSON object or array beginning at ``start`` (after whitespace).

    Braces inside string literals are ignored; ``None`` when the value is not
    an object/array or is never closed.
    """

    pos = start
    while pos < len(text) and text[pos].isspace():
        pos += 1
    if pos >= len(text) or text[pos] not in _OPENERS:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(pos, len(text)):
        ch = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue
        if ch == '"':
            in_string = True
        elif ch in "{[":
            depth += 1
        elif ch in "}]":
            depth -= 1
            if depth == 0:
                return text[pos : index + 1]
    return None


class EmbeddedJsonStrategy(ExtractionStrategy):
    """Find known global assignments in HTML and read the item list from them."""

    name = StrategyName.EMBEDDED_JSON

    def extract(self, body: str, content_type: str, source: SourceConfig) -> list[RawCandidate]:
        config = source.embedded_json
        if config is None:
            return []
        for pattern in config.patterns:
            for match in re.finditer(pattern, body):
                raw = balanced_json(body, match.end())
                if raw is None:
                    continue
                try:
                    payload = json.loads(raw)
                except json.JSONDecodeError:
                    continue
                items = lookup_path(payload, config.path)
                if not isinstance(items, list):
                    continue
                candidates = [
                    RawCandidate(data=item, strategy=self.name.value)
                    for item in items
                    if isinstance(item, dict)
                ]
                if candidates:
                    return candidates
        return []


__all__ = ["EmbeddedJsonStrategy", "balanced_json"]
