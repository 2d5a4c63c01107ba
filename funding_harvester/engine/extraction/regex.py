"""Regex-only fallback for markup the DOM strategy cannot make sense of."""

from __future__ import annotations

import re
from html import unescape
from typing import Pattern

from ...config import RegexStrategyConfig, SourceConfig, StrategyName
from .base import ExtractionStrategy, RawCandidate, clean_text, compile_patterns, match_date


def container_patterns(config: RegexStrategyConfig) -> list[Pattern[str]]:
    """Explicit container patterns first, then one per tag and class keyword."""

    patterns = [re.compile(p, re.IGNORECASE | re.DOTALL) for p in config.container_patterns]
    for tag in config.container_tags:
        for keyword in config.class_keywords:
            patterns.append(
                re.compile(
                    rf"<(?P<tag>{re.escape(tag)})\b[^>]*\bclass=[\"'][^\"']*{re.escape(keyword)}"
                    rf"[^\"']*[\"'][^>]*>(?P<body>.*?)</(?P=tag)\s*>",
                    re.IGNORECASE | re.DOTALL,
                )
            )
    return patterns


class RegexFallbackStrategy(ExtractionStrategy):
    """Scan raw HTML with container regexes, then pull fields with sub-regexes."""

    name = StrategyName.REGEX

    def extract(self, body: str, content_type: str, source: SourceConfig) -> list[RawCandidate]:
        config = source.regex
        if config is None or not body:
            return []
        title_re = re.compile(config.title_pattern, re.IGNORECASE | re.DOTALL)
        link_re = re.compile(config.link_pattern, re.IGNORECASE | re.DOTALL)
        date_res = compile_patterns(config.date_patterns)

        candidates: list[RawCandidate] = []
        seen: set[tuple[str, str]] = set()
        for container in container_patterns(config):
            for match in container.finditer(body):
                fragment = match.groupdict().get("body") or match.group(0)
                title_match = title_re.search(fragment)
                link_match = link_re.search(fragment)
                if not title_match or not link_match:
                    continue
                title = clean_text(title_match.group(1) if title_re.groups else title_match.group(0))
                link = unescape(link_match.group(1) if link_re.groups else link_match.group(0)).strip()
                if not title or not link or (title, link) in seen:
                    continue
                seen.add((title, link))
                text = clean_text(fragment)
                candidates.append(
                    RawCandidate(
                        data={
                            "title": title,
                            "link": link,
                            "deadline": match_date(text, date_res),
                            "text": text,
                        },
                        strategy=self.name.value,
                    )
                )
        return candidates


__all__ = ["RegexFallbackStrategy", "container_patterns"]
