"""Pydantic models describing harvester and per-source configuration."""

from __future__ import annotations

import re
from enum import Enum
from pathlib import Path
from typing import Any
from urllib.parse import urlparse

from pydantic import BaseModel, Field, field_validator, model_validator

DEFAULT_USER_AGENTS = [
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (Macintosh; Intel Mac OS X 10_15_7) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
    "Mozilla/5.0 (X11; Linux x86_64) AppleWebKit/537.36 (KHTML, like Gecko) Chrome/120.0.0.0 Safari/537.36",
]

DEFAULT_DATE_PATTERNS = [
    r"(\d{2}/\d{2}/\d{4})",
    r"(\d{4}-\d{2}-\d{2})",
    r"(\d{1,2}\s+de\s+[A-Za-zç]{3}\.?\s+de\s+\d{4})",
]


def _compile_all(patterns: list[str]) -> list[str]:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as exc:
            raise ValueError(f"Invalid regular expression {pattern!r}: {exc}") from exc
    return patterns


class ScheduleType(str, Enum):
    """Scheduler modes for periodic harvesting."""

    CRON = "cron"
    INTERVAL = "interval"


class ScheduleConfig(BaseModel):
    """When the scheduler should trigger a full harvest."""

    type: ScheduleType = ScheduleType.INTERVAL
    value: Any = Field(
        default=6 * 60 * 60,
        description="Cron expression or interval seconds, depending on type.",
    )

    @model_validator(mode="after")
    def _validate_value(self) -> "ScheduleConfig":
        if self.type is ScheduleType.CRON and not isinstance(self.value, str):
            raise ValueError("Cron schedule requires string expression")
        if self.type is ScheduleType.INTERVAL and not isinstance(self.value, (int, float, dict)):
            raise ValueError("Interval schedule requires seconds (int/float) or kwargs dict")
        return self


class FetchSettings(BaseModel):
    """Retry, backoff and identity settings for the fetch client."""

    max_attempts: int = Field(default=3, ge=1)
    timeout: float = Field(default=30.0, gt=0)
    backoff_base: float = Field(default=2.0, ge=0)
    user_agents: list[str] = Field(default_factory=lambda: list(DEFAULT_USER_AGENTS))
    default_headers: dict[str, str] = Field(
        default_factory=lambda: {"Accept-Language": "pt-BR,pt;q=0.9,en;q=0.8"}
    )


class StrategyName(str, Enum):
    """Extraction strategies, in their default cascade order."""

    API = "api"
    EMBEDDED_JSON = "embedded_json"
    DOM = "dom"
    REGEX = "regex"


class OpenRule(BaseModel):
    """One clause of the "is open" predicate for structured API items."""

    field: str
    equals: str


class ApiStrategyConfig(BaseModel):
    items_path: str | None = None
    open_when: list[OpenRule] = Field(default_factory=list)


class EmbeddedJsonConfig(BaseModel):
    """Global-assignment patterns whose match ends where the JSON value begins."""

    patterns: list[str] = Field(min_length=1)
    path: str | None = None

    @field_validator("patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        return _compile_all(value)


class DomStrategyConfig(BaseModel):
    card_selectors: list[str] = Field(min_length=1)
    title_selectors: list[str] = Field(default_factory=lambda: ["h1, h2, h3, h4, .title"])
    link_selector: str = "a[href]"
    date_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_PATTERNS))
    field_selectors: dict[str, str] = Field(default_factory=dict)

    @field_validator("date_patterns")
    @classmethod
    def _check_patterns(cls, value: list[str]) -> list[str]:
        return _compile_all(value)


class RegexStrategyConfig(BaseModel):
    container_tags: list[str] = Field(default_factory=lambda: ["div", "article", "li"])
    class_keywords: list[str] = Field(default_factory=list)
    container_patterns: list[str] = Field(default_factory=list)
    title_pattern: str = r"<h[1-6][^>]*>(.*?)</h[1-6]>"
    link_pattern: str = r"<a\b[^>]*\bhref=[\"']([^\"']+)[\"']"
    date_patterns: list[str] = Field(default_factory=lambda: list(DEFAULT_DATE_PATTERNS))

    @model_validator(mode="after")
    def _validate_containers(self) -> "RegexStrategyConfig":
        if not self.class_keywords and not self.container_patterns:
            raise ValueError("regex strategy needs class_keywords or container_patterns")
        _compile_all(self.container_patterns)
        _compile_all(self.date_patterns)
        _compile_all([self.title_pattern, self.link_pattern])
        return self


class CompositePart(BaseModel):
    """A sub-field copied into a composite canonical field."""

    path: str
    label: str | None = None
    prefix: str = ""
    limit: int | None = Field(default=None, ge=1)
    join: str = ", "


class CompositeField(BaseModel):
    parts: list[CompositePart] = Field(min_length=1)
    separator: str = " | "


class FieldMapping(BaseModel):
    """Map site-specific candidate data onto the canonical schema.

    Plain fields list dotted paths tried in order; the first non-empty value
    wins. Composite fields concatenate every available part.
    """

    name: list[str] = Field(default_factory=lambda: ["title"])
    url: list[str] = Field(default_factory=lambda: ["link"])
    url_template: str | None = None
    deadline: list[str] = Field(default_factory=lambda: ["deadline"])
    category: CompositeField | None = None
    description: CompositeField | None = None
    target_audience: CompositeField | None = None
    public_info: CompositeField | None = None


class SourceConfig(BaseModel):
    """Full definition of one harvested site."""

    name: str
    locale: str = "BR"
    base_url: str
    urls: list[str] = Field(min_length=1)
    enabled: bool = True
    headers: dict[str, str] = Field(default_factory=dict)
    strategies: list[StrategyName] = Field(default_factory=lambda: list(StrategyName))
    api: ApiStrategyConfig | None = None
    embedded_json: EmbeddedJsonConfig | None = None
    dom: DomStrategyConfig | None = None
    regex: RegexStrategyConfig | None = None
    mapping: FieldMapping = Field(default_factory=FieldMapping)

    @field_validator("name")
    @classmethod
    def _normalise_name(cls, value: str) -> str:
        value = value.strip().lower()
        if not value:
            raise ValueError("source name cannot be empty")
        return value

    @field_validator("base_url")
    @classmethod
    def _check_base_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in ("http", "https") or not parsed.netloc:
            raise ValueError(f"base_url must be an absolute http(s) URL: {value}")
        return value

    @model_validator(mode="after")
    def _validate_strategies(self) -> "SourceConfig":
        if not self.configured_strategies():
            raise ValueError(f"source {self.name} has no configured extraction strategy")
        return self

    def configured_strategies(self) -> list[StrategyName]:
        """Declared strategies that also carry a configuration block, in order."""

        return [name for name in self.strategies if getattr(self, name.value) is not None]


class GlobalConfig(BaseModel):
    """Controls shared by every source."""

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    store_path: Path = Field(default=Path("data/opportunities.db"))
    max_workers: int = Field(default=4, ge=1)
    schedule: ScheduleConfig = Field(default_factory=ScheduleConfig)

    @field_validator("store_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)


__all__ = [
    "ApiStrategyConfig",
    "CompositeField",
    "CompositePart",
    "DEFAULT_DATE_PATTERNS",
    "DEFAULT_USER_AGENTS",
    "DomStrategyConfig",
    "EmbeddedJsonConfig",
    "FetchSettings",
    "FieldMapping",
    "GlobalConfig",
    "OpenRule",
    "RegexStrategyConfig",
    "ScheduleConfig",
    "ScheduleType",
    "SourceConfig",
    "StrategyName",
]
