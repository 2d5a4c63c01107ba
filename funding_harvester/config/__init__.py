"""Configuration package exports."""

from .loader import BUILTIN_SOURCES_DIR, ConfigLocator, ConfigRepository
from .models import (
    ApiStrategyConfig,
    CompositeField,
    CompositePart,
    DomStrategyConfig,
    EmbeddedJsonConfig,
    FetchSettings,
    FieldMapping,
    GlobalConfig,
    OpenRule,
    RegexStrategyConfig,
    ScheduleConfig,
    ScheduleType,
    SourceConfig,
    StrategyName,
)

__all__ = [
    "ApiStrategyConfig",
    "BUILTIN_SOURCES_DIR",
    "CompositeField",
    "CompositePart",
    "ConfigLocator",
    "ConfigRepository",
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
