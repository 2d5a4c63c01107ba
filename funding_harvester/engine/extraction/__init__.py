"""Extraction cascade: structured API, embedded JSON, DOM query, regex fallback."""

from .api import StructuredApiStrategy
from .base import ExtractionStrategy, RawCandidate, lookup_path
from .dom import DomQueryStrategy
from .embedded import EmbeddedJsonStrategy
from .pipeline import ExtractionPipeline, ExtractionResult, default_strategies
from .regex import RegexFallbackStrategy

__all__ = [
    "DomQueryStrategy",
    "EmbeddedJsonStrategy",
    "ExtractionPipeline",
    "ExtractionResult",
    "ExtractionStrategy",
    "RawCandidate",
    "RegexFallbackStrategy",
    "StructuredApiStrategy",
    "default_strategies",
    "lookup_path",
]
