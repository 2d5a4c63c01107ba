"""Request strategy chain (retry, user-agent rotation, backoff, timeout)."""

from .chain import AntiBotChain, AttemptPlan, AttemptState, Strategy
from .strategies import build_chain

__all__ = ["AntiBotChain", "AttemptPlan", "AttemptState", "Strategy", "build_chain"]
