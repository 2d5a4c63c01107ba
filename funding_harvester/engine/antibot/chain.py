"""Strategy chain shaping each outgoing request attempt."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Sequence

from ...config import FetchSettings


@dataclass
class AttemptPlan:
    """Headers, timeout and pre-attempt delay for a single request."""

    headers: dict[str, str] = field(default_factory=dict)
    timeout: float | None = None
    delay: float = 0.0


@dataclass
class AttemptState:
    """Attempt bookkeeping for one URL, shared by every strategy."""

    settings: FetchSettings
    attempt: int = 1
    max_attempts: int = 1
    last_status: int | None = None
    last_error: Exception | None = None

    @property
    def exhausted(self) -> bool:
        return self.attempt > self.max_attempts


class Strategy:
    """Hooks run around each attempt. Both default to doing nothing."""

    def shape(self, state: AttemptState, plan: AttemptPlan) -> None:
        return None

    def on_failure(self, state: AttemptState) -> None:
        return None


class AntiBotChain:
    def __init__(self, strategies: Sequence[Strategy]) -> None:
        self.strategies = tuple(strategies)

    def plan(self, state: AttemptState) -> AttemptPlan:
        plan = AttemptPlan()
        for strategy in self.strategies:
            strategy.shape(state, plan)
        return plan

    def record_success(self, state: AttemptState, status_code: int) -> None:
        state.last_status = status_code
        state.last_error = None

    def record_failure(
        self,
        state: AttemptState,
        status_code: int | None = None,
        error: Exception | None = None,
    ) -> None:
        state.last_status = status_code
        state.last_error = error
        for strategy in self.strategies:
            strategy.on_failure(state)


__all__ = ["AntiBotChain", "AttemptPlan", "AttemptState", "Strategy"]
