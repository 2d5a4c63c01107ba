"""Concrete request strategies used by the chain."""

from __future__ import annotations

from ...config import FetchSettings
from ...infra import UserAgentPool
from .chain import AntiBotChain, AttemptPlan, AttemptState, Strategy


class RetryStrategy(Strategy):
    """Expose the attempt budget from config to the fetch loop."""

    def shape(self, state: AttemptState, plan: AttemptPlan) -> None:
        state.max_attempts = max(1, state.settings.max_attempts)

    def on_failure(self, state: AttemptState) -> None:
        state.attempt += 1


class UserAgentStrategy(Strategy):
    """Pick a fresh user agent for every attempt."""

    def __init__(self, pool: UserAgentPool | None) -> None:
        self.pool = pool

    def shape(self, state: AttemptState, plan: AttemptPlan) -> None:
        ua = self.pool.get() if self.pool else None
        if ua:
            plan.headers["User-Agent"] = ua


class BackoffStrategy(Strategy):
    """Wait ``backoff_base ** n`` seconds before retrying after the n-th failure."""

    def shape(self, state: AttemptState, plan: AttemptPlan) -> None:
        failures = state.attempt - 1
        if failures > 0:
            plan.delay = state.settings.backoff_base ** failures


class TimeoutStrategy(Strategy):
    def shape(self, state: AttemptState, plan: AttemptPlan) -> None:
        plan.timeout = state.settings.timeout


def build_chain(
    settings: FetchSettings,
    ua_pool: UserAgentPool | None,
) -> tuple[AttemptState, AntiBotChain]:
    """Fresh attempt state plus the retry/UA/backoff/timeout chain."""

    chain = AntiBotChain(
        [RetryStrategy(), UserAgentStrategy(ua_pool), BackoffStrategy(), TimeoutStrategy()]
    )
    return AttemptState(settings=settings), chain


__all__ = [
    "BackoffStrategy",
    "RetryStrategy",
    "TimeoutStrategy",
    "UserAgentStrategy",
    "build_chain",
]
