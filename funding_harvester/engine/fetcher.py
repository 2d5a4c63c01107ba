"""HTTP fetching with retry, backoff and user-agent rotation."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Any, Callable, Dict

import httpx
import structlog

from ..config import FetchSettings
from ..errors import FetchExhausted
from ..infra import UserAgentPool
from .antibot import strategies
from .antibot.chain import AntiBotChain, AttemptState


@dataclass(slots=True)
class FetchResponse:
    """Standardised response wrapper."""

    url: str
    status_code: int
    text: str
    headers: Dict[str, str]
    raw: httpx.Response | None = field(repr=False, default=None)

    @property
    def content_type(self) -> str:
        for key, value in self.headers.items():
            if key.lower() == "content-type":
                return value
        return ""


class Fetcher:
    """Retrieve a URL, retrying failed attempts through the strategy chain."""

    def __init__(
        self,
        settings: FetchSettings,
        ua_pool: UserAgentPool | None = None,
        logger: structlog.BoundLogger | None = None,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        self.settings = settings
        self.ua_pool = ua_pool if ua_pool is not None else UserAgentPool(settings.user_agents)
        self.logger = logger or structlog.get_logger("funding_harvester.fetcher")
        self._owns_client = client is None
        self._client = client or httpx.Client(follow_redirects=True)
        self._sleep = sleep

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "Fetcher":
        return self

    def __exit__(self, *_exc: Any) -> None:
        self.close()

    def fetch(self, url: str, headers: dict[str, str] | None = None) -> FetchResponse:
        state, chain = self._build_chain()
        while True:
            plan = chain.plan(state)
            req_headers = dict(self.settings.default_headers)
            req_headers.update(headers or {})
            req_headers.update(plan.headers)

            if plan.delay:
                self.logger.debug("fetch_backoff", url=url, attempt=state.attempt, delay=plan.delay)
                self._sleep(plan.delay)

            try:
                response = self._client.request(
                    "GET",
                    url,
                    headers=req_headers,
                    timeout=plan.timeout or self.settings.timeout,
                )
            except httpx.HTTPError as exc:
                self.logger.warning(
                    "fetch_attempt_failed",
                    url=url,
                    attempt=state.attempt,
                    max_attempts=state.max_attempts,
                    error=str(exc),
                )
                chain.record_failure(state, error=exc)
            else:
                if self._is_failure(response):
                    self.logger.warning(
                        "fetch_attempt_failed",
                        url=url,
                        attempt=state.attempt,
                        max_attempts=state.max_attempts,
                        status=response.status_code,
                    )
                    chain.record_failure(state, status_code=response.status_code)
                else:
                    chain.record_success(state, response.status_code)
                    return FetchResponse(
                        url=str(response.url),
                        status_code=response.status_code,
                        text=response.text,
                        headers=dict(response.headers),
                        raw=response,
                    )

            if state.exhausted:
                break

        last_error = state.last_error
        raise FetchExhausted(
            url,
            attempts=state.max_attempts,
            last_status=state.last_status,
            last_error=str(last_error) if last_error is not None else None,
        ) from last_error

    # ------------------------------------------------------------------
    def _build_chain(self) -> tuple[AttemptState, AntiBotChain]:
        return strategies.build_chain(self.settings, self.ua_pool)

    @staticmethod
    def _is_failure(response: Any) -> bool:
        status_code = getattr(response, "status_code", 0)
        return not 200 <= status_code < 300


__all__ = ["Fetcher", "FetchResponse"]
