"""User-Agent pool abstraction."""

from __future__ import annotations

import random
from threading import Lock
from typing import Iterable, List, Optional

from ..config.models import DEFAULT_USER_AGENTS


class UserAgentPool:
    """Return random user agents from configured pool."""

    def __init__(self, user_agents: Iterable[str] | None = None) -> None:
        self._lock = Lock()
        source = DEFAULT_USER_AGENTS if user_agents is None else user_agents
        self._uas: List[str] = [ua.strip() for ua in source if ua.strip()]

    def __len__(self) -> int:
        return len(self._uas)

    def get(self) -> Optional[str]:
        with self._lock:
            if not self._uas:
                return None
            return random.choice(self._uas)

    def refresh(self, user_agents: Iterable[str]) -> None:
        with self._lock:
            self._uas = [ua.strip() for ua in user_agents if ua.strip()]


__all__ = ["UserAgentPool"]
