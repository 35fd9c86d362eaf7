from __future__ import annotations

import threading
import time
from typing import Dict, List, Optional

from weathercache.core.abstractions import ProviderResponse
from weathercache.core.providers.base import FetchError


class StubClient:
    """Scripted provider: answers per query, raises scripted errors, counts calls."""

    name = "stub"

    def __init__(self, responses: Optional[Dict[str, object]] = None, delay: float = 0.0) -> None:
        self.responses: Dict[str, object] = dict(responses or {})
        self.calls: List[str] = []
        self.delay = delay
        self._lock = threading.Lock()

    def fetch(self, query: str) -> ProviderResponse:
        with self._lock:
            self.calls.append(query)
        if self.delay:
            time.sleep(self.delay)
        answer = self.responses.get(query)
        if answer is None:
            raise FetchError(f"no scripted answer for {query}")
        if isinstance(answer, Exception):
            raise answer
        return answer  # type: ignore[return-value]


def reply(location: str, temp: float, condition: str) -> ProviderResponse:
    return ProviderResponse(location_name=location, temperature_c=temp, condition=condition)
