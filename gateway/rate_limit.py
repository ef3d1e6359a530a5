import logging
import math
import threading
import time
from dataclasses import dataclass
from typing import Callable

from .errors import RateLimited


logger = logging.getLogger(__name__)


@dataclass(slots=True)
class _Window:
    started_at: float
    count: int = 0


@dataclass(frozen=True, slots=True)
class RateLimitDecision:
    limit: int
    remaining: int
    reset_after: int
    window_seconds: int

    def headers(self) -> dict[str, str]:
        return {
            "RateLimit-Policy": f"{self.limit};w={self.window_seconds}",
            "RateLimit-Limit": str(self.limit),
            "RateLimit-Remaining": str(self.remaining),
            "RateLimit-Reset": str(self.reset_after),
        }


class RateLimiter:
    """Fixed-window request counter keyed by client identity.

    Each identity gets its own window, opened by its first request.
    """

    def __init__(
        self,
        max_requests: int = 30,
        window_seconds: int = 60,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.max_requests = max(1, max_requests)
        self.window_seconds = max(1, window_seconds)
        self._clock = clock

        self._lock = threading.Lock()
        self._windows: dict[str, _Window] = {}
        self._next_sweep = clock() + self.window_seconds

    def hit(self, identity: str) -> RateLimitDecision:
        now = self._clock()
        with self._lock:
            if now >= self._next_sweep:
                self._sweep(now)

            window = self._windows.get(identity)
            if window is None or now - window.started_at >= self.window_seconds:
                window = _Window(started_at=now)
                self._windows[identity] = window

            if window.count >= self.max_requests:
                decision = self._decision(window, now)
                logger.info("Rate limit exceeded for client=%s", identity)
                raise RateLimited(
                    headers={
                        **decision.headers(),
                        "Retry-After": str(decision.reset_after),
                    }
                )

            window.count += 1
            return self._decision(window, now)

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)

    def _decision(self, window: _Window, now: float) -> RateLimitDecision:
        return RateLimitDecision(
            limit=self.max_requests,
            remaining=max(0, self.max_requests - window.count),
            reset_after=max(
                0, math.ceil(window.started_at + self.window_seconds - now)
            ),
            window_seconds=self.window_seconds,
        )

    def _sweep(self, now: float) -> None:
        expired = [
            identity
            for identity, window in self._windows.items()
            if now - window.started_at >= self.window_seconds
        ]
        for identity in expired:
            del self._windows[identity]
        self._next_sweep = now + self.window_seconds
