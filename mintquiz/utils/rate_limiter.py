"""
Per-client request throttle applied as HTTP middleware
"""
import time
from collections import defaultdict, deque
from fastapi import Request
from typing import Callable, Deque, Dict, Tuple
import logging

from mintquiz.exceptions import TooManyRequests

logger = logging.getLogger(__name__)


class RequestThrottle:
    """
    In-memory sliding-window throttle keyed by client IP

    Separate from the daily attempt gate: this only caps raw request volume.
    A limit of 0 disables that window.
    """

    def __init__(
        self,
        requests_per_minute: int = 60,
        requests_per_hour: int = 1000,
        clock: Callable[[], float] = time.monotonic
    ):
        self.windows: Tuple[Tuple[int, int, str], ...] = (
            (60, requests_per_minute, "minute"),
            (3600, requests_per_hour, "hour"),
        )
        self.clock = clock
        # Storage: {client_id: deque of request times}
        self.history: Dict[str, Deque[float]] = defaultdict(deque)

    @property
    def enabled(self) -> bool:
        return any(limit > 0 for _, limit, _ in self.windows)

    def get_client_id(self, request: Request) -> str:
        """Extract client identifier from request"""
        return request.client.host if request.client else "unknown"

    def _cleanup_old_entries(self, now: float) -> None:
        """Drop timestamps older than the longest window, and clients left empty"""
        cutoff = now - max(seconds for seconds, _, _ in self.windows)

        for client_id in list(self.history.keys()):
            history = self.history[client_id]
            while history and history[0] <= cutoff:
                history.popleft()

            if not history:
                del self.history[client_id]

    def check(self, client_id: str) -> None:
        """
        Record one request for ``client_id``

        Raises:
            TooManyRequests: if any window is already full
        """
        now = self.clock()
        self._cleanup_old_entries(now)
        history = self.history[client_id]

        for seconds, limit, label in self.windows:
            if limit <= 0:
                continue
            in_window = sum(1 for ts in history if ts > now - seconds)
            if in_window >= limit:
                logger.warning(f"Rate limit exceeded ({label}): {client_id}")
                raise TooManyRequests(
                    f"Too many requests. Limit: {limit} requests per {label}",
                    retry_after=seconds,
                )

        history.append(now)
        logger.debug(f"Rate limit check passed: {client_id} ({len(history)} in last hour)")

    def reset(self) -> None:
        self.history.clear()
