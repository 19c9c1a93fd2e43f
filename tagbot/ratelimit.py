"""Rate limiting per actor.

Commands are cheap for the bot but not for GitHub's API quota or the
chat's patience. Each actor gets a sliding window of invocations;
elevated actors are exempt.
"""

import logging
import time
from typing import Callable

logger = logging.getLogger("tagbot.ratelimit")


class RateLimiter:
    """Rate limiter with sliding window per actor.

    Default: 2 invocations per 5 seconds per actor.
    """

    def __init__(
        self,
        max_requests: int = 2,
        window_seconds: int = 5,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize rate limiter.

        Args:
            max_requests: Maximum invocations allowed per window
            window_seconds: Time window in seconds
            clock: Time source (monotonic seconds)
        """
        self.max_requests = max(1, max_requests)
        self.window = max(1, window_seconds)
        self._clock = clock
        self._requests: dict[str, list[float]] = {}
        logger.info(f"Rate limits: {self.max_requests} commands / {self.window}s")

    def __len__(self) -> int:
        """Number of actors with invocations inside the current window."""
        return len(self._requests)

    def check(self, actor_id: str, exempt: bool = False) -> tuple[bool, int]:
        """Check and record one invocation.

        Args:
            actor_id: Unique identifier for the actor
            exempt: Skip the limit (elevated actors)

        Returns:
            Tuple of (allowed: bool, remaining_wait_seconds: int)
        """
        if exempt:
            return True, 0

        now = self._clock()
        self._prune(now)
        history = self._requests.setdefault(actor_id, [])

        if len(history) >= self.max_requests:
            remaining = max(1, int(self.window - (now - history[0])))
            logger.info(f"Rate limit hit for actor {actor_id}: {remaining}s remaining")
            return False, remaining

        history.append(now)
        return True, 0

    def _prune(self, now: float):
        """Drop timestamps outside the window, and actors left with none."""
        for actor_id in list(self._requests):
            history = [t for t in self._requests[actor_id] if now - t < self.window]
            if history:
                self._requests[actor_id] = history
            else:
                del self._requests[actor_id]
