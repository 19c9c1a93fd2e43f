"""Tests for per-actor rate limiting."""

from tagbot.ratelimit import RateLimiter


class FakeClock:
    def __init__(self):
        self.now = 0.0

    def __call__(self):
        return self.now


class TestRateLimiter:

    def test_allows_up_to_limit(self):
        limiter = RateLimiter(max_requests=2, window_seconds=5, clock=FakeClock())
        assert limiter.check("a") == (True, 0)
        assert limiter.check("a") == (True, 0)
        allowed, remaining = limiter.check("a")
        assert not allowed
        assert remaining == 5

    def test_window_slides(self):
        clock = FakeClock()
        limiter = RateLimiter(max_requests=1, window_seconds=5, clock=clock)
        assert limiter.check("a")[0]
        clock.now = 3
        allowed, remaining = limiter.check("a")
        assert not allowed and remaining == 2
        clock.now = 5.5
        assert limiter.check("a")[0]

    def test_actors_are_independent(self):
        limiter = RateLimiter(max_requests=1, window_seconds=5, clock=FakeClock())
        assert limiter.check("a")[0]
        assert limiter.check("b")[0]

    def test_exempt(self):
        limiter = RateLimiter(max_requests=1, window_seconds=5, clock=FakeClock())
        limiter.check("a")
        assert limiter.check("a", exempt=True) == (True, 0)

    def test_exempt_actor_not_tracked(self):
        limiter = RateLimiter(max_requests=1, window_seconds=5, clock=FakeClock())
        limiter.check("admin", exempt=True)
        assert len(limiter) == 0

    def test_idle_actors_are_forgotten(self):
        """Actors whose invocations all left the window hold no state."""
        clock = FakeClock()
        limiter = RateLimiter(max_requests=2, window_seconds=5, clock=clock)
        for actor in ("a", "b", "c"):
            limiter.check(actor)
        assert len(limiter) == 3

        clock.now = 10
        limiter.check("d")
        assert len(limiter) == 1
