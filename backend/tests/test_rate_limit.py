"""
Tests for the sliding-window rate limiter.
"""
import os, sys
sys.path.insert(0, os.path.dirname(os.path.dirname(__file__)))

import pytest

from middleware.rate_limit import SlidingWindowLimiter


class FakeClock:
    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def limiter(clock):
    return SlidingWindowLimiter(clock=clock)


class TestSlidingWindowLimiter:

    @pytest.mark.unit
    def test_allows_up_to_limit(self, limiter):
        assert all(limiter.hit("ip:/auth/test-login", 3, 60) for _ in range(3))
        assert limiter.hit("ip:/auth/test-login", 3, 60) is False

    @pytest.mark.unit
    def test_rejected_hits_are_not_recorded(self, limiter, clock):
        for _ in range(5):
            limiter.hit("k", 2, 60)
        clock.advance(61)
        assert limiter.remaining("k", 2, 60) == 2

    @pytest.mark.unit
    def test_window_slides(self, limiter, clock):
        limiter.hit("k", 2, 60)
        clock.advance(30)
        limiter.hit("k", 2, 60)
        assert limiter.hit("k", 2, 60) is False

        clock.advance(30)
        # first hit is now exactly one window old
        assert limiter.hit("k", 2, 60) is True
        assert limiter.hit("k", 2, 60) is False

    @pytest.mark.unit
    def test_keys_are_independent(self, limiter):
        assert limiter.hit("a", 1, 60) is True
        assert limiter.hit("b", 1, 60) is True
        assert limiter.hit("a", 1, 60) is False

    @pytest.mark.unit
    def test_remaining_and_reset(self, limiter):
        limiter.hit("k", 5, 60)
        limiter.hit("k", 5, 60)
        assert limiter.remaining("k", 5, 60) == 3
        limiter.reset()
        assert limiter.remaining("k", 5, 60) == 5
