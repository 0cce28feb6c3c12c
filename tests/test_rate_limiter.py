import pytest

from mintquiz.exceptions import TooManyRequests
from mintquiz.utils.rate_limiter import RequestThrottle


class Clock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


def test_minute_window():
    clock = Clock()
    throttle = RequestThrottle(requests_per_minute=3, requests_per_hour=100, clock=clock)

    for _ in range(3):
        throttle.check("1.2.3.4")
    with pytest.raises(TooManyRequests) as exc_info:
        throttle.check("1.2.3.4")
    assert exc_info.value.retry_after == 60

    throttle.check("5.6.7.8")

    clock.now += 61
    throttle.check("1.2.3.4")


def test_hour_window():
    clock = Clock()
    throttle = RequestThrottle(requests_per_minute=0, requests_per_hour=2, clock=clock)

    throttle.check("ip")
    clock.now += 120
    throttle.check("ip")
    clock.now += 120
    with pytest.raises(TooManyRequests) as exc_info:
        throttle.check("ip")
    assert "per hour" in exc_info.value.message

    clock.now += 3600
    throttle.check("ip")


def test_disabled_when_both_limits_zero():
    throttle = RequestThrottle(requests_per_minute=0, requests_per_hour=0)

    assert not throttle.enabled
    for _ in range(500):
        throttle.check("ip")


def test_expired_clients_are_evicted():
    clock = Clock()
    throttle = RequestThrottle(requests_per_minute=60, requests_per_hour=1000, clock=clock)

    for i in range(1000):
        throttle.check(f"10.0.{i // 256}.{i % 256}")
    assert len(throttle.history) == 1000

    clock.now += 10_000
    throttle.check("192.168.0.1")

    assert list(throttle.history) == ["192.168.0.1"]


def test_active_clients_are_kept():
    clock = Clock()
    throttle = RequestThrottle(requests_per_minute=0, requests_per_hour=100, clock=clock)

    throttle.check("old")
    clock.now += 1800
    throttle.check("recent")
    clock.now += 1800
    throttle.check("new")

    assert set(throttle.history) == {"recent", "new"}
