import threading

from services.rate_limiter import RateLimiter


class FakeClock:
    def __init__(self, now=1000.0):
        self.now = now

    def __call__(self):
        return self.now


def test_allows_up_to_limit_then_blocks():
    clock = FakeClock()
    limiter = RateLimiter(limit=3, window_seconds=60, clock=clock)

    results = [limiter.check("1.2.3.4") for _ in range(3)]
    assert [r.allowed for r in results] == [True, True, True]
    assert [r.remaining for r in results] == [2, 1, 0]

    blocked = limiter.check("1.2.3.4")
    assert not blocked.allowed
    assert blocked.retry_after == 60

    clock.now += 59.2
    assert limiter.check("1.2.3.4").retry_after == 1


def test_window_resets():
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window_seconds=60, clock=clock)
    assert limiter.check("a").allowed
    assert not limiter.check("a").allowed
    clock.now += 60
    assert limiter.check("a").allowed


def test_clients_are_counted_independently():
    limiter = RateLimiter(limit=1, window_seconds=60, clock=FakeClock())
    assert limiter.check("a").allowed
    assert limiter.check("b").allowed
    assert not limiter.check("a").allowed


def test_expired_windows_are_pruned_when_full():
    clock = FakeClock()
    limiter = RateLimiter(limit=5, window_seconds=10, clock=clock, max_clients=2)
    limiter.check("a")
    limiter.check("b")
    clock.now += 11
    limiter.check("c")
    assert len(limiter) == 1
    assert limiter.prune() == 0


def test_concurrent_checks_never_exceed_limit():
    limiter = RateLimiter(limit=100, window_seconds=60)
    allowed = []

    def worker():
        for _ in range(50):
            allowed.append(limiter.check("shared").allowed)

    threads = [threading.Thread(target=worker) for _ in range(4)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert allowed.count(True) == 100
    assert allowed.count(False) == 100


def test_tracked_clients_never_exceed_cap():
    clock = FakeClock()
    limiter = RateLimiter(limit=1, window_seconds=60, clock=clock, max_clients=2)
    limiter.check("a")
    clock.now += 1
    limiter.check("b")
    clock.now += 1
    limiter.check("c")

    assert len(limiter) == 2
    assert limiter.check("b").allowed is False
    assert limiter.check("c").allowed is False
    # "a" had the earliest window, so it was evicted and starts afresh
    assert limiter.check("a").allowed is True
    assert len(limiter) == 2
