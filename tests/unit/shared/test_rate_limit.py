"""RateLimiter 테스트."""

import threading
from unittest.mock import MagicMock

import pytest

from commit_sherpa.shared.llm import RateLimitedLLM, RateLimiter


class FakeClock:
    """sleep이 시간을 앞당기는 가짜 시계."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start
        self.sleeps: list[float] = []

    def __call__(self) -> float:
        return self.now

    def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


class TestRateLimiter:
    """고정 간격 대기 테스트."""

    def test_invalid_rate(self) -> None:
        with pytest.raises(ValueError):
            RateLimiter(0)

    def test_min_interval(self) -> None:
        assert RateLimiter(10).min_interval == pytest.approx(6.0)

    def test_first_call_does_not_wait(self, clock: FakeClock) -> None:
        limiter = RateLimiter(10, clock=clock, sleep=clock.sleep)
        assert limiter.wait() == 0.0
        assert clock.sleeps == []

    def test_waits_remaining_interval(self, clock: FakeClock) -> None:
        """두 번째 호출은 남은 간격만큼 대기."""
        limiter = RateLimiter(10, clock=clock, sleep=clock.sleep)
        limiter.wait()
        clock.now += 2.0

        waited = limiter.wait()

        assert waited == pytest.approx(4.0)
        assert clock.sleeps == [pytest.approx(4.0)]

    def test_no_wait_after_interval(self, clock: FakeClock) -> None:
        limiter = RateLimiter(60, clock=clock, sleep=clock.sleep)
        limiter.wait()
        clock.now += 1.5
        assert limiter.wait() == 0.0

    def test_concurrent_callers_are_serialized(self) -> None:
        """여러 스레드가 호출해도 간격이 지켜진다."""
        clock = FakeClock()
        lock = threading.Lock()

        def sleep(seconds: float) -> None:
            with lock:
                clock.sleep(seconds)

        limiter = RateLimiter(60, clock=clock, sleep=sleep)
        threads = [threading.Thread(target=limiter.wait) for _ in range(5)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        # 첫 호출 이후 네 번 모두 1초씩 대기
        assert sum(clock.sleeps) == pytest.approx(4.0)


class TestRateLimitedLLM:
    """RateLimitedLLM 래퍼 테스트."""

    def test_delegates_after_wait(self) -> None:
        inner = MagicMock()
        inner.complete.return_value = "done"
        inner.chat.return_value = "chat"
        inner.get_model_name.return_value = "m"
        limiter = MagicMock()

        llm = RateLimitedLLM(inner, limiter)

        assert llm.complete("p", temperature=0.2) == "done"
        assert llm.chat([{"role": "user", "content": "x"}]) == "chat"
        assert llm.get_model_name() == "m"
        assert limiter.wait.call_count == 2
        inner.complete.assert_called_once_with("p", temperature=0.2)

    def test_close_delegates(self) -> None:
        inner = MagicMock()
        RateLimitedLLM(inner, MagicMock()).close()
        inner.close.assert_called_once()
