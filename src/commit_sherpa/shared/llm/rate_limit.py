"""LLM 호출 간격 제한."""

import logging
import threading
import time
from collections.abc import Callable

from .base import BaseLLM

logger = logging.getLogger(__name__)

DEFAULT_REQUESTS_PER_MINUTE = 10


class RateLimiter:
    """고정 간격 rate limiter.

    마지막 호출 이후 최소 간격(60 / requests_per_minute 초)이 지나지 않았으면
    남은 시간만큼 호출한 스레드를 재운다. 요청을 큐에 쌓지 않는다.
    """

    def __init__(
        self,
        requests_per_minute: int = DEFAULT_REQUESTS_PER_MINUTE,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if requests_per_minute <= 0:
            raise ValueError(
                f"requests_per_minute는 0보다 커야 합니다: {requests_per_minute}"
            )
        self.min_interval = 60.0 / requests_per_minute
        self._clock = clock
        self._sleep = sleep
        self._last_request: float | None = None
        self._lock = threading.Lock()

    def wait(self) -> float:
        """필요하면 대기 후 호출 시각을 기록.

        Returns:
            실제로 대기한 시간(초)
        """
        with self._lock:
            waited = 0.0
            if self._last_request is not None:
                elapsed = self._clock() - self._last_request
                if elapsed < self.min_interval:
                    waited = self.min_interval - elapsed
                    logger.debug(f"rate limit 대기: {waited:.2f}초")
                    self._sleep(waited)
            self._last_request = self._clock()
            return waited


class RateLimitedLLM(BaseLLM):
    """모든 호출 앞에 RateLimiter.wait()를 거치는 LLM 래퍼."""

    def __init__(self, llm: BaseLLM, limiter: RateLimiter) -> None:
        self._llm = llm
        self._limiter = limiter

    @property
    def limiter(self) -> RateLimiter:
        return self._limiter

    def complete(self, prompt: str, **kwargs) -> str:
        self._limiter.wait()
        return self._llm.complete(prompt, **kwargs)

    def chat(self, messages: list[dict], **kwargs) -> str:
        self._limiter.wait()
        return self._llm.chat(messages, **kwargs)

    def get_model_name(self) -> str:
        return self._llm.get_model_name()

    def close(self) -> None:
        self._llm.close()
