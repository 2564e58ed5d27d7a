"""LLM adapters - LLM 제공자 어댑터와 호출 간격 제한."""

from commit_sherpa.shared.config import LLMConfig

from .anthropic import AnthropicLLM
from .base import BaseLLM, LLMError
from .openai import OpenAILLM
from .rate_limit import RateLimitedLLM, RateLimiter

__all__ = [
    "AnthropicLLM",
    "BaseLLM",
    "LLMError",
    "OpenAILLM",
    "RateLimitedLLM",
    "RateLimiter",
    "create_llm",
    "get_llm",
]


def get_llm(provider: str = "openai", model: str | None = None, **kwargs) -> BaseLLM:
    """제공자 이름으로 LLM 인스턴스 생성.

    Args:
        provider: "openai" 또는 "anthropic"
        model: 모델명. None이면 제공자별 기본값.
        **kwargs: api_key, api_key_env, max_tokens, temperature

    Raises:
        ValueError: 지원하지 않는 제공자인 경우.

    Examples:
        >>> llm = get_llm("anthropic", max_tokens=500)
    """
    provider = provider.lower()

    if provider == "openai":
        return OpenAILLM(model=model, **kwargs)
    if provider == "anthropic":
        return AnthropicLLM(model=model, **kwargs)
    raise ValueError(
        f"지원하지 않는 LLM 제공자입니다: {provider}. "
        "'openai' 또는 'anthropic'을 사용하세요."
    )


def create_llm(config: LLMConfig) -> BaseLLM:
    """설정으로 rate limit이 적용된 LLM 생성.

    Raises:
        ValueError: 제공자가 잘못됐거나 API 키가 없는 경우.
    """
    llm = get_llm(
        config.provider,
        model=config.model,
        api_key_env=config.api_key_env,
        max_tokens=config.max_tokens,
        temperature=config.temperature,
    )
    return RateLimitedLLM(llm, RateLimiter(config.requests_per_minute))
