"""Anthropic LLM 어댑터 구현."""

import logging
import os

from anthropic import Anthropic, AnthropicError

from .base import BaseLLM, LLMError

logger = logging.getLogger(__name__)


class AnthropicLLM(BaseLLM):
    """Anthropic messages API 어댑터.

    API 키는 인자, api_key_env 환경변수(기본 ANTHROPIC_API_KEY) 순서로 찾는다.
    """

    DEFAULT_MODEL = "claude-3-5-haiku-latest"
    DEFAULT_API_KEY_ENV = "ANTHROPIC_API_KEY"

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        api_key_env: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.3,
    ) -> None:
        """Anthropic LLM 초기화.

        Raises:
            ValueError: API 키가 설정되지 않은 경우.
        """
        env_name = api_key_env or self.DEFAULT_API_KEY_ENV
        self._api_key = api_key or os.environ.get(env_name)
        if not self._api_key:
            raise ValueError(
                "Anthropic API 키가 필요합니다. "
                f"환경변수 {env_name}를 설정하거나 api_key 파라미터를 전달하세요."
            )

        self._model = model or self.DEFAULT_MODEL
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = Anthropic(api_key=self._api_key)

    def complete(self, prompt: str, **kwargs) -> str:
        return self.chat([{"role": "user", "content": prompt}], **kwargs)

    def chat(self, messages: list[dict], **kwargs) -> str:
        """messages API 호출. system 역할 메시지는 별도 파라미터로 옮긴다.

        Raises:
            LLMError: API 호출 실패 시.
        """
        system = kwargs.get("system")
        api_messages = []
        for msg in messages:
            if msg["role"] == "system":
                system = system or msg["content"]
            else:
                api_messages.append(msg)

        create_kwargs = {
            "model": self._model,
            "messages": api_messages,
            "temperature": kwargs.get("temperature", self._temperature),
            "max_tokens": kwargs.get("max_tokens", self._max_tokens),
        }
        if system:
            create_kwargs["system"] = system

        try:
            response = self._client.messages.create(**create_kwargs)
        except AnthropicError as e:
            raise LLMError(f"Anthropic 호출 실패: {e}") from e

        logger.debug(f"Anthropic 응답 수신: model={self._model}")
        # 텍스트 블록만 이어 붙인다
        return "".join(
            block.text for block in response.content if getattr(block, "text", None)
        )

    def get_model_name(self) -> str:
        return self._model

    def close(self) -> None:
        self._client.close()
