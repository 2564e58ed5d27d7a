"""OpenAI LLM 어댑터 구현."""

import logging
import os

from openai import OpenAI, OpenAIError

from .base import BaseLLM, LLMError

logger = logging.getLogger(__name__)


class OpenAILLM(BaseLLM):
    """OpenAI chat completions API 어댑터.

    API 키는 인자, api_key_env 환경변수(기본 OPENAI_API_KEY) 순서로 찾는다.
    """

    DEFAULT_MODEL = "gpt-4o-mini"
    DEFAULT_API_KEY_ENV = "OPENAI_API_KEY"

    def __init__(
        self,
        model: str | None = None,
        api_key: str | None = None,
        api_key_env: str | None = None,
        max_tokens: int = 1000,
        temperature: float = 0.3,
    ) -> None:
        """OpenAI LLM 초기화.

        Raises:
            ValueError: API 키가 설정되지 않은 경우.
        """
        env_name = api_key_env or self.DEFAULT_API_KEY_ENV
        self._api_key = api_key or os.environ.get(env_name)
        if not self._api_key:
            raise ValueError(
                "OpenAI API 키가 필요합니다. "
                f"환경변수 {env_name}를 설정하거나 api_key 파라미터를 전달하세요."
            )

        self._model = model or self.DEFAULT_MODEL
        self._max_tokens = max_tokens
        self._temperature = temperature
        self._client = OpenAI(api_key=self._api_key)

    def complete(self, prompt: str, **kwargs) -> str:
        return self.chat([{"role": "user", "content": prompt}], **kwargs)

    def chat(self, messages: list[dict], **kwargs) -> str:
        """chat completions 호출.

        Raises:
            LLMError: API 호출 실패 시.
        """
        try:
            response = self._client.chat.completions.create(
                model=self._model,
                messages=messages,
                temperature=kwargs.get("temperature", self._temperature),
                max_tokens=kwargs.get("max_tokens", self._max_tokens),
            )
        except OpenAIError as e:
            raise LLMError(f"OpenAI 호출 실패: {e}") from e

        logger.debug(f"OpenAI 응답 수신: model={self._model}")
        return response.choices[0].message.content or ""

    def get_model_name(self) -> str:
        return self._model

    def close(self) -> None:
        self._client.close()
