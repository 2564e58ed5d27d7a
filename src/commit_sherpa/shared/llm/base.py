"""LLM 추상 베이스 클래스."""

from abc import ABC, abstractmethod


class LLMError(Exception):
    """LLM 호출 실패."""

    pass


class BaseLLM(ABC):
    """LLM 어댑터의 추상 베이스 클래스.

    커밋 메시지 생성과 버전 분석 모두 프롬프트 문자열을 보내고 텍스트를
    돌려받는 것만 사용한다.
    """

    @abstractmethod
    def complete(self, prompt: str, **kwargs) -> str:
        """단일 프롬프트에 대한 완성 응답 생성.

        Args:
            prompt: 입력 프롬프트
            **kwargs: 추가 파라미터 (temperature, max_tokens 등)

        Returns:
            생성된 텍스트 응답
        """
        ...

    @abstractmethod
    def chat(self, messages: list[dict], **kwargs) -> str:
        """대화 형식의 메시지에 대한 응답 생성.

        Args:
            messages: {"role": "user|assistant|system", "content": "..."} 목록
            **kwargs: 추가 파라미터

        Returns:
            생성된 텍스트 응답
        """
        ...

    @abstractmethod
    def get_model_name(self) -> str:
        """현재 사용 중인 모델 이름."""
        ...

    def close(self) -> None:
        """SDK 클라이언트 연결 해제. 기본 구현은 아무것도 하지 않는다."""

    def __enter__(self) -> "BaseLLM":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
