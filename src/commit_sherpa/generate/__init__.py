"""Generate module - diff에서 커밋 메시지를 생성하는 파이프라인."""

from .runner import CommitGenerator, GenerationError

__all__ = ["CommitGenerator", "GenerationError"]
