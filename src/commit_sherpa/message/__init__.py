"""Message module - 커밋 메시지 포맷, 검증, 응답 파싱."""

from .formatter import FormatterConfig, MessageFormatter
from .parser import ResponseParseError, parse_commit_response
from .validator import MessageValidator, ValidationConfig

__all__ = [
    "FormatterConfig",
    "MessageFormatter",
    "MessageValidator",
    "ResponseParseError",
    "ValidationConfig",
    "parse_commit_response",
]
