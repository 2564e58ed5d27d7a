"""Context module - 설정/함수/성능 변경과 커밋 히스토리 분석."""

from .analyzer import ContextAnalyzer, HistorySource

__all__ = ["ContextAnalyzer", "HistorySource"]
