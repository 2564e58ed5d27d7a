"""Diff module - unified diff 파싱과 우선순위/청크 처리."""

from .parser import DiffParseError, DiffParser, build_summary
from .processor import DiffProcessor, ImportanceRule, NoChangesError

__all__ = [
    "DiffParseError",
    "DiffParser",
    "DiffProcessor",
    "ImportanceRule",
    "NoChangesError",
    "build_summary",
]
