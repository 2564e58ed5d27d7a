"""Scope module - 변경 경로 기반 커밋 scope 추론."""

from .detector import ScopeDetector

__all__ = ["ScopeDetector"]
