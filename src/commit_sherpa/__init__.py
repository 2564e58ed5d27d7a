"""Commit-Sherpa: AI 기반 커밋 메시지 생성 및 시맨틱 버전 태깅 도구."""

__version__ = "0.1.0"
