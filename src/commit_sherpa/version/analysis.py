"""LLM 기반 버전 증가 분석."""

import json
import logging
import re
from collections.abc import Sequence
from typing import Any

from commit_sherpa.message.parser import ResponseParseError
from commit_sherpa.prompts import load_prompt
from commit_sherpa.shared.llm import BaseLLM
from commit_sherpa.shared.models import (
    BumpType,
    CommitInfo,
    ProcessedDiff,
    VersionAnalysis,
)

logger = logging.getLogger(__name__)

MAX_PROMPT_COMMITS = 5
MAX_SAMPLE_LINES = 20

_CODE_FENCE = re.compile(r"^```[\w-]*\s*|\s*```$")
_LIST_FIELDS = (
    "breaking_changes",
    "new_features",
    "bug_fixes",
    "documentation",
    "dependencies",
)


def parse_version_analysis(text: str) -> VersionAnalysis:
    """LLM 응답에서 JSON 객체를 찾아 VersionAnalysis로 변환.

    코드 펜스나 앞뒤 설명 문장이 있어도 첫 `{`부터 마지막 `}`까지를 JSON으로
    읽는다. confidence는 [0, 1]로 잘라내고, 빠진 목록 필드는 빈 목록이 된다.

    Raises:
        ResponseParseError: JSON이 없거나 깨졌거나 bump 값이 잘못된 경우
    """
    cleaned = _CODE_FENCE.sub("", text.strip()).strip()
    start = cleaned.find("{")
    end = cleaned.rfind("}")
    if start == -1 or end == -1 or start >= end:
        raise ResponseParseError("응답에서 JSON 객체를 찾을 수 없습니다")

    try:
        raw = json.loads(cleaned[start : end + 1])
    except json.JSONDecodeError as e:
        raise ResponseParseError(f"JSON 파싱 실패: {e}") from e
    if not isinstance(raw, dict):
        raise ResponseParseError("응답 JSON이 객체가 아닙니다")

    bump_value = str(raw.get("recommended_bump", "")).strip().lower()
    try:
        bump = BumpType(bump_value)
    except ValueError as e:
        raise ResponseParseError(f"유효하지 않은 bump 타입: {bump_value!r}") from e

    return VersionAnalysis(
        recommended_bump=bump,
        confidence=_clamp_confidence(raw.get("confidence")),
        reasoning=str(raw.get("reasoning") or ""),
        **{name: _string_list(raw.get(name)) for name in _LIST_FIELDS},
    )


def _clamp_confidence(value: Any) -> float:
    try:
        confidence = float(value)
    except (TypeError, ValueError):
        return 0.0
    return min(max(confidence, 0.0), 1.0)


def _string_list(value: Any) -> list[str]:
    if not value:
        return []
    if isinstance(value, str):
        return [value]
    return [str(item) for item in value]


class VersionAnalyst:
    """ProcessedDiff와 커밋 히스토리로 LLM에 bump 추천을 요청."""

    def __init__(self, llm: BaseLLM) -> None:
        self.llm = llm

    def analyze(
        self, processed: ProcessedDiff, recent_commits: Sequence[CommitInfo] = ()
    ) -> VersionAnalysis:
        """버전 분석 실행.

        Raises:
            ResponseParseError: 응답 형식이 잘못된 경우
            LLMError: LLM 호출이 실패한 경우
        """
        prompt = self.build_prompt(processed, recent_commits)
        logger.info(f"버전 분석 요청: {processed.total_files}개 파일")
        response = self.llm.complete(prompt)
        analysis = parse_version_analysis(response)
        logger.debug(
            f"버전 분석 결과: {analysis.recommended_bump.value} "
            f"(confidence={analysis.confidence:.2f})"
        )
        return analysis

    def build_prompt(
        self, processed: ProcessedDiff, recent_commits: Sequence[CommitInfo] = ()
    ) -> str:
        commits = [
            f"- {c.short_hash}: {c.subject}"
            for c in recent_commits[:MAX_PROMPT_COMMITS]
        ]
        return load_prompt(
            "version/analyze",
            recent_commits=commits or "(none)",
            total_files=processed.total_files,
            total_added=processed.total_added,
            total_deleted=processed.total_deleted,
            languages=", ".join(processed.languages) or "(unknown)",
            file_changes=_describe_files(processed),
        )


def _describe_files(processed: ProcessedDiff) -> str:
    lines = ["## File changes"]
    for file in processed.files:
        lines.append(
            f"- {file.path} ({file.change_type.value}): "
            f"+{file.lines_added} -{file.lines_deleted} lines"
        )
        sample = [
            line
            for line in file.content.split("\n")[:MAX_SAMPLE_LINES]
            if line.startswith(("+", "-")) and not line.startswith(("+++", "---"))
        ]
        if sample:
            lines.append("  Sample changes:")
            lines.extend(f"    {line}" for line in sample)
    return "\n".join(lines)
