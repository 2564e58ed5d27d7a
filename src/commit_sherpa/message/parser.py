"""LLM 응답 텍스트를 CommitMessage로 파싱."""

import logging
import re

from commit_sherpa.shared.models import CommitMessage, CommitType

logger = logging.getLogger(__name__)

CONVENTIONAL_STYLE = "conventional"

_HEADER_PATTERN = re.compile(
    r"^(?P<type>[A-Za-z]+)(?:\((?P<scope>[^)]*)\))?(?P<breaking>!)?:\s*(?P<desc>.*)$"
)
_FOOTER_PATTERN = re.compile(r"^(?:BREAKING CHANGE:|(?:Closes|Fixes)(?::|\s+#))")
_TYPE_PREFIXES = tuple(f"{t.value}:" for t in CommitType)


class ResponseParseError(ValueError):
    """LLM 응답을 해석할 수 없는 경우."""

    pass


def parse_commit_response(text: str, style: str = CONVENTIONAL_STYLE) -> CommitMessage:
    """LLM이 생성한 커밋 메시지 텍스트를 구조화.

    첫 번째 비어 있지 않은 줄이 제목이다. 이후 줄은 `BREAKING CHANGE:`,
    `Closes #N`, `Fixes #N` 형태의 첫 줄 전까지 본문, 그 뒤는 footer가 된다.

    Args:
        text: LLM 응답
        style: 메시지 스타일 (conventional, simple, detailed)

    Returns:
        CommitMessage

    Raises:
        ResponseParseError: 응답이 비어 있는 경우
    """
    cleaned = _strip_code_fence(text.strip())
    if not cleaned:
        raise ResponseParseError("LLM 응답이 비어 있습니다")

    lines = cleaned.split("\n")
    message = _parse_subject(lines[0].strip(), style)

    body_lines: list[str] = []
    footer_lines: list[str] = []
    in_footer = False
    for raw in lines[1:]:
        line = raw.strip()
        if not line:
            continue
        if _FOOTER_PATTERN.match(line):
            in_footer = True
        if in_footer:
            footer_lines.append(line)
        else:
            body_lines.append(line)

    message.body = "\n".join(body_lines)
    message.footer = "\n".join(footer_lines)
    if "BREAKING CHANGE" in message.footer:
        message.breaking = True
    return message


def _parse_subject(subject: str, style: str) -> CommitMessage:
    match = _HEADER_PATTERN.match(subject)
    if match and match.group("desc").strip():
        return CommitMessage(
            type=match.group("type").lower(),
            scope=(match.group("scope") or "").strip(),
            breaking=bool(match.group("breaking")),
            description=clean_description(match.group("desc").strip()),
        )

    if style != CONVENTIONAL_STYLE:
        # 자유 형식 스타일은 prefix 없이 제목만 사용
        return CommitMessage(type="", description=subject)

    head, sep, tail = subject.partition(":")
    if sep and tail.strip():
        commit_type = head.strip().split("(", 1)[0].removesuffix("!").strip().lower()
        logger.debug(f"비표준 conventional 헤더 복구: {subject!r}")
        return CommitMessage(
            type=commit_type or CommitType.CHORE.value,
            description=clean_description(tail.strip()),
        )
    return CommitMessage(type=CommitType.CHORE.value, description=subject)


def clean_description(description: str) -> str:
    """설명 앞에 중복된 `type:` prefix가 있으면 제거."""
    lowered = description.lower()
    for prefix in _TYPE_PREFIXES:
        if lowered.startswith(prefix):
            return description[len(prefix) :].strip()
    return description


def _strip_code_fence(text: str) -> str:
    """```로 감싼 응답이면 바깥 fence를 제거."""
    if not text.startswith("```"):
        return text
    lines = text.split("\n")[1:]
    if lines and lines[-1].strip().startswith("```"):
        lines = lines[:-1]
    return "\n".join(lines).strip()
