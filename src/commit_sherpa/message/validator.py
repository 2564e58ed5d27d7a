"""커밋 메시지 best-practice 검증.

검증 결과는 예외가 아니라 ValidationResult로 보고한다. 에러가 하나라도
있으면 유효하지 않고, 경고와 제안은 커밋을 막지 않는다.
"""

import logging
import re
from dataclasses import dataclass, field

from commit_sherpa.message.formatter import truncate_at_word
from commit_sherpa.shared.models import (
    CommitMessage,
    CommitType,
    ValidationError,
    ValidationResult,
    ValidationSuggestion,
    ValidationWarning,
)

logger = logging.getLogger(__name__)

DEFAULT_ALLOWED_TYPES: tuple[str, ...] = tuple(t.value for t in CommitType) + (
    "security",
    "deps",
)

_HEADER_PATTERN = re.compile(r"^([a-z]+)(\([^)]+\))?(!)?: (.+)$")

# 과거형/진행형 동사 -> 명령형
IMPERATIVE_REPLACEMENTS: dict[str, str] = {
    "added": "add",
    "adding": "add",
    "fixed": "fix",
    "fixing": "fix",
    "updated": "update",
    "updating": "update",
    "removed": "remove",
    "removing": "remove",
    "changed": "change",
    "changing": "change",
    "implemented": "implement",
    "implementing": "implement",
    "refactored": "refactor",
    "refactoring": "refactor",
}

MULTIPLE_CHANGE_INDICATORS: tuple[str, ...] = (
    " and ",
    " & ",
    ", ",
    " + ",
    " also ",
    " additionally ",
    " furthermore ",
    " moreover ",
    " besides ",
    " as well as ",
    " along with ",
)

BREAKING_FOOTER = "BREAKING CHANGE:"

_MESSAGES: dict[str, dict[str, str]] = {
    "en": {
        "subject_too_long": "Subject line is {0} characters, should be {1} or fewer",
        "suggest_truncation": "Consider shortening the subject line",
        "no_trailing_period": "Remove trailing period from subject line",
        "capitalize_first_letter": "Capitalize the first letter of the subject line",
        "use_imperative_mood": "Use imperative mood (e.g., 'Fix bug' not 'Fixed bug')",
        "empty_subject": "Subject line cannot be empty",
        "body_line_too_long": "Line {0} is {1} characters, should be {2} or fewer",
        "body_needs_blank_line": "Add blank line between subject and body",
        "invalid_commit_type": "Invalid commit type '{0}'. Use: {1}",
        "consider_atomic_commits": "Consider splitting into multiple atomic commits",
        "breaking_change_needs_footer": (
            "Breaking changes should include 'BREAKING CHANGE:' footer"
        ),
        "body_required": "Commit body is required",
    },
    "ko": {
        "subject_too_long": "제목이 {0}자입니다. {1}자 이하로 작성하세요",
        "suggest_truncation": "제목을 줄이는 것을 고려하세요",
        "no_trailing_period": "제목 끝의 마침표를 제거하세요",
        "capitalize_first_letter": "제목의 첫 글자를 대문자로 쓰세요",
        "use_imperative_mood": "명령형을 사용하세요 (예: 'Fixed bug'가 아닌 'Fix bug')",
        "empty_subject": "제목이 비어 있습니다",
        "body_line_too_long": "{0}번째 줄이 {1}자입니다. {2}자 이하로 작성하세요",
        "body_needs_blank_line": "제목과 본문 사이에 빈 줄을 추가하세요",
        "invalid_commit_type": "유효하지 않은 커밋 타입 '{0}'. 사용 가능: {1}",
        "consider_atomic_commits": "여러 개의 작은 커밋으로 나누는 것을 고려하세요",
        "breaking_change_needs_footer": (
            "Breaking change에는 'BREAKING CHANGE:' footer가 필요합니다"
        ),
        "body_required": "커밋 본문이 필요합니다",
    },
}


@dataclass
class ValidationConfig:
    """검증 설정."""

    max_subject_length: int = 50
    max_body_line_length: int = 72
    enforce_imperative: bool = True
    enforce_capitalization: bool = True
    allowed_types: list[str] = field(
        default_factory=lambda: list(DEFAULT_ALLOWED_TYPES)
    )
    require_body: bool = False
    language: str = "en"


class MessageValidator:
    """커밋 메시지를 다시 파싱해 규칙 위반을 수집."""

    def __init__(self, config: ValidationConfig | None = None) -> None:
        self.config = config or ValidationConfig()
        if self.config.language not in _MESSAGES:
            logger.warning(
                f"지원하지 않는 검증 메시지 언어: {self.config.language}, en 사용"
            )

    def validate(self, message: CommitMessage) -> ValidationResult:
        """구조화된 메시지 검증. 포맷된 텍스트가 있으면 그것을 검증한다."""
        return self.validate_text(message.formatted or str(message))

    def validate_text(self, text: str) -> ValidationResult:
        """렌더링된 커밋 메시지 텍스트 검증.

        Args:
            text: 제목, 빈 줄, 본문, footer 순서의 커밋 메시지

        Returns:
            ValidationResult
        """
        result = ValidationResult()
        lines = text.strip("\n").split("\n")
        subject = lines[0].rstrip() if lines else ""
        rest = lines[1:]

        self._check_subject(subject, result)

        if rest and rest[0].strip():
            result.warnings.append(
                ValidationWarning(
                    type="body_separation",
                    message=self._message("body_needs_blank_line"),
                )
            )

        body_lines = rest[1:] if rest and not rest[0].strip() else rest
        body = "\n".join(body_lines)
        self._check_body(body_lines, result)

        if self.config.require_body and not body.strip():
            result.errors.append(
                ValidationError(
                    type="missing_body", message=self._message("body_required")
                )
            )

        header = _HEADER_PATTERN.match(subject)
        if header and header.group(3) and BREAKING_FOOTER not in body:
            result.warnings.append(
                ValidationWarning(
                    type="breaking_change_footer",
                    message=self._message("breaking_change_needs_footer"),
                )
            )

        self._check_atomic(subject, result)
        return result

    def _check_subject(self, subject: str, result: ValidationResult) -> None:
        if not subject.strip():
            result.errors.append(
                ValidationError(
                    type="empty_subject", message=self._message("empty_subject")
                )
            )
            return

        max_length = self.config.max_subject_length
        if len(subject) > max_length:
            result.errors.append(
                ValidationError(
                    type="subject_length",
                    message=self._message("subject_too_long", len(subject), max_length),
                )
            )
            result.suggestions.append(
                ValidationSuggestion(
                    type="subject_truncation",
                    message=self._message("suggest_truncation"),
                    original=subject,
                    suggested=truncate_subject(subject, max_length),
                )
            )

        if subject.endswith("."):
            result.warnings.append(
                ValidationWarning(
                    type="trailing_period",
                    message=self._message("no_trailing_period"),
                    suggestion=subject.removesuffix("."),
                )
            )

        prefix, description = split_header(subject)
        header = _HEADER_PATTERN.match(subject)
        if header and header.group(1) not in self.config.allowed_types:
            result.errors.append(
                ValidationError(
                    type="invalid_type",
                    message=self._message(
                        "invalid_commit_type",
                        header.group(1),
                        ", ".join(self.config.allowed_types),
                    ),
                )
            )

        # 대문자 검사는 conventional prefix 뒤의 설명에 적용
        if (
            self.config.enforce_capitalization
            and description
            and description[0].isalpha()
            and not description[0].isupper()
        ):
            result.warnings.append(
                ValidationWarning(
                    type="capitalization",
                    message=self._message("capitalize_first_letter"),
                    suggestion=prefix + description[0].upper() + description[1:],
                )
            )

        if self.config.enforce_imperative and not is_imperative(description):
            result.warnings.append(
                ValidationWarning(
                    type="imperative_mood",
                    message=self._message("use_imperative_mood"),
                    suggestion=prefix + suggest_imperative(description),
                )
            )

    def _check_body(self, body_lines: list[str], result: ValidationResult) -> None:
        max_length = self.config.max_body_line_length
        for number, line in enumerate(body_lines, start=1):
            if not line.strip():
                continue
            if len(line) > max_length:
                result.warnings.append(
                    ValidationWarning(
                        type="body_line_length",
                        message=self._message(
                            "body_line_too_long", number, len(line), max_length
                        ),
                    )
                )

    def _check_atomic(self, subject: str, result: ValidationResult) -> None:
        lowered = subject.lower()
        if any(indicator in lowered for indicator in MULTIPLE_CHANGE_INDICATORS):
            result.warnings.append(
                ValidationWarning(
                    type="atomic_commit",
                    message=self._message("consider_atomic_commits"),
                )
            )

    def _message(self, key: str, *args: object) -> str:
        messages = _MESSAGES.get(self.config.language, _MESSAGES["en"])
        template = messages.get(key) or _MESSAGES["en"].get(key)
        if template is None:
            return f"Validation message not found: {key}"
        return template.format(*args)


def split_header(subject: str) -> tuple[str, str]:
    """제목을 (`type(scope)!: ` prefix, 설명)으로 분리. prefix가 없으면 빈 문자열."""
    match = _HEADER_PATTERN.match(subject)
    if not match:
        return "", subject
    return subject[: match.start(4)], match.group(4)


def _non_imperative_prefix(description: str) -> str | None:
    """설명이 과거형/진행형 동사로 시작하면 그 동사를 돌려준다."""
    lowered = description.lstrip().lower()
    for verb in IMPERATIVE_REPLACEMENTS:
        if lowered.startswith(verb):
            return verb
    return None


def is_imperative(description: str) -> bool:
    """과거형/진행형 동사 목록으로 시작하지 않으면 명령형으로 본다."""
    return _non_imperative_prefix(description) is None


def suggest_imperative(description: str) -> str:
    """앞의 동사를 명령형으로 바꾼 설명. 바꿀 동사가 없으면 그대로."""
    verb = _non_imperative_prefix(description)
    if verb is None:
        return description
    rest = description.lstrip()[len(verb) :]
    replacement = IMPERATIVE_REPLACEMENTS[verb]
    return replacement[:1].upper() + replacement[1:] + rest


def truncate_subject(subject: str, max_length: int) -> str:
    """단어 경계에서 제목을 자른다."""
    return truncate_at_word(subject, max_length)
