"""MessageValidator 테스트."""

import pytest

from commit_sherpa.message.validator import (
    MessageValidator,
    ValidationConfig,
    is_imperative,
    split_header,
    suggest_imperative,
    truncate_subject,
)
from commit_sherpa.shared.models import CommitMessage


@pytest.fixture
def validator() -> MessageValidator:
    return MessageValidator()


def types_of(items) -> list[str]:
    return [item.type for item in items]


class TestSubject:
    """제목 규칙 테스트."""

    def test_valid_message(self, validator: MessageValidator) -> None:
        result = validator.validate_text("feat(auth): Add login flow")

        assert result.is_valid
        assert result.warnings == []
        assert result.suggestions == []

    def test_trailing_period_and_past_tense(self, validator: MessageValidator) -> None:
        """마침표와 과거형 동사는 각각 경고."""
        result = validator.validate_text("Added new login flow.")

        assert result.is_valid
        warnings = {w.type: w for w in result.warnings}
        assert "trailing_period" in warnings
        assert warnings["trailing_period"].suggestion == "Added new login flow"
        assert "imperative_mood" in warnings
        assert warnings["imperative_mood"].suggestion == "Add new login flow."

    def test_subject_too_long(self, validator: MessageValidator) -> None:
        """60자 제목은 길이 에러와 자르기 제안."""
        subject = "Implement a much longer subject line for the login screen ok"
        assert len(subject) == 60

        result = validator.validate_text(subject)

        assert not result.is_valid
        assert types_of(result.errors) == ["subject_length"]
        assert result.errors[0].message == (
            "Subject line is 60 characters, should be 50 or fewer"
        )
        suggestion = result.suggestions[0]
        assert suggestion.type == "subject_truncation"
        assert suggestion.original == subject
        assert len(suggestion.suggested) <= 50

    def test_empty_subject(self, validator: MessageValidator) -> None:
        result = validator.validate_text("")
        assert types_of(result.errors) == ["empty_subject"]

    def test_capitalization_checks_description(
        self, validator: MessageValidator
    ) -> None:
        """conventional prefix 뒤의 설명 첫 글자를 검사."""
        result = validator.validate_text("feat(api): add pagination")

        warning = next(w for w in result.warnings if w.type == "capitalization")
        assert warning.suggestion == "feat(api): Add pagination"

    def test_capitalization_can_be_disabled(self) -> None:
        validator = MessageValidator(ValidationConfig(enforce_capitalization=False))
        result = validator.validate_text("feat: add pagination")
        assert "capitalization" not in types_of(result.warnings)

    def test_imperative_suggestion_keeps_prefix(
        self, validator: MessageValidator
    ) -> None:
        result = validator.validate_text("fix(db): Fixed connection leak")
        warning = next(w for w in result.warnings if w.type == "imperative_mood")
        assert warning.suggestion == "fix(db): Fix connection leak"

    def test_invalid_type(self, validator: MessageValidator) -> None:
        result = validator.validate_text("wip: Add thing")
        assert types_of(result.errors) == ["invalid_type"]
        assert "'wip'" in result.errors[0].message

    @pytest.mark.parametrize("commit_type", ["feat", "revert", "security", "deps"])
    def test_allowed_types(self, validator: MessageValidator, commit_type: str) -> None:
        assert validator.validate_text(f"{commit_type}: Update thing").is_valid

    def test_multiple_changes_warning(self, validator: MessageValidator) -> None:
        result = validator.validate_text("feat: Add export and fix import")
        assert "atomic_commit" in types_of(result.warnings)


class TestBody:
    """본문 규칙 테스트."""

    def test_missing_blank_line(self, validator: MessageValidator) -> None:
        result = validator.validate_text("feat: Add export\nSupport CSV")
        assert "body_separation" in types_of(result.warnings)

    def test_long_body_line(self, validator: MessageValidator) -> None:
        text = "feat: Add export\n\n" + "x" * 80
        result = validator.validate_text(text)

        warning = next(w for w in result.warnings if w.type == "body_line_length")
        assert warning.message == "Line 1 is 80 characters, should be 72 or fewer"
        assert result.is_valid

    def test_require_body(self) -> None:
        validator = MessageValidator(ValidationConfig(require_body=True))

        assert types_of(validator.validate_text("feat: Add export").errors) == [
            "missing_body"
        ]
        assert validator.validate_text("feat: Add export\n\n- Support CSV").is_valid

    def test_breaking_change_needs_footer(self, validator: MessageValidator) -> None:
        result = validator.validate_text("feat!: Drop v1 API")
        assert "breaking_change_footer" in types_of(result.warnings)

    def test_breaking_change_with_footer(self, validator: MessageValidator) -> None:
        text = "feat!: Drop v1 API\n\nBREAKING CHANGE: v1 endpoints removed"
        result = validator.validate_text(text)
        assert "breaking_change_footer" not in types_of(result.warnings)


class TestLocalization:
    """메시지 언어 테스트."""

    def test_korean_messages(self) -> None:
        validator = MessageValidator(ValidationConfig(language="ko"))
        result = validator.validate_text("")
        assert result.errors[0].message == "제목이 비어 있습니다"

    def test_unknown_language_falls_back_to_english(self) -> None:
        validator = MessageValidator(ValidationConfig(language="fr"))
        result = validator.validate_text("")
        assert result.errors[0].message == "Subject line cannot be empty"


def test_punctuated_past_tense_is_flagged(validator: MessageValidator) -> None:
    result = validator.validate_text("fix: Fixed.")
    warnings = {w.type: w for w in result.warnings}
    assert {"trailing_period", "imperative_mood"} <= set(warnings)
    assert warnings["imperative_mood"].suggestion == "fix: Fix."


def test_validate_uses_formatted_text(validator: MessageValidator) -> None:
    """formatted가 있으면 그 텍스트를 검증한다."""
    message = CommitMessage(
        type="feat", description="whatever", formatted="Fixed stuff."
    )
    result = validator.validate(message)
    assert {"trailing_period", "imperative_mood"} <= set(types_of(result.warnings))


def test_validate_renders_message_without_formatted(
    validator: MessageValidator,
) -> None:
    message = CommitMessage(type="feat", scope="ui", description="Add dark mode")
    assert validator.validate(message).is_valid


class TestHelpers:
    """모듈 함수 테스트."""

    def test_split_header(self) -> None:
        assert split_header("feat(ui)!: Add x") == ("feat(ui)!: ", "Add x")
        assert split_header("Add x") == ("", "Add x")

    def test_is_imperative(self) -> None:
        assert is_imperative("Add feature")
        assert not is_imperative("Added feature")
        assert not is_imperative("refactoring code")
        assert is_imperative("")

    def test_is_imperative_matches_prefix(self) -> None:
        """구두점이 붙은 동사도 접두어로 잡는다."""
        assert not is_imperative("Updated.")
        assert not is_imperative("Fixed, then tested")
        assert is_imperative("Adds nothing")

    def test_suggest_imperative(self) -> None:
        assert suggest_imperative("Updated docs") == "Update docs"
        assert suggest_imperative("Add docs") == "Add docs"
        assert suggest_imperative("Fixed, then tested") == "Fix, then tested"

    def test_truncate_subject(self) -> None:
        assert truncate_subject("one two three", 9) == "one two"
        assert truncate_subject("one two three", 7) == "one two"
