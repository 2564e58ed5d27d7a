"""LLM 응답 파서 테스트."""

import pytest

from commit_sherpa.message.parser import (
    ResponseParseError,
    clean_description,
    parse_commit_response,
)


class TestParseCommitResponse:
    """parse_commit_response 테스트."""

    def test_full_message(self) -> None:
        """제목, 본문, footer 분리."""
        text = "feat(auth): add OAuth login\n\nAdds Google provider.\n\nCloses #42"

        message = parse_commit_response(text)

        assert message.type == "feat"
        assert message.scope == "auth"
        assert message.description == "add OAuth login"
        assert message.body == "Adds Google provider."
        assert message.footer == "Closes #42"
        assert not message.breaking

    def test_code_fence_is_stripped(self) -> None:
        message = parse_commit_response("```text\nfix: handle nil config\n```")
        assert message.type == "fix"
        assert message.description == "handle nil config"

    def test_duplicated_type_prefix_dropped(self) -> None:
        message = parse_commit_response("feat: feat: add export")
        assert message.description == "add export"

    def test_breaking_marker_and_uppercase_type(self) -> None:
        message = parse_commit_response("Feat!: Drop v1 API")
        assert message.type == "feat"
        assert message.breaking

    def test_breaking_change_footer_sets_breaking(self) -> None:
        text = "refactor: remove legacy client\n\nBREAKING CHANGE: v1 client removed"
        message = parse_commit_response(text)

        assert message.breaking
        assert message.footer == "BREAKING CHANGE: v1 client removed"
        assert message.body == ""

    def test_lines_after_footer_stay_in_footer(self) -> None:
        text = "fix: patch leak\n\nFree buffers on close.\n\nFixes #3\nReviewed by ops"
        message = parse_commit_response(text)

        assert message.body == "Free buffers on close."
        assert message.footer == "Fixes #3\nReviewed by ops"

    def test_issue_footer_with_colon(self) -> None:
        message = parse_commit_response("fix: patch leak\n\nCloses: #9")
        assert message.body == ""
        assert message.footer == "Closes: #9"

    def test_sentence_starting_with_keyword_stays_in_body(self) -> None:
        """이슈 번호 없이 `Fixes`로 시작하는 문장은 본문이다."""
        message = parse_commit_response("fix: patch leak\n\nFixes the buffer reuse.")
        assert message.body == "Fixes the buffer reuse."
        assert message.footer == ""

    def test_malformed_header_uses_text_before_colon(self) -> None:
        """`type (scope): ...`처럼 어긋난 헤더는 콜론 앞을 타입으로 사용."""
        message = parse_commit_response("feat (ui): add dark mode")
        assert message.type == "feat"
        assert message.description == "add dark mode"

    def test_header_without_colon_becomes_chore(self) -> None:
        message = parse_commit_response("Update the readme")
        assert message.type == "chore"
        assert message.description == "Update the readme"

    def test_free_form_style_has_no_type(self) -> None:
        """simple/detailed 스타일에서 헤더가 없으면 prefix를 붙이지 않는다."""
        message = parse_commit_response("Update the readme", style="simple")
        assert message.type == ""
        assert message.description == "Update the readme"

    def test_free_form_style_keeps_conventional_header(self) -> None:
        message = parse_commit_response("docs: Update readme", style="detailed")
        assert message.type == "docs"

    @pytest.mark.parametrize("text", ["", "   \n", "```\n```"])
    def test_empty_response_raises(self, text: str) -> None:
        with pytest.raises(ResponseParseError):
            parse_commit_response(text)


def test_clean_description() -> None:
    assert clean_description("Fix: crash on start") == "crash on start"
    assert clean_description("crash on start") == "crash on start"
