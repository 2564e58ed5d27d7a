"""CommitGenerator 테스트."""

from pathlib import Path
from unittest.mock import MagicMock

import pytest

from commit_sherpa.diff.processor import NoChangesError
from commit_sherpa.generate.runner import (
    CommitGenerator,
    GenerationError,
    build_preview,
)
from commit_sherpa.message.parser import ResponseParseError
from commit_sherpa.shared.config import AppConfig
from commit_sherpa.shared.git import GitError
from commit_sherpa.shared.llm import BaseLLM, LLMError
from commit_sherpa.shared.models import CommitInfo

CLIENT_DIFF = (
    "diff --git a/internal/ai/client.go b/internal/ai/client.go\n"
    "index 1111111..2222222 100644\n"
    "--- a/internal/ai/client.go\n"
    "+++ b/internal/ai/client.go\n"
    "@@ -1,2 +1,3 @@\n"
    " package ai\n"
    "+const maxRetries = 3\n"
)

LOCK_DIFF = (
    "diff --git a/yarn.lock b/yarn.lock\n"
    "index 3333333..4444444 100644\n"
    "--- a/yarn.lock\n"
    "+++ b/yarn.lock\n"
    "@@ -1 +1 @@\n"
    "-old\n"
    "+new\n"
)

CONVENTIONAL_RESPONSE = "feat: add retry to client\n\nRetry failed requests."


@pytest.fixture
def git(mocker) -> MagicMock:
    git = mocker.MagicMock()
    git.path = Path("/repo")
    git.is_valid_repo.return_value = True
    git.get_diff.return_value = CLIENT_DIFF + LOCK_DIFF
    git.get_recent_commits.return_value = [
        CommitInfo("a" * 40, "fix: Handle timeout", "dev", None)
    ]
    git.get_file_history.return_value = []
    return git


@pytest.fixture
def llm(mocker) -> MagicMock:
    llm = mocker.MagicMock(spec=BaseLLM)
    llm.complete.return_value = CONVENTIONAL_RESPONSE
    return llm


@pytest.fixture
def generator(git: MagicMock, llm: MagicMock) -> CommitGenerator:
    return CommitGenerator(git, llm=llm)


class TestGenerate:
    """generate() 테스트."""

    def test_dry_run(self, generator: CommitGenerator, git: MagicMock) -> None:
        """dry-run은 커밋하지 않고 미리보기만 만든다."""
        result = generator.generate(dry_run=True)

        assert result.message.formatted == (
            "feat(ai): Add retry to client\n\n- Retry failed requests."
        )
        assert result.message.subject == "feat(ai): Add retry to client"
        assert result.scope == "ai"
        assert result.validation.is_valid
        assert not result.committed
        assert result.preview.startswith("Commit Message:\nfeat(ai): Add retry")
        git.commit.assert_not_called()
        git.get_diff.assert_called_once_with(staged=True)

    def test_commits_formatted_message(
        self, generator: CommitGenerator, git: MagicMock
    ) -> None:
        result = generator.generate()

        assert result.committed
        git.commit.assert_called_once_with(result.message.formatted)

    def test_ignored_files_are_dropped(self, generator: CommitGenerator) -> None:
        """기본 ignore_files 패턴으로 yarn.lock이 제외된다."""
        result = generator.generate(dry_run=True)

        paths = [f.path for f in result.processed_diff.files]
        assert paths == ["internal/ai/client.go"]
        assert result.processed_diff.languages == {"Go": 1}

    def test_model_scope_is_kept(
        self, generator: CommitGenerator, llm: MagicMock
    ) -> None:
        llm.complete.return_value = "fix(net): handle reset"
        result = generator.generate(dry_run=True)
        assert result.message.formatted == "fix(net): Handle reset"

    def test_simple_style_has_no_prefix(
        self, generator: CommitGenerator, llm: MagicMock
    ) -> None:
        """자유 형식 스타일은 경로 scope를 붙이지 않는다."""
        llm.complete.return_value = "Add retry to client"
        result = generator.generate(style="simple", dry_run=True)

        assert result.message.type == ""
        assert result.message.formatted == "Add retry to client"

    def test_no_changes(self, generator: CommitGenerator, git: MagicMock) -> None:
        git.get_diff.return_value = ""
        with pytest.raises(NoChangesError, match="git add"):
            generator.generate()

    def test_only_ignored_changes(
        self, generator: CommitGenerator, git: MagicMock
    ) -> None:
        git.get_diff.return_value = LOCK_DIFF
        with pytest.raises(NoChangesError):
            generator.generate()

    def test_not_a_work_tree(self, generator: CommitGenerator, git: MagicMock) -> None:
        git.is_valid_repo.return_value = False
        with pytest.raises(GitError):
            generator.generate()
        git.get_diff.assert_not_called()

    def test_unknown_style(self, generator: CommitGenerator, git: MagicMock) -> None:
        """지원하지 않는 스타일은 diff를 읽기 전에 실패한다."""
        with pytest.raises(ValueError, match="poem"):
            generator.generate(style="poem")
        git.get_diff.assert_not_called()

    def test_empty_response(self, generator: CommitGenerator, llm: MagicMock) -> None:
        llm.complete.return_value = "   "
        with pytest.raises(ResponseParseError):
            generator.generate(dry_run=True)

    def test_llm_error_propagates(
        self, generator: CommitGenerator, llm: MagicMock, git: MagicMock
    ) -> None:
        llm.complete.side_effect = LLMError("quota")
        with pytest.raises(LLMError):
            generator.generate()
        git.commit.assert_not_called()

    def test_unstaged_from_config(self, git: MagicMock, llm: MagicMock) -> None:
        config = AppConfig()
        config.diff.include_staged = False

        CommitGenerator(git, llm=llm, config=config).generate(dry_run=True)

        git.get_diff.assert_called_once_with(staged=False)


class TestGenerateOptions:
    """generate_options() 테스트."""

    def test_cycles_styles(self, generator: CommitGenerator, llm: MagicMock) -> None:
        """스타일을 지정하지 않으면 conventional, simple, detailed 순서."""
        llm.complete.side_effect = [
            CONVENTIONAL_RESPONSE,
            "Add retry to client",
            "feat: add retry\n\nRetry failed requests.",
        ]

        options = generator.generate_options(3)

        assert len(options) == 3
        assert options[0].formatted.startswith("feat(ai): ")
        assert options[1].formatted == "Add retry to client"
        prompts = [c.args[0] for c in llm.complete.call_args_list]
        assert "Do not use a `type:` prefix" in prompts[1]

    def test_failed_option_is_skipped(
        self, generator: CommitGenerator, llm: MagicMock
    ) -> None:
        llm.complete.side_effect = [
            CONVENTIONAL_RESPONSE,
            LLMError("boom"),
            "",
        ]
        options = generator.generate_options(3, style="conventional")
        assert len(options) == 1

    def test_all_options_fail(self, generator: CommitGenerator, llm: MagicMock) -> None:
        llm.complete.side_effect = LLMError("boom")
        with pytest.raises(GenerationError):
            generator.generate_options(2)

    @pytest.mark.parametrize(("requested", "expected"), [(0, 3), (9, 5)])
    def test_count_bounds(
        self,
        generator: CommitGenerator,
        llm: MagicMock,
        requested: int,
        expected: int,
    ) -> None:
        assert len(generator.generate_options(requested)) == expected
        assert llm.complete.call_count == expected

    def test_commit_selected_option(
        self, generator: CommitGenerator, git: MagicMock
    ) -> None:
        option = generator.generate_options(1)[0]
        generator.commit(option)
        git.commit.assert_called_once_with(option.formatted)


class TestBuildPrompt:
    """프롬프트 구성 테스트."""

    def test_conventional_prompt(self, generator: CommitGenerator) -> None:
        processed = generator.change_summary()
        prompt = generator.build_prompt(processed, "ai", "conventional")

        assert "Suggested scope based on the changed paths: `ai`" in prompt
        assert "## Change Summary" in prompt
        assert "## Recent commit history" in prompt
        assert "fix: Handle timeout" in prompt
        assert "+const maxRetries = 3" in prompt
        assert "yarn.lock" not in prompt

    def test_scope_hint_only_for_conventional(
        self, generator: CommitGenerator
    ) -> None:
        processed = generator.change_summary()
        prompt = generator.build_prompt(processed, "ai", "simple")
        assert "Suggested scope" not in prompt

    def test_korean_hint(self, git: MagicMock, llm: MagicMock) -> None:
        config = AppConfig()
        config.message.language = "ko"
        generator = CommitGenerator(git, llm=llm, config=config)

        prompt = generator.build_prompt(generator.change_summary(), "", "conventional")
        assert "Write the description and body in Korean" in prompt

    def test_diff_is_truncated(self, git: MagicMock, llm: MagicMock) -> None:
        """max_diff_size를 넘는 diff 발췌는 잘린다."""
        config = AppConfig()
        config.diff.max_diff_size = 20
        generator = CommitGenerator(git, llm=llm, config=config)

        prompt = generator.build_prompt(generator.change_summary(), "", "simple")
        assert "... (truncated)" in prompt
        assert "+const maxRetries = 3" not in prompt


class TestChangeSummary:
    """LLM 없이 diff만 처리."""

    def test_does_not_call_llm(
        self, generator: CommitGenerator, llm: MagicMock
    ) -> None:
        processed = generator.change_summary(staged=False)

        assert processed.total_files == 1
        assert processed.change_context is not None
        llm.complete.assert_not_called()

    def test_history_failure_is_ignored(
        self, generator: CommitGenerator, git: MagicMock
    ) -> None:
        git.get_recent_commits.side_effect = GitError("no history")
        processed = generator.change_summary()
        assert processed.change_context.recent_commits == []


def test_close_releases_llm(generator: CommitGenerator, llm: MagicMock) -> None:
    generator.close()
    llm.close.assert_called_once()


def test_preview_lists_validation_issues(generator: CommitGenerator) -> None:
    result = generator.generate(dry_run=True)
    result.message.formatted = "Added stuff."
    validation = generator.validator.validate_text("Added stuff.")

    preview = build_preview(result.message, result.processed_diff, validation)

    assert "Validation:" in preview
    assert "  [warning] " in preview
    assert "  [suggestion] " not in preview
    assert preview.endswith("\n")


def test_preview_lists_suggestions(generator: CommitGenerator) -> None:
    """자르기 제안도 미리보기에 포함된다."""
    result = generator.generate(dry_run=True)
    subject = "Implement a much longer subject line for the login screen ok"
    validation = generator.validator.validate_text(subject)

    preview = build_preview(result.message, result.processed_diff, validation)

    assert "  [error] " in preview
    assert "  [suggestion] Consider shortening the subject line: " in preview
