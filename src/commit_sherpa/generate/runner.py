"""Commit Generator - diff에서 커밋 메시지를 생성하는 실행기."""

import logging
from dataclasses import replace
from fnmatch import fnmatch
from pathlib import PurePosixPath

from commit_sherpa.context.analyzer import ContextAnalyzer
from commit_sherpa.diff.parser import DiffParser, build_summary
from commit_sherpa.diff.processor import DiffProcessor, NoChangesError
from commit_sherpa.message.formatter import FormatterConfig, MessageFormatter
from commit_sherpa.message.parser import ResponseParseError, parse_commit_response
from commit_sherpa.message.validator import MessageValidator, ValidationConfig
from commit_sherpa.prompts import load_prompt
from commit_sherpa.scope.detector import ScopeDetector
from commit_sherpa.shared.config import AppConfig
from commit_sherpa.shared.git import GitClient, GitError
from commit_sherpa.shared.llm import BaseLLM, LLMError, create_llm
from commit_sherpa.shared.models import (
    CommitMessage,
    DiffSummary,
    GenerationResult,
    ProcessedDiff,
    ValidationResult,
)

logger = logging.getLogger(__name__)

STYLES = ("conventional", "simple", "detailed")
DEFAULT_OPTION_COUNT = 3
MAX_OPTION_COUNT = 5

MAX_PROMPT_COMMITS = 5
MAX_PROMPT_CHUNKS = 3
MAX_PREVIEW_CHUNKS = 5


class GenerationError(Exception):
    """커밋 메시지를 하나도 생성하지 못한 경우."""

    pass


class CommitGenerator:
    """staged diff로 conventional commit 메시지를 생성하고 커밋한다.

    파이프라인: diff 파싱 -> 무시 패턴 필터 -> 우선순위/청크 -> 컨텍스트 분석
    -> scope 추론 -> LLM 호출 -> 응답 파싱 -> 포맷 -> 검증 -> 커밋.
    """

    def __init__(
        self,
        git: GitClient,
        llm: BaseLLM | None = None,
        config: AppConfig | None = None,
        scope_detector: ScopeDetector | None = None,
        context_analyzer: ContextAnalyzer | None = None,
    ) -> None:
        """CommitGenerator 초기화.

        Args:
            git: 저장소 클라이언트
            llm: LLM 인스턴스. None이면 설정으로 처음 사용할 때 생성.
            config: 애플리케이션 설정. None이면 기본값.
            scope_detector: scope 추론기
            context_analyzer: 컨텍스트 분석기. None이면 git 히스토리 사용.
        """
        self.git = git
        self.config = config or AppConfig()
        self._llm = llm

        message_config = self.config.message
        self.parser = DiffParser()
        self.processor = DiffProcessor(
            max_chunk_size=self.config.diff.max_chunk_size,
            max_files=self.config.diff.max_files,
        )
        self.scope_detector = scope_detector or ScopeDetector()
        self.context_analyzer = context_analyzer or ContextAnalyzer(history=git)
        self.formatter = MessageFormatter(
            FormatterConfig(
                max_subject_length=message_config.max_subject_length,
                max_body_line_length=message_config.max_body_line_length,
            )
        )
        self.validator = MessageValidator(
            ValidationConfig(
                max_subject_length=message_config.max_subject_length,
                max_body_line_length=message_config.max_body_line_length,
                enforce_imperative=message_config.enforce_imperative,
                enforce_capitalization=message_config.enforce_capitalization,
                require_body=message_config.require_body,
                language=message_config.language,
            )
        )

    @property
    def llm(self) -> BaseLLM:
        """LLM 인스턴스 (지연 생성)."""
        if self._llm is None:
            self._llm = create_llm(self.config.llm)
        return self._llm

    def close(self) -> None:
        if self._llm is not None:
            self._llm.close()

    # ============================================================
    # 공개 API
    # ============================================================

    def change_summary(self, staged: bool | None = None) -> ProcessedDiff:
        """LLM 호출 없이 처리된 diff와 컨텍스트를 반환.

        Raises:
            NoChangesError: 변경사항이 없는 경우
        """
        return self._prepare(self._staged(staged))

    def generate(
        self,
        staged: bool | None = None,
        style: str | None = None,
        dry_run: bool = False,
    ) -> GenerationResult:
        """커밋 메시지 생성 후 dry-run이 아니면 커밋.

        Args:
            staged: staged 변경사항 사용 여부. None이면 설정값.
            style: conventional, simple, detailed. None이면 설정값.
            dry_run: True이면 커밋하지 않고 미리보기만.

        Returns:
            GenerationResult 객체

        Raises:
            NoChangesError: 변경사항이 없는 경우
            GitError: 저장소 조회나 커밋이 실패한 경우
            LLMError: LLM 호출이 실패한 경우
            ResponseParseError: LLM 응답이 비어 있는 경우
        """
        style = self._style(style)
        processed = self._prepare(self._staged(staged))
        scope = self._scope(processed)

        message = self._generate_message(processed, scope, style)
        validation = self.validator.validate_text(message.formatted)
        result = GenerationResult(
            message=message,
            processed_diff=processed,
            validation=validation,
            scope=scope,
            preview=build_preview(message, processed, validation),
        )

        if not dry_run:
            self.git.commit(message.formatted)
            result.committed = True
            logger.info(f"커밋 완료: {message.subject}")
        return result

    def generate_options(
        self,
        count: int = DEFAULT_OPTION_COUNT,
        staged: bool | None = None,
        style: str | None = None,
    ) -> list[CommitMessage]:
        """여러 후보 메시지 생성. style이 없으면 스타일을 번갈아 사용.

        개별 후보의 실패는 경고 후 건너뛴다.

        Raises:
            NoChangesError: 변경사항이 없는 경우
            GenerationError: 후보를 하나도 만들지 못한 경우
        """
        if count <= 0:
            count = DEFAULT_OPTION_COUNT
        count = min(count, MAX_OPTION_COUNT)
        if style is not None:
            style = self._style(style)

        processed = self._prepare(self._staged(staged))
        scope = self._scope(processed)

        messages: list[CommitMessage] = []
        for i in range(count):
            option_style = style or STYLES[i % len(STYLES)]
            try:
                messages.append(self._generate_message(processed, scope, option_style))
            except (LLMError, ResponseParseError) as e:
                logger.warning(f"후보 {i + 1} 생성 실패: {e}")

        if not messages:
            raise GenerationError("커밋 메시지 후보를 하나도 생성하지 못했습니다")
        return messages

    def commit(self, message: CommitMessage) -> None:
        """선택한 메시지로 커밋."""
        self.git.commit(message.formatted or str(message))

    # ============================================================
    # 파이프라인 단계
    # ============================================================

    def _prepare(self, staged: bool) -> ProcessedDiff:
        if not self.git.is_valid_repo():
            raise GitError(f"작업 트리가 있는 Git 저장소가 아닙니다: {self.git.path}")

        diff_text = self.git.get_diff(staged=staged)
        summary = self.filter_ignored(self.parser.parse(diff_text))
        if not summary.files:
            hint = " 'git add'로 변경사항을 stage 하세요." if staged else ""
            raise NoChangesError(f"변경사항이 없습니다.{hint}")

        processed = self.processor.process(summary)
        processed.change_context = self.context_analyzer.analyze(summary)
        return processed

    def filter_ignored(self, summary: DiffSummary) -> DiffSummary:
        """ignore_files 패턴에 맞는 파일 제외. 경로 전체나 파일 이름으로 비교."""
        patterns = self.config.diff.ignore_files
        if not patterns:
            return summary

        kept = []
        for file in summary.files:
            name = PurePosixPath(file.path).name
            if any(fnmatch(file.path, p) or fnmatch(name, p) for p in patterns):
                logger.debug(f"무시 패턴에 의해 제외: {file.path}")
                continue
            kept.append(file)

        if len(kept) == len(summary.files):
            return summary
        return build_summary(kept)

    def _scope(self, processed: ProcessedDiff) -> str:
        if processed.diff_summary is None:
            return ""
        return self.scope_detector.detect_scope(processed.diff_summary)

    def _generate_message(
        self, processed: ProcessedDiff, scope: str, style: str
    ) -> CommitMessage:
        prompt = self.build_prompt(processed, scope, style)
        response = self.llm.complete(prompt)
        message = parse_commit_response(response, style)

        # 모델이 scope를 생략했으면 경로 기반 scope 사용
        if message.type and not message.scope and scope:
            message.scope = scope

        formatted = self.formatter.format(message)
        return replace(message, formatted=formatted, subject=formatted.split("\n")[0])

    def build_prompt(self, processed: ProcessedDiff, scope: str, style: str) -> str:
        """스타일별 프롬프트 템플릿에 diff 컨텍스트를 채운다."""
        scope_hint = ""
        if scope and style == "conventional":
            scope_hint = (
                f"\nSuggested scope based on the changed paths: `{scope}`. "
                "Use it unless a better scope is obvious.\n"
            )
        language_hint = ""
        if self.config.message.language == "ko":
            language_hint = (
                "\nWrite the description and body in Korean. "
                "Keep the commit type and scope in English.\n"
            )

        return load_prompt(
            f"commit/{style}",
            scope_hint=scope_hint,
            context=build_context_section(processed, self.config.diff.max_diff_size),
            max_subject_length=self.config.message.max_subject_length,
            language_hint=language_hint,
        )

    def _staged(self, staged: bool | None) -> bool:
        return self.config.diff.include_staged if staged is None else staged

    def _style(self, style: str | None) -> str:
        style = style or self.config.message.style
        if style not in STYLES:
            raise ValueError(
                f"지원하지 않는 메시지 스타일: {style} ({', '.join(STYLES)} 중 하나)"
            )
        return style


def build_context_section(processed: ProcessedDiff, max_diff_size: int) -> str:
    """프롬프트에 넣을 변경 요약, 컨텍스트, diff 발췌."""
    lines = ["## Change Summary", processed.summary, ""]

    if processed.languages:
        lines.append("## Languages involved")
        lines.extend(
            f"- {lang} ({count} files)" for lang, count in processed.languages.items()
        )
        lines.append("")

    context = processed.change_context
    if context is not None:
        if context.recent_commits:
            lines.append("## Recent commit history")
            lines.extend(
                f"- {c.short_hash}: {c.subject}"
                for c in context.recent_commits[:MAX_PROMPT_COMMITS]
            )
            lines.append("")

        if context.config_changes:
            lines.append("## Configuration changes detected")
            for change in context.config_changes:
                lines.append(
                    f"- {change.parameter} in {change.file}: {change.new_value}"
                )
                if change.context:
                    lines.append(f"  Context: {change.context}")
            lines.append("Explain WHY these configuration values were changed.")
            lines.append("")

        if context.function_changes:
            lines.append("## Function changes detected")
            for fn in context.function_changes:
                lines.append(
                    f"- Function '{fn.function_name}' in {fn.file}: "
                    f"{fn.change_type.value}"
                )
                if fn.impact:
                    lines.append(f"  Impact: {fn.impact}")
            lines.append("")

        if context.performance_hints:
            lines.append("## Performance-related changes")
            lines.extend(f"- {hint}" for hint in context.performance_hints)
            lines.append("")

        patterns = context.change_patterns
        notes = []
        if patterns.get("likely_refactoring"):
            notes.append("- This appears to be a refactoring effort")
        if patterns.get("likely_new_feature"):
            notes.append("- This appears to be a new feature implementation")
        if patterns.get("documentation_update"):
            notes.append("- Documentation updates detected")
        if notes:
            lines.append("## Change patterns detected")
            lines.extend(notes)
            lines.append("")

    if processed.chunks:
        lines.append("## File changes")
        for i, chunk in enumerate(processed.chunks):
            if i >= MAX_PROMPT_CHUNKS:
                lines.append(f"... and {len(processed.chunks) - i} more chunks")
                break
            lines.append(f"Chunk {i + 1}: {chunk.description}")
        lines.append("")

        lines.append("## Diff")
        for chunk in processed.chunks[:MAX_PROMPT_CHUNKS]:
            for file in chunk.files:
                content = file.content
                if len(content) > max_diff_size:
                    content = content[:max_diff_size] + "\n... (truncated)"
                lines.append(content.rstrip("\n"))
        lines.append("")

    return "\n".join(lines)


def build_preview(
    message: CommitMessage,
    processed: ProcessedDiff,
    validation: ValidationResult | None = None,
) -> str:
    """커밋 메시지와 변경 요약 미리보기 텍스트."""
    lines = ["Commit Message:", message.formatted or str(message), ""]
    lines += ["Changes Summary:", processed.summary, ""]

    if processed.languages:
        lines.append("Languages:")
        lines.extend(
            f"  - {lang}: {count} files" for lang, count in processed.languages.items()
        )
        lines.append("")

    if processed.chunks:
        lines.append("File Changes:")
        for i, chunk in enumerate(processed.chunks):
            if i >= MAX_PREVIEW_CHUNKS:
                lines.append(f"  ... and {len(processed.chunks) - i} more chunks")
                break
            lines.append(f"  {i + 1}. {chunk.description}")
        lines.append("")

    if validation is not None and (
        validation.errors or validation.warnings or validation.suggestions
    ):
        lines.append("Validation:")
        lines.extend(f"  [error] {e.message}" for e in validation.errors)
        lines.extend(f"  [warning] {w.message}" for w in validation.warnings)
        lines.extend(
            f"  [suggestion] {s.message}: {s.suggested}"
            for s in validation.suggestions
        )
        lines.append("")

    return "\n".join(lines).rstrip() + "\n"
