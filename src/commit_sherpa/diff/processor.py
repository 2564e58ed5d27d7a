"""Diff 우선순위 정렬 및 청크 분할."""

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass

from commit_sherpa.shared.models import (
    ChangeType,
    DiffChunk,
    DiffSummary,
    FileChange,
    ProcessedDiff,
)

from .parser import UNKNOWN_LANGUAGE

logger = logging.getLogger(__name__)


class NoChangesError(Exception):
    """분석할 변경사항이 없는 경우."""

    pass


DEFAULT_MAX_CHUNK_SIZE = 4000
DEFAULT_MAX_FILES = 20

CHANGE_TYPE_PRIORITY: dict[ChangeType, int] = {
    ChangeType.ADDED: 4,
    ChangeType.DELETED: 3,
    ChangeType.RENAMED: 2,
    ChangeType.MODIFIED: 1,
}

DEFAULT_IMPORTANCE = 3


@dataclass(frozen=True)
class ImportanceRule:
    """파일 중요도 규칙. 순서대로 평가하고 처음 일치한 규칙을 사용한다."""

    name: str
    predicate: Callable[[str], bool]
    importance: int


def _contains_any(*needles: str) -> Callable[[str], bool]:
    return lambda path: any(n in path for n in needles)


def _ends_with_any(*suffixes: str) -> Callable[[str], bool]:
    return lambda path: path.endswith(suffixes)


def _is_config(path: str) -> bool:
    return "config" in path or ".env" in path or path.endswith(
        (".json", ".yaml", ".yml", ".toml")
    )


def _is_docs(path: str) -> bool:
    return path.endswith((".md", ".rst")) or "readme" in path or "doc" in path


def _is_test(path: str) -> bool:
    return "test" in path or "spec" in path


# 경로는 소문자로 변환해서 평가한다. 테스트 규칙은 소스 규칙보다 먼저 온다.
DEFAULT_IMPORTANCE_RULES: tuple[ImportanceRule, ...] = (
    ImportanceRule(
        "dependencies",
        _contains_any(
            "package.json",
            "go.mod",
            "requirements.txt",
            "pyproject.toml",
            "cargo.toml",
            "pom.xml",
            "build.gradle",
        ),
        9,
    ),
    ImportanceRule("config", _is_config, 8),
    ImportanceRule("docs", _is_docs, 7),
    ImportanceRule("tests", _is_test, 5),
    ImportanceRule(
        "source",
        _ends_with_any(".go", ".js", ".ts", ".py", ".java", ".cpp", ".c", ".rs"),
        6,
    ),
    ImportanceRule(
        "web", _ends_with_any(".css", ".scss", ".html", ".vue", ".jsx", ".tsx"), 4
    ),
)


class DiffProcessor:
    """DiffSummary를 프롬프트용 ProcessedDiff로 변환.

    파일을 (변경 타입 우선순위, 파일 중요도, 변경 라인 수) 순으로 정렬하고
    max_files로 자른 뒤 max_chunk_size 단위로 묶는다.
    """

    def __init__(
        self,
        max_chunk_size: int = DEFAULT_MAX_CHUNK_SIZE,
        max_files: int = DEFAULT_MAX_FILES,
        importance_rules: Sequence[ImportanceRule] = DEFAULT_IMPORTANCE_RULES,
    ) -> None:
        """DiffProcessor 초기화.

        Args:
            max_chunk_size: 청크당 최대 문자 수. 0 이하이면 기본값 4000.
            max_files: 처리할 최대 파일 수. 0 이하이면 기본값 20.
            importance_rules: 파일 중요도 규칙 (순서가 의미를 가진다).
        """
        self.max_chunk_size = (
            max_chunk_size if max_chunk_size > 0 else DEFAULT_MAX_CHUNK_SIZE
        )
        self.max_files = max_files if max_files > 0 else DEFAULT_MAX_FILES
        self._importance_rules = tuple(importance_rules)

    def process(self, summary: DiffSummary | None) -> ProcessedDiff:
        """diff를 정렬, 절단, 청크 분할.

        Args:
            summary: 파싱된 diff

        Returns:
            ProcessedDiff 객체

        Raises:
            ValueError: summary가 None인 경우
        """
        if summary is None:
            raise ValueError("diff summary가 없습니다")

        files = self.prioritize(summary.files)
        if len(files) > self.max_files:
            logger.info(
                f"파일 수 제한 적용: {len(files)}개 중 {self.max_files}개만 처리"
            )
            files = files[: self.max_files]

        chunks = self.create_chunks(files)
        logger.debug(f"diff 처리 완료: 파일 {len(files)}개, 청크 {len(chunks)}개")

        return ProcessedDiff(
            summary=self.generate_summary(files, summary),
            chunks=chunks,
            total_files=len(files),
            total_added=summary.total_added,
            total_deleted=summary.total_deleted,
            languages=self.count_languages(files),
            diff_summary=summary,
        )

    def prioritize(self, files: Sequence[FileChange]) -> list[FileChange]:
        """변경 타입 → 파일 중요도 → 작은 변경 순의 안정 정렬."""
        return sorted(
            files,
            key=lambda f: (
                -CHANGE_TYPE_PRIORITY.get(f.change_type, 0),
                -self.file_importance(f.path),
                f.total_lines,
            ),
        )

    def file_importance(self, path: str) -> int:
        """경로의 파일 중요도. 처음 일치한 규칙을 사용한다."""
        lowered = path.lower()
        for rule in self._importance_rules:
            if rule.predicate(lowered):
                return rule.importance
        return DEFAULT_IMPORTANCE

    def create_chunks(self, files: Sequence[FileChange]) -> list[DiffChunk]:
        """파일을 순서대로 max_chunk_size 이하의 청크로 묶는다.

        크기를 넘는 단일 파일은 쪼개지 않고 단독 청크가 된다.
        """
        chunks: list[DiffChunk] = []
        current: list[FileChange] = []
        current_size = 0

        for file in files:
            file_size = len(file.content)
            if current and current_size + file_size > self.max_chunk_size:
                chunks.append(self._make_chunk(current, current_size))
                current, current_size = [], 0

            current.append(file)
            current_size += file_size

        if current:
            chunks.append(self._make_chunk(current, current_size))

        return chunks

    def _make_chunk(self, files: list[FileChange], size: int) -> DiffChunk:
        return DiffChunk(
            files=files, description=self.describe_chunk(files), size=size
        )

    def describe_chunk(self, files: Sequence[FileChange]) -> str:
        """청크 설명 문자열 생성."""
        if not files:
            return "Empty chunk"

        if len(files) == 1:
            f = files[0]
            return (
                f"{f.change_type.value}: {f.path} "
                f"({f.lines_added}+, {f.lines_deleted}-)"
            )

        type_counts = _count_by_type(files)
        added = sum(f.lines_added for f in files)
        deleted = sum(f.lines_deleted for f in files)
        types = ", ".join(f"{count} {name}" for name, count in type_counts.items())
        return f"{len(files)} files: {types} ({added}+, {deleted}-)"

    def generate_summary(
        self, files: Sequence[FileChange], summary: DiffSummary
    ) -> str:
        """변경 요약 문자열 생성."""
        if not files:
            return "No changes detected"

        type_counts = _count_by_type(files)
        parts = ", ".join(f"{count} {name}" for name, count in type_counts.items())
        text = (
            f"Changes: {parts} files with {summary.total_added} additions "
            f"and {summary.total_deleted} deletions"
        )

        languages = self.count_languages(files)
        if languages:
            breakdown = ", ".join(f"{lang} ({n})" for lang, n in languages.items())
            text += f". Languages: {breakdown}"
        return text

    def count_languages(self, files: Sequence[FileChange]) -> dict[str, int]:
        """언어별 파일 수. Unknown은 제외한다."""
        languages: dict[str, int] = {}
        for f in files:
            if f.language and f.language != UNKNOWN_LANGUAGE:
                languages[f.language] = languages.get(f.language, 0) + 1
        return languages


def _count_by_type(files: Sequence[FileChange]) -> dict[str, int]:
    """변경 타입별 파일 수 (처음 등장한 순서)."""
    counts: dict[str, int] = {}
    for f in files:
        counts[f.change_type.value] = counts.get(f.change_type.value, 0) + 1
    return counts
