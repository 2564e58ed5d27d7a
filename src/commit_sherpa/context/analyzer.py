"""diff와 커밋 히스토리에서 변경 컨텍스트를 도출하는 분석기."""

import logging
import re
from collections.abc import Mapping, Sequence
from typing import Protocol

from commit_sherpa.shared.git import GitError
from commit_sherpa.shared.models import (
    ChangeContext,
    ChangeType,
    CommitInfo,
    ConfigChange,
    ConfigValue,
    DiffSummary,
    FileChange,
    FunctionChange,
    FunctionChangeType,
    PatternValue,
)

logger = logging.getLogger(__name__)

RECENT_COMMIT_COUNT = 10
RELATED_COMMIT_COUNT = 5


class HistorySource(Protocol):
    """커밋 히스토리 조회 인터페이스. 실패 시 GitError를 던진다."""

    def get_recent_commits(self, count: int = 10) -> list[CommitInfo]: ...

    def get_file_history(
        self, paths: Sequence[str], count: int = 5
    ) -> list[CommitInfo]: ...


# ============================================================
# 분석 테이블
# ============================================================

DEFAULT_CONFIG_FILE_PATTERNS: tuple[str, ...] = (
    r"\.ya?ml$",
    r"\.json$",
    r"\.toml$",
    r"\.ini$",
    r"\.conf$",
    r"\.config$",
    r"\.env$",
    r"(?:^|/)\.env(?:\.[\w-]+)?$",
    r"config\.(?:go|py)$",
    r"settings\.(?:go|py)$",
    r"constants\.(?:go|py)$",
)

# 언어 이름(소문자) -> 함수 선언 패턴. 각 패턴은 name 그룹을 가진다.
DEFAULT_FUNCTION_PATTERNS: Mapping[str, tuple[str, ...]] = {
    "go": (
        r"func\s+(?P<name>\w+)\s*\(",
        r"func\s+\(\w+\s+\*?\w+\)\s+(?P<name>\w+)\s*\(",
    ),
    "javascript": (
        r"function\s+(?P<name>\w+)\s*\(",
        r"(?P<name>\w+)\s*:\s*function\s*\(",
        r"(?:const|let|var)\s+(?P<name>\w+)\s*=\s*(?:async\s+)?\([^)]*\)\s*=>",
    ),
    "typescript": (
        r"function\s+(?P<name>\w+)\s*\(",
        r"(?:const|let|var)\s+(?P<name>\w+)\s*=\s*(?:async\s+)?\([^)]*\)\s*=>",
        r"(?P<name>\w+)\s*:\s*\(.*\)\s*=>",
    ),
    "python": (r"def\s+(?P<name>\w+)\s*\(",),
    "java": (
        r"^\s*(?:(?:public|private|protected|static|final|abstract|synchronized)\s+)*"
        r"(?!return\b|new\b|else\b|throw\b)[\w<>\[\],.?]+\s+(?P<name>\w+)\s*\(",
    ),
}

# (키워드들, impact 설명). 순서대로 평가한다.
DEFAULT_FUNCTION_IMPACTS: tuple[tuple[tuple[str, ...], str], ...] = (
    (
        ("public",),
        "Public API change - may affect external consumers and require version bump",
    ),
    (
        ("private", "internal"),
        "Internal implementation change - refactoring or optimization",
    ),
    (("protected",), "Protected method change - may affect inheritance hierarchy"),
    (
        ("test",),
        "Test function change - improving test coverage or fixing test issues",
    ),
    (
        ("main",),
        "Entry point change - application startup or configuration modification",
    ),
    (("init",), "Initialization function change - setup or configuration modification"),
    (
        ("handler", "controller"),
        "Request handler change - API endpoint or business logic modification",
    ),
    (
        ("service", "manager"),
        "Service layer change - business logic or data processing modification",
    ),
    (("util", "helper"), "Utility function change - shared functionality improvement"),
    (
        ("validate", "check"),
        "Validation logic change - input validation or business rule modification",
    ),
    (
        ("parse", "format"),
        "Data processing change - parsing or formatting logic modification",
    ),
    (
        ("async", "await", "goroutine"),
        "Asynchronous function change - concurrency or performance optimization",
    ),
    (("context",), "Context-aware function change - timeout or cancellation handling"),
    (("error",), "Error handling function change - improved error management"),
)
GENERIC_FUNCTION_IMPACT = (
    "Function signature or implementation change - logic modification or enhancement"
)

# 카테고리 -> (키워드들, 힌트 템플릿). 템플릿은 path, keyword를 받는다.
DEFAULT_PERFORMANCE_CATEGORIES: Mapping[str, tuple[tuple[str, ...], str]] = {
    "caching": (
        ("cache", "memoize", "redis", "memcached", "lru", "ttl"),
        "Caching optimization in {path} ({keyword}) - likely improving response "
        "times and reducing computational overhead",
    ),
    "database": (
        ("index", "query", "sql", "database", "db", "orm", "transaction"),
        "Database optimization in {path} ({keyword}) - likely improving query "
        "performance and data access efficiency",
    ),
    "concurrency": (
        (
            "goroutine",
            "thread",
            "async",
            "await",
            "concurrent",
            "parallel",
            "mutex",
            "lock",
            "channel",
        ),
        "Concurrency optimization in {path} ({keyword}) - likely improving "
        "throughput and resource utilization",
    ),
    "memory": (
        ("memory", "heap", "gc", "garbage", "leak", "allocation", "buffer", "pool"),
        "Memory optimization in {path} ({keyword}) - likely reducing memory usage "
        "and preventing leaks",
    ),
    "algorithm": (
        ("algorithm", "complexity", "optimize", "efficient", "sort", "search", "hash"),
        "Algorithm optimization in {path} ({keyword}) - likely improving "
        "computational efficiency and reducing complexity",
    ),
    "io": (
        ("io", "read", "write", "stream", "batch", "bulk", "pipeline"),
        "I/O optimization in {path} ({keyword}) - likely improving data processing "
        "throughput and reducing latency",
    ),
    "network": (
        ("timeout", "retry", "connection", "keepalive", "compression"),
        "Network optimization in {path} ({keyword}) - likely improving connection "
        "reliability and reducing network overhead",
    ),
    "monitoring": (
        ("benchmark", "profile", "metric", "monitor", "trace", "performance"),
        "Performance monitoring enhancement in {path} ({keyword}) - likely "
        "improving observability and performance tracking",
    ),
}

_TIMING_MARKERS = ("time.", "perf_counter", "performance.now")
_SYNC_MARKERS = ("sync.", "atomic.", "threading.lock", "asyncio.lock")

_KEY_VALUE_SEPARATORS = (":", "=")
_COMMENT_PREFIXES = ("#", "//", ";")


class ContextAnalyzer:
    """DiffSummary와 커밋 히스토리로 ChangeContext를 만든다.

    히스토리 조회 실패는 치명적이지 않다. 경고를 남기고 빈 목록으로 진행한다.
    """

    def __init__(
        self,
        history: HistorySource | None = None,
        config_file_patterns: Sequence[str] = DEFAULT_CONFIG_FILE_PATTERNS,
        function_patterns: Mapping[str, Sequence[str]] = DEFAULT_FUNCTION_PATTERNS,
        performance_categories: Mapping[
            str, tuple[tuple[str, ...], str]
        ] = DEFAULT_PERFORMANCE_CATEGORIES,
    ) -> None:
        """ContextAnalyzer 초기화.

        Args:
            history: 커밋 히스토리 조회 객체. None이면 히스토리 없이 분석.
            config_file_patterns: 설정 파일 경로 정규식 목록
            function_patterns: 언어(소문자) -> 함수 선언 정규식 목록
            performance_categories: 성능 키워드 카테고리 테이블
        """
        self._history = history
        self._config_patterns = [re.compile(p) for p in config_file_patterns]
        self._function_patterns = {
            lang: [re.compile(p) for p in patterns]
            for lang, patterns in function_patterns.items()
        }
        self._performance_categories = dict(performance_categories)

    def analyze(self, summary: DiffSummary) -> ChangeContext:
        """변경 컨텍스트 분석.

        Args:
            summary: 파싱된 diff

        Returns:
            ChangeContext 객체
        """
        files = summary.files
        context = ChangeContext(
            recent_commits=self._recent_commits(),
            related_commits=self._related_commits([f.path for f in files]),
        )

        for file in files:
            if self.is_config_file(file.path):
                context.config_changes.extend(self.detect_config_changes(file))
            context.function_changes.extend(self.detect_function_changes(file))
            context.performance_hints.extend(self.detect_performance_hints(file))

        context.change_patterns = self.classify_change_patterns(files)
        logger.debug(
            f"컨텍스트 분석 완료: 설정 변경 {len(context.config_changes)}개, "
            f"함수 변경 {len(context.function_changes)}개"
        )
        return context

    # ============================================================
    # 커밋 히스토리
    # ============================================================

    def _recent_commits(self) -> list[CommitInfo]:
        if self._history is None:
            return []
        try:
            return self._history.get_recent_commits(RECENT_COMMIT_COUNT)
        except GitError as e:
            logger.warning(f"최근 커밋 조회 실패, 히스토리 없이 진행: {e}")
            return []

    def _related_commits(self, paths: list[str]) -> list[CommitInfo]:
        if self._history is None or not paths:
            return []
        try:
            return self._history.get_file_history(paths, RELATED_COMMIT_COUNT)
        except GitError as e:
            logger.warning(f"관련 커밋 조회 실패, 히스토리 없이 진행: {e}")
            return []

    # ============================================================
    # 설정 변경
    # ============================================================

    def is_config_file(self, path: str) -> bool:
        """설정 파일 패턴에 일치하는지 확인."""
        return any(pattern.search(path) for pattern in self._config_patterns)

    def detect_config_changes(self, file: FileChange) -> list[ConfigChange]:
        """삭제/추가 라인의 key-value 쌍을 비교해 설정 변경 목록 생성.

        양쪽에 모두 있는 key는 old -> new 변경 하나로 합친다.
        """
        removed: dict[str, ConfigValue] = {}
        added: dict[str, ConfigValue] = {}

        for line in file.content.split("\n"):
            if line.startswith(("---", "+++")):
                continue
            if line.startswith("-"):
                target = removed
            elif line.startswith("+"):
                target = added
            else:
                continue

            body = line[1:].strip()
            if not body or body.startswith(_COMMENT_PREFIXES):
                continue
            parsed = parse_key_value(body)
            if parsed:
                key, value = parsed
                target[key] = value

        changes: list[ConfigChange] = []
        for key, old_value in removed.items():
            if key in added:
                new_value = added[key]
                changes.append(
                    ConfigChange(
                        file=file.path,
                        parameter=key,
                        old_value=old_value,
                        new_value=new_value,
                        context=describe_config_change(key, old_value, new_value),
                    )
                )
            else:
                changes.append(
                    ConfigChange(
                        file=file.path,
                        parameter=key,
                        old_value=old_value,
                        context=f"Configuration parameter removed: {key}",
                    )
                )

        for key, new_value in added.items():
            if key not in removed:
                changes.append(
                    ConfigChange(
                        file=file.path,
                        parameter=key,
                        new_value=new_value,
                        context=f"New configuration parameter added: {key}",
                    )
                )

        return changes

    # ============================================================
    # 함수 변경
    # ============================================================

    def detect_function_changes(self, file: FileChange) -> list[FunctionChange]:
        """추가/삭제 라인에서 함수 선언을 찾는다."""
        patterns = self._function_patterns.get(file.language.lower())
        if not patterns:
            return []

        changes: list[FunctionChange] = []
        for raw_line in file.content.split("\n"):
            if raw_line.startswith(("+++", "---")):
                continue
            if raw_line.startswith("+"):
                change_type = FunctionChangeType.ADDED
            elif raw_line.startswith("-"):
                change_type = FunctionChangeType.REMOVED
            else:
                continue

            line = raw_line[1:].strip()
            for pattern in patterns:
                match = pattern.search(line)
                if match and match.group("name"):
                    changes.append(
                        FunctionChange(
                            file=file.path,
                            function_name=match.group("name"),
                            change_type=change_type,
                            impact=describe_function_impact(line),
                        )
                    )
                    break

        return changes

    # ============================================================
    # 성능 힌트
    # ============================================================

    def detect_performance_hints(self, file: FileChange) -> list[str]:
        """카테고리별 키워드로 성능 관련 힌트 생성 (카테고리당 최대 1개)."""
        content = file.content.lower()
        if not content:
            return []

        hints: list[str] = []
        for keywords, template in self._performance_categories.values():
            for keyword in keywords:
                if keyword in content:
                    hints.append(template.format(path=file.path, keyword=keyword))
                    break

        if "+" in content and any(m in content for m in _TIMING_MARKERS):
            hints.append(
                f"Timing optimization detected in {file.path} - "
                "performance measurement or timeout handling"
            )
        if any(m in content for m in _SYNC_MARKERS):
            hints.append(
                f"Synchronization optimization detected in {file.path} - "
                "concurrency safety improvement"
            )
        return hints

    # ============================================================
    # 변경 패턴
    # ============================================================

    def classify_change_patterns(
        self, files: Sequence[FileChange]
    ) -> dict[str, PatternValue]:
        """파일 타입/변경 타입 히스토그램과 변경 성격 플래그."""
        file_types: dict[str, int] = {}
        change_types: dict[str, int] = {}
        for f in files:
            file_types[f.language] = file_types.get(f.language, 0) + 1
            key = f.change_type.value
            change_types[key] = change_types.get(key, 0) + 1

        patterns: dict[str, PatternValue] = {
            "file_types": file_types,
            "change_types": change_types,
        }

        added = change_types.get(ChangeType.ADDED.value, 0)
        modified = change_types.get(ChangeType.MODIFIED.value, 0)
        if len(files) > 3 and modified > added:
            patterns["likely_refactoring"] = True
        if added > modified:
            patterns["likely_new_feature"] = True

        doc_files = sum(1 for f in files if _is_documentation(f.path))
        if doc_files:
            patterns["documentation_update"] = True
            patterns["documentation_files"] = doc_files

        return patterns


def parse_key_value(line: str) -> tuple[str, str] | None:
    """`key: value` 또는 `key=value` 한 줄을 파싱. 콜론을 먼저 시도한다."""
    for separator in _KEY_VALUE_SEPARATORS:
        if separator not in line:
            continue
        key, _, value = line.partition(separator)
        key = key.strip().strip("\"'")
        value = value.strip().rstrip(",").strip().strip("\"'")
        if key:
            return key, value
    return None


def describe_config_change(
    parameter: str, old_value: ConfigValue, new_value: ConfigValue
) -> str:
    """파라미터 이름 키워드로 설정 변경 설명 선택."""
    name = parameter.lower()
    old, new = str(old_value), str(new_value)

    if "timeout" in name or "delay" in name:
        return (
            f"Timeout configuration '{parameter}' adjusted from {old} to {new} - "
            "likely for performance optimization or reliability improvement"
        )
    if any(k in name for k in ("port", "host", "url")):
        return (
            f"Network configuration '{parameter}' updated from {old} to {new} - "
            "may indicate environment change or service migration"
        )
    if any(k in name for k in ("size", "limit", "max", "min")):
        return (
            f"Limit configuration '{parameter}' changed from {old} to {new} - "
            "likely for capacity planning or performance tuning"
        )
    if (
        "enable" in name
        or "disable" in name
        or old in ("true", "false")
        or new in ("true", "false")
    ):
        if new == "true":
            return f"Feature '{parameter}' enabled - functionality activation"
        if new == "false":
            return f"Feature '{parameter}' disabled - functionality deactivation"
        return f"Boolean configuration '{parameter}' toggled from {old} to {new}"
    if "version" in name or "model" in name:
        return (
            f"Version configuration '{parameter}' updated from {old} to {new} - "
            "likely upgrade or compatibility change"
        )
    if "level" in name or "mode" in name:
        return (
            f"Mode configuration '{parameter}' changed from {old} to {new} - "
            "operational behavior modification"
        )
    return f"Configuration value changed from '{old}' to '{new}'"


def describe_function_impact(declaration: str) -> str:
    """선언 라인의 키워드로 함수 변경 영향 설명 선택."""
    line = declaration.lower()
    for keywords, impact in DEFAULT_FUNCTION_IMPACTS:
        if any(keyword in line for keyword in keywords):
            return impact
    return GENERIC_FUNCTION_IMPACT


def _is_documentation(path: str) -> bool:
    lowered = path.lower()
    return lowered.endswith((".md", ".txt")) or "doc" in lowered
