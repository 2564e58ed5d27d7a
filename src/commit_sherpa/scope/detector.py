"""파일 경로 기반 conventional commit scope 추론."""

import logging
import re
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass

from commit_sherpa.shared.models import DiffSummary, ScopeDetectionRule

logger = logging.getLogger(__name__)

_PREFIX = r"^(?:src/|app/)?"

DEFAULT_SCOPE_RULES: tuple[ScopeDetectionRule, ...] = (
    # 내부 패키지는 자기 디렉토리 이름이 scope
    ScopeDetectionRule(
        rf"{_PREFIX}(?:internal|pkg)/([^/]+)/", "$1", 96, "Internal package"
    ),
    ScopeDetectionRule(r"^(?:config|configs?)/", "config", 95, "Config directory"),
    ScopeDetectionRule(
        rf"{_PREFIX}(?:migrations?|seeds?)/", "db", 95, "Database migrations"
    ),
    ScopeDetectionRule(r"^(?:test|tests?|spec|specs?)/", "test", 95, "Test directory"),
    ScopeDetectionRule(r"^(?:docs?|documentation)/", "docs", 95, "Docs directory"),
    ScopeDetectionRule(r"^\.github/workflows/", "ci", 95, "GitHub Actions"),
    ScopeDetectionRule(r"^\.gitlab-ci\.yml$", "ci", 95, "GitLab CI"),
    ScopeDetectionRule(
        rf"{_PREFIX}(?:api|routes?|controllers?|handlers?)/", "api", 90, "API layer"
    ),
    ScopeDetectionRule(
        rf"{_PREFIX}(?:models?|entities?|schemas?)/", "db", 90, "Data models"
    ),
    ScopeDetectionRule(r"\.(?:sql|migration)$", "db", 90, "SQL files"),
    ScopeDetectionRule(rf"{_PREFIX}(?:auth|security)/", "auth", 90, "Auth"),
    ScopeDetectionRule(r"^\.env", "config", 90, "Environment files"),
    ScopeDetectionRule(
        r"\.(?:test|spec)\.(?:js|jsx|ts|tsx|go|py|rb|java|php)$",
        "test",
        90,
        "Test files",
    ),
    ScopeDetectionRule(r"_test\.(?:go|rs)$", "test", 90, "Go/Rust test files"),
    ScopeDetectionRule(r"(?:^|/)test_[^/]+\.py$", "test", 90, "Python test files"),
    ScopeDetectionRule(
        r"^(?:Dockerfile|docker-compose\.yml|\.dockerignore)$", "ci", 90, "Docker"
    ),
    ScopeDetectionRule(r"^(?:Makefile|Jenkinsfile)$", "ci", 90, "Build scripts"),
    ScopeDetectionRule(
        r"(?:^|/)(?:package\.json|package-lock\.json|yarn\.lock|go\.mod|go\.sum"
        r"|requirements\.txt|pyproject\.toml|Pipfile|Cargo\.toml|pom\.xml"
        r"|build\.gradle)$",
        "deps",
        85,
        "Dependency manifests",
    ),
    ScopeDetectionRule(rf"{_PREFIX}components?/", "ui", 85, "UI components"),
    ScopeDetectionRule(rf"{_PREFIX}pages?/", "ui", 85, "UI pages"),
    ScopeDetectionRule(rf"{_PREFIX}middleware/", "api", 85, "Middleware"),
    ScopeDetectionRule(
        r"\.(?:env|config|conf|ini|yaml|yml|toml|json)$", "config", 85, "Config files"
    ),
    ScopeDetectionRule(r"^README", "docs", 85, "README"),
    ScopeDetectionRule(rf"{_PREFIX}services?/", "service", 85, "Service layer"),
    ScopeDetectionRule(rf"{_PREFIX}(?:core|internal)/", "core", 85, "Core"),
    ScopeDetectionRule(
        r"\.(?:js|jsx|ts|tsx|vue|svelte|html|css|scss|sass|less)$",
        "ui",
        80,
        "Frontend files",
    ),
    ScopeDetectionRule(r"\.(?:md|rst|txt|adoc)$", "docs", 80, "Documentation"),
    ScopeDetectionRule(
        rf"{_PREFIX}(?:utils?|helpers?|lib|libs?)/", "utils", 80, "Utilities"
    ),
)

# 과반이 아니어도 2개 이상 파일이면 채택하는 scope
DEFAULT_HIGH_PRIORITY_SCOPES: frozenset[str] = frozenset(
    {"auth", "api", "db", "security", "core", "config", "ci", "ai", "git", "cli"}
)

DEFAULT_CONTENT_KEYWORDS: Mapping[str, tuple[str, ...]] = {
    "auth": (
        "login",
        "password",
        "token",
        "authentication",
        "authorization",
        "jwt",
        "oauth",
    ),
    "api": ("endpoint", "route", "handler", "controller", "middleware"),
    "db": ("database", "query", "migration", "schema", "table", "model"),
    "ui": ("component", "template", "style", "css", "html", "jsx", "vue"),
    "test": ("test", "spec", "mock", "fixture", "assert", "expect"),
    "config": ("config", "setting", "environment", "env", "constant"),
    "security": ("security", "encrypt", "decrypt", "hash", "validate", "sanitize"),
    "perf": ("performance", "optimize", "cache", "memory", "speed", "benchmark"),
    "docs": ("documentation", "readme", "comment", "doc", "guide", "manual"),
    "ci": ("pipeline", "build", "deploy", "workflow", "action", "jenkins"),
}

DEFAULT_COVERAGE_THRESHOLD = 0.5
DEFAULT_MIN_ALLOWLISTED_FILES = 2


@dataclass
class _ScopeTally:
    count: int = 0
    priority: int = 0


class ScopeDetector:
    """우선순위 규칙 테이블로 파일 경로에서 scope를 추론.

    파일마다 우선순위가 가장 높은 일치 규칙 하나가 scope를 결정한다.
    여러 파일의 결과는 다음 순서로 하나로 합친다.

    1. 파일이 하나면 그 파일의 scope
    2. 최빈 scope가 전체의 threshold(기본 50%) 이상이면 채택
    3. 최빈 scope가 2개 이상 파일이고 high-priority 목록에 있으면 채택
    4. 그 외에는 빈 문자열 (scope 생략)
    """

    def __init__(
        self,
        rules: Iterable[ScopeDetectionRule] = DEFAULT_SCOPE_RULES,
        high_priority_scopes: Iterable[str] = DEFAULT_HIGH_PRIORITY_SCOPES,
        content_keywords: Mapping[str, Sequence[str]] = DEFAULT_CONTENT_KEYWORDS,
        coverage_threshold: float = DEFAULT_COVERAGE_THRESHOLD,
        min_allowlisted_files: int = DEFAULT_MIN_ALLOWLISTED_FILES,
    ) -> None:
        self._rules: list[tuple[ScopeDetectionRule, re.Pattern[str]]] = []
        for rule in rules:
            self._insert(rule)
        self._high_priority = frozenset(high_priority_scopes)
        self._content_keywords = dict(content_keywords)
        self.coverage_threshold = coverage_threshold
        self.min_allowlisted_files = min_allowlisted_files

    @property
    def rules(self) -> list[ScopeDetectionRule]:
        """우선순위 내림차순 규칙 목록."""
        return [rule for rule, _ in self._rules]

    def add_custom_rule(self, rule: ScopeDetectionRule) -> None:
        """규칙 추가. 같은 우선순위에서는 기존 규칙 뒤에 놓인다.

        Raises:
            re.error: pattern이 유효한 정규식이 아닌 경우
        """
        self._insert(rule)

    def _insert(self, rule: ScopeDetectionRule) -> None:
        compiled = re.compile(rule.pattern)
        self._rules.append((rule, compiled))
        self._rules.sort(key=lambda item: -item[0].priority)

    def detect_file_scope(self, path: str) -> tuple[str, int] | None:
        """파일 하나의 (scope, 규칙 우선순위). 일치하는 규칙이 없으면 None."""
        for rule, pattern in self._rules:
            match = pattern.search(path)
            if not match:
                continue
            scope = rule.scope
            if "$1" in scope:
                group = match.group(1) if pattern.groups else None
                if not group:
                    continue
                scope = scope.replace("$1", group)
            return scope, rule.priority
        return None

    def matching_rules(self, path: str) -> list[ScopeDetectionRule]:
        """경로에 일치하는 모든 규칙 (우선순위 순)."""
        return [rule for rule, pattern in self._rules if pattern.search(path)]

    def detect_scope(self, summary: DiffSummary) -> str:
        """변경 파일 전체를 대표하는 scope 하나를 반환. 애매하면 빈 문자열."""
        files = summary.files
        if not files:
            return ""

        if len(files) == 1:
            detected = self.detect_file_scope(files[0].path)
            return detected[0] if detected else ""

        tallies = self._tally(summary)
        if not tallies:
            return ""

        # 파일 수가 같으면 규칙 우선순위가 높은 scope
        scope, tally = max(
            tallies.items(), key=lambda item: (item[1].count, item[1].priority)
        )
        total = len(files)

        if tally.count / total >= self.coverage_threshold:
            return scope
        if tally.count >= self.min_allowlisted_files and scope in self._high_priority:
            logger.debug(f"high-priority scope 채택: {scope} ({tally.count}/{total})")
            return scope
        return ""

    def detect_multiple_scopes(self, summary: DiffSummary) -> dict[str, float]:
        """scope별 파일 비율 (0~1)."""
        total = len(summary.files)
        if total == 0:
            return {}
        return {
            scope: tally.count / total for scope, tally in self._tally(summary).items()
        }

    def _tally(self, summary: DiffSummary) -> dict[str, _ScopeTally]:
        tallies: dict[str, _ScopeTally] = {}
        for file in summary.files:
            detected = self.detect_file_scope(file.path)
            if detected is None:
                continue
            scope, priority = detected
            tally = tallies.setdefault(scope, _ScopeTally())
            tally.count += 1
            tally.priority = max(tally.priority, priority)
        return tallies

    def suggest_scope_from_content(self, summary: DiffSummary) -> str:
        """파일 내용의 키워드 빈도로 scope 추천. 키워드가 없으면 빈 문자열."""
        content = " ".join(f.content for f in summary.files).lower()
        if not content.strip():
            return ""

        best_scope = ""
        best_score = 0
        for scope, keywords in self._content_keywords.items():
            score = sum(content.count(keyword) for keyword in keywords)
            if score > best_score:
                best_scope, best_score = scope, score
        return best_scope
