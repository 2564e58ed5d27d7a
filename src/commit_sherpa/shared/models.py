"""공통 데이터 모델 정의."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from functools import total_ordering

# 설정 값, 변경 패턴 값으로 허용되는 스칼라 타입
ConfigValue = str | int | float | bool
PatternValue = bool | int | dict[str, int]

# ============================================================
# 공통 Enum
# ============================================================


class ChangeType(Enum):
    """파일 변경 타입."""

    ADDED = "added"
    MODIFIED = "modified"
    DELETED = "deleted"
    RENAMED = "renamed"
    COPIED = "copied"


class FunctionChangeType(Enum):
    """함수 단위 변경 타입."""

    ADDED = "added"
    REMOVED = "removed"
    MODIFIED = "modified"


class CommitType(Enum):
    """Conventional commit 타입."""

    FEAT = "feat"
    FIX = "fix"
    DOCS = "docs"
    STYLE = "style"
    REFACTOR = "refactor"
    PERF = "perf"
    TEST = "test"
    BUILD = "build"
    CI = "ci"
    CHORE = "chore"
    REVERT = "revert"


class BumpType(Enum):
    """버전 증가 단위."""

    MAJOR = "major"
    MINOR = "minor"
    PATCH = "patch"


class PreReleaseType(Enum):
    """Pre-release 종류. rank 순서는 alpha < beta < rc."""

    ALPHA = "alpha"
    BETA = "beta"
    RC = "rc"

    @property
    def rank(self) -> int:
        return _PRE_RELEASE_RANK[self]


_PRE_RELEASE_RANK = {
    PreReleaseType.ALPHA: 1,
    PreReleaseType.BETA: 2,
    PreReleaseType.RC: 3,
}


class OutputFormat(Enum):
    """출력 형식."""

    CONSOLE = "console"
    JSON = "json"
    MARKDOWN = "markdown"


# ============================================================
# Diff 관련 모델
# ============================================================


@dataclass(frozen=True)
class FileChange:
    """파일 하나의 변경 정보. 파싱 이후 변경되지 않는다."""

    path: str
    change_type: ChangeType
    lines_added: int = 0
    lines_deleted: int = 0
    content: str = ""
    language: str = "Unknown"
    old_path: str | None = None  # renamed/copied인 경우

    @property
    def total_lines(self) -> int:
        return self.lines_added + self.lines_deleted


@dataclass(frozen=True)
class DiffSummary:
    """파싱된 diff 전체. 집계 값은 files의 합과 같다."""

    files: tuple[FileChange, ...] = ()
    total_added: int = 0
    total_deleted: int = 0
    total_files: int = 0
    timestamp: datetime | None = None


@dataclass
class DiffChunk:
    """크기 제한 안에서 묶인 파일 변경 그룹."""

    files: list[FileChange]
    description: str
    size: int


# ============================================================
# 컨텍스트 분석 모델
# ============================================================


@dataclass
class CommitInfo:
    """커밋 정보."""

    hash: str
    subject: str
    author: str
    date: datetime | None
    slug: str = ""

    @property
    def short_hash(self) -> str:
        return self.hash[:7]


@dataclass
class ConfigChange:
    """설정 파라미터 변경."""

    file: str
    parameter: str
    old_value: ConfigValue | None = None
    new_value: ConfigValue | None = None
    context: str = ""


@dataclass
class FunctionChange:
    """함수/메서드 선언 변경."""

    file: str
    function_name: str
    change_type: FunctionChangeType
    impact: str = ""


@dataclass
class ChangeContext:
    """diff와 커밋 히스토리에서 도출한 부가 정보."""

    recent_commits: list[CommitInfo] = field(default_factory=list)
    related_commits: list[CommitInfo] = field(default_factory=list)
    config_changes: list[ConfigChange] = field(default_factory=list)
    function_changes: list[FunctionChange] = field(default_factory=list)
    performance_hints: list[str] = field(default_factory=list)
    change_patterns: dict[str, PatternValue] = field(default_factory=dict)


@dataclass
class ProcessedDiff:
    """우선순위 정렬, 개수 제한, 청크 분할이 끝난 diff."""

    summary: str
    chunks: list[DiffChunk]
    total_files: int
    total_added: int
    total_deleted: int
    languages: dict[str, int] = field(default_factory=dict)
    change_context: ChangeContext | None = None
    diff_summary: DiffSummary | None = None

    @property
    def files(self) -> list[FileChange]:
        """청크 순서대로 모든 파일을 반환."""
        return [f for chunk in self.chunks for f in chunk.files]


@dataclass(frozen=True)
class ScopeDetectionRule:
    """경로 기반 scope 규칙. scope에 `$1`이 있으면 첫 캡처 그룹으로 치환."""

    pattern: str
    scope: str
    priority: int
    description: str = ""


# ============================================================
# 커밋 메시지 모델
# ============================================================


@dataclass
class CommitMessage:
    """구조화된 커밋 메시지."""

    type: str = CommitType.CHORE.value
    description: str = ""
    scope: str = ""
    subject: str = ""
    body: str = ""
    footer: str = ""
    breaking: bool = False
    formatted: str = ""

    def header(self) -> str:
        """`type(scope)!: description` 형태의 헤더."""
        if not self.type:
            return self.description
        header = self.type
        if self.scope:
            header += f"({self.scope})"
        if self.breaking:
            header += "!"
        return f"{header}: {self.description}"

    def __str__(self) -> str:
        parts = [self.subject or self.header()]
        if self.body:
            parts.append(self.body)
        if self.footer:
            parts.append(self.footer)
        return "\n\n".join(parts)


@dataclass
class ValidationError:
    """검증 에러 (커밋 차단 사유)."""

    type: str
    message: str
    severity: str = "error"


@dataclass
class ValidationWarning:
    """검증 경고."""

    type: str
    message: str
    suggestion: str = ""


@dataclass
class ValidationSuggestion:
    """수정 제안."""

    type: str
    message: str
    original: str = ""
    suggested: str = ""


@dataclass
class ValidationResult:
    """커밋 메시지 검증 결과. 에러가 없으면 유효하다."""

    errors: list[ValidationError] = field(default_factory=list)
    warnings: list[ValidationWarning] = field(default_factory=list)
    suggestions: list[ValidationSuggestion] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors


@dataclass
class GenerationResult:
    """커밋 메시지 생성 결과."""

    message: CommitMessage
    processed_diff: ProcessedDiff
    validation: ValidationResult
    scope: str = ""
    preview: str = ""
    committed: bool = False


# ============================================================
# 버전 관련 모델
# ============================================================


@total_ordering
@dataclass(frozen=True)
class SemanticVersion:
    """시맨틱 버전 `MAJOR.MINOR.PATCH[-pre[.N]]`.

    정렬 규칙:
        major, minor, patch 숫자 비교 후 같으면 정식 릴리스가 pre-release보다
        새 버전이다. pre-release끼리는 alpha < beta < rc, 그 다음 pre_number.
    """

    major: int = 0
    minor: int = 0
    patch: int = 0
    pre_release: PreReleaseType | None = None
    pre_number: int = 0

    def _sort_key(self) -> tuple[int, int, int, int, int, int]:
        is_release = 1 if self.pre_release is None else 0
        rank = self.pre_release.rank if self.pre_release else 0
        return (self.major, self.minor, self.patch, is_release, rank, self.pre_number)

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, SemanticVersion):
            return NotImplemented
        return self._sort_key() < other._sort_key()

    def __str__(self) -> str:
        version = f"{self.major}.{self.minor}.{self.patch}"
        if self.pre_release is not None:
            version += f"-{self.pre_release.value}"
            if self.pre_number > 0:
                version += f".{self.pre_number}"
        return version

    @property
    def is_pre_release(self) -> bool:
        return self.pre_release is not None

    @property
    def tag_name(self) -> str:
        return f"v{self}"


@dataclass(frozen=True)
class GitTag:
    """Git 태그. 시맨틱 버전이 아닌 태그는 version이 None."""

    name: str
    hash: str
    version: SemanticVersion | None = None
    date: datetime | None = None
    message: str = ""
    is_annotated: bool = False


@dataclass
class VersionAnalysis:
    """모델이 추천한 버전 증가 분석."""

    recommended_bump: BumpType
    confidence: float
    reasoning: str = ""
    breaking_changes: list[str] = field(default_factory=list)
    new_features: list[str] = field(default_factory=list)
    bug_fixes: list[str] = field(default_factory=list)
    documentation: list[str] = field(default_factory=list)
    dependencies: list[str] = field(default_factory=list)


@dataclass
class TaggingOptions:
    """태그 생성 옵션."""

    dry_run: bool = False
    message: str = ""
    push: bool = False
    annotated: bool = True
    force_bump: BumpType | None = None
    pre_release: PreReleaseType | None = None


@dataclass
class VersionPlan:
    """태그 생성 계획."""

    current: SemanticVersion
    next: SemanticVersion
    analysis: VersionAnalysis | None = None
    tag_created: bool = False
    dry_run: bool = False

    @property
    def tag_name(self) -> str:
        return self.next.tag_name
