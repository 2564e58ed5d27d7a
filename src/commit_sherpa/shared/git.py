"""Git 클라이언트 모듈."""

import logging
from collections.abc import Callable, Sequence
from datetime import datetime
from pathlib import Path
from types import MappingProxyType

from git import InvalidGitRepositoryError, NoSuchPathError, Repo
from git.exc import GitCommandError

from commit_sherpa.shared.models import CommitInfo, GitTag, SemanticVersion

logger = logging.getLogger(__name__)


class GitError(Exception):
    """Git 관련 에러."""

    pass


class InvalidRepositoryError(GitError):
    """유효하지 않은 Git 저장소 에러."""

    pass


# 확장자 -> 언어 매핑
EXTENSION_LANGUAGE_MAP = MappingProxyType(
    {
        ".go": "Go",
        ".py": "Python",
        ".js": "JavaScript",
        ".jsx": "JavaScript",
        ".mjs": "JavaScript",
        ".ts": "TypeScript",
        ".tsx": "TypeScript",
        ".java": "Java",
        ".kt": "Kotlin",
        ".rs": "Rust",
        ".c": "C",
        ".h": "C",
        ".cpp": "C++",
        ".cc": "C++",
        ".hpp": "C++",
        ".cs": "C#",
        ".rb": "Ruby",
        ".php": "PHP",
        ".swift": "Swift",
        ".sh": "Shell",
        ".bash": "Shell",
        ".sql": "SQL",
        ".html": "HTML",
        ".htm": "HTML",
        ".css": "CSS",
        ".scss": "SCSS",
        ".sass": "Sass",
        ".less": "Less",
        ".vue": "Vue",
        ".svelte": "Svelte",
        ".json": "JSON",
        ".xml": "XML",
        ".yaml": "YAML",
        ".yml": "YAML",
        ".toml": "TOML",
        ".ini": "INI",
        ".md": "Markdown",
        ".rst": "reStructuredText",
        ".txt": "Text",
        ".proto": "Protocol Buffers",
        ".tf": "Terraform",
    }
)

# git log --pretty 형식: hash|subject|author|date|slug
COMMIT_LOG_FORMAT = "%H|%s|%an|%ad|%f"
# git tag --format 형식: name|hash|date|subject
TAG_LIST_FORMAT = (
    "%(refname:short)|%(objectname)|%(creatordate:iso)|%(contents:subject)"
)
_ISO_DATE_FORMAT = "%Y-%m-%d %H:%M:%S %z"


def parse_iso_date(value: str) -> datetime | None:
    """`--date=iso` 형식 날짜 파싱. 실패하면 None."""
    try:
        return datetime.strptime(value.strip(), _ISO_DATE_FORMAT)
    except ValueError:
        logger.debug(f"날짜 파싱 실패: {value!r}")
        return None


def parse_commit_records(text: str) -> list[CommitInfo]:
    """`hash|subject|author|date|slug` 레코드 목록 파싱.

    subject에 `|`가 들어간 경우를 위해 앞의 hash와 뒤의 세 필드를 기준으로 나눈다.
    필드가 부족한 줄은 건너뛴다.
    """
    commits: list[CommitInfo] = []
    for line in text.splitlines():
        if not line.strip():
            continue

        head, sep, rest = line.partition("|")
        parts = rest.rsplit("|", 3) if sep else []
        if len(parts) != 4:
            logger.debug(f"커밋 레코드 형식 불일치, 건너뜀: {line!r}")
            continue

        subject, author, date, slug = parts
        commits.append(
            CommitInfo(
                hash=head,
                subject=subject,
                author=author,
                date=parse_iso_date(date),
                slug=slug,
            )
        )
    return commits


def parse_tag_records(
    text: str,
    version_parser: Callable[[str], SemanticVersion | None],
    is_annotated: Callable[[str], bool] | None = None,
) -> list[GitTag]:
    """`name|hash|date|subject` 태그 레코드 목록 파싱.

    Args:
        text: git tag 출력
        version_parser: 태그 이름 -> SemanticVersion (시맨틱 버전이 아니면 None)
        is_annotated: 태그 이름 -> annotated 여부. None이면 모두 False.

    Returns:
        GitTag 목록 (입력 순서 유지)
    """
    tags: list[GitTag] = []
    for line in text.splitlines():
        if not line.strip():
            continue

        parts = line.split("|", 3)
        if len(parts) < 2:
            continue
        name, tag_hash = parts[0], parts[1]
        date = parse_iso_date(parts[2]) if len(parts) > 2 else None
        message = parts[3] if len(parts) > 3 else ""

        tags.append(
            GitTag(
                name=name,
                hash=tag_hash,
                version=version_parser(name),
                date=date,
                message=message,
                is_annotated=is_annotated(name) if is_annotated else False,
            )
        )
    return tags


class GitClient:
    """Git 저장소 클라이언트."""

    def __init__(self, path: str | Path = ".") -> None:
        """Git 저장소를 엽니다.

        Args:
            path: Git 저장소 경로. 기본값은 현재 디렉토리.

        Raises:
            InvalidRepositoryError: 유효하지 않은 Git 저장소인 경우.
        """
        self._path = Path(path).resolve()
        try:
            self._repo = Repo(self._path)
        except (InvalidGitRepositoryError, NoSuchPathError) as e:
            raise InvalidRepositoryError(
                f"유효하지 않은 Git 저장소입니다: {self._path}"
            ) from e

    @property
    def path(self) -> Path:
        """저장소 경로를 반환합니다."""
        return self._path

    def is_valid_repo(self) -> bool:
        """작업 트리가 있는 저장소인지 확인합니다."""
        return not self._repo.bare

    def get_diff(self, staged: bool = True, commit_range: str | None = None) -> str:
        """Git diff를 가져옵니다.

        Args:
            staged: True이면 staged 변경사항만, False이면 unstaged 변경사항.
            commit_range: 커밋 범위 (예: "HEAD~3..HEAD").
                         지정하면 staged 인자는 무시됩니다.

        Returns:
            diff 문자열.

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        try:
            if commit_range:
                return self._repo.git.diff(commit_range)
            elif staged:
                return self._repo.git.diff("--cached")
            else:
                return self._repo.git.diff()
        except GitCommandError as e:
            raise GitError(f"diff 가져오기 실패: {e}") from e

    def get_commit_diff(self, ref: str = "HEAD") -> str:
        """커밋 하나의 diff를 가져옵니다."""
        try:
            return self._repo.git.show("--format=", ref)
        except GitCommandError as e:
            raise GitError(f"커밋 diff 가져오기 실패 ({ref}): {e}") from e

    def get_commit_numstat(self, ref: str = "HEAD") -> str:
        """커밋 하나의 numstat 출력을 가져옵니다."""
        try:
            return self._repo.git.show("--numstat", "--format=", ref)
        except GitCommandError as e:
            raise GitError(f"numstat 가져오기 실패 ({ref}): {e}") from e

    def get_recent_commits(self, count: int = 10) -> list[CommitInfo]:
        """최근 커밋 목록을 가져옵니다 (merge 커밋 제외, 최신순).

        Args:
            count: 가져올 커밋 수. 기본값 10.

        Returns:
            CommitInfo 목록. 커밋이 없는 저장소면 빈 목록.

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        return self._log(f"-{count}")

    def get_file_history(
        self, paths: Sequence[str], count: int = 5
    ) -> list[CommitInfo]:
        """주어진 경로들을 변경한 커밋 목록을 가져옵니다.

        Args:
            paths: 파일 경로 목록
            count: 가져올 커밋 수. 기본값 5.

        Returns:
            CommitInfo 목록.

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        if not paths:
            return []
        return self._log(f"-{count}", "--", *paths)

    def _log(self, *args: str) -> list[CommitInfo]:
        try:
            output = self._repo.git.log(
                "--no-merges",
                f"--pretty=format:{COMMIT_LOG_FORMAT}",
                "--date=iso",
                *args,
            )
        except GitCommandError as e:
            # 빈 저장소의 경우
            if "does not have any commits" in str(e):
                return []
            raise GitError(f"커밋 목록 가져오기 실패: {e}") from e
        return parse_commit_records(output)

    def get_tags(
        self, version_parser: Callable[[str], SemanticVersion | None]
    ) -> list[GitTag]:
        """태그 목록을 버전 내림차순으로 가져옵니다.

        Args:
            version_parser: 태그 이름을 SemanticVersion으로 바꾸는 함수.

        Returns:
            GitTag 목록.

        Raises:
            GitError: Git 명령 실행 실패 시.
        """
        try:
            output = self._repo.git.tag(
                "-l", "--sort=-version:refname", f"--format={TAG_LIST_FORMAT}"
            )
        except GitCommandError as e:
            raise GitError(f"태그 목록 가져오기 실패: {e}") from e
        return parse_tag_records(output, version_parser, self.is_annotated_tag)

    def is_annotated_tag(self, name: str) -> bool:
        """태그가 annotated 태그인지 확인합니다."""
        try:
            return self._repo.git.cat_file("-t", name).strip() == "tag"
        except GitCommandError:
            return False

    def create_tag(self, name: str, message: str, annotated: bool = True) -> None:
        """태그를 생성합니다.

        Raises:
            GitError: 태그 생성 실패 시 (이미 존재하는 태그 포함).
        """
        try:
            if annotated:
                self._repo.create_tag(name, message=message)
            else:
                self._repo.create_tag(name)
        except GitCommandError as e:
            raise GitError(f"태그 생성 실패 ({name}): {e}") from e

    def push_tag(self, name: str, remote: str = "origin") -> None:
        """태그를 원격 저장소로 push 합니다."""
        try:
            self._repo.git.push(remote, name)
        except GitCommandError as e:
            raise GitError(f"태그 push 실패 ({name}): {e}") from e

    def has_staged_changes(self) -> bool:
        """staged 변경사항이 있는지 확인합니다."""
        return self._has_changes("--cached")

    def has_unstaged_changes(self) -> bool:
        """unstaged 변경사항이 있는지 확인합니다."""
        return self._has_changes()

    def _has_changes(self, *args: str) -> bool:
        try:
            self._repo.git.diff(*args, "--quiet")
        except GitCommandError as e:
            # --quiet는 변경사항이 있으면 종료 코드 1
            if e.status == 1:
                return True
            raise GitError(f"변경사항 확인 실패: {e}") from e
        return False

    def commit(self, message: str) -> None:
        """staged 변경사항을 커밋합니다."""
        try:
            self._repo.git.commit("-m", message)
        except GitCommandError as e:
            raise GitError(f"커밋 실패: {e}") from e

    def get_current_branch(self) -> str:
        """현재 브랜치 이름을 반환합니다.

        Returns:
            현재 브랜치 이름. detached HEAD 상태이면 커밋 해시 반환.
        """
        try:
            if self._repo.head.is_detached:
                return self._repo.head.commit.hexsha[:7]
            return self._repo.active_branch.name
        except GitCommandError as e:
            raise GitError(f"현재 브랜치 가져오기 실패: {e}") from e
        except TypeError:
            # 빈 저장소의 경우
            return "main"
