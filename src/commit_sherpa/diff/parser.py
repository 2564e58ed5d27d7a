"""Git diff 파서 모듈."""

import logging
import re
from collections.abc import Mapping, Sequence
from datetime import UTC, datetime
from pathlib import PurePosixPath

from commit_sherpa.shared.git import EXTENSION_LANGUAGE_MAP
from commit_sherpa.shared.models import ChangeType, DiffSummary, FileChange

logger = logging.getLogger(__name__)

UNKNOWN_LANGUAGE = "Unknown"


class DiffParseError(ValueError):
    """diff 섹션 하나를 해석할 수 없는 경우."""

    pass


class DiffParser:
    """Git diff 문자열을 DiffSummary 객체로 변환하는 파서.

    파일 섹션 하나의 파싱 실패는 해당 파일만 건너뛰고 나머지는 계속 처리한다.
    """

    # Git diff 헤더 패턴
    # core.quotePath가 켜져 있으면 비ASCII 경로는 "a/..." 형태로 인용된다
    _FILE_HEADER_PATTERN = re.compile(
        r'^diff --git ("(?:[^"\\]|\\.)*"|a/.*?) ("(?:[^"\\]|\\.)*"|b/.*)$',
        re.MULTILINE,
    )
    _NEW_FILE_PATTERN = re.compile(r"^new file mode", re.MULTILINE)
    _DELETED_FILE_PATTERN = re.compile(r"^deleted file mode", re.MULTILINE)
    _RENAME_FROM_PATTERN = re.compile(r"^rename from (.*)$", re.MULTILINE)
    _RENAME_TO_PATTERN = re.compile(r"^rename to (.*)$", re.MULTILINE)
    _COPY_FROM_PATTERN = re.compile(r"^copy from (.*)$", re.MULTILINE)
    _COPY_TO_PATTERN = re.compile(r"^copy to (.*)$", re.MULTILINE)
    _HUNK_HEADER_PATTERN = re.compile(r"^@@ ", re.MULTILINE)

    # numstat 패턴: <added>\t<deleted>\t<path>
    _NUMSTAT_PATTERN = re.compile(r"^(\d+|-)\t(\d+|-)\t(.+)$")

    def __init__(self, language_map: Mapping[str, str] | None = None) -> None:
        """DiffParser 초기화.

        Args:
            language_map: 확장자 -> 언어 매핑. None이면 기본 매핑 사용.
        """
        self._language_map = (
            language_map if language_map is not None else EXTENSION_LANGUAGE_MAP
        )

    def parse(self, diff_text: str) -> DiffSummary:
        """
        Git diff 텍스트를 파싱하여 DiffSummary 반환.

        Args:
            diff_text: git diff 명령의 출력 문자열

        Returns:
            DiffSummary 객체 (files, 합계, timestamp 포함)
        """
        if not diff_text or not diff_text.strip():
            return build_summary([])

        files: list[FileChange] = []
        for section in self._split_into_file_diffs(diff_text):
            try:
                files.append(self._parse_file_diff(section))
            except DiffParseError as e:
                logger.warning(f"diff 섹션 파싱 실패, 건너뜀: {e}")

        return build_summary(files)

    def parse_numstat(self, numstat_text: str) -> DiffSummary:
        """`git show --numstat` 출력을 DiffSummary로 변환.

        커밋 단위 분석용이며 내용(content)은 비어 있다. 바이너리 파일의
        `-` 카운트는 0으로 처리한다.

        Args:
            numstat_text: numstat 형식 텍스트

        Returns:
            DiffSummary 객체
        """
        files: list[FileChange] = []
        for line in numstat_text.splitlines():
            match = self._NUMSTAT_PATTERN.match(line.strip())
            if not match:
                continue

            added, deleted, raw_path = match.groups()
            path = unquote_path(raw_path)
            files.append(
                FileChange(
                    path=path,
                    change_type=ChangeType.MODIFIED,
                    lines_added=int(added) if added != "-" else 0,
                    lines_deleted=int(deleted) if deleted != "-" else 0,
                    language=self.detect_language(path),
                )
            )

        return build_summary(files)

    def detect_language(self, path: str) -> str:
        """확장자로 언어 추론. 매핑이 없으면 "Unknown"."""
        suffix = PurePosixPath(path).suffix.lower()
        if not suffix:
            return UNKNOWN_LANGUAGE
        return self._language_map.get(suffix, UNKNOWN_LANGUAGE)

    def _split_into_file_diffs(self, diff_text: str) -> list[str]:
        """Diff 텍스트를 파일별로 분리."""
        # diff --git 으로 시작하는 부분을 기준으로 분리
        parts = re.split(r"(?=^diff --git )", diff_text, flags=re.MULTILINE)
        return [part for part in parts if part.startswith("diff --git")]

    def _parse_file_diff(self, section: str) -> FileChange:
        """개별 파일 diff를 파싱."""
        header_paths = self._header_paths(section)
        if header_paths is None:
            first_line = section.splitlines()[0] if section else ""
            raise DiffParseError(f"파일 헤더를 찾을 수 없음: {first_line!r}")

        old_path: str | None = header_paths[0]
        path = header_paths[1]
        change_type = self._detect_change_type(section)

        if change_type == ChangeType.RENAMED:
            old_path, path = self._resolve_paths(
                section,
                self._RENAME_FROM_PATTERN,
                self._RENAME_TO_PATTERN,
                old_path,
                path,
            )
        elif change_type == ChangeType.COPIED:
            old_path, path = self._resolve_paths(
                section, self._COPY_FROM_PATTERN, self._COPY_TO_PATTERN, old_path, path
            )
        else:
            old_path = None

        added, deleted = self._count_changes(section)

        return FileChange(
            path=path,
            change_type=change_type,
            lines_added=added,
            lines_deleted=deleted,
            content=section,
            language=self.detect_language(path),
            old_path=old_path,
        )

    def _detect_change_type(self, section: str) -> ChangeType:
        """파일 변경 타입 감지."""
        if self._NEW_FILE_PATTERN.search(section):
            return ChangeType.ADDED
        if self._DELETED_FILE_PATTERN.search(section):
            return ChangeType.DELETED
        if self._COPY_FROM_PATTERN.search(section):
            return ChangeType.COPIED
        if self._RENAME_FROM_PATTERN.search(section):
            return ChangeType.RENAMED

        # 헤더의 a/, b/ 경로가 다르면 rename
        header_paths = self._header_paths(section)
        if header_paths and header_paths[0] != header_paths[1]:
            return ChangeType.RENAMED
        return ChangeType.MODIFIED

    def _resolve_paths(
        self,
        section: str,
        from_pattern: re.Pattern[str],
        to_pattern: re.Pattern[str],
        old_path: str | None,
        path: str,
    ) -> tuple[str | None, str]:
        """rename/copy 헤더가 있으면 그 경로를 우선 사용."""
        from_match = from_pattern.search(section)
        to_match = to_pattern.search(section)
        if from_match and to_match:
            return unquote_path(from_match.group(1)), unquote_path(to_match.group(1))
        return old_path, path

    def _header_paths(self, section: str) -> tuple[str, str] | None:
        """`diff --git` 헤더에서 a/, b/ 접두어를 뗀 (이전 경로, 현재 경로)."""
        header_match = self._FILE_HEADER_PATTERN.search(section)
        if not header_match:
            return None
        old_path = unquote_path(header_match.group(1)).removeprefix("a/")
        path = unquote_path(header_match.group(2)).removeprefix("b/")
        return old_path, path

    def _count_changes(self, section: str) -> tuple[int, int]:
        """첫 hunk 이후의 추가/삭제 라인 수 계산."""
        hunk_match = self._HUNK_HEADER_PATTERN.search(section)
        if not hunk_match:
            return 0, 0

        additions = 0
        deletions = 0
        for line in section[hunk_match.start():].split("\n"):
            if line.startswith("+") and not line.startswith("+++"):
                additions += 1
            elif line.startswith("-") and not line.startswith("---"):
                deletions += 1

        return additions, deletions


def build_summary(files: Sequence[FileChange]) -> DiffSummary:
    """파일 목록으로 합계를 계산해 DiffSummary 생성."""
    return DiffSummary(
        files=tuple(files),
        total_added=sum(f.lines_added for f in files),
        total_deleted=sum(f.lines_deleted for f in files),
        total_files=len(files),
        timestamp=datetime.now(UTC),
    )


_C_ESCAPES = {
    "a": "\a",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
    "v": "\v",
    '"': '"',
    "\\": "\\",
}


def unquote_path(value: str) -> str:
    """git이 C 스타일로 인용한 경로를 원래 문자열로 복원.

    `"docs/\\355\\225\\234.md"`처럼 8진수로 이스케이프된 바이트는 UTF-8로
    디코딩한다. 인용되지 않은 경로는 그대로 돌려준다.
    """
    if len(value) < 2 or not (value.startswith('"') and value.endswith('"')):
        return value

    inner = value[1:-1]
    raw = bytearray()
    i = 0
    while i < len(inner):
        char = inner[i]
        if char != "\\" or i + 1 == len(inner):
            raw += char.encode("utf-8")
            i += 1
            continue

        escaped = inner[i + 1]
        octal = re.match(r"[0-7]{1,3}", inner[i + 1 : i + 4])
        if octal:
            raw.append(int(octal.group(), 8) & 0xFF)
            i += 1 + len(octal.group())
        else:
            raw += _C_ESCAPES.get(escaped, escaped).encode("utf-8")
            i += 2
    return raw.decode("utf-8", errors="replace")
