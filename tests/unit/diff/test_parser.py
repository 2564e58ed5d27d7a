"""DiffParser 테스트."""

import pytest

from commit_sherpa.diff.parser import DiffParser, build_summary, unquote_path
from commit_sherpa.shared.models import ChangeType, FileChange

MODIFIED_DIFF = """diff --git a/src/main.py b/src/main.py
index 1234567..abcdefg 100644
--- a/src/main.py
+++ b/src/main.py
@@ -1,3 +1,4 @@
 import os
+import sys

-print("old")
+print("new")
"""

ADDED_DIFF = """diff --git a/internal/ai/client.go b/internal/ai/client.go
new file mode 100644
index 0000000..1111111
--- /dev/null
+++ b/internal/ai/client.go
@@ -0,0 +1,3 @@
+package ai
+
+func NewClient() {}
"""

DELETED_DIFF = """diff --git a/old.js b/old.js
deleted file mode 100644
index 1111111..0000000
--- a/old.js
+++ /dev/null
@@ -1,2 +0,0 @@
-const a = 1;
-export default a;
"""

RENAMED_DIFF = """diff --git a/docs/old.md b/docs/new.md
similarity index 90%
rename from docs/old.md
rename to docs/new.md
"""

COPIED_DIFF = """diff --git a/base.yaml b/copy.yaml
similarity index 100%
copy from base.yaml
copy to copy.yaml
"""


QUOTED_DIFF = r"""diff --git "a/docs/\355\225\234.md" "b/docs/\355\225\234.md"
index 1111111..2222222 100644
--- "a/docs/\355\225\234.md"
+++ "b/docs/\355\225\234.md"
@@ -1 +1,2 @@
 # Title
+more
"""


@pytest.fixture
def parser() -> DiffParser:
    return DiffParser()


class TestParse:
    """parse() 테스트."""

    def test_empty_input_returns_empty_summary(self, parser: DiffParser) -> None:
        """빈 입력은 에러가 아니라 빈 요약."""
        for text in ("", "   \n\t"):
            summary = parser.parse(text)
            assert summary.files == ()
            assert summary.total_files == 0
            assert summary.total_added == 0
            assert summary.total_deleted == 0

    def test_modified_file(self, parser: DiffParser) -> None:
        """수정 파일의 라인 수와 언어."""
        summary = parser.parse(MODIFIED_DIFF)

        assert summary.total_files == 1
        file = summary.files[0]
        assert file.path == "src/main.py"
        assert file.change_type == ChangeType.MODIFIED
        assert file.lines_added == 2
        assert file.lines_deleted == 1
        assert file.language == "Python"
        assert file.old_path is None
        assert file.content.startswith("diff --git")

    def test_added_file(self, parser: DiffParser) -> None:
        """new file mode는 added."""
        file = parser.parse(ADDED_DIFF).files[0]
        assert file.change_type == ChangeType.ADDED
        assert file.lines_added == 3
        assert file.lines_deleted == 0
        assert file.language == "Go"

    def test_deleted_file(self, parser: DiffParser) -> None:
        """deleted file mode는 deleted."""
        file = parser.parse(DELETED_DIFF).files[0]
        assert file.change_type == ChangeType.DELETED
        assert file.lines_deleted == 2

    def test_renamed_file(self, parser: DiffParser) -> None:
        """rename from/to 헤더로 이전 경로 기록."""
        file = parser.parse(RENAMED_DIFF).files[0]
        assert file.change_type == ChangeType.RENAMED
        assert file.path == "docs/new.md"
        assert file.old_path == "docs/old.md"
        assert file.lines_added == 0

    def test_copied_file(self, parser: DiffParser) -> None:
        """copy from/to 헤더는 copied."""
        file = parser.parse(COPIED_DIFF).files[0]
        assert file.change_type == ChangeType.COPIED
        assert file.path == "copy.yaml"
        assert file.old_path == "base.yaml"

    def test_header_paths_differ_means_renamed(self, parser: DiffParser) -> None:
        """헤더의 a/, b/ 경로가 다르면 rename으로 분류."""
        diff = "diff --git a/a.py b/b.py\n@@ -1 +1 @@\n-x\n+y\n"
        file = parser.parse(diff).files[0]
        assert file.change_type == ChangeType.RENAMED
        assert file.old_path == "a.py"
        assert file.path == "b.py"

    def test_quoted_non_ascii_path(self, parser: DiffParser) -> None:
        """인용된 8진수 이스케이프 경로도 파일 하나로 해석한다."""
        summary = parser.parse(QUOTED_DIFF + MODIFIED_DIFF)

        assert summary.total_files == 2
        file = summary.files[0]
        assert file.path == "docs/한.md"
        assert file.change_type == ChangeType.MODIFIED
        assert file.lines_added == 1

    def test_quoted_path_renamed(self, parser: DiffParser) -> None:
        """인용된 경로와 인용되지 않은 경로가 섞인 rename."""
        diff = (
            r'diff --git "a/\355\225\234.txt" b/notes.txt' "\n"
            "similarity index 100%\n"
            r'rename from "\355\225\234.txt"' "\n"
            "rename to notes.txt\n"
        )
        file = parser.parse(diff).files[0]
        assert file.change_type == ChangeType.RENAMED
        assert file.old_path == "한.txt"
        assert file.path == "notes.txt"

    def test_multiple_sections_and_totals(self, parser: DiffParser) -> None:
        """섹션 수만큼 파일이 생기고 합계는 파일별 합과 같다."""
        summary = parser.parse(MODIFIED_DIFF + ADDED_DIFF + DELETED_DIFF)

        assert summary.total_files == 3
        assert summary.total_added == sum(f.lines_added for f in summary.files)
        assert summary.total_deleted == sum(f.lines_deleted for f in summary.files)
        assert summary.total_added == 5
        assert summary.total_deleted == 3

    def test_preamble_is_ignored(self, parser: DiffParser) -> None:
        """첫 섹션 앞의 텍스트는 무시."""
        summary = parser.parse("commit abc\nAuthor: me\n\n" + MODIFIED_DIFF)
        assert summary.total_files == 1

    def test_header_lines_not_counted(self, parser: DiffParser) -> None:
        """+++, --- 헤더는 라인 수에 포함되지 않는다."""
        file = parser.parse(MODIFIED_DIFF).files[0]
        assert file.total_lines == 3

    def test_malformed_section_is_skipped(self, parser: DiffParser) -> None:
        """헤더를 해석할 수 없는 섹션만 건너뛴다."""
        broken = "diff --git something-odd\n@@ -1 +1 @@\n+x\n"
        summary = parser.parse(broken + ADDED_DIFF)

        assert summary.total_files == 1
        assert summary.files[0].path == "internal/ai/client.go"

    def test_timestamp_is_set(self, parser: DiffParser) -> None:
        assert parser.parse(MODIFIED_DIFF).timestamp is not None


class TestParseNumstat:
    """parse_numstat() 테스트."""

    def test_numstat_lines(self, parser: DiffParser) -> None:
        """added, deleted, path 형식 파싱."""
        summary = parser.parse_numstat("10\t2\tsrc/app.py\n3\t0\tREADME.md\n")

        assert summary.total_files == 2
        assert summary.total_added == 13
        assert summary.total_deleted == 2
        assert summary.files[0].language == "Python"
        assert summary.files[0].change_type == ChangeType.MODIFIED

    def test_binary_counts_as_zero(self, parser: DiffParser) -> None:
        """바이너리 파일의 `-`는 0."""
        summary = parser.parse_numstat("-\t-\tlogo.png\n")
        assert summary.files[0].lines_added == 0
        assert summary.files[0].lines_deleted == 0

    def test_ignores_other_lines(self, parser: DiffParser) -> None:
        summary = parser.parse_numstat("commit abc\n\n1\t1\ta.go\n")
        assert summary.total_files == 1


class TestDetectLanguage:
    """detect_language() 테스트."""

    @pytest.mark.parametrize(
        ("path", "expected"),
        [
            ("main.go", "Go"),
            ("web/App.TSX", "TypeScript"),
            ("config.yaml", "YAML"),
            ("Makefile", "Unknown"),
            ("data.xyz", "Unknown"),
        ],
    )
    def test_detect_language(
        self, parser: DiffParser, path: str, expected: str
    ) -> None:
        assert parser.detect_language(path) == expected

    def test_custom_language_map(self) -> None:
        """주입한 매핑을 사용한다."""
        parser = DiffParser(language_map={".xyz": "Xyz"})
        assert parser.detect_language("a.xyz") == "Xyz"
        assert parser.detect_language("a.py") == "Unknown"


def test_build_summary_totals() -> None:
    """build_summary는 파일 목록으로 합계를 계산한다."""
    files = [
        FileChange("a.py", ChangeType.ADDED, lines_added=4),
        FileChange("b.py", ChangeType.MODIFIED, lines_added=1, lines_deleted=2),
    ]
    summary = build_summary(files)

    assert summary.files == tuple(files)
    assert summary.total_files == 2
    assert summary.total_added == 5
    assert summary.total_deleted == 2


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("src/main.py", "src/main.py"),
        ('"a/my file.py"', "a/my file.py"),
        (r'"tab\there.txt"', "tab\there.txt"),
        (r'"say \"hi\".md"', 'say "hi".md'),
        (r'"\355\225\234.md"', "한.md"),
    ],
)
def test_unquote_path(value: str, expected: str) -> None:
    assert unquote_path(value) == expected
