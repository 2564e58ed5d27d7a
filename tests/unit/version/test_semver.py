"""시맨틱 버전 파싱, 정렬, 증가 테스트."""

import pytest

from commit_sherpa.shared.models import BumpType, PreReleaseType, SemanticVersion
from commit_sherpa.version.semver import (
    InvalidOptionError,
    InvalidVersionError,
    VersionError,
    bump_version,
    latest_version,
    parse_bump,
    parse_pre_release,
    parse_version,
    try_parse_version,
)


class TestParseVersion:
    """parse_version 테스트."""

    def test_plain_version(self) -> None:
        assert parse_version("1.2.3") == SemanticVersion(1, 2, 3)

    def test_leading_v(self) -> None:
        assert parse_version("v10.0.7") == SemanticVersion(10, 0, 7)

    def test_pre_release(self) -> None:
        version = parse_version("v2.0.0-rc.3")
        assert version.pre_release == PreReleaseType.RC
        assert version.pre_number == 3
        assert version.is_pre_release

    def test_pre_release_without_number(self) -> None:
        version = parse_version("1.0.0-beta")
        assert version.pre_release == PreReleaseType.BETA
        assert version.pre_number == 0

    @pytest.mark.parametrize(
        "value", ["", "1.2", "v1.2.3.4", "1.2.3-gamma", "release-1", "1.2.x"]
    )
    def test_invalid(self, value: str) -> None:
        with pytest.raises(InvalidVersionError):
            parse_version(value)

    def test_invalid_version_is_value_error(self) -> None:
        """InvalidVersionError는 ValueError로도 잡힌다."""
        with pytest.raises(ValueError):
            parse_version("nope")

    def test_try_parse_version(self) -> None:
        assert try_parse_version("v1.0.0") == SemanticVersion(1, 0, 0)
        assert try_parse_version("latest") is None

    @pytest.mark.parametrize(
        "version",
        [
            SemanticVersion(0, 0, 0),
            SemanticVersion(1, 2, 3),
            SemanticVersion(1, 0, 0, PreReleaseType.ALPHA, 1),
            SemanticVersion(3, 4, 5, PreReleaseType.RC, 12),
        ],
    )
    def test_string_round_trip(self, version: SemanticVersion) -> None:
        assert parse_version(str(version)) == version

    def test_tag_name(self) -> None:
        version = SemanticVersion(1, 0, 0, PreReleaseType.BETA, 2)
        assert version.tag_name == "v1.0.0-beta.2"


class TestOrdering:
    """버전 정렬 규칙."""

    def test_numeric_ordering(self) -> None:
        assert parse_version("1.2.10") > parse_version("1.2.9")
        assert parse_version("2.0.0") > parse_version("1.99.99")

    def test_release_newer_than_pre_release(self) -> None:
        assert parse_version("1.0.0") > parse_version("1.0.0-rc.9")

    def test_pre_release_rank_then_number(self) -> None:
        ordered = sorted(
            parse_version(v)
            for v in ["1.0.0-rc.1", "1.0.0-beta.2", "1.0.0-alpha.5", "1.0.0-beta.1"]
        )
        assert [str(v) for v in ordered] == [
            "1.0.0-alpha.5",
            "1.0.0-beta.1",
            "1.0.0-beta.2",
            "1.0.0-rc.1",
        ]

    def test_latest_version(self) -> None:
        versions = [parse_version("v1.0.0"), None, parse_version("v1.1.0-rc.1")]
        expected = SemanticVersion(1, 1, 0, PreReleaseType.RC, 1)
        assert latest_version(versions) == expected

    def test_latest_version_baseline(self) -> None:
        assert latest_version([None]) == SemanticVersion(0, 0, 0)


class TestBumpVersion:
    """bump_version 테스트."""

    @pytest.mark.parametrize(
        ("bump", "expected"),
        [
            (BumpType.MAJOR, "2.0.0"),
            (BumpType.MINOR, "1.3.0"),
            (BumpType.PATCH, "1.2.4"),
        ],
    )
    def test_bump(self, bump: BumpType, expected: str) -> None:
        assert str(bump_version(SemanticVersion(1, 2, 3), bump)) == expected

    def test_pre_release_starts_at_one(self) -> None:
        version = bump_version(
            SemanticVersion(1, 2, 3), BumpType.MINOR, PreReleaseType.ALPHA
        )
        assert str(version) == "1.3.0-alpha.1"

    def test_drops_current_pre_release(self) -> None:
        current = SemanticVersion(1, 0, 0, PreReleaseType.RC, 2)
        assert str(bump_version(current, BumpType.PATCH)) == "1.0.1"


class TestKeywords:
    """bump / pre-release 키워드 검증."""

    def test_parse_bump(self) -> None:
        assert parse_bump(" Minor ") == BumpType.MINOR

    def test_parse_bump_invalid(self) -> None:
        with pytest.raises(InvalidOptionError):
            parse_bump("huge")

    def test_parse_pre_release(self) -> None:
        assert parse_pre_release("RC") == PreReleaseType.RC

    def test_parse_pre_release_invalid(self) -> None:
        with pytest.raises(VersionError):
            parse_pre_release("preview")
