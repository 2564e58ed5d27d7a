"""시맨틱 버전 파싱 및 증가."""

import re
from collections.abc import Iterable

from commit_sherpa.shared.models import BumpType, PreReleaseType, SemanticVersion

BASELINE_VERSION = SemanticVersion(0, 0, 0)

_VERSION_PATTERN = re.compile(
    r"^(\d+)\.(\d+)\.(\d+)(?:-(alpha|beta|rc)(?:\.(\d+))?)?$", re.IGNORECASE
)


class VersionError(Exception):
    """버전 관련 에러."""

    pass


class InvalidVersionError(VersionError, ValueError):
    """시맨틱 버전 형식이 아닌 경우."""

    pass


class InvalidOptionError(VersionError, ValueError):
    """잘못된 bump / pre-release 키워드."""

    pass


def parse_version(value: str) -> SemanticVersion:
    """`[v]MAJOR.MINOR.PATCH[-pre[.N]]` 문자열을 SemanticVersion으로 변환.

    Args:
        value: 버전 문자열 또는 태그 이름

    Returns:
        SemanticVersion

    Raises:
        InvalidVersionError: 형식이 맞지 않는 경우
    """
    text = value.strip()
    if text[:1] in ("v", "V"):
        text = text[1:]

    match = _VERSION_PATTERN.match(text)
    if not match:
        raise InvalidVersionError(f"유효하지 않은 버전 형식: {value}")

    major, minor, patch, pre, pre_number = match.groups()
    return SemanticVersion(
        major=int(major),
        minor=int(minor),
        patch=int(patch),
        pre_release=PreReleaseType(pre.lower()) if pre else None,
        pre_number=int(pre_number) if pre_number else 0,
    )


def try_parse_version(value: str) -> SemanticVersion | None:
    """parse_version과 같지만 실패하면 None."""
    try:
        return parse_version(value)
    except InvalidVersionError:
        return None


def latest_version(versions: Iterable[SemanticVersion | None]) -> SemanticVersion:
    """가장 높은 버전 반환. 시맨틱 버전이 하나도 없으면 0.0.0."""
    candidates = [v for v in versions if v is not None]
    return max(candidates, default=BASELINE_VERSION)


def bump_version(
    current: SemanticVersion,
    bump: BumpType,
    pre_release: PreReleaseType | None = None,
) -> SemanticVersion:
    """현재 버전에 bump를 적용한 다음 버전 계산.

    현재 버전의 pre-release 정보는 버리고, pre_release가 주어지면
    pre_number 1로 시작한다.
    """
    if bump == BumpType.MAJOR:
        major, minor, patch = current.major + 1, 0, 0
    elif bump == BumpType.MINOR:
        major, minor, patch = current.major, current.minor + 1, 0
    else:
        major, minor, patch = current.major, current.minor, current.patch + 1

    if pre_release is None:
        return SemanticVersion(major, minor, patch)
    return SemanticVersion(major, minor, patch, pre_release, 1)


def parse_bump(keyword: str) -> BumpType:
    """`major` / `minor` / `patch` 키워드 검증.

    Raises:
        InvalidOptionError: 지원하지 않는 키워드
    """
    try:
        return BumpType(keyword.strip().lower())
    except ValueError as e:
        raise InvalidOptionError(
            f"유효하지 않은 bump 타입: {keyword} (major, minor, patch 중 하나)"
        ) from e


def parse_pre_release(keyword: str) -> PreReleaseType:
    """`alpha` / `beta` / `rc` 키워드 검증.

    Raises:
        InvalidOptionError: 지원하지 않는 키워드
    """
    try:
        return PreReleaseType(keyword.strip().lower())
    except ValueError as e:
        raise InvalidOptionError(
            f"유효하지 않은 pre-release 타입: {keyword} (alpha, beta, rc 중 하나)"
        ) from e
