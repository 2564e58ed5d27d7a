"""Version module - 시맨틱 버전 계산과 태그 생성."""

from .analysis import VersionAnalyst, parse_version_analysis
from .engine import DirtyWorkingTreeError, VersionPlanner
from .semver import (
    InvalidOptionError,
    InvalidVersionError,
    VersionError,
    bump_version,
    parse_bump,
    parse_pre_release,
    parse_version,
)

__all__ = [
    "DirtyWorkingTreeError",
    "InvalidOptionError",
    "InvalidVersionError",
    "VersionAnalyst",
    "VersionError",
    "VersionPlanner",
    "bump_version",
    "parse_bump",
    "parse_pre_release",
    "parse_version",
    "parse_version_analysis",
]
