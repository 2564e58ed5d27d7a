"""태그 기반 시맨틱 버전 계획 및 태그 생성."""

import logging
from collections.abc import Iterable

from commit_sherpa.diff.parser import DiffParser
from commit_sherpa.diff.processor import DiffProcessor, NoChangesError
from commit_sherpa.shared.git import GitClient
from commit_sherpa.shared.models import (
    BumpType,
    GitTag,
    ProcessedDiff,
    SemanticVersion,
    TaggingOptions,
    VersionAnalysis,
    VersionPlan,
)

from .analysis import VersionAnalyst
from .semver import VersionError, bump_version, latest_version, try_parse_version

logger = logging.getLogger(__name__)

RECENT_COMMIT_COUNT = 10
DEFAULT_TAG_MESSAGE = "Release {version}"


class DirtyWorkingTreeError(VersionError):
    """커밋되지 않은 변경사항이 있어 태그를 만들 수 없는 경우."""

    pass


class VersionPlanner:
    """현재 버전 조회, 변경 분석, 다음 버전 계산, 태그 생성.

    Args:
        git: 저장소 클라이언트
        analyst: LLM 버전 분석기. None이면 force_bump 없이는 계획할 수 없다.
        parser: diff 파서
        processor: diff 처리기
        tag_message: 태그 메시지 템플릿. `{version}` 자리에 버전이 들어간다.
    """

    def __init__(
        self,
        git: GitClient,
        analyst: VersionAnalyst | None = None,
        parser: DiffParser | None = None,
        processor: DiffProcessor | None = None,
        tag_message: str = DEFAULT_TAG_MESSAGE,
    ) -> None:
        self.git = git
        self.analyst = analyst
        self.parser = parser or DiffParser()
        self.processor = processor or DiffProcessor()
        self.tag_message = tag_message

    @staticmethod
    def latest_version(tags: Iterable[GitTag]) -> SemanticVersion:
        """시맨틱 버전 태그 중 최신 버전. 없으면 0.0.0."""
        return latest_version(tag.version for tag in tags)

    def get_latest_version(self) -> SemanticVersion:
        """저장소 태그에서 최신 버전 조회.

        Raises:
            GitError: 태그 목록 조회 실패 시
        """
        tags = self.git.get_tags(try_parse_version)
        version = self.latest_version(tags)
        logger.debug(f"최신 버전: {version} (태그 {len(tags)}개)")
        return version

    def validate_repository_state(self) -> None:
        """태그 생성 전 작업 트리가 깨끗한지 확인.

        Raises:
            DirtyWorkingTreeError: staged 또는 unstaged 변경사항이 있는 경우
        """
        if self.git.has_staged_changes() or self.git.has_unstaged_changes():
            raise DirtyWorkingTreeError(
                "커밋되지 않은 변경사항이 있습니다. "
                "태그를 만들기 전에 커밋하거나 stash 하세요."
            )

    def collect_changes(self, include_staged: bool = True) -> ProcessedDiff:
        """분석 대상 diff 수집. staged 변경이 없으면 HEAD 커밋을 사용.

        Raises:
            NoChangesError: 분석할 변경사항이 없는 경우
        """
        summary = self.parser.parse(self.git.get_diff(staged=include_staged))
        if not summary.files:
            logger.info("작업 트리 변경 없음, HEAD 커밋을 분석합니다")
            summary = self.parser.parse_numstat(self.git.get_commit_numstat("HEAD"))
        if not summary.files:
            raise NoChangesError("최신 커밋에서 변경사항을 찾을 수 없습니다")
        return self.processor.process(summary)

    def analyze_changes(self, include_staged: bool = True) -> VersionAnalysis:
        """변경사항을 LLM으로 분석해 bump 추천을 받는다.

        Raises:
            NoChangesError: 분석할 변경사항이 없는 경우
            VersionError: 분석기가 설정되지 않은 경우
        """
        if self.analyst is None:
            raise VersionError("버전 분석기가 설정되지 않았습니다")
        processed = self.collect_changes(include_staged)
        recent = self.git.get_recent_commits(RECENT_COMMIT_COUNT)
        return self.analyst.analyze(processed, recent)

    @staticmethod
    def calculate_next_version(
        current: SemanticVersion,
        analysis: VersionAnalysis | None,
        options: TaggingOptions,
    ) -> SemanticVersion:
        """다음 버전 계산. force_bump가 있으면 추천 bump를 무시한다."""
        bump: BumpType | None = options.force_bump
        if bump is None:
            if analysis is None:
                raise VersionError("bump 타입을 결정할 수 없습니다")
            bump = analysis.recommended_bump
        return bump_version(current, bump, options.pre_release)

    def plan(self, options: TaggingOptions) -> VersionPlan:
        """작업 트리 확인 후 현재 버전과 다음 버전을 계산.

        force_bump가 있고 분석기가 없으면 LLM 분석을 건너뛴다.
        """
        self.validate_repository_state()
        current = self.get_latest_version()

        analysis = None
        if options.force_bump is None or self.analyst is not None:
            analysis = self.analyze_changes()

        next_version = self.calculate_next_version(current, analysis, options)
        logger.info(f"버전 계획: {current.tag_name} -> {next_version.tag_name}")
        return VersionPlan(
            current=current,
            next=next_version,
            analysis=analysis,
            dry_run=options.dry_run,
        )

    def create_tag(self, version: SemanticVersion, options: TaggingOptions) -> bool:
        """태그 생성 (필요하면 push). dry-run이면 아무것도 하지 않는다.

        Returns:
            태그를 실제로 만들었는지 여부

        Raises:
            GitError: 태그 생성 또는 push 실패 시
        """
        if options.dry_run:
            logger.info(f"dry-run: 태그 {version.tag_name} 생성 건너뜀")
            return False

        message = options.message or self.tag_message.format(version=version)
        self.git.create_tag(version.tag_name, message, annotated=options.annotated)
        logger.info(f"태그 생성: {version.tag_name}")

        if options.push:
            self.git.push_tag(version.tag_name)
            logger.info(f"태그 push: {version.tag_name}")
        return True

    def execute(self, options: TaggingOptions) -> VersionPlan:
        """plan 후 create_tag까지 실행."""
        plan = self.plan(options)
        plan.tag_created = self.create_tag(plan.next, options)
        return plan
