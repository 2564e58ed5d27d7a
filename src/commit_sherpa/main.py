"""Commit-Sherpa CLI 엔트리포인트."""

import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape

from commit_sherpa import __version__
from commit_sherpa.shared.config import (
    MESSAGE_STYLES,
    OUTPUT_FORMATS,
    get_config_path,
    init_config,
    load_config,
)
from commit_sherpa.shared.output import get_formatter

console = Console()


class Context:
    """CLI 컨텍스트."""

    def __init__(self):
        self.config = None
        self.format = "console"
        self.verbose = False


pass_context = click.make_pass_decorator(Context, ensure=True)


def _setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _emit(ctx: Context, data) -> None:
    """설정된 형식으로 결과 출력. console 포매터는 직접 출력한다."""
    formatter = get_formatter(ctx.format, color=ctx.config.output.color)
    output = formatter.format(data)
    if ctx.format != "console":
        click.echo(output)


def _fail(ctx: Context, error: Exception) -> None:
    console.print(f"[red]오류:[/red] {escape(str(error))}")
    if ctx.verbose:
        import traceback

        console.print(traceback.format_exc())
    raise click.Abort()


@click.group()
@click.option(
    "--config",
    "-c",
    type=click.Path(exists=True),
    help="설정 파일 경로",
)
@click.option(
    "--format",
    "-f",
    type=click.Choice(OUTPUT_FORMATS),
    default=None,
    help="출력 형식 (기본: 설정의 output.default_format)",
)
@click.option(
    "--verbose",
    "-v",
    is_flag=True,
    help="상세 출력",
)
@click.version_option(version=__version__, prog_name="commit-sherpa")
@pass_context
def cli(ctx: Context, config: str | None, format: str | None, verbose: bool):
    """Commit-Sherpa: AI 기반 커밋 메시지 생성 및 시맨틱 버전 태깅 도구."""
    from pathlib import Path

    _setup_logging(verbose)
    try:
        ctx.config = load_config(Path(config) if config else None)
    except ValueError as e:
        console.print(f"[red]설정 오류:[/red] {escape(str(e))}")
        raise click.Abort() from e
    ctx.format = format or ctx.config.output.default_format
    ctx.verbose = verbose


# ============================================================
# 커밋 메시지 명령어
# ============================================================


@cli.command()
@click.option("--all", "all_changes", is_flag=True, help="stage 되지 않은 변경까지 포함")
@click.option("--style", "-s", type=click.Choice(MESSAGE_STYLES), help="메시지 스타일")
@click.option("--dry-run", is_flag=True, help="커밋하지 않고 미리보기만")
@click.option(
    "--options",
    "-n",
    "option_count",
    type=click.IntRange(min=0),
    default=0,
    help="여러 후보를 생성해 선택 (최대 5개)",
)
@pass_context
def generate(
    ctx: Context,
    all_changes: bool,
    style: str | None,
    dry_run: bool,
    option_count: int,
):
    """변경사항으로 커밋 메시지를 생성하고 커밋."""
    from commit_sherpa.generate import CommitGenerator
    from commit_sherpa.shared.git import GitClient

    staged = False if all_changes else None

    try:
        generator = CommitGenerator(GitClient("."), config=ctx.config)
        try:
            if option_count:
                _generate_with_options(generator, option_count, staged, style, dry_run)
                return

            with console.status("[bold green]커밋 메시지 생성 중..."):
                result = generator.generate(staged=staged, style=style, dry_run=dry_run)
            _emit(ctx, result)
        finally:
            generator.close()
    except click.Abort:
        raise
    except Exception as e:
        _fail(ctx, e)


def _generate_with_options(generator, count: int, staged, style, dry_run: bool) -> None:
    with console.status("[bold green]후보 메시지 생성 중..."):
        options = generator.generate_options(count, staged=staged, style=style)

    for i, message in enumerate(options, start=1):
        console.print(f"\n[bold cyan]{i}.[/bold cyan]")
        console.print(escape(message.formatted or str(message)))

    if dry_run:
        console.print("\n[dim]dry-run: 커밋하지 않았습니다[/dim]")
        return

    choice = click.prompt(
        "\n사용할 메시지 번호 (0: 취소)",
        type=click.IntRange(0, len(options)),
        default=1,
    )
    if choice == 0:
        console.print("[yellow]취소했습니다[/yellow]")
        return
    generator.commit(options[choice - 1])
    console.print(f"[green]커밋 완료:[/green] {escape(options[choice - 1].subject)}")


@cli.command()
@click.option("--all", "all_changes", is_flag=True, help="stage 되지 않은 변경까지 포함")
@pass_context
def diff(ctx: Context, all_changes: bool):
    """처리된 변경 요약, scope, 컨텍스트 표시 (LLM 호출 없음)."""
    from commit_sherpa.generate import CommitGenerator
    from commit_sherpa.shared.git import GitClient

    try:
        generator = CommitGenerator(GitClient("."), config=ctx.config)
        processed = generator.change_summary(staged=False if all_changes else None)
        if processed.diff_summary is not None and ctx.format == "console":
            scope = generator.scope_detector.detect_scope(processed.diff_summary)
            console.print(f"[bold]Scope:[/bold] {escape(scope) if scope else '(none)'}")
        _emit(ctx, processed)
    except Exception as e:
        _fail(ctx, e)


@cli.command()
@click.argument("message")
@pass_context
def validate(ctx: Context, message: str):
    """커밋 메시지 검증. 에러가 있으면 종료 코드 1."""
    from commit_sherpa.message.validator import MessageValidator, ValidationConfig

    message_config = ctx.config.message
    validator = MessageValidator(
        ValidationConfig(
            max_subject_length=message_config.max_subject_length,
            max_body_line_length=message_config.max_body_line_length,
            enforce_imperative=message_config.enforce_imperative,
            enforce_capitalization=message_config.enforce_capitalization,
            require_body=message_config.require_body,
            language=message_config.language,
        )
    )
    result = validator.validate_text(message)
    _emit(ctx, result)
    if not result.is_valid:
        raise SystemExit(1)


# ============================================================
# 버전 명령어
# ============================================================


@cli.command()
@click.option("--bump", "-b", help="강제 bump 타입 (major, minor, patch)")
@click.option("--pre-release", "-p", help="pre-release 종류 (alpha, beta, rc)")
@click.option("--message", "-m", default="", help="태그 메시지")
@click.option("--dry-run", is_flag=True, help="태그를 만들지 않고 계획만 표시")
@click.option("--push", is_flag=True, help="생성한 태그를 origin에 push")
@click.option("--lightweight", is_flag=True, help="annotated 대신 lightweight 태그")
@pass_context
def tag(
    ctx: Context,
    bump: str | None,
    pre_release: str | None,
    message: str,
    dry_run: bool,
    push: bool,
    lightweight: bool,
):
    """변경사항을 분석해 다음 시맨틱 버전 태그를 생성."""
    from commit_sherpa.shared.git import GitClient
    from commit_sherpa.shared.llm import create_llm
    from commit_sherpa.shared.models import TaggingOptions
    from commit_sherpa.version import (
        VersionAnalyst,
        VersionPlanner,
        parse_bump,
        parse_pre_release,
    )

    version_config = ctx.config.version
    llm = None
    try:
        options = TaggingOptions(
            dry_run=dry_run,
            message=message,
            push=push or version_config.push,
            annotated=version_config.annotated and not lightweight,
            force_bump=parse_bump(bump) if bump else None,
            pre_release=parse_pre_release(pre_release) if pre_release else None,
        )

        analyst = None
        if options.force_bump is None:
            llm = create_llm(ctx.config.llm)
            analyst = VersionAnalyst(llm)

        planner = VersionPlanner(
            GitClient("."), analyst=analyst, tag_message=version_config.message
        )
        with console.status("[bold green]버전 분석 중..."):
            plan = planner.execute(options)
        _emit(ctx, plan)
    except Exception as e:
        _fail(ctx, e)
    finally:
        if llm is not None:
            llm.close()


@cli.command()
@pass_context
def version(ctx: Context):
    """저장소의 최신 시맨틱 버전 표시."""
    from commit_sherpa.shared.git import GitClient
    from commit_sherpa.version import VersionPlanner

    try:
        latest = VersionPlanner(GitClient(".")).get_latest_version()
        _emit(ctx, latest)
    except Exception as e:
        _fail(ctx, e)


# ============================================================
# Config 명령어 그룹
# ============================================================


@cli.group()
@pass_context
def config(ctx: Context):
    """설정 관리."""
    pass


@config.command("show")
@pass_context
def config_show(ctx: Context):
    """현재 설정 표시."""
    config_path = get_config_path()

    if config_path:
        console.print(f"[bold]설정 파일:[/bold] {config_path}")
    else:
        console.print("[dim]설정 파일 없음 (기본값 사용)[/dim]")

    llm = ctx.config.llm
    message = ctx.config.message
    console.print()
    console.print("[bold]LLM 설정:[/bold]")
    console.print(f"  Provider: {llm.provider}")
    console.print(f"  Model: {llm.model or '(기본값)'}")
    console.print(f"  분당 요청 수: {llm.requests_per_minute}")

    console.print()
    console.print("[bold]메시지 설정:[/bold]")
    console.print(f"  스타일: {message.style}")
    console.print(f"  제목 최대 길이: {message.max_subject_length}")
    console.print(f"  언어: {message.language}")

    console.print()
    console.print("[bold]버전 설정:[/bold]")
    console.print(f"  Annotated 태그: {ctx.config.version.annotated}")
    console.print(f"  자동 push: {ctx.config.version.push}")


@config.command("init")
@click.option("--force", is_flag=True, help="기존 파일 덮어쓰기")
@click.option("--global", "global_", is_flag=True, help="전역 설정 파일 생성")
@pass_context
def config_init(ctx: Context, force: bool, global_: bool):
    """설정 파일 초기화."""
    from commit_sherpa.shared.config import get_global_config_path

    target = get_global_config_path() if global_ else None
    try:
        path, created = init_config(target, force=force)
    except OSError as e:
        _fail(ctx, e)
        return

    if created:
        console.print(f"[green]설정 파일 생성됨:[/green] {path}")
    else:
        console.print(f"[red]설정 파일이 이미 존재합니다:[/red] {path}")
        console.print("[dim]--force 옵션으로 덮어쓰기 가능[/dim]")


if __name__ == "__main__":
    cli()
