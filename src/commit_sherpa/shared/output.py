"""출력 포매터 모듈."""

import json
from abc import ABC, abstractmethod
from dataclasses import asdict, is_dataclass
from datetime import datetime
from enum import Enum
from pathlib import Path
from typing import Any

from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from commit_sherpa.shared.models import (
    GenerationResult,
    ProcessedDiff,
    SemanticVersion,
    ValidationResult,
    VersionPlan,
)


class BaseFormatter(ABC):
    """출력 포매터 추상 클래스."""

    def format(self, data: Any) -> str:
        """데이터 타입에 맞는 포맷 메서드를 호출해 문자열로 변환."""
        formatters = {
            ProcessedDiff: self._format_processed_diff,
            GenerationResult: self._format_generation_result,
            ValidationResult: self._format_validation_result,
            VersionPlan: self._format_version_plan,
            SemanticVersion: self._format_version,
        }

        formatter = formatters.get(type(data))
        if formatter:
            return formatter(data)
        return self._format_generic(data)

    @abstractmethod
    def _format_processed_diff(self, data: ProcessedDiff) -> str: ...

    @abstractmethod
    def _format_generation_result(self, data: GenerationResult) -> str: ...

    @abstractmethod
    def _format_validation_result(self, data: ValidationResult) -> str: ...

    @abstractmethod
    def _format_version_plan(self, data: VersionPlan) -> str: ...

    @abstractmethod
    def _format_version(self, data: SemanticVersion) -> str: ...

    @abstractmethod
    def _format_generic(self, data: Any) -> str: ...


class ConsoleFormatter(BaseFormatter):
    """Rich를 사용한 터미널 출력 포매터.

    콘솔에 직접 출력하고, 기록된 내용을 일반 텍스트로 반환한다.
    """

    def __init__(self, color: bool = True) -> None:
        self.console = Console(record=True, no_color=not color)

    def _format_processed_diff(self, data: ProcessedDiff) -> str:
        self.console.print(
            Panel(escape(data.summary), title="Changes", border_style="blue")
        )

        stats_table = Table(title="Diff Statistics", show_header=True)
        stats_table.add_column("Metric", style="cyan")
        stats_table.add_column("Value", style="green")
        stats_table.add_row("Files", str(data.total_files))
        stats_table.add_row("Additions", f"[green]+{data.total_added}[/green]")
        stats_table.add_row("Deletions", f"[red]-{data.total_deleted}[/red]")
        stats_table.add_row("Chunks", str(len(data.chunks)))
        self.console.print(stats_table)

        if data.chunks:
            chunk_table = Table(title="Chunks", show_header=True)
            chunk_table.add_column("#", style="dim")
            chunk_table.add_column("Description", style="cyan")
            chunk_table.add_column("Size", style="green", justify="right")
            for i, chunk in enumerate(data.chunks, start=1):
                chunk_table.add_row(
                    str(i), escape(chunk.description), f"{chunk.size:,}"
                )
            self.console.print(chunk_table)

        self._print_context(data)
        return self.console.export_text()

    def _print_context(self, data: ProcessedDiff) -> None:
        context = data.change_context
        if context is None:
            return

        if context.config_changes:
            self.console.print("\n[bold]Configuration Changes[/bold]")
            for change in context.config_changes:
                self.console.print(
                    f"  [cyan]{escape(change.parameter)}[/cyan] "
                    f"[dim]({escape(change.file)})[/dim]: "
                    f"{escape(str(change.old_value))} -> "
                    f"{escape(str(change.new_value))}"
                )
                if change.context:
                    self.console.print(f"    [dim]{escape(change.context)}[/dim]")

        if context.function_changes:
            self.console.print("\n[bold]Function Changes[/bold]")
            for fn in context.function_changes:
                self.console.print(
                    f"  [magenta]{fn.change_type.value}[/magenta] "
                    f"{escape(fn.function_name)} [dim]({escape(fn.file)})[/dim] "
                    f"- {escape(fn.impact)}"
                )

        if context.performance_hints:
            self.console.print("\n[bold]Performance Hints[/bold]")
            for hint in context.performance_hints:
                self.console.print(f"  - {escape(hint)}")

        if context.recent_commits:
            self.console.print("\n[bold]Recent Commits[/bold]")
            for commit in context.recent_commits[:5]:
                self.console.print(
                    f"  [dim]{commit.short_hash}[/dim] {escape(commit.subject[:60])}"
                )

    def _format_generation_result(self, data: GenerationResult) -> str:
        title = "Commit Message" + (" (committed)" if data.committed else " (preview)")
        self.console.print(
            Panel(
                escape(data.message.formatted or str(data.message)),
                title=title,
                border_style="green",
            )
        )
        if data.scope:
            self.console.print(f"[dim]Detected scope:[/dim] {escape(data.scope)}")
        self.console.print(f"[dim]{escape(data.processed_diff.summary)}[/dim]")
        self._print_validation(data.validation)
        return self.console.export_text()

    def _format_validation_result(self, data: ValidationResult) -> str:
        self._print_validation(data, show_ok=True)
        return self.console.export_text()

    def _print_validation(self, data: ValidationResult, show_ok: bool = False) -> None:
        if show_ok and not data.errors and not data.warnings:
            self.console.print("[green]✓ 유효한 커밋 메시지입니다[/green]")
        for error in data.errors:
            self.console.print(f"[red]✗ {escape(error.message)}[/red]")
        for warning in data.warnings:
            line = f"[yellow]! {escape(warning.message)}[/yellow]"
            if warning.suggestion:
                line += f" [dim]-> {escape(warning.suggestion)}[/dim]"
            self.console.print(line)
        for suggestion in data.suggestions:
            self.console.print(
                f"[blue]> {escape(suggestion.message)}:[/blue] "
                f"{escape(suggestion.suggested)}"
            )

    def _format_version_plan(self, data: VersionPlan) -> str:
        if data.analysis is not None:
            analysis = data.analysis
            table = Table(title="Version Analysis", show_header=True)
            table.add_column("Item", style="cyan")
            table.add_column("Value", style="green")
            table.add_row("Recommended", analysis.recommended_bump.value.upper())
            table.add_row("Confidence", f"{analysis.confidence * 100:.1f}%")
            table.add_row("Breaking changes", str(len(analysis.breaking_changes)))
            table.add_row("New features", str(len(analysis.new_features)))
            table.add_row("Bug fixes", str(len(analysis.bug_fixes)))
            self.console.print(table)
            if analysis.reasoning:
                self.console.print(
                    Panel(
                        escape(analysis.reasoning),
                        title="Reasoning",
                        border_style="blue",
                    )
                )

        if data.dry_run:
            status = "dry-run"
        else:
            status = "created" if data.tag_created else "planned"
        self.console.print(
            f"[yellow]{data.current.tag_name}[/yellow] -> "
            f"[bold green]{data.tag_name}[/bold green] [dim]({status})[/dim]"
        )
        return self.console.export_text()

    def _format_version(self, data: SemanticVersion) -> str:
        self.console.print(f"[bold]{data.tag_name}[/bold]")
        return self.console.export_text()

    def _format_generic(self, data: Any) -> str:
        if is_dataclass(data) and not isinstance(data, type):
            panel = Panel(escape(str(asdict(data))), title=type(data).__name__)
            self.console.print(panel)
        else:
            self.console.print(escape(str(data)))
        return self.console.export_text()


class JSONFormatter(BaseFormatter):
    """JSON 출력 포매터 (파이프라인 친화적)."""

    def __init__(self, indent: int = 2) -> None:
        self.indent = indent

    def _to_serializable(self, obj: Any) -> Any:
        """객체를 JSON 직렬화 가능한 형태로 변환."""
        if isinstance(obj, SemanticVersion):
            return str(obj)
        if is_dataclass(obj) and not isinstance(obj, type):
            return {
                f.name: self._to_serializable(getattr(obj, f.name))
                for f in obj.__dataclass_fields__.values()
            }
        if isinstance(obj, Enum):
            return obj.value
        if isinstance(obj, Path):
            return str(obj)
        if isinstance(obj, datetime):
            return obj.isoformat()
        if isinstance(obj, list | tuple):
            return [self._to_serializable(item) for item in obj]
        if isinstance(obj, dict):
            return {k: self._to_serializable(v) for k, v in obj.items()}
        return obj

    def _to_json(self, data: Any) -> str:
        return json.dumps(
            self._to_serializable(data), indent=self.indent, ensure_ascii=False
        )

    def _format_processed_diff(self, data: ProcessedDiff) -> str:
        return self._to_json(data)

    def _format_generation_result(self, data: GenerationResult) -> str:
        payload = self._to_serializable(data)
        payload["validation"]["is_valid"] = data.validation.is_valid
        return json.dumps(payload, indent=self.indent, ensure_ascii=False)

    def _format_validation_result(self, data: ValidationResult) -> str:
        payload = self._to_serializable(data)
        payload["is_valid"] = data.is_valid
        return json.dumps(payload, indent=self.indent, ensure_ascii=False)

    def _format_version_plan(self, data: VersionPlan) -> str:
        payload = self._to_serializable(data)
        payload["tag_name"] = data.tag_name
        return json.dumps(payload, indent=self.indent, ensure_ascii=False)

    def _format_version(self, data: SemanticVersion) -> str:
        return self._to_json({"version": str(data), "tag_name": data.tag_name})

    def _format_generic(self, data: Any) -> str:
        return self._to_json(data)


class MarkdownFormatter(BaseFormatter):
    """Markdown 출력 포매터."""

    def _format_processed_diff(self, data: ProcessedDiff) -> str:
        lines = [
            "# Changes",
            "",
            data.summary,
            "",
            f"- **Files**: {data.total_files}",
            f"- **Additions**: +{data.total_added}",
            f"- **Deletions**: -{data.total_deleted}",
            "",
        ]

        if data.chunks:
            lines.extend(["## Chunks", "", "| # | Description | Size |"])
            lines.append("|---|---|---|")
            for i, chunk in enumerate(data.chunks, start=1):
                lines.append(f"| {i} | {chunk.description} | {chunk.size} |")
            lines.append("")

        context = data.change_context
        if context is not None and context.config_changes:
            lines.extend(["## Configuration Changes", ""])
            for change in context.config_changes:
                lines.append(
                    f"- `{change.parameter}` ({change.file}): "
                    f"{change.old_value} -> {change.new_value}"
                )
            lines.append("")
        if context is not None and context.function_changes:
            lines.extend(["## Function Changes", ""])
            for fn in context.function_changes:
                lines.append(
                    f"- **{fn.change_type.value}** `{fn.function_name}` ({fn.file}): "
                    f"{fn.impact}"
                )
            lines.append("")
        if context is not None and context.performance_hints:
            lines.extend(["## Performance Hints", ""])
            lines.extend(f"- {hint}" for hint in context.performance_hints)
            lines.append("")

        return "\n".join(lines)

    def _format_generation_result(self, data: GenerationResult) -> str:
        lines = [
            "# Commit Message",
            "",
            "```",
            data.message.formatted or str(data.message),
            "```",
            "",
            f"- **Committed**: {'yes' if data.committed else 'no'}",
        ]
        if data.scope:
            lines.append(f"- **Scope**: {data.scope}")
        lines.append("")
        lines.append(self._format_validation_result(data.validation))
        return "\n".join(lines)

    def _format_validation_result(self, data: ValidationResult) -> str:
        valid = "yes" if data.is_valid else "no"
        lines = ["## Validation", "", f"- **Valid**: {valid}"]
        lines.extend(f"- ❌ {e.message}" for e in data.errors)
        lines.extend(f"- ⚠️ {w.message}" for w in data.warnings)
        lines.extend(f"- 💡 {s.message}: `{s.suggested}`" for s in data.suggestions)
        return "\n".join(lines)

    def _format_version_plan(self, data: VersionPlan) -> str:
        lines = [
            f"# Release {data.tag_name}",
            "",
            f"- **Current**: {data.current.tag_name}",
            f"- **Next**: {data.tag_name}",
        ]
        if data.analysis is not None:
            analysis = data.analysis
            lines.append(f"- **Bump**: {analysis.recommended_bump.value}")
            lines.append(f"- **Confidence**: {analysis.confidence * 100:.1f}%")
            if analysis.reasoning:
                lines.extend(["", analysis.reasoning])
            sections = [
                ("Breaking Changes", analysis.breaking_changes),
                ("New Features", analysis.new_features),
                ("Bug Fixes", analysis.bug_fixes),
                ("Documentation", analysis.documentation),
                ("Dependencies", analysis.dependencies),
            ]
            for title, items in sections:
                if items:
                    lines.extend(["", f"## {title}", ""])
                    lines.extend(f"- {item}" for item in items)
        return "\n".join(lines)

    def _format_version(self, data: SemanticVersion) -> str:
        return f"`{data.tag_name}`"

    def _format_generic(self, data: Any) -> str:
        if is_dataclass(data) and not isinstance(data, type):
            lines = [f"# {type(data).__name__}", ""]
            for key, value in asdict(data).items():
                lines.append(f"- **{key}**: {value}")
            return "\n".join(lines)
        return f"```\n{data}\n```"


def get_formatter(format_type: str = "console", color: bool = True) -> BaseFormatter:
    """포매터 팩토리 함수.

    Args:
        format_type: 출력 형식 ("console", "json", "markdown")
        color: 콘솔 출력 색상 사용 여부

    Raises:
        ValueError: 지원하지 않는 형식인 경우
    """
    format_type = format_type.lower()
    if format_type == "console":
        return ConsoleFormatter(color=color)
    if format_type == "json":
        return JSONFormatter()
    if format_type == "markdown":
        return MarkdownFormatter()
    raise ValueError(
        f"Unsupported format type: {format_type}. Supported: console, json, markdown"
    )
