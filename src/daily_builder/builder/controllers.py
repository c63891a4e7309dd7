"""Controllers for daily-builder CLI commands."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from daily_builder.builder.backlog import load_backlog
from daily_builder.builder.cycle import CycleReport, DailyBuildCycle
from daily_builder.builder.extractor import extract_blocks
from daily_builder.builder.generation import GeminiClient, TextGenerator
from daily_builder.builder.publish import GitPublisher
from daily_builder.config import Settings


@dataclass(slots=True)
class DailyRunCommand:
    """CLI input for one build cycle."""

    root: Path | None
    backlog_path: Path | None
    dry_run: bool


@dataclass(slots=True)
class ExtractCommand:
    """CLI input for offline extraction of a saved response."""

    response_path: Path
    sandbox: bool


@dataclass(slots=True)
class BacklogStatusCommand:
    """CLI input for backlog summary."""

    root: Path | None
    backlog_path: Path | None


class BuildCliController:
    """Wires settings, generation client and publisher for CLI operations."""

    def __init__(self, generator: TextGenerator | None = None) -> None:
        self._generator = generator

    def run_daily(self, command: DailyRunCommand) -> list[str]:
        settings = Settings.from_env(root=command.root, backlog_path=command.backlog_path)
        settings.validate_for_run(require_api_key=self._generator is None)
        generator = self._generator or GeminiClient(
            api_key=settings.generation.api_key,
            model=settings.generation.model,
            base_url=settings.generation.base_url,
            timeout_seconds=settings.generation.timeout_seconds,
        )
        cycle = DailyBuildCycle(
            settings=settings,
            generator=generator,
            publisher=GitPublisher(
                user_name=settings.git.user_name,
                user_email=settings.git.user_email,
                commit_prefix=settings.git.commit_prefix,
                push=settings.git.push,
                timeout_seconds=settings.git.timeout_seconds,
            ),
            dry_run=command.dry_run,
        )
        return render_cycle_report(cycle.run(), root=settings.root)

    def extract(self, command: ExtractCommand) -> list[str]:
        result = extract_blocks(command.response_path.read_text("utf-8"), sandbox=command.sandbox)
        lines = [
            f"{change.filename} ({len(change.content.splitlines())} lines)"
            for change in result.changes
        ]
        lines.extend(f"Rejected path: {path}" for path in result.rejected_paths)
        lines.append(
            f"Extracted: files={len(result.changes)} "
            f"blocks={result.blocks_seen} discarded={result.discarded}",
        )
        return lines

    def backlog_status(self, command: BacklogStatusCommand) -> list[str]:
        settings = Settings.from_env(root=command.root, backlog_path=command.backlog_path)
        backlog = load_backlog(settings.resolved_backlog_path)
        lines = [f"Backlog: pending={len(backlog.pending)} completed={len(backlog.completed)}"]
        task = backlog.next_task()
        if task is None:
            lines.append("Next task: none")
        else:
            lines.append(
                f"Next task: #{task.id} {task.title} (phase: {backlog.phase_name(task.phase)})",
            )
        return lines


def render_cycle_report(report: CycleReport, *, root: Path) -> list[str]:
    task = report.task
    if report.backlog_empty or task is None:
        return ["All tasks completed!"]
    lines = [f"Task {task.id}: {task.title}"]
    lines.extend(f"Wrote: {_relative(path, root)}" for path in report.written)
    if report.discarded_blocks:
        lines.append(f"Discarded blocks: {report.discarded_blocks}")
    lines.extend(f"Rejected path: {path}" for path in report.rejected_paths)
    if report.progress_note is not None:
        lines.append(f"Progress note: {_relative(report.progress_note, root)}")
    lines.extend(
        f"{step.name}: failed, continued ({step.error})"
        for step in report.quality_steps
        if not step.ok
    )
    if report.publish is not None:
        lines.append(f"Committed: {report.publish.commit_message}")
        lines.append(f"Task {task.id} complete.")
    elif report.written:
        lines.append("Dry run: nothing committed.")
    else:
        lines.append("No changes generated. Skipping commit.")
    return lines


def _relative(path: Path, root: Path) -> str:
    try:
        return path.relative_to(root).as_posix()
    except ValueError:
        return str(path)
