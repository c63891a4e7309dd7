"""One daily build cycle: next task -> generated files -> commit."""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, date, datetime
from pathlib import Path

from daily_builder.builder.backlog import Backlog, Task, advance_backlog, load_backlog, save_backlog
from daily_builder.builder.extractor import extract_blocks
from daily_builder.builder.generation import TextGenerator
from daily_builder.builder.prompts import build_task_prompt, list_repo_files
from daily_builder.builder.publish import GitPublisher, PublishResult, StepResult, run_best_effort
from daily_builder.builder.workspace import write_file_changes, write_progress_note
from daily_builder.config import Settings

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class CycleReport:
    """What one run did."""

    task: Task | None = None
    backlog_empty: bool = False
    written: list[Path] = field(default_factory=list)
    discarded_blocks: int = 0
    rejected_paths: list[str] = field(default_factory=list)
    progress_note: Path | None = None
    quality_steps: list[StepResult] = field(default_factory=list)
    publish: PublishResult | None = None
    backlog: Backlog | None = None

    @property
    def published(self) -> bool:
        return self.publish is not None


class DailyBuildCycle:
    """Runs the linear load -> generate -> extract -> write -> publish sequence.

    Every external call happens once and in order. Generation and git failures
    propagate; install and lint failures are logged and the run continues.
    The backlog is advanced and saved only after a successful publish.
    """

    def __init__(  # noqa: PLR0913
        self,
        *,
        settings: Settings,
        generator: TextGenerator,
        publisher: GitPublisher,
        today: Callable[[], date] | None = None,
        step_runner: Callable[..., StepResult] = run_best_effort,
        dry_run: bool = False,
    ) -> None:
        self.settings = settings
        self.generator = generator
        self.publisher = publisher
        self._today = today or (lambda: datetime.now(tz=UTC).date())
        self._step_runner = step_runner
        self.dry_run = dry_run

    def run(self) -> CycleReport:
        root = self.settings.root
        backlog_path = self.settings.resolved_backlog_path
        backlog = load_backlog(backlog_path)
        report = CycleReport(backlog=backlog)

        task = backlog.next_task()
        if task is None:
            logger.info("All tasks completed, nothing to build")
            report.backlog_empty = True
            return report
        report.task = task
        logger.info("Building task %d: %s", task.id, task.title)

        prompt = build_task_prompt(
            task=task,
            phase_name=backlog.phase_name(task.phase),
            repo_files=list_repo_files(root),
            project=self.settings.project.name,
            stack=self.settings.project.stack,
            rules=self.settings.project.rules,
        )
        response = self.generator.generate(prompt)
        logger.info("Response preview: %s...", response[:300])

        extraction = extract_blocks(response, sandbox=self.settings.sandbox_paths)
        report.discarded_blocks = extraction.discarded
        report.rejected_paths = list(extraction.rejected_paths)
        if extraction.discarded:
            logger.info(
                "Dropped %d of %d blocks (rejected paths: %s)",
                extraction.discarded,
                extraction.blocks_seen,
                ", ".join(extraction.rejected_paths) or "none",
            )

        report.written = write_file_changes(root, extraction.changes)
        report.progress_note = write_progress_note(
            root=root,
            task=task,
            response=response,
            day=self._today(),
            progress_dir=self.settings.progress_dir,
            preview_chars=self.settings.preview_chars,
        )

        if not report.written:
            logger.warning("No changes generated, skipping commit")
            return report
        if self.dry_run:
            logger.info("Dry run: skipping install, lint, publish and backlog update")
            return report

        quality = self.settings.quality
        for name, command in (
            ("install", quality.install_command),
            ("lint", quality.lint_command),
        ):
            report.quality_steps.append(
                self._step_runner(
                    name,
                    command,
                    cwd=root,
                    timeout_seconds=quality.step_timeout_seconds,
                ),
            )

        report.publish = self.publisher.publish(task=task, cwd=root)
        report.backlog = advance_backlog(backlog)
        save_backlog(backlog_path, report.backlog)
        logger.info("Task %d complete", task.id)
        return report
