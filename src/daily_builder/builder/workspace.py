"""Materialization of extracted files and the daily progress note."""

from __future__ import annotations

import logging
from datetime import date
from pathlib import Path

from daily_builder.builder.backlog import Task
from daily_builder.builder.extractor import FileChange

logger = logging.getLogger(__name__)

DEFAULT_PROGRESS_DIR = Path("docs/progress")
DEFAULT_PREVIEW_CHARS = 1000


def write_file_changes(root: Path, changes: list[FileChange]) -> list[Path]:
    """Write each change under `root`, replacing existing files."""

    written: list[Path] = []
    for change in changes:
        target = root / change.filename
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_text(change.content, "utf-8")
        logger.info("Wrote %s", change.filename)
        written.append(target)
    return written


def progress_note_path(*, root: Path, progress_dir: Path, task: Task, day: date) -> Path:
    return root / progress_dir / f"{day.isoformat()}-{task.id}.md"


def write_progress_note(  # noqa: PLR0913
    *,
    root: Path,
    task: Task,
    response: str,
    day: date,
    progress_dir: Path = DEFAULT_PROGRESS_DIR,
    preview_chars: int = DEFAULT_PREVIEW_CHARS,
) -> Path:
    """Record the task title and the head of the raw response for `day`."""

    path = progress_note_path(root=root, progress_dir=progress_dir, task=task, day=day)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(f"# Task {task.id}: {task.title}\n\n{response[:preview_chars]}", "utf-8")
    return path
