"""Backlog document: pending and completed tasks plus phase names."""

from __future__ import annotations

import json
from dataclasses import dataclass, field, replace
from pathlib import Path
from typing import Any

from daily_builder.builder.errors import BacklogError

_TASK_FIELDS = ("id", "title", "desc", "phase")
_BACKLOG_FIELDS = ("pending", "completed", "phases")


@dataclass(frozen=True, slots=True)
class Task:
    """One unit of work taken from the backlog."""

    id: int
    title: str
    desc: str
    phase: int
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "id": self.id,
            "title": self.title,
            "desc": self.desc,
            "phase": self.phase,
        }
        payload.update(self.extra)
        return payload


@dataclass(frozen=True, slots=True)
class Backlog:
    """Immutable backlog snapshot; `advance_backlog` returns the next one."""

    pending: tuple[Task, ...] = ()
    completed: tuple[Task, ...] = ()
    phases: dict[int, str] = field(default_factory=dict)
    extra: dict[str, Any] = field(default_factory=dict, compare=False)

    def next_task(self) -> Task | None:
        return self.pending[0] if self.pending else None

    def phase_name(self, phase: int) -> str:
        return self.phases.get(phase, f"Phase {phase}")

    def to_dict(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "pending": [task.to_dict() for task in self.pending],
            "completed": [task.to_dict() for task in self.completed],
            "phases": {str(key): value for key, value in sorted(self.phases.items())},
        }
        payload.update(self.extra)
        return payload


def advance_backlog(backlog: Backlog) -> Backlog:
    """Move the head of `pending` to the end of `completed`."""

    if not backlog.pending:
        raise BacklogError("Cannot advance backlog: no pending tasks.")
    head, *rest = backlog.pending
    return replace(backlog, pending=tuple(rest), completed=(*backlog.completed, head))


def load_backlog(path: Path) -> Backlog:
    """Read and validate the backlog JSON document at `path`."""

    try:
        raw = json.loads(path.read_text("utf-8"))
    except FileNotFoundError as error:
        raise BacklogError(f"Backlog not found: {path}") from error
    except json.JSONDecodeError as error:
        raise BacklogError(f"Backlog is not valid JSON: {path}: {error}") from error
    if not isinstance(raw, dict):
        raise BacklogError(f"Expected JSON object in {path}")
    return backlog_from_dict(raw)


def save_backlog(path: Path, backlog: Backlog) -> None:
    """Rewrite the backlog document in place."""

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(backlog.to_dict(), ensure_ascii=False, indent=2) + "\n", "utf-8")


def backlog_from_dict(raw: dict[str, Any]) -> Backlog:
    return Backlog(
        pending=_parse_tasks(raw.get("pending"), key="pending"),
        completed=_parse_tasks(raw.get("completed", []), key="completed"),
        phases=_parse_phases(raw.get("phases", {})),
        extra={name: value for name, value in raw.items() if name not in _BACKLOG_FIELDS},
    )


def _parse_tasks(raw_tasks: object, *, key: str) -> tuple[Task, ...]:
    if not isinstance(raw_tasks, list):
        raise BacklogError(f"backlog.{key} must be an array")
    return tuple(_parse_task(item, key=key) for item in raw_tasks)


def _parse_task(item: object, *, key: str) -> Task:
    if not isinstance(item, dict):
        raise BacklogError(f"backlog.{key} entry must be an object")
    missing = [name for name in _TASK_FIELDS if name not in item]
    if missing:
        raise BacklogError(f"backlog.{key} task missing fields: {', '.join(missing)}")

    task_id = item["id"]
    phase = item["phase"]
    title = item["title"]
    desc = item["desc"]
    if isinstance(task_id, bool) or not isinstance(task_id, int):
        raise BacklogError(f"backlog.{key} task id must be an integer: {task_id!r}")
    if isinstance(phase, bool) or not isinstance(phase, int):
        raise BacklogError(f"backlog.{key} task {task_id} phase must be an integer")
    if not isinstance(title, str) or not isinstance(desc, str):
        raise BacklogError(f"backlog.{key} task {task_id} title and desc must be strings")
    extra = {name: value for name, value in item.items() if name not in _TASK_FIELDS}
    return Task(id=task_id, title=title, desc=desc, phase=phase, extra=extra)


def _parse_phases(raw_phases: object) -> dict[int, str]:
    if not isinstance(raw_phases, dict):
        raise BacklogError("backlog.phases must be an object")
    phases: dict[int, str] = {}
    for raw_key, name in raw_phases.items():
        try:
            phase = int(raw_key)
        except ValueError as error:
            raise BacklogError(f"backlog.phases key must be an integer: {raw_key!r}") from error
        if not isinstance(name, str):
            raise BacklogError(f"backlog.phases[{raw_key!r}] must be a string")
        phases[phase] = name
    return phases
