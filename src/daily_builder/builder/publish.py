"""Post-write steps: best-effort install/lint and the git publish sequence."""

from __future__ import annotations

import logging
import shlex
import subprocess
from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path

from daily_builder.builder.backlog import Task
from daily_builder.builder.errors import PublishError

logger = logging.getLogger(__name__)

CommandRunner = Callable[..., "subprocess.CompletedProcess[str]"]

COMMIT_TITLE_CHARS = 50
_OUTPUT_TAIL_CHARS = 2000


@dataclass(slots=True)
class StepResult:
    """Outcome of one best-effort step."""

    name: str
    ok: bool
    skipped: bool = False
    returncode: int | None = None
    error: str | None = None


@dataclass(slots=True)
class PublishResult:
    """Git commands issued for one task."""

    commit_message: str
    commands: list[list[str]] = field(default_factory=list)
    pushed: bool = False


def run_best_effort(
    name: str,
    command: str,
    *,
    cwd: Path,
    timeout_seconds: int | None = None,
    runner: CommandRunner = subprocess.run,
) -> StepResult:
    """Run a quality step; failures are logged and reported, never raised."""

    args = shlex.split(command)
    if not args:
        logger.info("%s: no command configured, skipping", name)
        return StepResult(name=name, ok=True, skipped=True)

    logger.info("%s: running %s", name, command)
    try:
        completed = runner(  # noqa: S603
            args,
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,
            timeout=timeout_seconds,
        )
    except FileNotFoundError:
        message = f"executable not found: {args[0]}"
        logger.warning("%s failed, continuing: %s", name, message)
        return StepResult(name=name, ok=False, error=message)
    except subprocess.TimeoutExpired:
        message = f"timed out after {timeout_seconds}s"
        logger.warning("%s failed, continuing: %s", name, message)
        return StepResult(name=name, ok=False, error=message)

    if completed.returncode != 0:
        tail = (completed.stderr or completed.stdout or "").strip()[-_OUTPUT_TAIL_CHARS:]
        logger.warning(
            "%s failed or not configured, continuing (exit %d): %s",
            name,
            completed.returncode,
            tail,
        )
        return StepResult(
            name=name,
            ok=False,
            returncode=completed.returncode,
            error=tail or f"exit code {completed.returncode}",
        )
    return StepResult(name=name, ok=True, returncode=0)


class GitPublisher:
    """Stage everything, commit with a task-derived message, and push."""

    def __init__(  # noqa: PLR0913
        self,
        *,
        user_name: str,
        user_email: str,
        commit_prefix: str = "feat",
        push: bool = True,
        timeout_seconds: int | None = None,
        runner: CommandRunner = subprocess.run,
    ) -> None:
        self.user_name = user_name
        self.user_email = user_email
        self.commit_prefix = commit_prefix
        self.push = push
        self.timeout_seconds = timeout_seconds
        self._runner = runner

    def commit_message(self, task: Task) -> str:
        summary = task.title[:COMMIT_TITLE_CHARS]
        return f"{self.commit_prefix}: {summary} (#{task.id})"

    def publish(self, *, task: Task, cwd: Path) -> PublishResult:
        result = PublishResult(commit_message=self.commit_message(task))
        steps = [
            ["config", "user.name", self.user_name],
            ["config", "user.email", self.user_email],
            ["add", "."],
            ["commit", "-m", result.commit_message],
        ]
        if self.push:
            steps.append(["push"])

        for step in steps:
            result.commands.append(self._git(step, cwd=cwd))
        result.pushed = self.push
        return result

    def _git(self, args: list[str], *, cwd: Path) -> list[str]:
        command = ["git", *args]
        try:
            completed = self._runner(  # noqa: S603
                command,
                cwd=cwd,
                capture_output=True,
                text=True,
                check=False,
                timeout=self.timeout_seconds,
            )
        except FileNotFoundError as error:
            raise PublishError("git executable not found in PATH") from error
        except subprocess.TimeoutExpired as error:
            raise PublishError(f"git {args[0]} timed out") from error

        if completed.returncode != 0:
            detail = (completed.stderr or completed.stdout or "").strip()
            raise PublishError(
                f"git {args[0]} failed with exit code {completed.returncode}: {detail}",
                returncode=completed.returncode,
            )
        logger.debug("git %s ok", args[0])
        return command
