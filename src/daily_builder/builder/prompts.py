"""Prompt text sent to the generation service for one task."""

from __future__ import annotations

from pathlib import Path

from daily_builder.builder.backlog import Task

DEFAULT_RULES = (
    "Create missing files: package.json, vite.config.js, index.html if needed",
    "Use TMDB API: https://api.themoviedb.org/3/trending/all/week?api_key=free",
)

_OUTPUT_FORMAT_EXAMPLE = """\
```
FILENAME
<file content here>
```"""


def list_repo_files(root: Path) -> list[str]:
    """Top-level entries of the target repository, hidden ones excluded."""

    return sorted(entry.name for entry in root.iterdir() if not entry.name.startswith("."))


def build_task_prompt(
    *,
    task: Task,
    phase_name: str,
    repo_files: list[str],
    project: str,
    stack: str,
    rules: tuple[str, ...] = DEFAULT_RULES,
    max_lines: int = 200,
) -> str:
    """Render the instruction for `task` with the required output format."""

    rule_lines = [f"- Generate ONLY valid {stack} code (<{max_lines} lines)"]
    rule_lines.extend(f"- {rule}" for rule in rules)
    rule_lines.append("- For each file, output in this format:")
    rules_text = "\n".join(rule_lines)

    return (
        f"You're building {project}.\n"
        f"\n"
        f"TASK {task.id}: {task.desc}\n"
        f"PHASE: {phase_name}\n"
        f"\n"
        f"REPO STATE:\n"
        f"Files: {', '.join(repo_files)}\n"
        f"\n"
        f"RULES:\n"
        f"{rules_text}\n"
        f"\n"
        f"{_OUTPUT_FORMAT_EXAMPLE}\n"
        f"\n"
        f"Do NOT explain anything, only output one or more such code blocks. "
        f"Start with Task {task.id} ONLY."
    )
