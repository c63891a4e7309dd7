"""Best-effort extraction of file blocks from generation-service text.

The generation service is asked to answer with fenced blocks whose first
line names the target file::

    ```
    src/App.jsx
    export default function App() {}
    ```

An older prompt revision asked for ``filename|content`` on the first line
instead; both layouts are accepted and the mode is picked per block. Blocks
that do not look like a file are dropped without raising, since the text is
model output and rarely follows the requested format exactly.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from pathlib import PureWindowsPath

# Fence plus an optional language tag, the tag only when it ends the fence line.
_FENCE = re.compile(r"```(?:[\w+#-]+(?=[ \t]*(?:\r?\n|\Z)))?")
_WHITESPACE = re.compile(r"\s")
_PATH_SEPARATORS = re.compile(r"[\\/]")
PIPE_SEPARATOR = "|"


@dataclass(frozen=True, slots=True)
class FileChange:
    """A resolved relative path and the text to write there."""

    filename: str
    content: str


@dataclass(slots=True)
class ExtractionResult:
    """Extracted changes plus counters for blocks that were dropped."""

    changes: list[FileChange] = field(default_factory=list)
    blocks_seen: int = 0
    discarded: int = 0
    rejected_paths: list[str] = field(default_factory=list)


def extract_file_changes(text: str, *, sandbox: bool = True) -> list[FileChange]:
    """Return file changes found in `text`, in the order they appear."""

    return extract_blocks(text, sandbox=sandbox).changes


def extract_blocks(text: str, *, sandbox: bool = True) -> ExtractionResult:
    """Parse every fenced block in `text` and keep the ones that name a file.

    With `sandbox` enabled, absolute paths and paths with a ``..`` component
    are dropped and listed in `rejected_paths`.
    """

    result = ExtractionResult()
    for raw_block in _split_blocks(text or ""):
        result.blocks_seen += 1
        change = parse_block(raw_block)
        if change is None:
            result.discarded += 1
            continue
        if sandbox and not is_safe_relative_path(change.filename):
            result.discarded += 1
            result.rejected_paths.append(change.filename)
            continue
        result.changes.append(change)
    return result


def parse_block(raw: str) -> FileChange | None:
    """Convert one block body into a `FileChange`, or None when it is not a file."""

    trimmed = raw.strip()
    if not trimmed:
        return None
    # Only "\n" ends a line; form feeds and U+2028 belong to the file content.
    lines = [line.removesuffix("\r") for line in trimmed.split("\n")]
    if PIPE_SEPARATOR in lines[0]:
        return _parse_pipe_block(lines)
    return _parse_header_block(lines)


def is_safe_relative_path(filename: str) -> bool:
    """True when `filename` stays inside the directory it is written under."""

    if filename.startswith(("/", "\\")) or PureWindowsPath(filename).drive:
        return False
    return ".." not in _PATH_SEPARATORS.split(filename)


def _split_blocks(text: str) -> list[str]:
    parts = _FENCE.split(text)
    fence_count = len(parts) - 1
    # Segment 2i+1 sits between fence 2i and fence 2i+1; an unclosed last fence opens nothing.
    return [parts[2 * index + 1] for index in range(fence_count // 2)]


def _parse_header_block(lines: list[str]) -> FileChange | None:
    if len(lines) < 2:  # noqa: PLR2004
        return None
    filename = lines[0].strip()
    if not _is_filename(filename):
        return None
    content = "\n".join(lines[1:]).strip()
    if not content:
        return None
    return FileChange(filename=filename, content=content)


def _parse_pipe_block(lines: list[str]) -> FileChange | None:
    left, _, right = lines[0].partition(PIPE_SEPARATOR)
    filename = left.strip()
    if not _is_filename(filename):
        return None
    content = "\n".join([right, *lines[1:]]).strip()
    if not content:
        return None
    return FileChange(filename=filename, content=content)


def _is_filename(value: str) -> bool:
    # A header with whitespace is prose, not a path.
    return bool(value) and _WHITESPACE.search(value) is None
