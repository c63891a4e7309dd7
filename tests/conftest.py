"""Shared test fixtures."""

from __future__ import annotations

import json
import subprocess
from pathlib import Path

import pytest

from daily_builder.builder.errors import GenerationError

SAMPLE_BACKLOG = {
    "pending": [
        {"id": 1, "title": "Scaffold Vite app", "desc": "Create the Vite + React shell.", "phase": 1},
        {"id": 2, "title": "Trending row", "desc": "Render trending titles from TMDB.", "phase": 2},
    ],
    "completed": [],
    "phases": {"1": "Foundation", "2": "Browse UI"},
}

SAMPLE_RESPONSE = """Here are the files.

```jsx
src/App.jsx
export default function App() {
  return <h1>Netflix</h1>;
}
```

```
this is not a filename
ignored
```

```
package.json|{"name": "netflix-project-llm"}
```
"""


class FakeGenerator:
    """Returns a canned response and records prompts."""

    def __init__(self, response: str = SAMPLE_RESPONSE, error: Exception | None = None) -> None:
        self.response = response
        self.error = error
        self.prompts: list[str] = []

    def generate(self, prompt: str) -> str:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.response


class FakeRunner:
    """Stands in for `subprocess.run` and records issued commands."""

    def __init__(self, fail_on: str | None = None, missing: str | None = None) -> None:
        self.fail_on = fail_on
        self.missing = missing
        self.calls: list[list[str]] = []

    def __call__(self, args: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        self.calls.append(list(args))
        if self.missing is not None and args[0] == self.missing:
            raise FileNotFoundError(args[0])
        if self.fail_on is not None and self.fail_on in args:
            return subprocess.CompletedProcess(args, 1, stdout="", stderr=f"{self.fail_on} broke")
        return subprocess.CompletedProcess(args, 0, stdout="ok", stderr="")


@pytest.fixture()
def backlog_file(tmp_path: Path) -> Path:
    path = tmp_path / "backlog.json"
    path.write_text(json.dumps(SAMPLE_BACKLOG, indent=2), "utf-8")
    return path


@pytest.fixture()
def failing_generator() -> FakeGenerator:
    return FakeGenerator(error=GenerationError("Gemini returned HTTP 503", status_code=503))


@pytest.fixture()
def sample_response() -> str:
    return SAMPLE_RESPONSE


@pytest.fixture()
def make_generator() -> type[FakeGenerator]:
    """Factory for canned generation clients: `make_generator(response=..., error=...)`."""
    return FakeGenerator


@pytest.fixture()
def make_runner() -> type[FakeRunner]:
    """Factory for recording subprocess runners: `make_runner(fail_on=..., missing=...)`."""
    return FakeRunner
