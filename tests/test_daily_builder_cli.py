from __future__ import annotations

from pathlib import Path

import allure
import pytest
from click.testing import CliRunner

from daily_builder import __version__
from daily_builder.builder.controllers import BuildCliController
from daily_builder.builder.errors import GenerationError
from daily_builder.main import daily_builder

pytestmark = [
    allure.epic("Daily Build"),
    allure.feature("CLI"),
]


@pytest.fixture()
def fake_controller(monkeypatch: pytest.MonkeyPatch, make_generator):
    generator = make_generator()
    monkeypatch.setattr(
        "daily_builder.main.BUILD_CONTROLLER",
        BuildCliController(generator=generator),
    )
    return generator


def test_version():
    assert __version__


def test_version_option():
    runner = CliRunner()
    result = runner.invoke(daily_builder, ["--version"])
    assert result.exit_code == 0
    assert __version__ in result.output


def test_run_dry_run_writes_files(
    tmp_path: Path,
    backlog_file: Path,
    fake_controller,
) -> None:
    result = CliRunner().invoke(daily_builder, ["run", "--root", str(tmp_path), "--dry-run"])

    assert result.exit_code == 0, result.output
    assert "Task 1: Scaffold Vite app" in result.output
    assert "Wrote: src/App.jsx" in result.output
    assert "Wrote: package.json" in result.output
    assert "Discarded blocks: 1" in result.output
    assert "Dry run: nothing committed." in result.output
    assert len(fake_controller.prompts) == 1


def test_run_with_empty_backlog_exits_cleanly(
    tmp_path: Path,
    fake_controller,
) -> None:
    (tmp_path / "backlog.json").write_text('{"pending": [], "completed": []}', "utf-8")

    result = CliRunner().invoke(daily_builder, ["run", "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert "All tasks completed!" in result.output
    assert fake_controller.prompts == []


def test_run_generation_failure_exits_non_zero(
    tmp_path: Path,
    backlog_file: Path,
    monkeypatch: pytest.MonkeyPatch,
    make_generator,
) -> None:
    monkeypatch.setattr(
        "daily_builder.main.BUILD_CONTROLLER",
        BuildCliController(generator=make_generator(error=GenerationError("quota exceeded"))),
    )

    result = CliRunner().invoke(daily_builder, ["run", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Failed: quota exceeded" in result.output


def test_run_without_api_key_exits_non_zero(
    tmp_path: Path,
    backlog_file: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("DAILY_BUILDER_GEMINI_API_KEY", raising=False)

    result = CliRunner().invoke(daily_builder, ["run", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Gemini API key is required" in result.output


def test_extract_command_lists_files(tmp_path: Path) -> None:
    response = tmp_path / "response.md"
    response.write_text(
        "```\nsrc/App.jsx\nline 1\nline 2\n```\n```\n../x.js\nbad\n```\n```\nnot a file\nx\n```",
        "utf-8",
    )

    result = CliRunner().invoke(daily_builder, ["extract", str(response)])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "src/App.jsx (2 lines)",
        "Rejected path: ../x.js",
        "Extracted: files=1 blocks=3 discarded=2",
    ]


def test_extract_command_without_sandbox(tmp_path: Path) -> None:
    response = tmp_path / "response.md"
    response.write_text("```\n../x.js\nok\n```", "utf-8")

    result = CliRunner().invoke(daily_builder, ["extract", str(response), "--no-sandbox"])

    assert result.exit_code == 0, result.output
    assert "../x.js (1 lines)" in result.output


def test_backlog_command_shows_next_task(tmp_path: Path, backlog_file: Path) -> None:
    result = CliRunner().invoke(daily_builder, ["backlog", "--root", str(tmp_path)])

    assert result.exit_code == 0, result.output
    assert result.output.splitlines() == [
        "Backlog: pending=2 completed=0",
        "Next task: #1 Scaffold Vite app (phase: Foundation)",
    ]


def test_backlog_command_missing_file(tmp_path: Path) -> None:
    result = CliRunner().invoke(daily_builder, ["backlog", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "Backlog not found" in result.output


def test_extract_command_rejects_undecodable_response(tmp_path: Path) -> None:
    response = tmp_path / "response.bin"
    response.write_bytes(b"\xff\xfe\x00bad")

    result = CliRunner().invoke(daily_builder, ["extract", str(response)])

    assert result.exit_code == 1
    assert "Cannot read response" in result.output
    assert result.exception is not None
    assert isinstance(result.exception, SystemExit)


def test_backlog_command_reports_invalid_settings(
    tmp_path: Path,
    backlog_file: Path,
    monkeypatch: pytest.MonkeyPatch,
) -> None:
    monkeypatch.setenv("DAILY_BUILDER_PREVIEW_CHARS", "abc")

    result = CliRunner().invoke(daily_builder, ["backlog", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert "invalid literal" in result.output
    assert isinstance(result.exception, SystemExit)


def test_backlog_command_reports_unreadable_backlog(tmp_path: Path) -> None:
    (tmp_path / "backlog.json").mkdir()

    result = CliRunner().invoke(daily_builder, ["backlog", "--root", str(tmp_path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
