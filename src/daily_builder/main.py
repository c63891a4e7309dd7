"""CLI entrypoint for daily-builder."""

import logging
from pathlib import Path

import rich_click as click

from daily_builder import __version__
from daily_builder.builder.controllers import (
    BacklogStatusCommand,
    BuildCliController,
    DailyRunCommand,
    ExtractCommand,
)
from daily_builder.builder.errors import DailyBuilderError

click.rich_click.USE_MARKDOWN = True
BUILD_CONTROLLER = BuildCliController()
logger = logging.getLogger(__name__)


@click.group()
@click.version_option(version=__version__, prog_name="daily-builder")
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default="INFO",
    show_default=True,
    help="Logging level for progress messages on stderr.",
)
def daily_builder(log_level: str) -> None:
    """Build one backlog task per run with a generative model and push it."""

    logging.basicConfig(
        level=log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


@daily_builder.command("run")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Target repository root. Defaults to DAILY_BUILDER_ROOT or the current directory.",
)
@click.option(
    "--backlog",
    "backlog_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Backlog JSON path, relative to the root unless absolute.",
)
@click.option(
    "--dry-run/--no-dry-run",
    default=False,
    show_default=True,
    help="Write files and the progress note but skip install, lint, git and backlog update.",
)
def run_daily(root: Path | None, backlog_path: Path | None, dry_run: bool) -> None:
    """Run one build cycle for the next pending backlog task."""

    try:
        lines = BUILD_CONTROLLER.run_daily(
            DailyRunCommand(root=root, backlog_path=backlog_path, dry_run=dry_run),
        )
    except (DailyBuilderError, OSError, ValueError) as error:
        logger.error("Build cycle failed: %s", error)
        raise click.ClickException(f"Failed: {error}") from error
    _emit_lines(lines)


@daily_builder.command("extract")
@click.argument(
    "response_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--sandbox/--no-sandbox",
    default=True,
    show_default=True,
    help="Reject absolute paths and paths containing '..'.",
)
def extract(response_path: Path, sandbox: bool) -> None:
    """Show the files a saved model response would produce, without writing them."""

    try:
        lines = BUILD_CONTROLLER.extract(
            ExtractCommand(response_path=response_path, sandbox=sandbox),
        )
    except (OSError, ValueError) as error:
        raise click.ClickException(f"Cannot read response: {error}") from error
    _emit_lines(lines)


@daily_builder.command("backlog")
@click.option(
    "--root",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Target repository root.",
)
@click.option(
    "--backlog",
    "backlog_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Backlog JSON path, relative to the root unless absolute.",
)
def backlog_status(root: Path | None, backlog_path: Path | None) -> None:
    """Show pending and completed counts and the next task."""

    try:
        lines = BUILD_CONTROLLER.backlog_status(
            BacklogStatusCommand(root=root, backlog_path=backlog_path),
        )
    except (DailyBuilderError, OSError, ValueError) as error:
        raise click.ClickException(str(error)) from error
    _emit_lines(lines)


def _emit_lines(lines: list[str]) -> None:
    for line in lines:
        click.echo(line)


if __name__ == "__main__":  # pragma: no cover
    daily_builder()
