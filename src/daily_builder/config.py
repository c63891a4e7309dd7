"""Runtime configuration for the daily build cycle."""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from urllib.parse import urlparse

from daily_builder.builder.generation import DEFAULT_BASE_URL, DEFAULT_MODEL
from daily_builder.builder.prompts import DEFAULT_RULES


@dataclass(slots=True)
class GenerationSettings:
    """Generation-service settings."""

    api_key: str = ""
    model: str = DEFAULT_MODEL
    base_url: str = DEFAULT_BASE_URL
    timeout_seconds: float = 120.0


@dataclass(slots=True)
class ProjectSettings:
    """Target project description used in the prompt."""

    name: str = "Netflix Project LLM (45-day roadmap)"
    stack: str = "React/Vite/Tailwind"
    rules: tuple[str, ...] = DEFAULT_RULES


@dataclass(slots=True)
class QualitySettings:
    """Best-effort steps run after files are written."""

    install_command: str = "npm install"
    lint_command: str = "npm run lint --silent"
    step_timeout_seconds: int = 600


@dataclass(slots=True)
class GitSettings:
    """Commit identity and publish behavior."""

    user_name: str = "AI Development Agent"
    user_email: str = "bot@netflix-project-llm.com"
    commit_prefix: str = "feat(netflix)"
    push: bool = True
    timeout_seconds: int = 300


@dataclass(slots=True)
class Settings:
    """Application settings grouped by concern."""

    root: Path = Path()
    backlog_path: Path = Path("backlog.json")
    progress_dir: Path = Path("docs/progress")
    preview_chars: int = 1000
    sandbox_paths: bool = True
    generation: GenerationSettings = field(default_factory=GenerationSettings)
    project: ProjectSettings = field(default_factory=ProjectSettings)
    quality: QualitySettings = field(default_factory=QualitySettings)
    git: GitSettings = field(default_factory=GitSettings)

    @property
    def resolved_backlog_path(self) -> Path:
        """Backlog path, relative paths taken from `root`."""

        if self.backlog_path.is_absolute():
            return self.backlog_path
        return self.root / self.backlog_path

    @classmethod
    def from_env(cls, root: Path | None = None, backlog_path: Path | None = None) -> Settings:
        """Load settings from environment with defaults matching the scheduled runner."""

        return cls(
            root=root or Path(os.getenv("DAILY_BUILDER_ROOT", ".")),
            backlog_path=backlog_path
            or Path(os.getenv("DAILY_BUILDER_BACKLOG_PATH", "backlog.json")),
            progress_dir=Path(os.getenv("DAILY_BUILDER_PROGRESS_DIR", "docs/progress")),
            preview_chars=int(os.getenv("DAILY_BUILDER_PREVIEW_CHARS", "1000")),
            sandbox_paths=_env_bool("DAILY_BUILDER_SANDBOX_PATHS", default=True),
            generation=GenerationSettings(
                api_key=os.getenv(
                    "DAILY_BUILDER_GEMINI_API_KEY",
                    os.getenv("GEMINI_API_KEY", ""),
                ).strip(),
                model=os.getenv("DAILY_BUILDER_GEMINI_MODEL", DEFAULT_MODEL),
                base_url=os.getenv("DAILY_BUILDER_GEMINI_BASE_URL", DEFAULT_BASE_URL),
                timeout_seconds=float(os.getenv("DAILY_BUILDER_GEMINI_TIMEOUT_SECONDS", "120")),
            ),
            project=ProjectSettings(
                name=os.getenv("DAILY_BUILDER_PROJECT_NAME", "Netflix Project LLM (45-day roadmap)"),
                stack=os.getenv("DAILY_BUILDER_PROJECT_STACK", "React/Vite/Tailwind"),
                rules=_collect_rules(),
            ),
            quality=QualitySettings(
                install_command=os.getenv("DAILY_BUILDER_INSTALL_COMMAND", "npm install"),
                lint_command=os.getenv("DAILY_BUILDER_LINT_COMMAND", "npm run lint --silent"),
                step_timeout_seconds=int(os.getenv("DAILY_BUILDER_STEP_TIMEOUT_SECONDS", "600")),
            ),
            git=GitSettings(
                user_name=os.getenv("DAILY_BUILDER_GIT_USER_NAME", "AI Development Agent"),
                user_email=os.getenv("DAILY_BUILDER_GIT_USER_EMAIL", "bot@netflix-project-llm.com"),
                commit_prefix=os.getenv("DAILY_BUILDER_COMMIT_PREFIX", "feat(netflix)"),
                push=_env_bool("DAILY_BUILDER_GIT_PUSH", default=True),
                timeout_seconds=int(os.getenv("DAILY_BUILDER_GIT_TIMEOUT_SECONDS", "300")),
            ),
        )

    def validate_for_run(self, *, require_api_key: bool = True) -> None:
        """Raise configuration error for values a run cannot proceed with."""

        if require_api_key and not self.generation.api_key:
            raise ValueError("Gemini API key is required. Set GEMINI_API_KEY.")
        if not self.generation.model.strip():
            raise ValueError("DAILY_BUILDER_GEMINI_MODEL must not be empty.")
        _validate_base_url(self.generation.base_url)
        if self.generation.timeout_seconds <= 0:
            raise ValueError("DAILY_BUILDER_GEMINI_TIMEOUT_SECONDS must be > 0.")
        if self.preview_chars < 0:
            raise ValueError("DAILY_BUILDER_PREVIEW_CHARS must be >= 0.")
        if self.quality.step_timeout_seconds <= 0:
            raise ValueError("DAILY_BUILDER_STEP_TIMEOUT_SECONDS must be > 0.")
        if self.git.timeout_seconds <= 0:
            raise ValueError("DAILY_BUILDER_GIT_TIMEOUT_SECONDS must be > 0.")
        if not self.git.user_name.strip() or not self.git.user_email.strip():
            raise ValueError("Git user name and email must not be empty.")
        if self.progress_dir.is_absolute():
            raise ValueError("DAILY_BUILDER_PROGRESS_DIR must be relative to the project root.")


def _collect_rules() -> tuple[str, ...]:
    raw = os.getenv("DAILY_BUILDER_PROJECT_RULES")
    if raw is None:
        return DEFAULT_RULES
    return tuple(line.strip() for line in raw.splitlines() if line.strip())


def _validate_base_url(value: str) -> None:
    parsed = urlparse(value)
    if parsed.scheme not in {"http", "https"} or not parsed.netloc:
        raise ValueError(
            "Invalid DAILY_BUILDER_GEMINI_BASE_URL: "
            f"{value!r}. Expected an absolute URL with http:// or https:// scheme.",
        )


def _env_bool(name: str, default: bool) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    normalized = value.strip().lower()
    if normalized in {"1", "true", "yes", "on"}:
        return True
    if normalized in {"0", "false", "no", "off"}:
        return False
    raise ValueError(f"Invalid boolean value for {name}: {value!r}")
