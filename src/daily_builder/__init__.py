"""Daily AI build automation: one backlog task per run."""

__version__ = "0.1.0"
