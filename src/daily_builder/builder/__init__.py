"""Daily build cycle: backlog task -> generated files -> git commit.

The only decision logic lives in `extractor`, which turns free-form model
output into file changes. Everything else is a linear driver around one
generation call and a handful of subprocesses.
"""
