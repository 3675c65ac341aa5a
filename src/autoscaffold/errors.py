"""
autoscaffold.errors - Exception Hierarchy
=========================================

Every error raised on purpose by autoscaffold derives from ``ScaffoldError``
so callers (the session, the CLI) can catch broadly or narrowly as needed.

Scan failures are deliberately *not* represented here: a missing or
unreadable directory simply contributes nothing.
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from autoscaffold.patterns import ParsedTemplate


class ScaffoldError(Exception):
    """Base exception for all autoscaffold errors."""


class ConfigError(ScaffoldError):
    """The ``[tool.autoscaffold]`` table is invalid or pyproject.toml is unreadable."""


class WriteFailed(ScaffoldError):
    """
    Writing template content into a target file failed.

    Attributes
    ----------
    path : Path
        The target file that could not be written.
    cause : OSError
        The underlying operating-system error.
    """

    def __init__(self, path: Path, cause: OSError) -> None:
        self.path = path
        self.cause = cause
        super().__init__(f"Failed to write {path}: {cause}")


class TemplateUnavailable(ScaffoldError):
    """The template source could not be read at apply time."""

    def __init__(self, template: ParsedTemplate, cause: OSError) -> None:
        self.template = template
        self.cause = cause
        super().__init__(f"Template {template.source_path!r} is unavailable: {cause}")
