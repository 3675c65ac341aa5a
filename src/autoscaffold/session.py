"""
autoscaffold.session - Session Start/Stop for Host Integrations
===============================================================

A session is what a host (a dev server, an editor plugin, the ``watch``
command) starts when work on a project begins and stops when it ends.

Pipeline
--------
On ``start()``:

    1. Discover every template root in the project (``scopes.discover_scopes``)
    2. Load and merge the configured presets, left to right
    3. Load user templates from the discovered roots
    4. Merge presets (base) with user templates (override)
    5. Start a ``ScaffoldWatcher`` over the merged registry

On ``stop()`` the watcher releases every watch.

Usage Example
-------------
>>> from pathlib import Path
>>> from autoscaffold.models import ScaffoldOptions
>>> from autoscaffold.session import ScaffoldSession
>>> session = ScaffoldSession(Path("."), ScaffoldOptions(presets=["vue"])).start()
>>> session.stop()
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from rich.console import Console
from rich.markup import escape
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver

from autoscaffold.models import ScaffoldOptions
from autoscaffold.patterns import ParsedTemplate
from autoscaffold.presets import load_presets
from autoscaffold.scopes import ScopeSource, discover_scopes, load_all
from autoscaffold.store import TemplateRegistry, merge_templates
from autoscaffold.watcher import LOG_PREFIX, ScaffoldWatcher


logger = logging.getLogger(__name__)

# Console for the default log sink
console = Console()


def console_log(message: str) -> None:
    """Default log sink: print through the Rich console, markup escaped."""
    console.print(escape(message))


def load_templates(
    project_root: Path,
    options: ScaffoldOptions,
) -> tuple[list[ParsedTemplate], list[ScopeSource]]:
    """
    Discover template roots and build the merged template set.

    Parameters
    ----------
    project_root : Path
        Project directory (should already be resolved).

    options : ScaffoldOptions
        Root folder name and presets to use.

    Returns
    -------
    tuple[list[ParsedTemplate], list[ScopeSource]]
        Merged templates (presets overridden by user templates) and the
        discovered roots, which the watcher keeps in sync.
    """
    sources = discover_scopes(project_root, options.root_folder_name)
    preset_templates = load_presets(options.presets)
    user_templates = load_all(project_root, options.root_folder_name, sources=sources)
    return merge_templates(preset_templates, user_templates), sources


class ScaffoldSession:
    """
    One scaffolding session for a project.

    Attributes
    ----------
    project_root : Path
        Resolved project directory.

    options : ScaffoldOptions
        Resolved options.

    watcher : ScaffoldWatcher | None
        The running watcher, or None when disabled, stopped or without templates.
    """

    def __init__(
        self,
        project_root: Path,
        options: ScaffoldOptions | None = None,
        log: Callable[[str], None] | None = None,
        *,
        observer_factory: Callable[[], BaseObserver] = Observer,
    ) -> None:
        self.project_root = project_root.resolve()
        self.options = options or ScaffoldOptions()
        self.log = log or console_log
        self.watcher: ScaffoldWatcher | None = None
        self.templates: list[ParsedTemplate] = []
        self.sources: list[ScopeSource] = []
        self._observer_factory = observer_factory

    @property
    def active(self) -> bool:
        return self.watcher is not None and not self.watcher.stopped

    def start(self) -> ScaffoldSession:
        """
        Load templates and start watching.

        Does nothing when scaffolding is disabled. When no templates are
        found, a warning goes to the log sink and nothing is watched.

        Returns
        -------
        ScaffoldSession
            ``self``, for chaining.
        """
        if not self.options.enabled:
            logger.debug("Scaffolding disabled for %s", self.project_root)
            return self
        if self.watcher is not None:
            return self

        self.templates, self.sources = load_templates(self.project_root, self.options)

        if not self.templates:
            self.log(
                f"{LOG_PREFIX} No templates found. Create templates in "
                f"{self.options.root_folder_name}/ or enable a preset."
            )
            return self

        self.watcher = ScaffoldWatcher(
            self.project_root,
            TemplateRegistry(self.templates),
            sources=self.sources,
            log=self.log,
            root_folder_name=self.options.root_folder_name,
            observer_factory=self._observer_factory,
        )
        self.watcher.start()
        return self

    def stop(self) -> None:
        """Stop the watcher, if any. Safe to call repeatedly."""
        if self.watcher is not None:
            self.watcher.stop()
