"""
autoscaffold.watcher - Live File-System Watching and Template Application
=========================================================================

The watcher observes the project while it is being worked on and fills in
newly created empty files.

Architecture
------------
- Watch directories are inferred from the loaded templates: each template's
  scope prefix joined with its leading static directories. Only these are
  observed, which keeps event volume bounded.
- On ``start()``, each watch directory captures a **baseline** of the files
  already present, then a recursive watchdog watch is scheduled for it.
  Files in the baseline are never scaffolded, even if empty.
- Files below hidden or vendored directories (``.git``, ``node_modules``)
  inside a watch directory are never scaffolded.
- A created file that is not in the baseline is held until its size and
  mtime have stayed unchanged for ``STABILITY_THRESHOLD`` seconds, so a
  writer that creates the file first and fills it a moment later is never
  overwritten. If it is still empty then, it is matched against a snapshot
  of the ``TemplateRegistry``; the winning template's content is re-read
  from disk and written into the file.
- Each discovered template root is watched too. Adding, editing or removing
  a template file updates the registry in place, so the next match sees it.

Threading
---------
A single watchdog ``Observer`` dispatches the events of every scheduled
watch from one thread. Held files are re-checked by one ``threading.Timer``
per path and applied from the timer thread, under a lock so two scaffold
operations never interleave. The registry is shared with the
template-source handlers and guards itself with a lock. ``start()`` and
``stop()`` may be called from any thread; ``stop()`` can run before
``start()`` has finished, and cancels every pending timer.
"""

from __future__ import annotations

import logging
import os
import threading
import time
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path

from watchdog.events import FileSystemEvent, FileSystemEventHandler
from watchdog.observers import Observer
from watchdog.observers.api import BaseObserver, ObservedWatch

from autoscaffold.errors import ScaffoldError, TemplateUnavailable, WriteFailed
from autoscaffold.patterns import SEPARATOR, ParsedTemplate, infer_watch_dirs, resolve_best
from autoscaffold.scopes import ScopeSource, is_ignored_directory, load_template_file, scan_files
from autoscaffold.store import TemplateRegistry


logger = logging.getLogger(__name__)

LOG_PREFIX = "[autoscaffold]"

# How long stop() waits for the observer thread to finish
_JOIN_TIMEOUT = 2.0

# A created file must keep the same size and mtime this long (seconds)
# before it is considered written and may be scaffolded
STABILITY_THRESHOLD = 1.0

# How often a held file is re-checked while waiting for it to settle
POLL_INTERVAL = 0.05


# =============================================================================
# Template Application
# =============================================================================

def is_file_empty(path: Path) -> bool:
    """True if ``path`` is an existing file of size zero; False otherwise."""
    try:
        return path.stat().st_size == 0
    except OSError:
        return False


def apply_template(path: Path, template: ParsedTemplate) -> None:
    """
    Overwrite ``path`` with the template's current content.

    The template is read at call time, so edits made to a template file
    after loading are picked up. Applying twice yields the same content.

    Raises
    ------
    TemplateUnavailable
        If the template file cannot be read.
    WriteFailed
        If the target file cannot be written.
    """
    try:
        content = template.read_content()
    except OSError as e:
        raise TemplateUnavailable(template, e) from e

    try:
        with path.open("w", encoding="utf-8", newline="") as f:
            f.write(content)
    except OSError as e:
        raise WriteFailed(path, e) from e


# =============================================================================
# Watch State
# =============================================================================

class WatchState(str, Enum):
    """Lifecycle of one watched directory."""

    INITIALIZING = "initializing"
    ACTIVE = "active"
    STOPPED = "stopped"


@dataclass
class DirectoryWatch:
    """
    One observed target directory.

    Attributes
    ----------
    directory : Path
        Absolute path being watched (recursively).

    relative : str
        The same directory relative to the project root (``""`` for the root).

    state : WatchState
        Current lifecycle state.

    baseline : set[str]
        ``/``-separated paths, relative to ``directory``, of files that
        existed when the watch was activated.
    """

    directory: Path
    relative: str
    state: WatchState = WatchState.INITIALIZING
    baseline: set[str] = field(default_factory=set)
    handle: ObservedWatch | None = None

    def relative_path(self, path: Path) -> str | None:
        """``path`` relative to this directory, or None if it lies outside."""
        try:
            return path.relative_to(self.directory).as_posix()
        except ValueError:
            return None


def _file_signature(path: Path) -> tuple[int, int] | None:
    """``(size, mtime_ns)`` of a file, or None if it cannot be stat'ed."""
    try:
        stat = path.stat()
    except OSError:
        return None
    return stat.st_size, stat.st_mtime_ns


@dataclass
class _PendingFile:
    """A created file held until writes to it have settled."""

    watch: DirectoryWatch
    path: Path
    signature: tuple[int, int] | None
    stable_since: float
    timer: threading.Timer | None = None


def _event_path(raw: str | bytes) -> Path:
    return Path(os.fsdecode(raw))


class _GuardedHandler(FileSystemEventHandler):
    """Event handler base that keeps one failing callback from killing the observer."""

    def dispatch(self, event: FileSystemEvent) -> None:
        try:
            super().dispatch(event)
        except Exception:
            logger.exception("Error handling file-system event %s", event)


class _TargetEventHandler(_GuardedHandler):
    """Feeds events of one watched target directory into the watcher."""

    def __init__(self, watcher: ScaffoldWatcher, watch: DirectoryWatch) -> None:
        super().__init__()
        self._watcher = watcher
        self._watch = watch

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.on_file_created(self._watch, _event_path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._watcher.on_file_removed(
            self._watch, _event_path(event.src_path), is_directory=event.is_directory
        )

    def on_moved(self, event: FileSystemEvent) -> None:
        self._watcher.on_file_removed(
            self._watch, _event_path(event.src_path), is_directory=event.is_directory
        )
        if not event.is_directory:
            self._watcher.on_file_created(self._watch, _event_path(event.dest_path))


class _TemplateSourceHandler(_GuardedHandler):
    """Keeps the registry in sync with one template root folder."""

    def __init__(self, watcher: ScaffoldWatcher, source: ScopeSource) -> None:
        super().__init__()
        self._watcher = watcher
        self._source = source

    def on_created(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.on_template_changed(self._source, _event_path(event.src_path))

    def on_modified(self, event: FileSystemEvent) -> None:
        if not event.is_directory:
            self._watcher.on_template_changed(self._source, _event_path(event.src_path))

    def on_deleted(self, event: FileSystemEvent) -> None:
        self._watcher.on_template_removed(
            self._source, _event_path(event.src_path), is_directory=event.is_directory
        )

    def on_moved(self, event: FileSystemEvent) -> None:
        self._watcher.on_template_removed(
            self._source, _event_path(event.src_path), is_directory=event.is_directory
        )
        if not event.is_directory:
            self._watcher.on_template_changed(self._source, _event_path(event.dest_path))


# =============================================================================
# Watcher
# =============================================================================

class ScaffoldWatcher:
    """
    Watches target directories and template roots for one project.

    Lifecycle:
        1. ``__init__(project_root, registry, sources=..., log=...)``
        2. ``start()``: baseline each watch directory, then watch it; then
           watch every template root.
        3. Events arrive on the observer thread (``on_file_created`` etc.).
           Created files are held until they settle, then scaffolded.
        4. ``stop()``: release every watch and drop held files; idempotent.

    Attributes
    ----------
    project_root : Path
        Resolved project directory.

    registry : TemplateRegistry
        Live templates, shared with the template-source handlers.

    sources : list[ScopeSource]
        Discovered template roots to keep in sync.

    directories : list[DirectoryWatch]
        Target directories, populated by ``start()``.

    stability_threshold : float
        Seconds a created file must stay unchanged before it is scaffolded.
        Zero scaffolds immediately on the event thread.

    poll_interval : float
        Seconds between checks of a held file.
    """

    def __init__(
        self,
        project_root: Path,
        registry: TemplateRegistry,
        *,
        sources: Iterable[ScopeSource] = (),
        log: Callable[[str], None] | None = None,
        root_folder_name: str | None = None,
        observer_factory: Callable[[], BaseObserver] = Observer,
        stability_threshold: float = STABILITY_THRESHOLD,
        poll_interval: float = POLL_INTERVAL,
    ) -> None:
        self.project_root = project_root.resolve()
        self.registry = registry
        self.sources = list(sources)
        self.directories: list[DirectoryWatch] = []
        self.stability_threshold = stability_threshold
        self.poll_interval = poll_interval

        self._log = log or (lambda message: logger.info(message))
        self._root_folder_name = root_folder_name
        self._observer_factory = observer_factory
        self._observer: BaseObserver | None = None
        self._source_watches: list[ObservedWatch] = []
        self._pending: dict[Path, _PendingFile] = {}
        self._ready = threading.Event()
        self._lock = threading.RLock()
        self._apply_lock = threading.Lock()
        self._started = False
        self._stopped = False

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    @property
    def ready(self) -> bool:
        """True once every watch directory has finished activating (or on stop)."""
        return self._ready.is_set()

    @property
    def stopped(self) -> bool:
        return self._stopped

    @property
    def pending(self) -> list[Path]:
        """Created files currently held while waiting for writes to settle."""
        with self._lock:
            return list(self._pending)

    def wait_until_ready(self, timeout: float | None = None) -> bool:
        """Block until ``ready``; returns False if ``timeout`` expired first."""
        return self._ready.wait(timeout)

    def start(self) -> None:
        """
        Capture baselines and start watching.

        Safe to call more than once; later calls are no-ops. If ``stop()``
        is called while this is running, the remaining directories are left
        unwatched and readiness is still signalled.
        """
        with self._lock:
            if self._started or self._stopped:
                return
            self._started = True

            observer = self._observer_factory()
            observer.daemon = True
            observer.start()
            self._observer = observer

            self.directories = [
                DirectoryWatch(
                    directory=self.project_root / relative if relative else self.project_root,
                    relative=relative,
                )
                for relative in infer_watch_dirs(self.registry.snapshot())
            ]

        for watch in self.directories:
            with self._lock:
                if self._stopped:
                    break
                self._activate(observer, watch)

        with self._lock:
            if not self._stopped:
                for source in self.sources:
                    self._watch_source(observer, source)

        self._ready.set()
        logger.debug(
            "Watching %d director(ies) and %d template root(s) under %s",
            sum(1 for w in self.directories if w.state is WatchState.ACTIVE),
            len(self._source_watches),
            self.project_root,
        )

    def stop(self) -> None:
        """Release every watch handle, drop held files and stop the observer; idempotent."""
        with self._lock:
            if self._stopped:
                return
            self._stopped = True
            observer, self._observer = self._observer, None
            for watch in self.directories:
                watch.state = WatchState.STOPPED
                watch.handle = None
            self._source_watches.clear()
            self._release_pending(lambda pending: True)

        if observer is not None:
            observer.unschedule_all()
            observer.stop()
            if threading.current_thread() is not observer:
                observer.join(timeout=_JOIN_TIMEOUT)

        self._ready.set()
        logger.debug("Watcher stopped: %s", self.project_root)

    # ------------------------------------------------------------------
    # Event callbacks
    # ------------------------------------------------------------------

    def on_file_created(self, watch: DirectoryWatch, path: Path) -> ParsedTemplate | None:
        """
        Scaffold ``path`` if it is a new, empty file with a matching template.

        With a positive ``stability_threshold`` the file is held and checked
        again from a timer once it has settled; this call then returns None.

        Returns
        -------
        ParsedTemplate | None
            The template applied, or None if the file was held or left alone.
        """
        if not self._is_candidate(watch, path):
            return None

        if self.stability_threshold <= 0:
            return self._scaffold(watch, path)

        self._hold(watch, path)
        return None

    def on_file_removed(self, watch: DirectoryWatch, path: Path, *, is_directory: bool = False) -> None:
        """Forget a removed path so that recreating it scaffolds again."""
        relative = watch.relative_path(path)
        if relative is None:
            return

        if is_directory:
            prefix = relative + SEPARATOR
            watch.baseline.difference_update(
                {entry for entry in watch.baseline if entry.startswith(prefix)}
            )
            with self._lock:
                self._release_pending(lambda pending: pending.path.is_relative_to(path))
        else:
            watch.baseline.discard(relative)
            with self._lock:
                self._release_pending(lambda pending: pending.path == path)

    def on_template_changed(self, source: ScopeSource, path: Path) -> None:
        """Re-parse an added or edited template file into the registry."""
        if not path.is_file():
            return
        try:
            template = load_template_file(source, self.project_root, path)
        except ValueError:
            return
        self.registry.insert_or_replace(template)
        logger.debug("Template updated: %s", template.display_path)

    def on_template_removed(self, source: ScopeSource, path: Path, *, is_directory: bool = False) -> None:
        """Drop the registry entries of a removed template file or directory."""
        try:
            relative = path.relative_to(source.root_directory).as_posix()
        except ValueError:
            return

        scope_prefix = source.scope_prefix(self.project_root)

        if not is_directory:
            if self.registry.remove((scope_prefix, relative)) is not None:
                logger.debug("Template removed: %s", relative)
            return

        prefix = relative + SEPARATOR
        for template in self.registry.snapshot():
            if template.scope_prefix == scope_prefix and template.source_path.startswith(prefix):
                self.registry.remove(template.key)

    # ------------------------------------------------------------------
    # Internal
    # ------------------------------------------------------------------

    def _is_candidate(self, watch: DirectoryWatch, path: Path) -> bool:
        """Cheap checks on a created path before it is held or scaffolded."""
        if watch.state is not WatchState.ACTIVE:
            return False

        relative = watch.relative_path(path)
        if relative is None or relative in watch.baseline:
            return False

        # .git, node_modules and the like below the watch directory
        if any(is_ignored_directory(part) for part in relative.split(SEPARATOR)[:-1]):
            return False

        return not self._in_template_root(path) and is_file_empty(path)

    def _scaffold(self, watch: DirectoryWatch, path: Path) -> ParsedTemplate | None:
        """Match and apply a template to ``path`` if it is still empty."""
        with self._apply_lock:
            if watch.state is not WatchState.ACTIVE or not is_file_empty(path):
                return None

            relative = watch.relative_path(path)
            if relative is None:
                return None

            project_relative = path.relative_to(self.project_root).as_posix()
            template = resolve_best(project_relative, self.registry.snapshot())
            if template is None:
                return None

            try:
                apply_template(path, template)
            except (WriteFailed, TemplateUnavailable):
                logger.exception("Failed to scaffold %s", project_relative)
                return None

        self._log(f"{LOG_PREFIX} Scaffolding {relative}")
        return template

    def _hold(self, watch: DirectoryWatch, path: Path) -> None:
        """Start (or restart) waiting for ``path`` to settle."""
        with self._lock:
            if self._stopped:
                return
            self._release_pending(lambda pending: pending.path == path)
            pending = _PendingFile(
                watch=watch,
                path=path,
                signature=_file_signature(path),
                stable_since=time.monotonic(),
            )
            self._pending[path] = pending
            self._schedule_check(pending)

    def _schedule_check(self, pending: _PendingFile) -> None:
        """Arm the timer of a held file. Caller holds the lock."""
        timer = threading.Timer(self.poll_interval, self._check_pending, args=(pending,))
        timer.daemon = True
        pending.timer = timer
        timer.start()

    def _check_pending(self, pending: _PendingFile) -> None:
        """Timer callback: scaffold a held file once it has stopped changing."""
        with self._lock:
            if self._stopped or self._pending.get(pending.path) is not pending:
                return

            signature = _file_signature(pending.path)
            now = time.monotonic()
            if signature is None:
                del self._pending[pending.path]
                return
            if signature != pending.signature:
                pending.signature = signature
                pending.stable_since = now
            if now - pending.stable_since < self.stability_threshold:
                self._schedule_check(pending)
                return

            del self._pending[pending.path]

        try:
            self._scaffold(pending.watch, pending.path)
        except Exception:
            logger.exception("Error scaffolding %s", pending.path)

    def _release_pending(self, predicate: Callable[[_PendingFile], bool]) -> None:
        """Cancel and forget held files matching ``predicate``. Caller holds the lock."""
        for path, pending in list(self._pending.items()):
            if predicate(pending):
                if pending.timer is not None:
                    pending.timer.cancel()
                del self._pending[path]

    def _activate(self, observer: BaseObserver, watch: DirectoryWatch) -> None:
        """Baseline one directory and schedule its watch. Caller holds the lock."""
        if not watch.directory.is_dir():
            logger.debug("Watch directory does not exist, skipping: %s", watch.directory)
            watch.state = WatchState.STOPPED
            return

        watch.baseline = set(scan_files(watch.directory, skip_ignored=True))
        try:
            watch.handle = observer.schedule(
                _TargetEventHandler(self, watch), str(watch.directory), recursive=True
            )
        except OSError:
            logger.exception("Cannot watch %s", watch.directory)
            watch.state = WatchState.STOPPED
            return

        watch.state = WatchState.ACTIVE
        logger.debug(
            "Watching %s (%d baseline file(s))", watch.relative or ".", len(watch.baseline)
        )

    def _watch_source(self, observer: BaseObserver, source: ScopeSource) -> None:
        """Schedule a template-root watch. Caller holds the lock."""
        if not source.root_directory.is_dir():
            return
        try:
            handle = observer.schedule(
                _TemplateSourceHandler(self, source), str(source.root_directory), recursive=True
            )
        except OSError:
            logger.exception("Cannot watch template root %s", source.root_directory)
            return
        self._source_watches.append(handle)

    def _in_template_root(self, path: Path) -> bool:
        """True for files inside a template root; they are sources, not targets."""
        for source in self.sources:
            if path.is_relative_to(source.root_directory):
                return True

        if self._root_folder_name is None:
            return False
        try:
            parts = path.relative_to(self.project_root).parts
        except ValueError:
            return False
        return self._root_folder_name in parts[:-1]
