"""
autoscaffold.scopes - Template Root Discovery and Loading
=========================================================

A project may contain any number of template root folders (``.scaffold`` by
default), at any depth outside hidden directories. Each root governs only
the subtree of the directory that contains it:

    project/
    ├── .scaffold/src/components/[...path].vue      scope "" (depth 0)
    └── src/modules/admin/
        └── .scaffold/components/[...path].vue      scope "src/modules/admin" (depth 3)

Discovery walks the tree once per session. Directory scan failures of any
kind (missing directory, permissions, a directory removed mid-walk) are
treated as "nothing here".
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path

from autoscaffold.patterns import SEPARATOR, ParsedTemplate, parse_template_path


logger = logging.getLogger(__name__)

# Recursion ceiling for directory walks
MAX_SCAN_DEPTH = 64

# Vendored or generated directories treated like hidden ones
IGNORED_DIRECTORY_NAMES = frozenset({"node_modules", "__pycache__"})


def is_ignored_directory(name: str) -> bool:
    """True for hidden directories and well-known vendored/generated ones."""
    return name.startswith(".") or name in IGNORED_DIRECTORY_NAMES


@dataclass(frozen=True)
class ScopeSource:
    """
    One discovered template root.

    Attributes
    ----------
    root_directory : Path
        The template root folder itself (contains pattern files).

    scope_root : Path
        Directory the templates apply under (the root folder's parent).

    depth : int
        Nesting level of ``scope_root`` below the project root (root = 0).
    """

    root_directory: Path
    scope_root: Path
    depth: int

    def scope_prefix(self, project_root: Path) -> str:
        """``/``-separated path from ``project_root`` to ``scope_root``; empty if equal."""
        relative = self.scope_root.relative_to(project_root).as_posix()
        return "" if relative == "." else relative


def _list_dir(directory: Path) -> list[os.DirEntry[str]]:
    """Sorted directory entries, or an empty list if the directory cannot be read."""
    try:
        with os.scandir(directory) as it:
            return sorted(it, key=lambda entry: entry.name)
    except OSError as e:
        logger.debug("Cannot scan %s: %s", directory, e)
        return []


def _is_real_dir(entry: os.DirEntry[str]) -> bool:
    try:
        return entry.is_dir(follow_symlinks=False)
    except OSError:
        return False


def discover_scopes(
    project_root: Path,
    root_folder_name: str,
    *,
    max_depth: int = MAX_SCAN_DEPTH,
) -> list[ScopeSource]:
    """
    Find every template root in the project tree.

    The walk is depth-first with entries visited in name order, so the
    result order is stable across runs. Ignored directories (hidden ones
    and ``IGNORED_DIRECTORY_NAMES``), the template root folders themselves
    and symlinked directories are never descended into.

    Parameters
    ----------
    project_root : Path
        Directory to start from.

    root_folder_name : str
        Name of template root folders.

    max_depth : int
        Directories deeper than this are not examined.

    Returns
    -------
    list[ScopeSource]
        Discovered roots, shallowest-first along each branch.
    """
    sources: list[ScopeSource] = []

    def walk(directory: Path, depth: int) -> None:
        if depth > max_depth:
            logger.debug("Not descending below %s (depth limit %d)", directory, max_depth)
            return

        entries = _list_dir(directory)
        subdirectories = [e for e in entries if _is_real_dir(e)]

        for entry in subdirectories:
            if entry.name == root_folder_name:
                sources.append(
                    ScopeSource(
                        root_directory=directory / entry.name,
                        scope_root=directory,
                        depth=depth,
                    )
                )
                break

        for entry in subdirectories:
            if is_ignored_directory(entry.name) or entry.name == root_folder_name:
                continue
            walk(directory / entry.name, depth + 1)

    walk(project_root, 0)
    return sources


def scan_files(
    directory: Path,
    *,
    max_depth: int = MAX_SCAN_DEPTH,
    skip_ignored: bool = False,
) -> list[str]:
    """
    List every file below ``directory`` as sorted ``/``-separated relative paths.

    With ``skip_ignored``, ignored directories (see ``is_ignored_directory``)
    below ``directory`` are pruned. Template roots are scanned without it,
    since a template tree may mirror hidden folders such as ``.github``.

    Returns an empty list if the directory does not exist or is unreadable.
    """
    files: list[str] = []

    def walk(current: Path, prefix: str, depth: int) -> None:
        if depth > max_depth:
            return
        for entry in _list_dir(current):
            relative = f"{prefix}{SEPARATOR}{entry.name}" if prefix else entry.name
            if _is_real_dir(entry):
                if skip_ignored and is_ignored_directory(entry.name):
                    continue
                walk(current / entry.name, relative, depth + 1)
            else:
                try:
                    if entry.is_file():
                        files.append(relative)
                except OSError:
                    continue

    walk(directory, "", 0)
    return sorted(files)


def load_templates_from_dir(directory: Path, *, origin: str = "user") -> list[ParsedTemplate]:
    """
    Parse every file below a template root, without scope metadata.

    Templates keep a reference to their file and read it when applied.

    Parameters
    ----------
    directory : Path
        Template root folder.

    origin : str
        Origin label stored on each template.

    Returns
    -------
    list[ParsedTemplate]
        One template per file; empty if the directory is missing.
    """
    return [
        parse_template_path(relative, content_path=directory / relative, origin=origin)
        for relative in scan_files(directory)
    ]


def load_template_file(source: ScopeSource, project_root: Path, path: Path) -> ParsedTemplate:
    """
    Parse a single file inside ``source.root_directory``, stamped with its scope.

    Used by the live watcher when a template source is added or changed.
    """
    relative = path.relative_to(source.root_directory).as_posix()
    template = parse_template_path(relative, content_path=path)
    return template.with_scope(source.scope_prefix(project_root), source.depth)


def load_scope(source: ScopeSource, project_root: Path) -> list[ParsedTemplate]:
    """Load every template of one discovered root, stamped with its scope."""
    prefix = source.scope_prefix(project_root)
    return [
        template.with_scope(prefix, source.depth)
        for template in load_templates_from_dir(source.root_directory)
    ]


def load_all(
    project_root: Path,
    root_folder_name: str,
    *,
    sources: list[ScopeSource] | None = None,
) -> list[ParsedTemplate]:
    """
    Discover every template root and load all of their templates.

    Parameters
    ----------
    project_root : Path
        Project directory.

    root_folder_name : str
        Name of template root folders.

    sources : list[ScopeSource] | None
        Previously discovered roots, to avoid walking the tree twice.

    Returns
    -------
    list[ParsedTemplate]
        Templates in discovery order, each root's files sorted by path.
    """
    if sources is None:
        sources = discover_scopes(project_root, root_folder_name)

    templates: list[ParsedTemplate] = []
    for source in sources:
        loaded = load_scope(source, project_root)
        logger.debug(
            "Loaded %d template(s) from %s (scope %r, depth %d)",
            len(loaded),
            source.root_directory,
            source.scope_prefix(project_root),
            source.depth,
        )
        templates.extend(loaded)

    return templates
