"""
autoscaffold.store - Template Set Merging and the Live Registry
===============================================================

Templates arrive from several sources: built-in presets, then user-authored
template roots. ``merge_templates`` combines two sets keyed by
``(scope_prefix, source_path)``, the override set winning on collision.

While a session runs, the merged set lives in a ``TemplateRegistry``. The
target-directory handlers read it and the template-source handlers write it;
watchdog calls both from its observer thread, and the registry's lock keeps
each read and write a single step.
"""

from __future__ import annotations

import threading
from collections.abc import Iterable

from autoscaffold.patterns import ParsedTemplate


TemplateKey = tuple[str, str]


def merge_templates(
    base: Iterable[ParsedTemplate],
    override: Iterable[ParsedTemplate],
) -> list[ParsedTemplate]:
    """
    Merge two template sets; ``override`` wins on identity-key collision.

    An overriding template takes the position of the entry it replaces;
    templates with new keys are appended in their input order.

    Examples
    --------
    >>> from autoscaffold.patterns import parse_template_path
    >>> merged = merge_templates(
    ...     [parse_template_path("src/[name].ts", "preset")],
    ...     [parse_template_path("src/[name].ts", "user")],
    ... )
    >>> [t.content for t in merged]
    ['user']
    """
    merged: dict[TemplateKey, ParsedTemplate] = {}
    for template in base:
        merged[template.key] = template
    for template in override:
        merged[template.key] = template
    return list(merged.values())


class TemplateRegistry:
    """
    The live, mutable set of templates used for matching.

    Only three operations touch the contents: ``insert_or_replace``,
    ``remove`` and ``snapshot``. Each runs under a lock.
    """

    def __init__(self, templates: Iterable[ParsedTemplate] = ()) -> None:
        self._lock = threading.Lock()
        self._templates: dict[TemplateKey, ParsedTemplate] = {}
        for template in templates:
            self._templates[template.key] = template

    def insert_or_replace(self, template: ParsedTemplate) -> None:
        """Add a template, replacing any entry with the same key in place."""
        with self._lock:
            self._templates[template.key] = template

    def remove(self, key: TemplateKey) -> ParsedTemplate | None:
        """Remove the entry for ``key``; returns it, or None if absent."""
        with self._lock:
            return self._templates.pop(key, None)

    def snapshot(self) -> list[ParsedTemplate]:
        """A copy of the current templates in registry order."""
        with self._lock:
            return list(self._templates.values())

    def __len__(self) -> int:
        with self._lock:
            return len(self._templates)
