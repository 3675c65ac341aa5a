"""
autoscaffold.patterns - Pattern Parsing, Matching and Specificity
=================================================================

Template files live in a tree that mirrors the project. Their *paths* are
patterns: any path component may embed bracket tokens that capture parts of
a concrete path.

Pattern Syntax
--------------
``[name]``
    Captures exactly one directory component, or a run of characters
    within a filename.

``[...name]``
    Captures zero or more directory components greedily. In the filename
    it absorbs any directory depth left over plus the filename stem.

Literal text outside brackets must match exactly, and the extension (from
the last ``.`` of the final component) is compared as a literal.

Examples
--------
>>> template = parse_template_path("src/components/[...path].vue")
>>> match_file("src/components/forms/Input.vue", template)
{'path': 'forms/Input'}
>>> match_file("src/views/Home.vue", template) is None
True

Known Limitations
-----------------
- There is no escape syntax for literal brackets. An unterminated ``[`` is
  kept as static text.
- Only one spread per directory pattern and one per filename pattern has
  defined behaviour. Additional spreads are parsed (and a warning logged)
  but the first spread consumes everything it can, so later ones capture
  an empty string.
- A spread in the filename checks the remaining static filename parts by
  substring containment rather than by position.
"""

from __future__ import annotations

import functools
import logging
import re
from dataclasses import dataclass, replace
from pathlib import Path
from typing import NamedTuple, assert_never


logger = logging.getLogger(__name__)

# [name] or [...name]; an unterminated bracket never matches
BRACKET_REGEX = re.compile(r"\[(?:\.\.\.)?([^\]]+)\]")

SEPARATOR = "/"


# =============================================================================
# Pattern Segments
# =============================================================================

@dataclass(frozen=True)
class Static:
    """Literal text that must match exactly."""

    text: str


@dataclass(frozen=True)
class Param:
    """Captures one directory component or one run of filename characters."""

    name: str


@dataclass(frozen=True)
class Spread:
    """Captures zero or more directory components, greedily."""

    name: str


PatternSegment = Static | Param | Spread

# One group of segments per directory component of a pattern
SegmentGroup = tuple[PatternSegment, ...]


# =============================================================================
# Parsed Template
# =============================================================================

@dataclass(frozen=True)
class ParsedTemplate:
    """
    A template file turned into a matchable pattern.

    Attributes
    ----------
    directory_segments : tuple[SegmentGroup, ...]
        One group per directory component of the pattern path. Most groups
        hold a single segment; a component such as ``v[version]`` yields a
        mixed group.

    filename_parts : SegmentGroup
        Segments of the final component's stem (extension excluded).

    extension : str
        Literal extension including the dot, e.g. ``".vue"``. May be empty.

    source_path : str
        Pattern path relative to its template root, ``/``-separated.

    content : str | None
        Inline template text, used when ``content_path`` is None.

    content_path : Path | None
        Template file on disk, re-read every time the template is applied so
        that edits are picked up without reloading.

    scope_prefix : str
        ``/``-separated path from the project root to the scope root that
        owns this template; empty for the project root itself.

    scope_depth : int
        Nesting level of the scope root (project root is 0).

    origin : str
        ``"user"`` or ``"preset:<name>"``, for display.
    """

    directory_segments: tuple[SegmentGroup, ...]
    filename_parts: SegmentGroup
    extension: str
    source_path: str
    content: str | None = None
    content_path: Path | None = None
    scope_prefix: str = ""
    scope_depth: int = 0
    origin: str = "user"

    def __post_init__(self) -> None:
        if self.scope_depth < 0:
            msg = f"scope_depth must be >= 0, got {self.scope_depth}"
            raise ValueError(msg)

    @property
    def key(self) -> tuple[str, str]:
        """Identity used for overriding: ``(scope_prefix, source_path)``."""
        return (self.scope_prefix, self.source_path)

    @property
    def display_path(self) -> str:
        """The pattern as seen from the project root."""
        if not self.scope_prefix:
            return self.source_path
        return f"{self.scope_prefix}{SEPARATOR}{self.source_path}"

    def all_segments(self) -> list[PatternSegment]:
        """Every segment of the pattern, directories first."""
        segments = [seg for group in self.directory_segments for seg in group]
        segments.extend(self.filename_parts)
        return segments

    def read_content(self) -> str:
        """
        Return the current template text.

        File-backed templates are read from disk on every call; newlines are
        preserved as stored so content is copied verbatim.

        Raises
        ------
        OSError
            If the template file cannot be read.
        """
        if self.content_path is None:
            return self.content or ""
        with self.content_path.open(encoding="utf-8", newline="") as f:
            return f.read()

    def with_scope(self, scope_prefix: str, scope_depth: int) -> ParsedTemplate:
        """Return a copy stamped with scope metadata."""
        return replace(self, scope_prefix=scope_prefix, scope_depth=scope_depth)


# =============================================================================
# Pattern Parser
# =============================================================================

def split_extension(name: str) -> tuple[str, str]:
    """
    Split a final path component into ``(stem, extension)``.

    The extension starts at the last ``.``, unless that dot is the first
    character (``.gitkeep``), the last character, or sits inside a bracket
    token (``[...path]``).

    >>> split_extension("[name].component.vue")
    ('[name].component', '.vue')
    >>> split_extension(".gitkeep")
    ('.gitkeep', '')
    """
    index = name.rfind(".")
    if index <= 0 or index == len(name) - 1 or index < name.rfind("]"):
        return name, ""
    return name[:index], name[index:]


def split_path(path: str) -> list[str]:
    """Split a relative path on either separator, dropping empty and ``.`` parts."""
    return [part for part in re.split(r"[\\/]", path) if part and part != "."]


def parse_segment(component: str) -> SegmentGroup:
    """
    Parse one path component into segments.

    >>> parse_segment("Base[name]")
    (Static(text='Base'), Param(name='name'))
    """
    parts: list[PatternSegment] = []
    last_index = 0

    for match in BRACKET_REGEX.finditer(component):
        if match.start() > last_index:
            parts.append(Static(component[last_index:match.start()]))

        if match.group(0).startswith("[..."):
            parts.append(Spread(match.group(1)))
        else:
            parts.append(Param(match.group(1)))

        last_index = match.end()

    if last_index < len(component):
        parts.append(Static(component[last_index:]))

    if not parts:
        parts.append(Static(component))

    return tuple(parts)


def parse_template_path(
    pattern_path: str,
    content: str | None = None,
    *,
    content_path: Path | None = None,
    origin: str = "user",
) -> ParsedTemplate:
    """
    Parse a template path into a ``ParsedTemplate``.

    Scope metadata is left at the project root; callers that load templates
    from nested roots stamp it afterwards (see ``ParsedTemplate.with_scope``).

    Parameters
    ----------
    pattern_path : str
        Path of the template file relative to its template root.

    content : str | None
        Inline template text.

    content_path : Path | None
        Template file to read content from at apply time.

    origin : str
        Label describing where the template came from.

    Returns
    -------
    ParsedTemplate
        The structured pattern.

    Examples
    --------
    >>> t = parse_template_path("src/components/[...path].vue", "<template/>")
    >>> t.directory_segments
    ((Static(text='src'),), (Static(text='components'),))
    >>> t.filename_parts
    (Spread(name='path'),)
    """
    components = split_path(pattern_path)
    if not components:
        msg = f"Empty template path: {pattern_path!r}"
        raise ValueError(msg)

    *directories, filename = components
    stem, extension = split_extension(filename)

    template = ParsedTemplate(
        directory_segments=tuple(parse_segment(d) for d in directories),
        filename_parts=parse_segment(stem),
        extension=extension,
        source_path=SEPARATOR.join(components),
        content=content,
        content_path=content_path,
        origin=origin,
    )

    directory_spreads = sum(
        1 for group in template.directory_segments for seg in group if isinstance(seg, Spread)
    )
    filename_spreads = sum(1 for seg in template.filename_parts if isinstance(seg, Spread))
    if directory_spreads > 1 or filename_spreads > 1:
        logger.warning(
            "Template %r uses more than one spread; only the first is meaningful",
            template.source_path,
        )

    return template


# =============================================================================
# Path Matcher
# =============================================================================

@functools.lru_cache(maxsize=512)
def _compile_parts(parts: SegmentGroup) -> tuple[re.Pattern[str], tuple[str, ...]]:
    """Compile filename parts into an anchored regex and its capture names."""
    regex = ""
    names: list[str] = []

    for part in parts:
        if isinstance(part, Static):
            regex += re.escape(part.text)
        elif isinstance(part, Param | Spread):
            # Only reached for Spread inside a mixed directory group, where
            # it behaves like a param
            regex += "(.+)"
            names.append(part.name)
        else:
            assert_never(part)

    return re.compile(regex), tuple(names)


def match_parts(text: str, parts: SegmentGroup) -> dict[str, str] | None:
    """
    Strictly match ``text`` against a group of segments.

    Statics must appear at their position; each param captures a maximal
    non-empty run of characters up to the next static boundary.

    >>> match_parts("Button.component", parse_segment("[name].component"))
    {'name': 'Button'}
    >>> match_parts("Button", parse_segment("[name].component")) is None
    True
    """
    regex, names = _compile_parts(parts)
    match = regex.fullmatch(text)
    if match is None:
        return None
    return dict(zip(names, match.groups(), strict=True))


def _is_single(group: SegmentGroup, kind: type) -> bool:
    return len(group) == 1 and isinstance(group[0], kind)


def match_file(file_path: str, template: ParsedTemplate) -> dict[str, str] | None:
    """
    Match a concrete path against a template's own segments.

    ``file_path`` is relative to the template's scope root; scope
    containment is handled by ``strip_scope`` / ``resolve_best``.

    Parameters
    ----------
    file_path : str
        Concrete path, e.g. ``"src/components/forms/Input.vue"``.

    template : ParsedTemplate
        Parsed pattern.

    Returns
    -------
    dict[str, str] | None
        Captured values by name, or None when the path does not match.
        Filename captures overwrite directory captures of the same name.

    Examples
    --------
    >>> match_file("Button.vue", parse_template_path("[name].vue"))
    {'name': 'Button'}
    >>> match_file("nested/Button.vue", parse_template_path("[name].vue")) is None
    True
    """
    components = split_path(file_path)
    if not components:
        return None

    *path_segments, filename = components
    stem, extension = split_extension(filename)

    if extension != template.extension:
        return None

    captures: dict[str, str] = {}
    groups = template.directory_segments
    path_index = 0

    for pattern_index, group in enumerate(groups):
        if _is_single(group, Spread):
            remaining = groups[pattern_index + 1:]
            reserved = sum(
                1 for g in remaining if not (_is_single(g, Param) or _is_single(g, Spread))
            )
            end = max(path_index, len(path_segments) - reserved)
            captures[group[0].name] = SEPARATOR.join(path_segments[path_index:end])
            path_index = end
            continue

        if path_index >= len(path_segments):
            return None

        component = path_segments[path_index]
        head = group[0]

        if len(group) == 1 and isinstance(head, Static):
            if component != head.text:
                return None
        elif len(group) == 1 and isinstance(head, Param):
            captures[head.name] = component
        else:
            group_captures = match_parts(component, group)
            if group_captures is None:
                return None
            captures.update(group_captures)

        path_index += 1

    filename_spread = next(
        (part for part in template.filename_parts if isinstance(part, Spread)), None
    )

    if filename_spread is not None:
        for part in template.filename_parts:
            if isinstance(part, Static) and part.text not in stem:
                return None
        captures[filename_spread.name] = SEPARATOR.join([*path_segments[path_index:], stem])
        return captures

    if path_index != len(path_segments):
        return None

    filename_captures = match_parts(stem, template.filename_parts)
    if filename_captures is None:
        return None

    return {**captures, **filename_captures}


def strip_scope(file_path: str, scope_prefix: str) -> str | None:
    """
    Return ``file_path`` relative to ``scope_prefix``, or None if outside it.

    >>> strip_scope("src/modules/admin/components/Button.vue", "src/modules/admin")
    'components/Button.vue'
    >>> strip_scope("src/components/Header.vue", "src/modules/admin") is None
    True
    """
    path = SEPARATOR.join(split_path(file_path))
    prefix = SEPARATOR.join(split_path(scope_prefix))
    if not prefix:
        return path
    if path.startswith(prefix + SEPARATOR):
        return path[len(prefix) + 1:]
    return None


def match_in_scope(file_path: str, template: ParsedTemplate) -> dict[str, str] | None:
    """Match a project-relative path, excluding templates whose scope does not cover it."""
    scoped = strip_scope(file_path, template.scope_prefix)
    if scoped is None:
        return None
    return match_file(scoped, template)


# =============================================================================
# Specificity Resolver
# =============================================================================

class Specificity(NamedTuple):
    """
    Ranking key for a template; tuples compare most significant first.

    A fully static pattern beats any pattern with variables; then more
    static filename parts, more static directory parts, fewer spreads and
    fewer params win. Scope depth only breaks ties that survive all of
    those.
    """

    is_fully_static: int
    static_filename_parts: int
    static_directory_parts: int
    negative_spreads: int
    negative_params: int
    scope_depth: int


def specificity(template: ParsedTemplate) -> Specificity:
    """Compute the ranking key of a template."""
    static_filename = 0
    static_directory = 0
    spreads = 0
    params = 0

    for group in template.directory_segments:
        for seg in group:
            if isinstance(seg, Static):
                static_directory += 1
            elif isinstance(seg, Param):
                params += 1
            elif isinstance(seg, Spread):
                spreads += 1
            else:
                assert_never(seg)

    for seg in template.filename_parts:
        if isinstance(seg, Static):
            static_filename += 1
        elif isinstance(seg, Param):
            params += 1
        elif isinstance(seg, Spread):
            spreads += 1
        else:
            assert_never(seg)

    return Specificity(
        is_fully_static=int(spreads == 0 and params == 0),
        static_filename_parts=static_filename,
        static_directory_parts=static_directory,
        negative_spreads=-spreads,
        negative_params=-params,
        scope_depth=template.scope_depth,
    )


class Candidate(NamedTuple):
    """A template that matched a file, with its captures and rank."""

    template: ParsedTemplate
    captures: dict[str, str]
    specificity: Specificity


def rank_candidates(file_path: str, templates: list[ParsedTemplate]) -> list[Candidate]:
    """
    Return every template matching ``file_path``, best first.

    The sort is stable, so candidates with identical specificity keep their
    input order.
    """
    candidates = []
    for template in templates:
        captures = match_in_scope(file_path, template)
        if captures is not None:
            candidates.append(Candidate(template, captures, specificity(template)))

    candidates.sort(key=lambda c: c.specificity, reverse=True)
    return candidates


def resolve_best(file_path: str, templates: list[ParsedTemplate]) -> ParsedTemplate | None:
    """
    Pick the single template that applies to ``file_path``.

    Parameters
    ----------
    file_path : str
        Path relative to the project root.

    templates : list[ParsedTemplate]
        Candidate templates, in registry order.

    Returns
    -------
    ParsedTemplate | None
        The most specific matching template. On an exact specificity tie
        the one appearing first in ``templates`` wins.
    """
    best: ParsedTemplate | None = None
    best_key: Specificity | None = None

    for template in templates:
        if match_in_scope(file_path, template) is None:
            continue
        key = specificity(template)
        if best_key is None or key > best_key:
            best, best_key = template, key

    return best


# =============================================================================
# Watch Directory Inference
# =============================================================================

def get_static_prefix(template: ParsedTemplate) -> str:
    """
    Leading directories of a template that contain no dynamic segments.

    >>> get_static_prefix(parse_template_path("src/components/[...path].vue"))
    'src/components'
    >>> get_static_prefix(parse_template_path("[...path].vue"))
    ''
    """
    parts: list[str] = []
    for group in template.directory_segments:
        head = group[0] if len(group) == 1 else None
        if not isinstance(head, Static):
            break
        parts.append(head.text)
    return SEPARATOR.join(parts)


def _join(*parts: str) -> str:
    return SEPARATOR.join(p for p in parts if p)


def infer_watch_dirs(templates: list[ParsedTemplate]) -> list[str]:
    """
    Directories (relative to the project root) that need observing.

    Each template contributes its scope prefix joined with its static
    prefix. Duplicates are removed and directories nested inside another
    watched directory are dropped, since watches are recursive. An empty
    string stands for the project root.

    >>> infer_watch_dirs([
    ...     parse_template_path("src/components/[...path].vue"),
    ...     parse_template_path("src/views/[name].vue"),
    ...     parse_template_path("src/components/[name].ts"),
    ... ])
    ['src/components', 'src/views']
    """
    seen: list[str] = []
    for template in templates:
        directory = _join(template.scope_prefix, get_static_prefix(template))
        if directory not in seen:
            seen.append(directory)

    def covered(directory: str) -> bool:
        return any(
            other != directory and (other == "" or directory.startswith(other + SEPARATOR))
            for other in seen
        )

    return [d for d in seen if not covered(d)]
