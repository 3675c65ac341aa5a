"""
autoscaffold.presets - Built-in Template Collections
====================================================

This package holds named template trees that can be used without authoring
a local template folder. Each preset is a directory laid out exactly like a
user's ``.scaffold`` folder, mirroring the project structure it targets.

Available Presets
-----------------
vue:
    - src/components/[...path].vue
vue-router:
    - src/pages/[...path].vue
pinia:
    - src/stores/[name].ts
pinia-colada:
    - src/queries/[name].ts

Precedence
----------
Presets are stacked left to right, so a later preset replaces an earlier one
that defines the same pattern path. User templates override every preset.

Usage
-----
>>> from autoscaffold.presets import load_presets
>>> [t.source_path for t in load_presets(["vue", "pinia"])]
['src/components/[...path].vue', 'src/stores/[name].ts']
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from pathlib import Path

from autoscaffold.models import PresetName, normalize_preset_list
from autoscaffold.patterns import ParsedTemplate
from autoscaffold.scopes import load_templates_from_dir
from autoscaffold.store import merge_templates


logger = logging.getLogger(__name__)

# Preset template trees sit next to this module
PRESET_ROOT = Path(__file__).parent


def preset_directory(name: PresetName | str) -> Path | None:
    """Directory holding a preset's templates, or None for unknown presets."""
    try:
        preset = PresetName(name)
    except ValueError:
        return None

    directory = PRESET_ROOT / preset.value
    return directory if directory.is_dir() else None


def load_preset(name: PresetName | str) -> list[ParsedTemplate]:
    """
    Load the templates of one preset.

    Preset templates apply at the project root (empty scope, depth 0).

    Parameters
    ----------
    name : PresetName | str
        Preset to load.

    Returns
    -------
    list[ParsedTemplate]
        The preset's templates, or an empty list for an unknown name.
    """
    directory = preset_directory(name)
    if directory is None:
        logger.warning("Unknown preset %r", name)
        return []

    preset = PresetName(name)
    return load_templates_from_dir(directory, origin=f"preset:{preset.value}")


def load_presets(names: Iterable[PresetName | str]) -> list[ParsedTemplate]:
    """Load several presets, later presets overriding earlier ones."""
    templates: list[ParsedTemplate] = []
    for preset in normalize_preset_list(list(names)):
        templates = merge_templates(templates, load_preset(preset))
    return templates
