"""
autoscaffold.models - Pydantic Models for Scaffold Configuration
================================================================

This module defines the configuration surface of autoscaffold. Pydantic gives
us validation with clear error messages and normalisation of loosely typed
input (a single preset string, mixed-case names) in one place.

Configuration can be:

- Built programmatically via ``ScaffoldOptions(...)``
- Loaded from a project's ``pyproject.toml`` (``[tool.autoscaffold]``)
- Overridden from the command line

Example ``pyproject.toml`` table::

    [tool.autoscaffold]
    root-folder-name = ".scaffold"
    enabled = true
    presets = ["vue", "pinia"]

Usage Example
-------------
>>> from autoscaffold.models import ScaffoldOptions
>>> options = ScaffoldOptions(presets="Vue_Router")
>>> options.presets
[<PresetName.VUE_ROUTER: 'vue-router'>]
"""

from __future__ import annotations

import logging
import re
import tomllib
from enum import Enum
from pathlib import Path
from typing import Any

import tomlkit
from pydantic import BaseModel, Field, ValidationError, field_validator

from autoscaffold.errors import ConfigError


logger = logging.getLogger(__name__)

# Default name of the template root folder
DEFAULT_ROOT_FOLDER_NAME = ".scaffold"

# Keys accepted in [tool.autoscaffold] besides the field names themselves
_KEY_ALIASES = {
    "scaffold_dir": "root_folder_name",
}


# =============================================================================
# Enumerations
# =============================================================================

class PresetName(str, Enum):
    """
    Built-in template collections usable without authoring a local tree.

    Each preset is a small template tree shipped inside the package under
    ``autoscaffold/presets/<value>/``.

    Examples
    --------
    >>> PresetName.PINIA.value
    'pinia'
    >>> PresetName.VUE.description
    'Vue single-file components under src/components'
    """

    VUE = "vue"
    VUE_ROUTER = "vue-router"
    PINIA = "pinia"
    PINIA_COLADA = "pinia-colada"

    @property
    def description(self) -> str:
        """Human-readable description for listings."""
        descriptions = {
            PresetName.VUE: "Vue single-file components under src/components",
            PresetName.VUE_ROUTER: "Route page components under src/pages",
            PresetName.PINIA: "Pinia stores under src/stores",
            PresetName.PINIA_COLADA: "Pinia Colada queries under src/queries",
        }
        return descriptions[self]


def normalize_preset_list(value: str | list[str] | tuple[str, ...] | None) -> list[PresetName]:
    """
    Normalise user-supplied preset names.

    Accepts a single name or a sequence. Names are trimmed, lowercased and
    runs of underscores/whitespace become ``-``, so ``"Pinia_Colada"`` and
    ``"pinia colada"`` both resolve to ``pinia-colada``. Unknown names are
    dropped with a warning; duplicates keep their first position.

    Parameters
    ----------
    value : str | list[str] | tuple[str, ...] | None
        Raw preset value from configuration or the command line.

    Returns
    -------
    list[PresetName]
        Known presets in the order given.
    """
    if not value:
        return []

    raw = [value] if isinstance(value, str) else list(value)
    presets: list[PresetName] = []

    for item in raw:
        if isinstance(item, PresetName):
            name = item.value
        else:
            name = re.sub(r"[_\s]+", "-", str(item).strip().lower())

        try:
            preset = PresetName(name)
        except ValueError:
            logger.warning("Ignoring unknown preset %r", item)
            continue

        if preset not in presets:
            presets.append(preset)

    return presets


# =============================================================================
# Main Configuration Model
# =============================================================================

class ScaffoldOptions(BaseModel):
    """
    Resolved options for a scaffolding session.

    Attributes
    ----------
    root_folder_name : str
        Name of the template root folder. Any number of folders with this
        name may exist in the project tree; each governs its own subtree.

    enabled : bool
        When False, a session starts nothing.

    presets : list[PresetName]
        Built-in collections to load, in order. Later presets override
        earlier ones; user templates override all presets.

    Examples
    --------
    >>> ScaffoldOptions().root_folder_name
    '.scaffold'
    >>> ScaffoldOptions(presets=["vue", "bogus"]).presets
    [<PresetName.VUE: 'vue'>]
    """

    root_folder_name: str = Field(
        default=DEFAULT_ROOT_FOLDER_NAME,
        description="Name of the template root folder",
        min_length=1,
    )
    enabled: bool = Field(
        default=True,
        description="Enable or disable scaffolding",
    )
    presets: list[PresetName] = Field(
        default_factory=list,
        description="Built-in template collections, later ones win",
    )

    @field_validator("root_folder_name")
    @classmethod
    def validate_root_folder_name(cls, v: str) -> str:
        """
        Ensure the root folder name is a single path component.

        Discovery compares directory *names*, so a value containing a
        separator could never match anything.
        """
        v = v.strip()
        if not v or "/" in v or "\\" in v or v in {".", ".."}:
            msg = f"Invalid root folder name: {v!r} (must be a single directory name)"
            raise ValueError(msg)
        return v

    @field_validator("presets", mode="before")
    @classmethod
    def validate_presets(cls, v: Any) -> list[PresetName]:
        """Accept a single string and normalise names (see ``normalize_preset_list``)."""
        return normalize_preset_list(v)


# =============================================================================
# pyproject.toml Integration
# =============================================================================

def _normalize_keys(table: dict[str, Any]) -> dict[str, Any]:
    """Map ``kebab-case`` and aliased keys onto model field names."""
    normalized: dict[str, Any] = {}
    for key, value in table.items():
        name = key.replace("-", "_")
        normalized[_KEY_ALIASES.get(name, name)] = value
    return normalized


def load_options(project_root: Path, **overrides: Any) -> ScaffoldOptions:
    """
    Load scaffold options from a project's pyproject.toml.

    Reads the ``[tool.autoscaffold]`` table if present, then applies any
    keyword overrides whose value is not None (so unset CLI flags fall
    through to the file, and the file falls through to the defaults).

    Parameters
    ----------
    project_root : Path
        Directory that may contain a pyproject.toml.

    **overrides : Any
        Field values taking precedence over the file.

    Returns
    -------
    ScaffoldOptions
        Validated options.

    Raises
    ------
    ConfigError
        If pyproject.toml is not valid TOML or the table fails validation.
    """
    table: dict[str, Any] = {}
    pyproject_path = project_root / "pyproject.toml"

    if pyproject_path.is_file():
        try:
            with pyproject_path.open("rb") as f:
                data = tomllib.load(f)
        except tomllib.TOMLDecodeError as e:
            raise ConfigError(f"Invalid {pyproject_path}: {e}") from e

        raw = data.get("tool", {}).get("autoscaffold", {})
        if not isinstance(raw, dict):
            raise ConfigError(f"[tool.autoscaffold] in {pyproject_path} must be a table")
        table = _normalize_keys(raw)

    table.update({k: v for k, v in overrides.items() if v is not None})

    try:
        return ScaffoldOptions(**table)
    except ValidationError as e:
        raise ConfigError(f"Invalid autoscaffold configuration: {e}") from e


def write_tool_config(project_root: Path, options: ScaffoldOptions) -> Path:
    """
    Write ``[tool.autoscaffold]`` into pyproject.toml.

    Uses tomlkit so comments and formatting elsewhere in the document are
    preserved. A minimal pyproject.toml is created if none exists.

    Parameters
    ----------
    project_root : Path
        Project directory.

    options : ScaffoldOptions
        Options to persist.

    Returns
    -------
    Path
        Path of the written pyproject.toml.
    """
    pyproject_path = project_root / "pyproject.toml"

    if pyproject_path.exists():
        with pyproject_path.open(encoding="utf-8") as f:
            doc = tomlkit.load(f)
    else:
        doc = tomlkit.document()

    if "tool" not in doc:
        doc["tool"] = tomlkit.table(is_super_table=True)

    section = tomlkit.table()
    section.add("root-folder-name", options.root_folder_name)
    section.add("enabled", options.enabled)
    section.add("presets", [p.value for p in options.presets])
    doc["tool"]["autoscaffold"] = section  # type: ignore[index]

    with pyproject_path.open("w", encoding="utf-8") as f:
        f.write(tomlkit.dumps(doc))

    return pyproject_path
