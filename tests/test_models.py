"""
Tests for autoscaffold.models
=============================

Test Organization
-----------------
- TestPresetNames: Preset enumeration and name normalisation
- TestScaffoldOptions: Defaults and field validation
- TestLoadOptions: Reading [tool.autoscaffold] from pyproject.toml
- TestWriteToolConfig: Writing [tool.autoscaffold] back
"""

import tomllib
from pathlib import Path

import pytest
from pydantic import ValidationError

from autoscaffold.errors import ConfigError
from autoscaffold.models import (
    PresetName,
    ScaffoldOptions,
    load_options,
    normalize_preset_list,
    write_tool_config,
)


# =============================================================================
# Presets
# =============================================================================

class TestPresetNames:
    """Tests for PresetName and normalize_preset_list."""

    def test_values(self) -> None:
        assert [p.value for p in PresetName] == ["vue", "vue-router", "pinia", "pinia-colada"]

    def test_descriptions(self) -> None:
        for preset in PresetName:
            assert preset.description

    @pytest.mark.parametrize(
        ("raw", "expected"),
        [
            ("vue", [PresetName.VUE]),
            ("Vue_Router", [PresetName.VUE_ROUTER]),
            ("  pinia colada ", [PresetName.PINIA_COLADA]),
            (["pinia", "PINIA"], [PresetName.PINIA]),
            (None, []),
            ([], []),
        ],
    )
    def test_normalisation(self, raw, expected) -> None:
        assert normalize_preset_list(raw) == expected

    def test_unknown_names_are_dropped(self, caplog: pytest.LogCaptureFixture) -> None:
        assert normalize_preset_list(["react", "vue"]) == [PresetName.VUE]
        assert "react" in caplog.text


# =============================================================================
# Options
# =============================================================================

class TestScaffoldOptions:
    """Tests for ScaffoldOptions."""

    def test_defaults(self) -> None:
        options = ScaffoldOptions()
        assert options.root_folder_name == ".scaffold"
        assert options.enabled is True
        assert options.presets == []

    def test_single_preset_string(self) -> None:
        assert ScaffoldOptions(presets="pinia").presets == [PresetName.PINIA]

    def test_order_is_kept(self) -> None:
        options = ScaffoldOptions(presets=["pinia", "vue"])
        assert options.presets == [PresetName.PINIA, PresetName.VUE]

    def test_custom_root_folder_name(self) -> None:
        assert ScaffoldOptions(root_folder_name="templates").root_folder_name == "templates"

    @pytest.mark.parametrize("name", ["", "  ", "a/b", "a\\b", ".", ".."])
    def test_invalid_root_folder_name(self, name: str) -> None:
        with pytest.raises(ValidationError):
            ScaffoldOptions(root_folder_name=name)


# =============================================================================
# pyproject.toml
# =============================================================================

class TestLoadOptions:
    """Tests for load_options."""

    def test_missing_pyproject_gives_defaults(self, tmp_path: Path) -> None:
        assert load_options(tmp_path) == ScaffoldOptions()

    def test_reads_kebab_case_keys(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.autoscaffold]\n'
            'root-folder-name = "templates"\n'
            'enabled = false\n'
            'presets = ["vue", "pinia"]\n',
            encoding="utf-8",
        )

        options = load_options(tmp_path)

        assert options.root_folder_name == "templates"
        assert options.enabled is False
        assert options.presets == [PresetName.VUE, PresetName.PINIA]

    def test_scaffold_dir_alias(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.autoscaffold]\nscaffold-dir = "blueprints"\n', encoding="utf-8"
        )
        assert load_options(tmp_path).root_folder_name == "blueprints"

    def test_other_tools_are_ignored(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[project]\nname = "x"\n\n[tool.ruff]\nline-length = 100\n', encoding="utf-8"
        )
        assert load_options(tmp_path) == ScaffoldOptions()

    def test_overrides_win_and_none_falls_through(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.autoscaffold]\nroot-folder-name = "templates"\npresets = ["vue"]\n',
            encoding="utf-8",
        )

        options = load_options(tmp_path, root_folder_name=None, presets=["pinia"])

        assert options.root_folder_name == "templates"
        assert options.presets == [PresetName.PINIA]

    def test_invalid_toml(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.autoscaffold\n", encoding="utf-8")
        with pytest.raises(ConfigError, match="Invalid"):
            load_options(tmp_path)

    def test_table_must_be_a_table(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool]\nautoscaffold = "yes"\n', encoding="utf-8"
        )
        with pytest.raises(ConfigError, match="must be a table"):
            load_options(tmp_path)

    def test_invalid_value(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text(
            '[tool.autoscaffold]\nroot-folder-name = "a/b"\n', encoding="utf-8"
        )
        with pytest.raises(ConfigError, match="Invalid autoscaffold configuration"):
            load_options(tmp_path)


class TestWriteToolConfig:
    """Tests for write_tool_config."""

    def test_creates_pyproject(self, tmp_path: Path) -> None:
        options = ScaffoldOptions(presets=["vue"])

        path = write_tool_config(tmp_path, options)

        assert path == tmp_path / "pyproject.toml"
        assert load_options(tmp_path) == options

    def test_preserves_existing_content(self, tmp_path: Path) -> None:
        pyproject = tmp_path / "pyproject.toml"
        pyproject.write_text(
            '# project settings\n[project]\nname = "web"\n\n[tool.ruff]\nline-length = 100\n',
            encoding="utf-8",
        )

        write_tool_config(tmp_path, ScaffoldOptions(root_folder_name="templates"))

        text = pyproject.read_text(encoding="utf-8")
        assert "# project settings" in text
        data = tomllib.loads(text)
        assert data["project"]["name"] == "web"
        assert data["tool"]["ruff"]["line-length"] == 100
        assert data["tool"]["autoscaffold"]["root-folder-name"] == "templates"

    def test_replaces_previous_table(self, tmp_path: Path) -> None:
        write_tool_config(tmp_path, ScaffoldOptions(presets=["vue"]))
        write_tool_config(tmp_path, ScaffoldOptions(presets=["pinia"], enabled=False))

        options = load_options(tmp_path)

        assert options.presets == [PresetName.PINIA]
        assert options.enabled is False
