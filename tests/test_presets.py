"""Tests for autoscaffold.presets."""

import pytest

from autoscaffold.models import PresetName
from autoscaffold.presets import load_preset, load_presets, preset_directory


class TestLoadPreset:
    """Tests for load_preset."""

    @pytest.mark.parametrize(
        ("name", "path"),
        [
            ("vue", "src/components/[...path].vue"),
            ("vue-router", "src/pages/[...path].vue"),
            ("pinia", "src/stores/[name].ts"),
            ("pinia-colada", "src/queries/[name].ts"),
        ],
    )
    def test_preset_templates(self, name: str, path: str) -> None:
        templates = load_preset(name)

        assert [t.source_path for t in templates] == [path]
        assert templates[0].origin == f"preset:{name}"
        assert templates[0].scope_prefix == ""
        assert templates[0].read_content().strip()

    def test_unknown_preset(self) -> None:
        assert load_preset("nonexistent") == []
        assert preset_directory("nonexistent") is None

    def test_every_preset_has_a_directory(self) -> None:
        for name in PresetName:
            assert preset_directory(name) is not None


class TestLoadPresets:
    """Tests for load_presets."""

    def test_merges_multiple(self) -> None:
        templates = load_presets(["vue", "pinia"])

        assert [t.source_path for t in templates] == [
            "src/components/[...path].vue",
            "src/stores/[name].ts",
        ]

    def test_three_disjoint_presets(self) -> None:
        assert len(load_presets(["vue", "vue-router", "pinia"])) == 3

    def test_names_are_normalised(self) -> None:
        templates = load_presets(["Pinia_Colada", "bogus"])

        assert [t.origin for t in templates] == ["preset:pinia-colada"]

    def test_empty(self) -> None:
        assert load_presets([]) == []
