"""Tests for autoscaffold.store: merge_templates and TemplateRegistry."""

from autoscaffold.patterns import parse_template_path
from autoscaffold.store import TemplateRegistry, merge_templates


class TestMergeTemplates:
    """Tests for merge_templates."""

    def test_override_wins_on_same_key(self) -> None:
        base = [parse_template_path("src/components/[...path].vue", "preset content")]
        override = [parse_template_path("src/components/[...path].vue", "user content")]

        merged = merge_templates(base, override)

        assert len(merged) == 1
        assert merged[0].content == "user content"

    def test_disjoint_sets_are_summed(self) -> None:
        base = [
            parse_template_path("src/a/[name].ts", "a"),
            parse_template_path("src/b/[name].ts", "b"),
        ]
        override = [parse_template_path("src/c/[name].ts", "c")]

        merged = merge_templates(base, override)

        assert [t.content for t in merged] == ["a", "b", "c"]

    def test_keys_in_one_input_are_preserved(self) -> None:
        base = [
            parse_template_path("a/[name].ts", "X").with_scope("scope", 1),
            parse_template_path("keep/[name].ts", "K").with_scope("scope", 1),
        ]
        override = [parse_template_path("a/[name].ts", "Y").with_scope("scope", 1)]

        merged = merge_templates(base, override)

        assert {t.key: t.content for t in merged} == {
            ("scope", "a/[name].ts"): "Y",
            ("scope", "keep/[name].ts"): "K",
        }

    def test_same_path_in_different_scopes_does_not_collide(self) -> None:
        root = parse_template_path("[name].ts", "root")
        nested = parse_template_path("[name].ts", "nested").with_scope("pkg", 1)

        assert len(merge_templates([root], [nested])) == 2

    def test_replacement_keeps_position(self) -> None:
        base = [
            parse_template_path("first/[name].ts", "1"),
            parse_template_path("second/[name].ts", "2"),
        ]
        override = [parse_template_path("first/[name].ts", "1b")]

        merged = merge_templates(base, override)

        assert [t.content for t in merged] == ["1b", "2"]


class TestTemplateRegistry:
    """Tests for TemplateRegistry."""

    def test_snapshot_is_a_copy(self) -> None:
        registry = TemplateRegistry([parse_template_path("[name].ts", "x")])

        snapshot = registry.snapshot()
        snapshot.clear()

        assert len(registry) == 1

    def test_insert_or_replace(self) -> None:
        registry = TemplateRegistry([parse_template_path("[name].ts", "old")])

        registry.insert_or_replace(parse_template_path("[name].ts", "new"))
        registry.insert_or_replace(parse_template_path("[name].vue", "vue"))

        assert [t.content for t in registry.snapshot()] == ["new", "vue"]

    def test_remove(self) -> None:
        template = parse_template_path("[name].ts", "x")
        registry = TemplateRegistry([template])

        assert registry.remove(template.key) is template
        assert registry.remove(template.key) is None
        assert registry.snapshot() == []
