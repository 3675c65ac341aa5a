"""
Tests for autoscaffold.cli
==========================

Uses Typer's CliRunner. The Rich consoles are widened so table cells and
log lines are not wrapped in the captured output.

Test Organization
-----------------
- TestCLIBasics: --version, --help and presets
- TestListCommand: Template listing
- TestMatchCommand: Candidate ranking output
- TestInitCommand: Template folder and pyproject.toml creation
- TestWatchCommand: Session start-up paths
"""

from pathlib import Path
from unittest.mock import MagicMock

import pytest
from typer.testing import CliRunner

from autoscaffold import __version__, cli, session


runner = CliRunner()


@pytest.fixture(autouse=True)
def wide_console(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(cli.console, "width", 200)
    monkeypatch.setattr(session.console, "width", 200)


# =============================================================================
# Basics
# =============================================================================

class TestCLIBasics:
    """Tests for top-level options and the presets command."""

    def test_version(self) -> None:
        result = runner.invoke(cli.app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help(self) -> None:
        result = runner.invoke(cli.app, ["--help"])
        assert result.exit_code == 0
        for command in ["watch", "list", "match", "init", "presets"]:
            assert command in result.output

    def test_presets(self) -> None:
        result = runner.invoke(cli.app, ["presets"])
        assert result.exit_code == 0
        for name in ["vue", "vue-router", "pinia", "pinia-colada"]:
            assert name in result.output
        assert "src/stores/[name].ts" in result.output


# =============================================================================
# list
# =============================================================================

class TestListCommand:
    """Tests for the list command."""

    def test_lists_user_templates(self, project: Path) -> None:
        result = runner.invoke(cli.app, ["list", str(project)])

        assert result.exit_code == 0
        assert "src/components/[...path].vue" in result.output
        assert "user" in result.output

    def test_lists_presets(self, project: Path) -> None:
        result = runner.invoke(cli.app, ["list", str(project), "--preset", "pinia"])

        assert result.exit_code == 0
        assert "preset:pinia" in result.output

    def test_no_templates(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["list", str(tmp_path)])

        assert result.exit_code == 0
        assert "No templates found." in result.output

    def test_not_a_directory(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["list", str(tmp_path / "missing")])

        assert result.exit_code == 1
        assert "Not a directory" in result.output

    def test_invalid_config(self, tmp_path: Path) -> None:
        (tmp_path / "pyproject.toml").write_text("[tool.autoscaffold\n", encoding="utf-8")

        result = runner.invoke(cli.app, ["list", str(tmp_path)])

        assert result.exit_code == 1
        assert "Error:" in result.output


# =============================================================================
# match
# =============================================================================

class TestMatchCommand:
    """Tests for the match command."""

    def test_reports_winner(self, project: Path, write) -> None:
        write(project, ".scaffold/src/components/[name].vue", "specific")

        result = runner.invoke(
            cli.app, ["match", "src/components/Button.vue", "--root", str(project)]
        )

        assert result.exit_code == 0
        lines = [line for line in result.output.splitlines() if "src/components/[" in line]
        assert "✓" in lines[0] and "[name].vue" in lines[0]
        assert "[...path].vue" in lines[1]
        assert "name=Button" in result.output

    def test_no_match_exits_1(self, project: Path) -> None:
        result = runner.invoke(cli.app, ["match", "src/stores/user.ts", "--root", str(project)])

        assert result.exit_code == 1
        assert "No template matches" in result.output


# =============================================================================
# init
# =============================================================================

class TestInitCommand:
    """Tests for the init command."""

    def test_creates_folder_and_config(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["init", str(tmp_path), "--preset", "vue"])

        assert result.exit_code == 0
        assert (tmp_path / ".scaffold").is_dir()
        text = (tmp_path / "pyproject.toml").read_text(encoding="utf-8")
        assert "[tool.autoscaffold]" in text
        assert '"vue"' in text
        assert "Created .scaffold/" in result.output

    def test_custom_folder_name(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["init", str(tmp_path), "-s", "templates"])

        assert result.exit_code == 0
        assert (tmp_path / "templates").is_dir()

    def test_rerun_is_safe(self, tmp_path: Path) -> None:
        runner.invoke(cli.app, ["init", str(tmp_path)])
        result = runner.invoke(cli.app, ["init", str(tmp_path)])

        assert result.exit_code == 0


# =============================================================================
# watch
# =============================================================================

class TestWatchCommand:
    """Tests for the watch command."""

    def test_disabled(self, project: Path) -> None:
        (project / "pyproject.toml").write_text(
            "[tool.autoscaffold]\nenabled = false\n", encoding="utf-8"
        )

        result = runner.invoke(cli.app, ["watch", str(project)])

        assert result.exit_code == 0
        assert "Scaffolding is disabled" in result.output

    def test_no_templates(self, tmp_path: Path) -> None:
        result = runner.invoke(cli.app, ["watch", str(tmp_path)])

        assert result.exit_code == 0
        assert "No templates found" in result.output

    def test_watches_until_interrupted(
        self,
        project: Path,
        fake_observer: MagicMock,
        monkeypatch: pytest.MonkeyPatch,
    ) -> None:
        class FakeSession(session.ScaffoldSession):
            def __init__(self, project_root, options=None, log=None):
                super().__init__(project_root, options, log, observer_factory=lambda: fake_observer)

        fake_time = MagicMock()
        fake_time.sleep.side_effect = KeyboardInterrupt
        monkeypatch.setattr(cli, "ScaffoldSession", FakeSession)
        monkeypatch.setattr(cli, "time", fake_time)

        result = runner.invoke(cli.app, ["watch", str(project)])

        assert result.exit_code == 0
        assert "Watching src/components" in result.output
        fake_observer.stop.assert_called_once()
