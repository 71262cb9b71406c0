"""Tests for the jaskmoney command line."""

import json

import yaml
from typer.testing import CliRunner

from jaskmoney import __version__
from jaskmoney.main import app

runner = CliRunner()


class TestCLIBasics:
    """Test top-level commands."""

    def test_help(self):
        result = runner.invoke(app, ["--help"])
        assert result.exit_code == 0
        assert "keybindings" in result.stdout

    def test_version(self):
        result = runner.invoke(app, ["version"])
        assert result.exit_code == 0
        assert f"jaskmoney version {__version__}" in result.stdout

    def test_verbose_and_quiet_conflict(self):
        result = runner.invoke(app, ["--verbose", "--quiet", "version"])
        assert result.exit_code == 1


class TestKeybindingsCommand:
    """Test `jaskmoney keybindings`."""

    def test_summary(self, config_path):
        result = runner.invoke(app, ["keybindings"])
        assert result.exit_code == 0
        assert "Keybinding Registry Summary" in result.stdout
        assert config_path.exists()

    def test_json(self, config_path):
        result = runner.invoke(app, ["keybindings", "--json"])
        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["summary"]["total_bindings"] > 0
        assert "transactions" in data["bindings"]

    def test_json_reflects_user_file(self, config_path):
        config_path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [x]\n")
        data = json.loads(runner.invoke(app, ["keybindings", "--json"]).stdout)
        sort = [b for b in data["bindings"]["transactions"] if b["action"] == "sort"]
        assert sort[0]["keys"] == ["x"]

    def test_scope_filter(self, config_path):
        result = runner.invoke(app, ["keybindings", "--scope", "budget"])
        assert result.exit_code == 0
        assert "Filtered to scope" in result.stdout
        assert "All Keybindings" in result.stdout

    def test_unknown_scope(self, config_path):
        result = runner.invoke(app, ["keybindings", "--scope", "nowhere"])
        assert result.exit_code == 1
        assert "Unknown scope" in result.stdout

    def test_conflicts(self, config_path):
        result = runner.invoke(app, ["keybindings", "--conflicts"])
        assert result.exit_code == 0

    def test_init_and_already_exists(self, config_path):
        result = runner.invoke(app, ["keybindings", "init"])
        assert result.exit_code == 0
        assert "Created keybindings config" in result.stdout
        assert yaml.safe_load(config_path.read_text())["version"] == 2

        result = runner.invoke(app, ["keybindings", "init"])
        assert "already exists" in result.stdout

    def test_check_valid(self, config_path):
        config_path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [x]\n")
        result = runner.invoke(app, ["keybindings", "check"])
        assert result.exit_code == 0
        assert "is valid" in result.stdout

    def test_check_invalid(self, config_path):
        config_path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [c]\n")
        result = runner.invoke(app, ["keybindings", "check"])
        assert result.exit_code == 1
        assert "Invalid keybindings config" in result.stdout
        assert "sort: [c]" in config_path.read_text()

    def test_check_without_file(self, config_path):
        result = runner.invoke(app, ["keybindings", "check"])
        assert result.exit_code == 0
        assert not config_path.exists()

    def test_reset(self, config_path):
        config_path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [x]\n")
        result = runner.invoke(app, ["keybindings", "reset", "--yes"])
        assert result.exit_code == 0
        assert yaml.safe_load(config_path.read_text())["bindings"]["transactions"]["sort"] == ["s"]

    def test_reset_prompt_declined(self, config_path):
        config_path.write_text("version: 2\nbindings:\n  transactions:\n    sort: [x]\n")
        result = runner.invoke(app, ["keybindings", "reset"], input="n\n")
        assert result.exit_code != 0
        assert "sort: [x]" in config_path.read_text()

    def test_scopes(self):
        result = runner.invoke(app, ["keybindings", "scopes"])
        assert result.exit_code == 0
        assert "overlays" in result.stdout
        assert "command_palette" in result.stdout
        assert "settings_nav" in result.stdout


class TestCommandsCommand:
    """Test `jaskmoney commands`."""

    def test_search_json(self, config_path):
        result = runner.invoke(app, ["commands", "budget", "--scope", "budget", "--json"])
        assert result.exit_code == 0
        rows = json.loads(result.stdout)
        ids = [row["id"] for row in rows]
        assert "nav:budget" in ids
        assert "budget:edit" in ids
        (edit,) = [row for row in rows if row["id"] == "budget:edit"]
        assert edit["key"] == "enter"
        assert edit["enabled"]

    def test_scoped_commands_hidden_elsewhere(self, config_path):
        result = runner.invoke(app, ["commands", "--json"])
        ids = [row["id"] for row in json.loads(result.stdout)]
        assert "budget:edit" not in ids
        assert "palette:open" not in ids
        assert "app:quit" in ids

    def test_table(self, config_path):
        result = runner.invoke(app, ["commands", "quit"])
        assert result.exit_code == 0
        assert "app:quit" in result.stdout

    def test_no_match(self, config_path):
        result = runner.invoke(app, ["commands", "zzzz"])
        assert result.exit_code == 0
        assert "No commands match" in result.stdout

    def test_unknown_scope(self, config_path):
        result = runner.invoke(app, ["commands", "--scope", "nowhere"])
        assert result.exit_code == 1
        assert "Unknown scope" in result.stdout
