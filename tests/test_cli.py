"""
Tests for CLI module.

Tests command-line interface commands and output.
"""

import json
import re
from pathlib import Path

import pytest
from typer.testing import CliRunner

from page_agent.cli import app


class TestCLI:
    """Tests for CLI commands."""

    @pytest.fixture
    def runner(self) -> CliRunner:
        """Provide a CLI test runner."""
        return CliRunner()

    @pytest.fixture
    def page_file(self, temp_dir: Path, sample_html: str) -> Path:
        """Write the sample page to disk."""
        path = temp_dir / "page.html"
        path.write_text(sample_html, encoding="utf-8")
        return path

    def invoke(self, runner: CliRunner, config_file: Path, *args: str, **kwargs):
        return runner.invoke(app, ["--config", str(config_file), *args], **kwargs)

    def test_cli_help(self, runner: CliRunner):
        """CLI should show help."""
        result = runner.invoke(app, ["--help"])

        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_version(self, runner: CliRunner):
        """--version prints the version."""
        result = runner.invoke(app, ["--version"])

        assert result.exit_code == 0
        assert "Page Agent" in result.output

    def test_analyze_help(self, runner: CliRunner):
        """Analyze command should show help."""
        result = runner.invoke(app, ["analyze", "--help"])

        assert result.exit_code == 0
        assert "source" in result.output.lower()

    def test_analyze_file_json(self, runner: CliRunner, config_file: Path, page_file: Path):
        """--json prints the insight in its wire shape."""
        result = self.invoke(
            runner, config_file,
            "analyze", str(page_file), "--url", "https://example.com/upgrade", "--json",
        )

        assert result.exit_code == 0
        data = json.loads(result.stdout)
        assert data["metadata"]["title"] == "Planning the Database Upgrade"
        assert data["metadata"]["domain"] == "example.com"
        assert "You should migrate the database before Friday." in data["actionItems"]

    def test_analyze_file_panels(self, runner: CliRunner, config_file: Path, page_file: Path):
        """The default output shows the insight panels."""
        result = self.invoke(runner, config_file, "analyze", str(page_file))

        assert result.exit_code == 0
        assert "Summary" in result.output
        assert "Suggested Actions" in result.output
        assert "Dana Reyes" in result.output
        assert "Not provided" in result.output

    def test_analyze_stdin(self, runner: CliRunner, config_file: Path):
        """'-' reads markup from stdin."""
        result = self.invoke(
            runner, config_file, "analyze", "-", "--json",
            input="<p>You should migrate the database before Friday.</p>",
        )

        assert result.exit_code == 0
        assert json.loads(result.stdout)["actionItems"] == [
            "You should migrate the database before Friday.",
        ]

    def test_analyze_missing_file(self, runner: CliRunner, config_file: Path, temp_dir: Path):
        """A missing file is an error."""
        result = self.invoke(runner, config_file, "analyze", str(temp_dir / "absent.html"))

        assert result.exit_code == 1
        assert "Cannot read" in result.output

    def test_config_show(self, runner: CliRunner, config_file: Path):
        """Config show command should display settings."""
        result = self.invoke(runner, config_file, "config", "show")

        assert result.exit_code == 0
        assert "analysis" in result.output
        assert "storage" in result.output

    def test_config_init(self, runner: CliRunner, temp_dir: Path, config_file: Path):
        """Config init writes a loadable default file."""
        output = temp_dir / "generated.yaml"

        result = self.invoke(runner, config_file, "config", "init", "--output", str(output))

        assert result.exit_code == 0
        assert output.exists()
        assert "max_key_points" in output.read_text()

    def test_invalid_config(self, runner: CliRunner, temp_dir: Path):
        """A bad configuration file stops the CLI."""
        bad = temp_dir / "bad.yaml"
        bad.write_text("analysis:\n  max_key_points: -1\n")

        result = runner.invoke(app, ["--config", str(bad), "config", "show"])

        assert result.exit_code == 1
        assert "Configuration error" in result.output


class TestTaskCommands:
    """Tests for the tasks sub-commands."""

    @pytest.fixture
    def runner(self) -> CliRunner:
        """Provide a CLI test runner."""
        return CliRunner()

    def invoke(self, runner: CliRunner, config_file: Path, *args: str):
        return runner.invoke(app, ["--config", str(config_file), "tasks", *args])

    def task_id(self, output: str) -> str:
        match = re.search(r"task ([0-9a-f]{32})", output)
        assert match, output
        return match.group(1)

    def test_list_empty(self, runner: CliRunner, config_file: Path):
        """An empty board shows zero counts."""
        result = self.invoke(runner, config_file, "list")

        assert result.exit_code == 0
        assert "Backlog: 0" in result.output
        assert "No tasks yet" in result.output

    def test_add_and_list(self, runner: CliRunner, config_file: Path):
        """Added tasks appear on the board."""
        result = self.invoke(runner, config_file, "add", "Review pricing", "--priority", "high")

        assert result.exit_code == 0
        assert "Added" in result.output

        listing = self.invoke(runner, config_file, "list")
        assert "Review" in listing.output
        assert "Backlog: 1" in listing.output

    def test_promote(self, runner: CliRunner, config_file: Path):
        """Promoted actions become backlog tasks with their source."""
        result = self.invoke(
            runner, config_file,
            "promote", "Update the billing contact", "--source", "https://example.com/billing",
        )

        assert result.exit_code == 0
        assert "Promoted" in result.output
        assert "Backlog" in result.output

    def test_set_status(self, runner: CliRunner, config_file: Path):
        """Status can be changed by id."""
        added = self.invoke(runner, config_file, "add", "Ship it")
        task_id = self.task_id(added.output)

        result = self.invoke(runner, config_file, "set", task_id, "--status", "in-progress")

        assert result.exit_code == 0
        assert "In Progress" in result.output

    def test_set_invalid_status(self, runner: CliRunner, config_file: Path):
        """Unknown statuses are reported."""
        added = self.invoke(runner, config_file, "add", "Ship it")
        task_id = self.task_id(added.output)

        result = self.invoke(runner, config_file, "set", task_id, "--status", "archived")

        assert result.exit_code == 1
        assert "Unknown status" in result.output

    def test_add_blank_title(self, runner: CliRunner, config_file: Path):
        """Whitespace-only titles are refused."""
        result = self.invoke(runner, config_file, "add", "   ")

        assert result.exit_code == 1
        assert "Invalid input" in result.output
        assert "Backlog: 0" in self.invoke(runner, config_file, "list").output

    def test_set_blank_title(self, runner: CliRunner, config_file: Path):
        """A title cannot be blanked out with set."""
        added = self.invoke(runner, config_file, "add", "Ship it")
        task_id = self.task_id(added.output)

        result = self.invoke(runner, config_file, "set", task_id, "--title", "")

        assert result.exit_code == 1
        assert "Invalid input" in result.output
        assert "Ship" in self.invoke(runner, config_file, "list").output

    def test_set_nothing(self, runner: CliRunner, config_file: Path):
        """set without changes is an error."""
        result = self.invoke(runner, config_file, "set", "abc")

        assert result.exit_code == 1

    def test_remove(self, runner: CliRunner, config_file: Path):
        """Removed tasks leave the board."""
        added = self.invoke(runner, config_file, "add", "Temporary")
        task_id = self.task_id(added.output)

        result = self.invoke(runner, config_file, "remove", task_id)

        assert result.exit_code == 0
        assert "Backlog: 0" in self.invoke(runner, config_file, "list").output

    def test_remove_unknown(self, runner: CliRunner, config_file: Path):
        """Removing an unknown task fails."""
        result = self.invoke(runner, config_file, "remove", "nope")

        assert result.exit_code == 1
        assert "Task not found" in result.output
