"""Tests for the management CLI."""
from click.testing import CliRunner

from manage import cli


def invoke(*args, input=None):
    return CliRunner().invoke(cli, ["--config", "testing", *args], input=input)


class TestManageCLI:
    def test_season_current(self):
        result = invoke("season", "current")
        assert result.exit_code == 0, result.output
        assert "Season: " in result.output
        assert "Week: " in result.output

    def test_sync_week(self):
        result = invoke("sync", "week", "3", "--season", "2025")
        assert result.exit_code == 0, result.output
        assert "Week 3 of 2025 has 16 games stored" in result.output

    def test_sync_week_out_of_range(self):
        result = invoke("sync", "week", "19")
        assert result.exit_code != 0

    def test_score_week(self):
        result = invoke("score", "week", "1")
        assert result.exit_code == 0, result.output
        assert "Scored 0 picks across 0 completed games" in result.output

    def test_group_create(self):
        result = invoke("group", "create", "Office Pool", "--max-members", "12")
        assert result.exit_code == 0, result.output
        assert "Created group 'Office Pool' (id=1)" in result.output

    def test_add_code_to_missing_group(self):
        result = invoke("group", "add-code", "7", "OFFICE2025")
        assert "Group 7 not found" in result.output

    def test_user_list_empty(self):
        result = invoke("user", "list")
        assert result.exit_code == 0
        assert "No users found." in result.output

    def test_promote_unknown_user(self):
        result = invoke("user", "promote", "ghost")
        assert "User 'ghost' not found" in result.output

    def test_db_group_name(self):
        result = invoke("--help")
        assert result.exit_code == 0
        assert "db-cmd" in result.output

    def test_db_reset_needs_confirmation(self):
        result = invoke("db-cmd", "reset", input="n\n")
        assert result.exit_code == 1
        assert "Are you sure?" in result.output
        assert "No such command" not in result.output
        assert "Database reset" not in result.output

        result = invoke("db-cmd", "reset", "--yes")
        assert result.exit_code == 0, result.output
        assert "Database reset successfully!" in result.output
