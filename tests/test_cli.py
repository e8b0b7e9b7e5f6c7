"""
Tests for the pathkit CLI.
"""

import os
from pathlib import Path

import pytest
from click.testing import CliRunner

import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from pathkit import is_read_only
from pathkit_cli import pathkit


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


def make_tree():
    """Create a small tree in the current directory."""
    (Path("tree") / "sub").mkdir(parents=True)
    Path("tree", "a.txt").write_text("abc")
    Path("tree", "sub", "b.log").write_text("hello")
    Path("pathkit.yaml").write_text("protected: []\n")


class TestCLI:
    """CLI commands."""

    def test_help(self, runner):
        result = runner.invoke(pathkit, ["--help"])

        assert result.exit_code == 0
        assert "Usage" in result.output

    def test_delete_file(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["delete", "tree/a.txt"])

            assert result.exit_code == 0, result.output
            assert not Path("tree/a.txt").exists()
            assert "Deleted" in result.output

    def test_delete_missing(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["delete", "tree/nope.txt"])

            assert result.exit_code == 1
            assert "Error" in result.output

    def test_delete_directory_without_recursive(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["delete", "tree"])

            assert result.exit_code == 1
            assert Path("tree").exists()

    def test_delete_recursive_confirmed(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["delete", "-r", "tree"], input="y\n")

            assert result.exit_code == 0, result.output
            assert not Path("tree").exists()

    def test_delete_recursive_declined(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["delete", "-r", "tree"], input="n\n")

            assert result.exit_code == 2
            assert Path("tree").exists()

    def test_delete_recursive_dry_run(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["delete", "-r", "--dry-run", "tree"])

            assert result.exit_code == 0, result.output
            assert "Would delete" in result.output
            assert Path("tree/sub/b.log").exists()

    def test_delete_override_read_only(self, runner):
        with runner.isolated_filesystem():
            make_tree()
            runner.invoke(pathkit, ["readonly", "tree/a.txt", "on"])

            result = runner.invoke(pathkit, ["delete", "--override-read-only", "tree/a.txt"])

            assert result.exit_code == 0, result.output
            assert not Path("tree/a.txt").exists()

    def test_readonly(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["readonly", "tree/a.txt", "on"])
            assert result.exit_code == 0, result.output
            assert is_read_only("tree/a.txt")

            result = runner.invoke(pathkit, ["readonly", "tree/a.txt", "off"])
            assert result.exit_code == 0, result.output
            assert not is_read_only("tree/a.txt")

    def test_count(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["count", "tree"])

            assert result.exit_code == 0, result.output
            assert "8" in result.output

    def test_count_invalid_regex(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["count", "tree", "--regex", "["])

            assert result.exit_code == 2
            assert "--regex" in result.output

    def test_find(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["find", "tree", r".*\.LOG", "-i"])

            assert result.exit_code == 0, result.output
            assert "b.log" in result.output
            assert "a.txt" not in result.output

    def test_find_invalid_regex(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["find", "tree", "[unclosed"])

            assert result.exit_code == 2

    def test_protect_and_audit(self, runner):
        with runner.isolated_filesystem():
            make_tree()

            result = runner.invoke(pathkit, ["protect", os.path.abspath("tree")])
            assert result.exit_code == 0, result.output

            result = runner.invoke(pathkit, ["delete", "-r", "--yes", "tree"])
            assert result.exit_code == 2
            assert Path("tree").exists()

            result = runner.invoke(pathkit, ["audit"])
            assert result.exit_code == 0
            assert "Recent Audit Log" in result.output
