"""
Tests for the stowage command line interface.
"""

import pytest
from click.testing import CliRunner

from stowage.cli import cli


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def data_dir(tmp_path):
    data = tmp_path / "data"
    (data / "reports").mkdir(parents=True)
    (data / "reports" / "q1.csv").write_bytes(b"id,total\n1,10\n")
    (data / "reports" / "notes.md").write_bytes(b"# notes")
    (data / "empty").mkdir()
    (data / "top.txt").write_bytes(b"top level")
    return data


class TestCli:
    """Tests for CLI commands."""

    def test_version(self, runner):
        """Test --version."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_tree(self, runner, data_dir):
        """Test the text tree of a local directory."""
        result = runner.invoke(cli, ["tree", str(data_dir)])

        assert result.exit_code == 0, result.output
        assert "/ (3 files, 30 B)" in result.output
        assert "reports (2 files, 21 B)" in result.output
        assert "Total: 3 files, 30 B" in result.output

    def test_tree_html_dirs_only(self, runner, data_dir):
        """Test HTML output without files."""
        result = runner.invoke(cli, ["tree", str(data_dir), "--html", "--dirs-only"])

        assert result.exit_code == 0, result.output
        assert '<li class="directory">empty' in result.output
        assert "q1.csv" not in result.output
        assert "Total:" not in result.output

    def test_copy_with_pattern(self, runner, data_dir, tmp_path):
        """Test deep copy of a directory filtered by pattern."""
        backup = tmp_path / "backup"

        result = runner.invoke(cli, ["copy", str(data_dir), str(backup), "-p", "*.csv"])

        assert result.exit_code == 0, result.output
        assert (backup / "reports" / "q1.csv").read_bytes() == b"id,total\n1,10\n"
        assert (backup / "empty").is_dir()
        assert not (backup / "top.txt").exists()
        assert "Copy complete" in result.output
        assert "Transfer Summary" in result.output

    @pytest.mark.parametrize("target", ["backup", "reports/backup", "."])
    def test_copy_into_own_subtree_fails(self, runner, data_dir, target):
        """Test copying a directory into itself exits with status 1 and copies nothing."""
        before = sorted(p.relative_to(data_dir) for p in data_dir.rglob("*"))

        result = runner.invoke(cli, ["copy", str(data_dir), str(data_dir / target)])

        assert result.exit_code == 1
        assert "Copy failed" in result.output
        assert "is inside source" in result.output
        assert sorted(p.relative_to(data_dir) for p in data_dir.rglob("*")) == before

    def test_copy_to_sibling_with_shared_prefix(self, runner, data_dir, tmp_path):
        """Test a sibling whose name starts with the source name is allowed."""
        result = runner.invoke(cli, ["copy", str(data_dir), str(tmp_path / "data-copy")])

        assert result.exit_code == 0, result.output
        assert (tmp_path / "data-copy" / "top.txt").read_bytes() == b"top level"

    def test_move(self, runner, data_dir, tmp_path):
        """Test moving named files between roots."""
        done = tmp_path / "done"

        result = runner.invoke(cli, ["move", str(data_dir), str(done), "top.txt"])

        assert result.exit_code == 0, result.output
        assert (done / "top.txt").read_bytes() == b"top level"
        assert not (data_dir / "top.txt").exists()

    def test_move_missing_file_fails(self, runner, data_dir, tmp_path):
        """Test a failed move exits with status 1."""
        result = runner.invoke(cli, ["move", str(data_dir), str(tmp_path / "done"), "absent.txt"])

        assert result.exit_code == 1
        assert "Move failed" in result.output
        assert "absent.txt" in result.output

    def test_config_file(self, runner, data_dir, tmp_path):
        """Test --config loads a YAML file."""
        config_file = tmp_path / "stowage.yaml"
        config_file.write_text("transfer:\n  chunk_size: 4\n")

        result = runner.invoke(cli, ["--config", str(config_file), "tree", str(data_dir)])

        assert result.exit_code == 0, result.output
