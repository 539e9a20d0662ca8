"""Tests for the launch adapter, using real child processes."""

from pathlib import Path

import pytest

from server_room.errors import RunScriptError
from server_room.launcher import execute


class TestExecute:
    def test_success_returns_zero(self, tmp_path: Path):
        assert execute("true", tmp_path) == 0

    def test_non_zero_exit_is_returned_not_raised(self, tmp_path: Path):
        assert execute("exit 3", tmp_path) == 3

    def test_runs_in_working_directory(self, tmp_path: Path):
        execute("pwd > where.txt", tmp_path)
        written = (tmp_path / "where.txt").read_text(encoding="utf-8").strip()
        assert Path(written).resolve() == tmp_path.resolve()

    def test_accepts_string_directory(self, tmp_path: Path):
        assert execute("true", str(tmp_path)) == 0

    def test_missing_directory_raises(self, tmp_path: Path):
        with pytest.raises(RunScriptError) as excinfo:
            execute("true", tmp_path / "missing")
        assert excinfo.value.command == "true"
        assert "RunScript" in str(excinfo.value)
