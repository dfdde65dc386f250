"""
Tests for the `planner ideas` subcommand.

Ideas are stored under $XDG_DATA_HOME/planner, which the isolated_env
fixture points into tmp_path.
"""

import json

import pytest
from typer.testing import CliRunner

from planner.cli import app

runner = CliRunner()


@pytest.fixture(autouse=True)
def _in_project(project_dir):
    return project_dir


def _add(*args: str):
    result = runner.invoke(app, ["ideas", "add", *args])
    assert result.exit_code == 0, result.output
    return result


class TestList:
    def test_empty(self):
        result = runner.invoke(app, ["ideas"])
        assert result.exit_code == 0
        assert "No ideas found" in result.output

    def test_lists_ideas_with_count(self):
        _add("Sauna")
        _add("Kits", "--stage", "developing")
        result = runner.invoke(app, ["ideas"])
        assert result.exit_code == 0
        assert "Sauna" in result.output
        assert "Kits" in result.output
        assert "2 incubating" in result.output

    def test_stage_filter_json(self):
        _add("Sauna")
        _add("Kits", "-s", "developing", "-p", "high")
        result = runner.invoke(app, ["ideas", "--stage", "developing", "--json"])
        data = json.loads(result.output)
        assert list(data) == ["developing"]
        assert data["developing"][0]["title"] == "Kits"
        assert data["developing"][0]["priority"] == "high"

    def test_bootstrap_from_config(self, project_dir, bootstrap_file):
        (project_dir / ".planner.json").write_text(
            json.dumps({"ideas": {"bootstrap_url": str(bootstrap_file)}})
        )
        result = runner.invoke(app, ["ideas"])
        assert "Mobile sauna" in result.output
        assert "Shed kits" in result.output


class TestMutations:
    def test_add_assigns_increasing_ids(self):
        assert "Added idea 1" in _add("First").output
        assert "Added idea 2" in _add("Second").output

    def test_ids_not_reused_after_delete(self):
        _add("First")
        runner.invoke(app, ["ideas", "delete", "1"])
        assert "Added idea 2" in _add("Second").output

    def test_add_blank_title_fails(self):
        result = runner.invoke(app, ["ideas", "add", "  "])
        assert result.exit_code == 2
        assert "Cannot add idea" in result.output

    def test_add_unknown_stage_is_usage_error(self):
        result = runner.invoke(app, ["ideas", "add", "x", "--stage", "shipped"])
        assert result.exit_code == 2

    def test_stage_and_graduate(self):
        _add("Sauna")
        result = runner.invoke(app, ["ideas", "stage", "1", "developing"])
        assert "now developing" in result.output

        result = runner.invoke(app, ["ideas", "graduate", "1"])
        assert result.exit_code == 0
        data = json.loads(runner.invoke(app, ["ideas", "--json"]).output)
        assert data["ready"][0]["id"] == "1"

    def test_notes(self):
        _add("Sauna")
        runner.invoke(app, ["ideas", "notes", "1", "ask about trailers"])
        data = json.loads(runner.invoke(app, ["ideas", "--json"]).output)
        assert data["concept"][0]["notes"] == "ask about trailers"

    @pytest.mark.parametrize(
        "args",
        [["stage", "9", "ready"], ["notes", "9", "x"], ["graduate", "9"]],
    )
    def test_unknown_id(self, args):
        result = runner.invoke(app, ["ideas", *args])
        assert result.exit_code == 2
        assert "Idea not found: 9" in result.output

    def test_delete_missing_is_not_an_error(self):
        result = runner.invoke(app, ["ideas", "delete", "42"])
        assert result.exit_code == 0
        assert "nothing deleted" in result.output


class TestExport:
    def test_stdout(self):
        _add("Sauna")
        result = runner.invoke(app, ["ideas", "export", "--stdout"])
        data = json.loads(result.output)
        assert data["ideas"][0]["title"] == "Sauna"
        assert data["lastId"] == 1

    def test_to_directory(self, tmp_path):
        _add("Sauna")
        result = runner.invoke(app, ["ideas", "export", "-o", str(tmp_path / "out")])
        assert result.exit_code == 0
        files = list((tmp_path / "out").glob("incubator-*.json"))
        assert len(files) == 1
        assert json.loads(files[0].read_text())["ideas"][0]["title"] == "Sauna"
