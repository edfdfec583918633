"""
Unit tests for the blib command line tool.
"""

import json

import pytest

from scripts.blib import main, load_document


@pytest.fixture
def write_file(tmp_path):
    """Write text to a file under tmp_path and return its path."""
    def _write(name, text):
        path = tmp_path / name
        path.write_text(text)
        return str(path)
    return _write


class TestLoadDocument:
    """Test JSON / YAML input loading."""

    def test_load_json(self, write_file):
        assert load_document(write_file("row.json", '{"id": 1}')) == {"id": 1}

    def test_load_yaml(self, write_file):
        path = write_file("row.yaml", "id: 1\nname: Bob\n")

        assert load_document(path) == {"id": 1, "name": "Bob"}


class TestCommands:
    """Test each subcommand end to end."""

    def test_diff(self, write_file, capsys):
        old = write_file("old.yaml", "a: 1\nb:\n  c: 2\n  d: 3\n")
        new = write_file("new.json", '{"a": 1, "b": {"c": 2, "d": 4}}')

        assert main(["diff", old, new]) == 0
        assert json.loads(capsys.readouterr().out) == {"b": {"d": 4}}

    def test_diff_loose(self, write_file, capsys):
        old = write_file("old.json", '{"qty": 5}')
        new = write_file("new.json", '{"qty": "5"}')

        assert main(["diff", old, new, "--loose"]) == 0
        assert json.loads(capsys.readouterr().out) == {}

    def test_insert(self, write_file, capsys):
        data = write_file("row.json", '{"name": "Bob", "age": 30}')

        assert main(["insert", "--table", "users", "--data", data]) == 0
        assert json.loads(capsys.readouterr().out) == {
            "sql": "INSERT INTO users (name, age) VALUES (:name, :age)",
            "parameters": {":name": "Bob", ":age": 30},
        }

    def test_update(self, write_file, capsys):
        data = write_file("data.yaml", "name: Bob\n")
        criteria = write_file("criteria.yaml", "id: 5\n")

        assert main(["update", "--table", "users", "--data", data, "--criteria", criteria]) == 0
        assert json.loads(capsys.readouterr().out) == {
            "sql": "UPDATE users SET name = :name WHERE id = :where_id",
            "parameters": {":name": "Bob", ":where_id": 5},
        }

    def test_update_with_empty_criteria_fails(self, write_file, capsys):
        data = write_file("data.yaml", "name: Bob\n")
        criteria = write_file("criteria.yaml", "")

        assert main(["update", "--table", "users", "--data", data, "--criteria", criteria]) == 1
        assert capsys.readouterr().out == ""

    def test_insert_invalid_table_fails(self, write_file):
        data = write_file("row.json", '{"x": 1}')

        assert main(["insert", "--table", "bad table", "--data", data]) == 1

    def test_missing_file_fails(self, tmp_path):
        assert main(["insert", "--table", "users", "--data", str(tmp_path / "nope.json")]) == 1

    def test_date(self, capsys):
        assert main(["date", "31/12/2023"]) == 0
        assert json.loads(capsys.readouterr().out) == "2023-12-31"

    def test_date_midnight(self, capsys):
        assert main(["date", "2023-12-31", "--datetime", "--midnight"]) == 0
        assert json.loads(capsys.readouterr().out) == "2023-12-31 00:00:00"

    def test_no_command_prints_help(self, capsys):
        assert main([]) == 1
        assert "usage" in capsys.readouterr().out

    def test_insert_with_list_data_fails(self, write_file, capsys):
        data = write_file("rows.json", "[1, 2]")

        assert main(["insert", "--table", "users", "--data", data]) == 1
        assert capsys.readouterr().out == ""

    def test_update_with_list_criteria_fails(self, write_file):
        data = write_file("data.yaml", "name: Bob\n")
        criteria = write_file("criteria.yaml", "- 5\n")

        assert main(["update", "--table", "users", "--data", data, "--criteria", criteria]) == 1

    def test_date_with_two_parts_keeps_legacy_output(self, capsys):
        assert main(["date", "12/2023"]) == 0
        assert json.loads(capsys.readouterr().out) == "-2023-12"


class TestLogging:
    """Test how the CLI wires logging and correlation IDs."""

    def test_correlation_id_from_environment(self, write_file, capsys, monkeypatch):
        monkeypatch.setenv("BLIB_CORRELATION_ID", "trace-7")
        monkeypatch.setenv("JSON_LOGGING", "true")
        data = write_file("row.json", '{"x": 1}')

        assert main(["insert", "--table", "bad table", "--data", data]) == 1

        entries = [json.loads(line) for line in capsys.readouterr().err.splitlines()]
        assert entries
        assert all(entry["correlation_id"] == "trace-7" for entry in entries)
        error = next(entry for entry in entries if entry["level"] == "ERROR")
        assert error["logger"] == "scripts.blib"
        assert error["message"] == "Error: Table name invalid - insert ('bad table')"

    def test_script_logger_uses_module_name(self):
        from scripts import blib

        assert blib.logger.name == blib.__name__ == "scripts.blib"
