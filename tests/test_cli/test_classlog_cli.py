# ABOUTME: Tests for the classlog command line interface
# ABOUTME: Runs subcommands against the test classroom and checks their output and exit codes

import json

import pytest
from openpyxl import Workbook

from classlog.cli import classlog_cli
from classlog.cli.classlog_cli import main


@pytest.fixture
def cli_classroom(classroom, monkeypatch):
    monkeypatch.setattr(classlog_cli, "build_classroom", lambda: classroom)
    return classroom


@pytest.fixture
def roster_file(tmp_path):
    wb = Workbook()
    ws = wb.active
    ws.title = "Roster"
    ws.append(["Name", "Period", "Student ID"])
    ws.append(["Ada", 1, 1001])
    ws.append(["Grace", 2, 2001])
    path = tmp_path / "roster.xlsx"
    wb.save(path)
    return path


def test_build(cli_classroom, capsys):
    assert main(["build", "--name", "Room 12"]) == 0

    out = capsys.readouterr().out
    assert "Created a new class log." in out
    assert "URL: file://" in out


def test_import_roster(cli_classroom, roster_file, capsys):
    main(["build", "--no-seed"])

    assert main(["import-roster", str(roster_file)]) == 0

    assert "Imported 2 students." in capsys.readouterr().out
    assert cli_classroom.queries.get_data()["per_map"] == {"1": ["Ada"], "2": ["Grace"]}


def test_import_roster_dry_run(cli_classroom, roster_file, capsys):
    main(["build", "--no-seed"])

    assert main(["import-roster", str(roster_file), "--dry-run"]) == 0

    assert "Dry run" in capsys.readouterr().out
    assert cli_classroom.queries.get_data()["periods"] == []


def test_import_roster_missing_file(cli_classroom, tmp_path, capsys):
    assert main(["import-roster", str(tmp_path / "missing.xlsx")]) == 1
    assert "File not found" in capsys.readouterr().out


def test_counts_json(cli_classroom, capsys):
    main(["build"])
    cli_classroom.writes.log_entries([{"student": "Ada Lovelace", "issue": "Tardy"}])
    capsys.readouterr()

    assert main(["counts", "1", "--json"]) == 0

    snapshot = json.loads(capsys.readouterr().out)
    assert snapshot["total_logs"] == 1
    assert snapshot["rows"][0]["student"] == "Ada Lovelace"


def test_scan_and_status(cli_classroom, capsys):
    main(["build"])
    capsys.readouterr()

    assert main(["scan", "1001"]) == 0
    assert "Ada Lovelace checked out" in capsys.readouterr().out

    assert main(["status", "--period", "1"]) == 0
    assert "Ada Lovelace (since" in capsys.readouterr().out


def test_domain_error_exit_code(cli_classroom, capsys):
    assert main(["scan", "1001"]) == 1
    assert capsys.readouterr().out.startswith("Error: No class log is attached")
