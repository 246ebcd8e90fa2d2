# ABOUTME: Tests for workbook documents and range access
# ABOUTME: Validates sheet range reads and writes, atomic saves, and trash handling

import pytest
from openpyxl import Workbook

from classlog.services.workbook import Spreadsheet, WorkbookStore


@pytest.fixture
def store(tmp_path):
    return WorkbookStore(tmp_path / "docs")


@pytest.fixture
def sheet():
    spreadsheet = Spreadsheet(Workbook())
    spreadsheet.ensure_sheet("Log", ["Student", "Issue"])
    return spreadsheet


def test_ensure_sheet_only_creates_once(sheet):
    assert sheet.ensure_sheet("Log", ["Other"]) is False
    assert sheet.headers("Log") == ["Student", "Issue"]
    assert sheet.has_sheet("Log")
    assert not sheet.has_sheet("Roster")


def test_last_row_and_column(sheet):
    assert sheet.last_row("Log") == 1
    assert sheet.last_column("Log") == 2

    sheet.write_range("Log", 2, 1, [["A", "X", "extra"]])

    assert sheet.last_row("Log") == 2
    assert sheet.last_column("Log") == 3


def test_append_row_after_last_value(sheet):
    assert sheet.append_row("Log", ["A", "X"]) == 2
    assert sheet.append_row("Log", ["B", "Y"]) == 3
    assert sheet.data_rows("Log") == [["A", "X"], ["B", "Y"]]


def test_data_rows_pads_to_width(sheet):
    sheet.append_row("Log", ["A"])
    assert sheet.data_rows("Log", 3) == [["A", None, None]]
    assert sheet.data_rows("Missing") == []


def test_delete_rows_shifts_up(sheet):
    for name in ("A", "B", "C", "D"):
        sheet.append_row("Log", [name, "X"])

    sheet.delete_row("Log", 2)
    sheet.delete_rows("Log", 3, 2)
    sheet.delete_rows("Log", 2, 0)

    assert sheet.data_rows("Log") == [["B", "X"]]


def test_insert_rows_and_column(sheet):
    sheet.append_row("Log", ["A", "X"])

    sheet.insert_rows("Log", 2)
    sheet.insert_column("Log", 2)

    assert sheet.read_range("Log", 1, 1, 3, 3) == [
        ["Student", None, "Issue"],
        [None, None, None],
        ["A", None, "X"],
    ]


def test_read_range_empty_size(sheet):
    assert sheet.read_range("Log", 1, 1, 0, 2) == []


def test_create_with_sheets_and_reopen(store):
    doc = store.create("Room 12", {"Roster": ["Name"], "Log": ["Student"]})

    assert doc.path.exists()
    assert doc.url.startswith("file://")
    assert doc.lock_path.suffix == ".lock"

    reopened = store.open(doc.id)
    assert reopened.name == "Room 12"
    assert store.load(reopened).sheet_names() == ["Roster", "Log"]


def test_open_missing_document(store):
    assert store.open("nope") is None


def test_save_is_durable_and_leaves_no_temp_files(store):
    doc = store.create("Room 12", {"Log": ["Student"]})
    sheet = store.load(doc)
    sheet.append_row("Log", ["A"])

    store.save(doc, sheet)

    assert store.load(doc).data_rows("Log") == [["A"]]
    assert [p.name for p in store.documents_dir.iterdir()] == [doc.path.name]


def test_trash_moves_document(store):
    doc = store.create("Room 12")
    assert store.is_trashed(doc.id) is False

    store.trash(doc.id)

    assert store.is_trashed(doc.id) is True
    assert (store.trash_dir / doc.path.name).exists()
    assert store.open(doc.id) is None
