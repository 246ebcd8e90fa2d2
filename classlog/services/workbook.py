# ABOUTME: Workbook-backed tabular storage for class log documents
# ABOUTME: Creates, opens, saves and trashes .xlsx documents and exposes row/column range access

import logging
import os
import secrets
import shutil
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence

import openpyxl
from openpyxl import Workbook
from openpyxl.worksheet.worksheet import Worksheet

logger = logging.getLogger(__name__)

TRASH_DIR_NAME = ".trash"


@dataclass(frozen=True)
class Document:
    """A single attached workbook."""
    id: str
    name: str
    path: Path

    @property
    def url(self) -> str:
        return self.path.resolve().as_uri()

    @property
    def lock_path(self) -> Path:
        return self.path.with_suffix(".lock")


class Spreadsheet:
    """
    Row/column range access over an in-memory openpyxl workbook.

    Rows and columns are 1-based, matching spreadsheet addressing.
    Changes are only durable once the owning WorkbookStore saves them.
    """

    def __init__(self, workbook: Workbook):
        self.workbook = workbook

    def sheet_names(self) -> List[str]:
        return list(self.workbook.sheetnames)

    def has_sheet(self, name: str) -> bool:
        return name in self.workbook.sheetnames

    def sheet(self, name: str) -> Worksheet:
        return self.workbook[name]

    def ensure_sheet(self, name: str, headers: Sequence[str]) -> bool:
        """Create the sheet with a header row if missing. Returns True if created."""
        if self.has_sheet(name):
            return False
        ws = self.workbook.create_sheet(title=name)
        ws.append(list(headers))
        return True

    def last_row(self, name: str) -> int:
        """Index of the last row holding any value, 0 for an empty sheet."""
        ws = self.sheet(name)
        for row_idx in range(ws.max_row, 0, -1):
            if any(cell.value not in (None, "") for cell in ws[row_idx]):
                return row_idx
        return 0

    def last_column(self, name: str) -> int:
        """Index of the last column holding any value, 0 for an empty sheet."""
        ws = self.sheet(name)
        for col_idx in range(ws.max_column, 0, -1):
            for row_idx in range(1, ws.max_row + 1):
                if ws.cell(row=row_idx, column=col_idx).value not in (None, ""):
                    return col_idx
        return 0

    def read_range(self, name: str, row: int, col: int, num_rows: int, num_cols: int) -> List[List[Any]]:
        """Read a rectangular block of values."""
        if num_rows <= 0 or num_cols <= 0:
            return []
        ws = self.sheet(name)
        return [
            list(values)
            for values in ws.iter_rows(
                min_row=row,
                max_row=row + num_rows - 1,
                min_col=col,
                max_col=col + num_cols - 1,
                values_only=True,
            )
        ]

    def write_range(self, name: str, row: int, col: int, values: Sequence[Sequence[Any]]) -> None:
        """Write a rectangular block of values starting at (row, col)."""
        ws = self.sheet(name)
        for r_offset, row_values in enumerate(values):
            for c_offset, value in enumerate(row_values):
                ws.cell(row=row + r_offset, column=col + c_offset, value=value)

    def append_row(self, name: str, values: Sequence[Any]) -> int:
        """Write values on the row after the last non-empty one. Returns the row index."""
        row = self.last_row(name) + 1
        self.write_range(name, row, 1, [values])
        return row

    def insert_rows(self, name: str, row: int, count: int = 1) -> None:
        self.sheet(name).insert_rows(row, amount=count)

    def delete_row(self, name: str, row: int) -> None:
        self.sheet(name).delete_rows(row, amount=1)

    def delete_rows(self, name: str, row: int, count: int) -> None:
        if count > 0:
            self.sheet(name).delete_rows(row, amount=count)

    def insert_column(self, name: str, col: int) -> None:
        self.sheet(name).insert_cols(col, amount=1)

    def headers(self, name: str) -> List[str]:
        last_col = self.last_column(name)
        if not last_col:
            return []
        return ["" if v is None else str(v) for v in self.read_range(name, 1, 1, 1, last_col)[0]]

    def data_rows(self, name: str, num_cols: Optional[int] = None) -> List[List[Any]]:
        """All rows below the header, padded or cut to num_cols columns."""
        if not self.has_sheet(name):
            return []
        last_row = self.last_row(name)
        width = num_cols or self.last_column(name)
        if last_row < 2 or width == 0:
            return []
        return self.read_range(name, 2, 1, last_row - 1, width)


class WorkbookStore:
    """
    Directory of .xlsx documents keyed by opaque id.

    Trashed documents are moved into a ``.trash`` subdirectory rather than deleted.
    """

    def __init__(self, documents_dir: Path):
        self.documents_dir = Path(documents_dir)
        self.trash_dir = self.documents_dir / TRASH_DIR_NAME

    def path_for(self, doc_id: str) -> Path:
        return self.documents_dir / f"{doc_id}.xlsx"

    def create(self, name: str, sheets: Optional[Dict[str, Sequence[str]]] = None) -> Document:
        """Create a workbook, optionally with header-only sheets, and return its handle."""
        self.documents_dir.mkdir(parents=True, exist_ok=True)
        doc_id = secrets.token_hex(12)
        doc = Document(id=doc_id, name=name, path=self.path_for(doc_id))

        wb = Workbook()
        spreadsheet = Spreadsheet(wb)
        if sheets:
            wb.remove(wb.active)
            for sheet_name, headers in sheets.items():
                spreadsheet.ensure_sheet(sheet_name, headers)
        wb.properties.title = name
        self.save(doc, spreadsheet)
        logger.info("Created document %s (%s)", doc.id, name)
        return doc

    def open(self, doc_id: str) -> Optional[Document]:
        """Document handle for an existing workbook, or None."""
        path = self.path_for(doc_id)
        if not path.exists():
            return None
        name = doc_id
        try:
            wb = openpyxl.load_workbook(path, read_only=True)
            name = wb.properties.title or doc_id
            wb.close()
        except Exception:
            logger.warning("Could not read title of document %s", doc_id, exc_info=True)
        return Document(id=doc_id, name=name, path=path)

    def is_trashed(self, doc_id: str) -> Optional[bool]:
        """
        Trash status of a document.

        Returns:
            True if the workbook sits in the trash or is gone, False if it is
            live, None if the status could not be determined.
        """
        try:
            self.path_for(doc_id).stat()
            return False
        except FileNotFoundError:
            return True
        except OSError:
            logger.warning("Trash lookup failed for document %s", doc_id, exc_info=True)
            return None

    def trash(self, doc_id: str) -> None:
        self.trash_dir.mkdir(parents=True, exist_ok=True)
        shutil.move(str(self.path_for(doc_id)), str(self.trash_dir / f"{doc_id}.xlsx"))
        logger.info("Moved document %s to trash", doc_id)

    def load(self, doc: Document) -> Spreadsheet:
        return Spreadsheet(openpyxl.load_workbook(doc.path))

    def save(self, doc: Document, sheet: Spreadsheet) -> None:
        """Write the workbook atomically so readers never see a half-written file."""
        fd, tmp_path = tempfile.mkstemp(suffix=".xlsx", dir=str(doc.path.parent))
        os.close(fd)
        try:
            sheet.workbook.save(tmp_path)
            os.replace(tmp_path, doc.path)
        except Exception:
            Path(tmp_path).unlink(missing_ok=True)
            raise
