# ABOUTME: Excel roster file parsing utilities
# ABOUTME: Reads a roster workbook and maps its columns onto name, period and student id

import openpyxl
from typing import Dict, List, Optional

from classlog.utils.data_cleaners import normalize_header

NAME_HEADERS = {"name", "student", "student_name", "full_name"}
PERIOD_HEADERS = {"period", "class_period", "section", "class"}
ID_HEADERS = {"student_id", "id", "student_number", "barcode"}


def _find_column(headers: List[str], candidates: set) -> Optional[int]:
    for i, header in enumerate(headers):
        if header in candidates:
            return i
    return None


def parse_roster_file(file_path: str, sheet_name: Optional[str] = None) -> List[Dict[str, object]]:
    """
    Parse a roster workbook into row dicts.

    Args:
        file_path: Path to Excel file
        sheet_name: Sheet to read (None = "Roster" if present, else the first sheet)

    Returns:
        [{"name": "...", "period": ..., "student_id": ...}, ...]
        Rows without a name are skipped.

    Raises:
        ValueError: if the sheet is missing or has no name column
    """
    wb = openpyxl.load_workbook(file_path, read_only=True, data_only=True)
    try:
        if sheet_name is None:
            sheet_name = "Roster" if "Roster" in wb.sheetnames else wb.sheetnames[0]
        if sheet_name not in wb.sheetnames:
            raise ValueError(f"No '{sheet_name}' sheet found in {file_path}")

        rows = wb[sheet_name].iter_rows(values_only=True)
        header_row = next(rows, None)
        if header_row is None or all(h is None for h in header_row):
            return []

        headers = [normalize_header(h) for h in header_row]
        name_col = _find_column(headers, NAME_HEADERS)
        if name_col is None:
            raise ValueError(f"Sheet '{sheet_name}' has no Name column")
        period_col = _find_column(headers, PERIOD_HEADERS)
        id_col = _find_column(headers, ID_HEADERS)

        def cell(row, col):
            return row[col] if col is not None and col < len(row) else None

        result = []
        for row in rows:
            name = cell(row, name_col)
            if name is None or str(name).strip() == "":
                continue
            result.append({
                "name": name,
                "period": cell(row, period_col),
                "student_id": cell(row, id_col),
            })
        return result
    finally:
        wb.close()
