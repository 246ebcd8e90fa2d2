# ABOUTME: Typed row records and sheet layouts for the class log workbook
# ABOUTME: Parses raw sheet rows into roster, log and bathroom records at the storage boundary

from dataclasses import dataclass
from datetime import datetime
from typing import Iterable, List, Optional, Sequence

from classlog.utils.data_cleaners import (
    clean_text,
    clean_period,
    clean_student_id,
    parse_timestamp,
    clean_minutes,
)

ROSTER_SHEET = "Roster"
ISSUES_SHEET = "Issues"
LOG_SHEET = "Log"
COUNTS_SHEET = "Counts"
BATHROOM_SHEET = "Bathroom"

ROSTER_HEADERS = ["Name", "Period", "Student ID"]
ISSUES_HEADERS = ["Issue"]
LOG_HEADERS = ["Timestamp", "Student", "Period", "Issue", "Notes"]
COUNTS_HEADERS = ["Student"]
BATHROOM_HEADERS = ["Timestamp", "Student ID", "Student", "Period", "Direction", "Minutes"]

SHEET_HEADERS = {
    ROSTER_SHEET: ROSTER_HEADERS,
    ISSUES_SHEET: ISSUES_HEADERS,
    LOG_SHEET: LOG_HEADERS,
    COUNTS_SHEET: COUNTS_HEADERS,
    BATHROOM_SHEET: BATHROOM_HEADERS,
}

DIRECTION_OUT = "out"
DIRECTION_IN = "in"


@dataclass(frozen=True)
class RosterRow:
    name: str
    period: str
    student_id: Optional[str] = None


@dataclass(frozen=True)
class LogEntry:
    timestamp: Optional[datetime]
    student: str
    period: str
    issue: str
    notes: str = ""

    def to_row(self) -> list:
        return [self.timestamp, self.student, self.period, self.issue, self.notes]


@dataclass(frozen=True)
class BathroomEvent:
    timestamp: datetime
    student_id: str
    student: str
    period: str
    direction: str
    minutes: Optional[int] = None

    def to_row(self) -> list:
        return [self.timestamp, self.student_id, self.student, self.period, self.direction, self.minutes]


def _cell(row: Sequence, index: int):
    return row[index] if index < len(row) else None


def parse_roster(rows: Iterable[Sequence]) -> List[RosterRow]:
    """Parse Roster rows, dropping rows without a name."""
    roster = []
    for row in rows:
        name = clean_text(_cell(row, 0))
        if not name:
            continue
        student_id = clean_student_id(_cell(row, 2)) or None
        roster.append(RosterRow(name=name, period=clean_period(_cell(row, 1)), student_id=student_id))
    return roster


def parse_issues(rows: Iterable[Sequence]) -> List[str]:
    """Parse Issues rows into the ordered list of non-blank labels."""
    return [label for label in (clean_text(_cell(row, 0)) for row in rows) if label]


def parse_log(rows: Iterable[Sequence]) -> List[LogEntry]:
    """Parse Log rows in sheet order. Blank rows are kept out."""
    entries = []
    for row in rows:
        student = clean_text(_cell(row, 1))
        issue = clean_text(_cell(row, 3))
        if not student and not issue:
            continue
        entries.append(LogEntry(
            timestamp=parse_timestamp(_cell(row, 0)),
            student=student,
            period=clean_period(_cell(row, 2)),
            issue=issue,
            notes=clean_text(_cell(row, 4)),
        ))
    return entries


def parse_bathroom(rows: Iterable[Sequence]) -> List[BathroomEvent]:
    """Parse Bathroom rows; rows without a timestamp, id or valid direction are skipped."""
    events = []
    for row in rows:
        timestamp = parse_timestamp(_cell(row, 0))
        student_id = clean_student_id(_cell(row, 1))
        direction = clean_text(_cell(row, 4)).lower()
        if timestamp is None or not student_id or direction not in (DIRECTION_OUT, DIRECTION_IN):
            continue
        events.append(BathroomEvent(
            timestamp=timestamp,
            student_id=student_id,
            student=clean_text(_cell(row, 2)),
            period=clean_period(_cell(row, 3)),
            direction=direction,
            minutes=clean_minutes(_cell(row, 5)) if direction == DIRECTION_IN else None,
        ))
    return events


def find_student_by_name(roster: Iterable[RosterRow], name: str) -> Optional[RosterRow]:
    """First roster row whose name matches exactly after trimming."""
    name = clean_text(name)
    return next((r for r in roster if r.name == name), None)


def find_student_by_id(roster: Iterable[RosterRow], student_id: str) -> Optional[RosterRow]:
    """First roster row with the given student id."""
    student_id = clean_student_id(student_id)
    return next((r for r in roster if r.student_id == student_id), None)


def load_roster(sheet) -> List[RosterRow]:
    return parse_roster(sheet.data_rows(ROSTER_SHEET, len(ROSTER_HEADERS)))


def load_issues(sheet) -> List[str]:
    return parse_issues(sheet.data_rows(ISSUES_SHEET, len(ISSUES_HEADERS)))


def load_log(sheet) -> List[LogEntry]:
    return parse_log(sheet.data_rows(LOG_SHEET, len(LOG_HEADERS)))


def load_bathroom(sheet) -> List[BathroomEvent]:
    return parse_bathroom(sheet.data_rows(BATHROOM_SHEET, len(BATHROOM_HEADERS)))
