# ABOUTME: Locked write operations for the class log
# ABOUTME: Logs issues, undoes and clears entries, records bathroom trips and bumps the document version

import functools
import logging
import math
from contextlib import contextmanager
from datetime import datetime
from typing import Callable, Iterable, Iterator, Optional

from classlog.models.errors import (
    ClasslogError,
    Duplicate,
    LimitReached,
    NoMatch,
    NotFound,
    NoValidEntries,
)
from classlog.models.records import (
    ROSTER_SHEET,
    ISSUES_SHEET,
    LOG_SHEET,
    COUNTS_SHEET,
    BATHROOM_SHEET,
    ROSTER_HEADERS,
    LOG_HEADERS,
    SHEET_HEADERS,
    DIRECTION_OUT,
    DIRECTION_IN,
    BathroomEvent,
    LogEntry,
    find_student_by_id,
    find_student_by_name,
    load_bathroom,
    load_issues,
    load_log,
    load_roster,
)
from classlog.services.aggregates import compute_count_snapshot, count_trips_on, latest_event_for
from classlog.services.attachment import AttachmentResolver
from classlog.services.locks import LockManager
from classlog.services.properties import PropertyStore, BATHROOM_LIMIT_KEY, get_bathroom_limit
from classlog.services.versions import VersionStore
from classlog.services.workbook import Document, Spreadsheet, WorkbookStore
from classlog.utils.data_cleaners import clean_text, clean_period, clean_student_id, normalize_header, parse_timestamp

logger = logging.getLogger(__name__)

DEFAULT_DOCUMENT_NAME = "Classroom Log"

SAMPLE_ISSUES = ["Tardy", "Phone out", "Off task", "Disruptive", "Unprepared"]

SAMPLE_ROSTER = [
    ("Ada Lovelace", "1", "1001"),
    ("Alan Turing", "1", "1002"),
    ("Grace Hopper", "1", "1003"),
    ("Katherine Johnson", "2", "2001"),
    ("Edsger Dijkstra", "2", "2002"),
    ("Barbara Liskov", "3", "3001"),
]


def _count(count: int, singular: str, plural: str) -> str:
    return f"{count} {singular if count == 1 else plural}"


def reports_failure(**failure_fields):
    """
    Turn any failure of a write into {"ok": False, "message": ...}.

    Domain errors keep their message; anything else is logged with its
    traceback and reported by operation name.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except ClasslogError as exc:
                return {"ok": False, "message": exc.message, **failure_fields}
            except Exception as exc:
                logger.exception("%s failed", func.__name__)
                action = func.__name__.replace("_", " ").capitalize()
                return {"ok": False, "message": f"{action} failed: {exc}", **failure_fields}
        return wrapper
    return decorator


class WriteCoordinator:
    """
    Write side of the class log.

    Every write holds the document lock across reload, mutation, durable save
    and version bump. The bump comes after the save, so a reader addressing
    the new version always sees the new rows.
    """

    def __init__(
        self,
        attachment: AttachmentResolver,
        workbooks: WorkbookStore,
        versions: VersionStore,
        locks: LockManager,
        settings_store: PropertyStore,
        bathroom_limit_default: int = 3,
        lock_timeout_ms: int = 5000,
        batch_lock_timeout_ms: int = 30000,
        clock: Callable[[], datetime] = datetime.now,
    ):
        self.attachment = attachment
        self.workbooks = workbooks
        self.versions = versions
        self.locks = locks
        self.settings_store = settings_store
        self.bathroom_limit_default = bathroom_limit_default
        self.lock_timeout_ms = lock_timeout_ms
        self.batch_lock_timeout_ms = batch_lock_timeout_ms
        self.clock = clock

    @contextmanager
    def _editing(self, doc: Document, timeout_ms: int, bump: bool = True) -> Iterator[Spreadsheet]:
        """Lock, reload, hand the sheet to the caller, then save and bump if the body succeeded."""
        with self.locks.hold(doc, timeout_ms):
            sheet = self.workbooks.load(doc)
            yield sheet
            self.workbooks.save(doc, sheet)
            if bump:
                self.versions.bump_version(doc.id)

    @reports_failure(doc_id=None, doc_url=None)
    def build_sheets(self, seed: bool = True, name: str = DEFAULT_DOCUMENT_NAME) -> dict:
        """
        Attach a workbook and make sure every class log sheet exists.

        Reuses the attached document when there is one; otherwise creates a
        new workbook. Sample roster and issues only go into empty sheets.
        """
        doc = self.attachment.resolve()
        created = doc is None
        if created:
            doc = self.attachment.create(name or DEFAULT_DOCUMENT_NAME, SHEET_HEADERS)

        with self._editing(doc, self.batch_lock_timeout_ms) as sheet:
            added = [n for n, headers in SHEET_HEADERS.items() if sheet.ensure_sheet(n, headers)]
            self._add_student_id_column(sheet)
            seeded = self._seed(sheet) if seed else []

        parts = ["Created a new class log." if created else "Class log is ready."]
        if added:
            parts.append(f"Added sheets: {', '.join(added)}.")
        if seeded:
            parts.append(f"Seeded sample {' and '.join(seeded)}.")
        return {"ok": True, "message": " ".join(parts), "doc_id": doc.id, "doc_url": doc.url}

    @reports_failure()
    def log_entries(self, entries: Iterable[dict], ts=None) -> dict:
        """
        Append issue entries as one contiguous block.

        Each entry's period comes from the Roster, whatever the caller sent;
        a student missing from the Roster gets a blank period. Entries without
        a student or an issue are dropped.
        """
        valid = []
        for entry in entries or []:
            student = clean_text(entry.get("student"))
            issue = clean_text(entry.get("issue"))
            if student and issue:
                valid.append((student, issue, clean_text(entry.get("notes"))))
        if not valid:
            raise NoValidEntries()

        timestamp = parse_timestamp(ts) or self.clock()
        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.batch_lock_timeout_ms) as sheet:
            roster = load_roster(sheet) if sheet.has_sheet(ROSTER_SHEET) else []
            sheet.ensure_sheet(LOG_SHEET, LOG_HEADERS)

            rows = []
            for student, issue, notes in valid:
                match = find_student_by_name(roster, student)
                rows.append(LogEntry(timestamp, student, match.period if match else "", issue, notes).to_row())
            sheet.write_range(LOG_SHEET, sheet.last_row(LOG_SHEET) + 1, 1, rows)

        logger.info("Logged %d entries to %s", len(rows), doc.id)
        return {"ok": True, "message": f"Logged {_count(len(rows), 'entry', 'entries')}."}

    @reports_failure()
    def delete_last_entry(self, student: str, issue: str, period: Optional[str] = None) -> dict:
        """Undo: remove the newest log row matching student, issue and (if given) period."""
        student = clean_text(student)
        issue = clean_text(issue)
        period = clean_period(period) or None

        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.lock_timeout_ms) as sheet:
            rows = sheet.data_rows(LOG_SHEET, len(LOG_HEADERS))
            for offset in range(len(rows) - 1, -1, -1):
                row = rows[offset]
                if (clean_text(row[1]) == student and clean_text(row[3]) == issue
                        and (period is None or clean_period(row[2]) == period)):
                    row_number = offset + 2
                    sheet.delete_row(LOG_SHEET, row_number)
                    break
            else:
                raise NoMatch(f"No logged '{issue}' entry for {student} to undo.")

        timestamp = parse_timestamp(row[0])
        return {
            "ok": True,
            "message": f"Removed '{issue}' for {student}.",
            "row": {
                "row_number": row_number,
                "timestamp": timestamp.isoformat() if timestamp else None,
                "student": clean_text(row[1]),
                "period": clean_period(row[2]),
                "issue": clean_text(row[3]),
                "notes": clean_text(row[4]),
            },
        }

    @reports_failure()
    def clear_all_logs(self) -> dict:
        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.batch_lock_timeout_ms) as sheet:
            sheet.ensure_sheet(LOG_SHEET, LOG_HEADERS)
            removed = max(sheet.last_row(LOG_SHEET) - 1, 0)
            sheet.delete_rows(LOG_SHEET, 2, removed)
        logger.info("Cleared %d log rows from %s", removed, doc.id)
        return {"ok": True, "message": f"Cleared {_count(removed, 'log entry', 'log entries')}."}

    def record_bathroom_event(self, student_id: str) -> str:
        """
        Check a scanned student out or back in.

        A student whose latest event (any day) is "out" is checked in with
        the trip length in minutes. Otherwise a new trip starts if today's
        trip count is under the limit.

        Raises:
            NotAttached, LockTimeout, NotFound, LimitReached
        """
        student_id = clean_student_id(student_id)
        if not student_id:
            raise NotFound("Scan or enter a student id.")

        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.lock_timeout_ms) as sheet:
            now = self.clock()
            roster = load_roster(sheet) if sheet.has_sheet(ROSTER_SHEET) else []
            student = find_student_by_id(roster, student_id)
            if student is None:
                raise NotFound(f"No student with id {student_id} in the roster.")

            sheet.ensure_sheet(BATHROOM_SHEET, SHEET_HEADERS[BATHROOM_SHEET])
            events = load_bathroom(sheet)
            latest = latest_event_for(events, student_id)

            if latest is not None and latest.direction == DIRECTION_OUT:
                minutes = max(math.floor((now - latest.timestamp).total_seconds() / 60 + 0.5), 0)
                event = BathroomEvent(now, student_id, student.name, student.period, DIRECTION_IN, minutes)
                message = f"{student.name} checked in after {minutes} min."
            else:
                limit = get_bathroom_limit(self.settings_store, self.bathroom_limit_default)
                if count_trips_on(events, student_id, now.date()) >= limit:
                    raise LimitReached(student.name, limit)
                event = BathroomEvent(now, student_id, student.name, student.period, DIRECTION_OUT)
                message = f"{student.name} checked out at {now:%H:%M}."

            sheet.append_row(BATHROOM_SHEET, event.to_row())

        logger.info("Bathroom %s for %s in %s", event.direction, student_id, doc.id)
        return message

    @reports_failure()
    def set_bathroom_limit(self, limit) -> dict:
        try:
            limit = int(limit)
        except (TypeError, ValueError):
            return {"ok": False, "message": "Bathroom limit must be a whole number."}
        if limit < 1:
            return {"ok": False, "message": "Bathroom limit must be at least 1."}
        self.settings_store.set(BATHROOM_LIMIT_KEY, limit)
        return {"ok": True, "message": f"Bathroom limit set to {limit} per day."}

    @reports_failure()
    def add_issue(self, label: str) -> dict:
        label = clean_text(label)
        if not label:
            raise NoValidEntries("Issue label is blank.")

        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.lock_timeout_ms) as sheet:
            sheet.ensure_sheet(ISSUES_SHEET, SHEET_HEADERS[ISSUES_SHEET])
            if label in load_issues(sheet):
                raise Duplicate(f"Issue '{label}' already exists.")
            sheet.append_row(ISSUES_SHEET, [label])
        return {"ok": True, "message": f"Added issue '{label}'."}

    @reports_failure()
    def import_roster(self, rows: Iterable[dict]) -> dict:
        """Replace the Roster with the given rows (name, period, student_id)."""
        values = []
        for row in rows or []:
            name = clean_text(row.get("name"))
            if name:
                values.append([name, clean_period(row.get("period")), clean_student_id(row.get("student_id")) or None])
        if not values:
            raise NoValidEntries("No roster rows with a student name.")

        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.batch_lock_timeout_ms) as sheet:
            sheet.ensure_sheet(ROSTER_SHEET, ROSTER_HEADERS)
            self._add_student_id_column(sheet)
            sheet.delete_rows(ROSTER_SHEET, 2, max(sheet.last_row(ROSTER_SHEET) - 1, 0))
            sheet.write_range(ROSTER_SHEET, 2, 1, values)
        return {"ok": True, "message": f"Imported {_count(len(values), 'student', 'students')}."}

    @reports_failure()
    def export_counts(self, period: str) -> dict:
        """
        Write the period's count grid into the Counts sheet.

        The version is not bumped because no cached aggregate reads Counts.
        """
        period = clean_period(period)
        doc = self.attachment.resolve_or_fail()
        with self._editing(doc, self.lock_timeout_ms, bump=False) as sheet:
            snapshot = compute_count_snapshot(load_roster(sheet), load_issues(sheet), load_log(sheet), period)
            sheet.ensure_sheet(COUNTS_SHEET, SHEET_HEADERS[COUNTS_SHEET])
            sheet.delete_rows(COUNTS_SHEET, 1, sheet.last_row(COUNTS_SHEET))

            grid = [["Student", *snapshot["issues"], "Total"]]
            grid += [[row["student"], *row["counts"], row["total"]] for row in snapshot["rows"]]
            grid.append(["Total", *[t["count"] for t in snapshot["totals_by_issue"]], snapshot["total_logs"]])
            sheet.write_range(COUNTS_SHEET, 1, 1, grid)
        return {"ok": True, "message": f"Exported counts for period {period}."}

    def _add_student_id_column(self, sheet: Spreadsheet) -> None:
        """Older rosters have no Student ID column; insert it after Period."""
        headers = [normalize_header(h) for h in sheet.headers(ROSTER_SHEET)]
        if "student_id" in headers:
            return
        col = len(ROSTER_HEADERS)
        sheet.insert_column(ROSTER_SHEET, col)
        sheet.write_range(ROSTER_SHEET, 1, col, [[ROSTER_HEADERS[-1]]])

    def _seed(self, sheet: Spreadsheet) -> list:
        seeded = []
        if sheet.last_row(ROSTER_SHEET) <= 1:
            sheet.write_range(ROSTER_SHEET, 2, 1, [list(row) for row in SAMPLE_ROSTER])
            seeded.append("roster")
        if sheet.last_row(ISSUES_SHEET) <= 1:
            sheet.write_range(ISSUES_SHEET, 2, 1, [[label] for label in SAMPLE_ISSUES])
            seeded.append("issues")
        return seeded
