# ABOUTME: Aggregate computations over parsed class log rows
# ABOUTME: Roster/issue lists, per-period count snapshots, bathroom status and analytics

from datetime import date
from typing import Dict, List, Optional

from classlog.models.records import (
    BathroomEvent,
    LogEntry,
    RosterRow,
    DIRECTION_IN,
    DIRECTION_OUT,
)


def compute_roster_and_issues(roster: List[RosterRow], issues: List[str]) -> dict:
    """
    Periods, students per period and issue labels for the UI pickers.

    Returns:
        {"periods": sorted unique periods,
         "per_map": {period: sorted unique names},
         "issues": labels in sheet order}
    """
    per_map: Dict[str, set] = {}
    for row in roster:
        if not row.period or not row.name:
            continue
        per_map.setdefault(row.period, set()).add(row.name)

    periods = sorted(per_map)
    return {
        "periods": periods,
        "per_map": {period: sorted(per_map[period]) for period in periods},
        "issues": [label for label in issues if label],
    }


def roster_names_for_period(roster: List[RosterRow], period: str) -> List[str]:
    return sorted({row.name for row in roster if row.period == period and row.name})


def compute_count_snapshot(
    roster: List[RosterRow],
    issues: List[str],
    log: List[LogEntry],
    period: str,
) -> dict:
    """
    Count matrix of log entries per student (rows) and issue (columns) for a period.

    Entries for other periods, students outside the period's roster, or
    unknown issue labels are skipped.
    """
    period = (period or "").strip()
    issue_index = {}
    for label in issues:
        issue_index.setdefault(label, len(issue_index))
    labels = list(issue_index)
    names = roster_names_for_period(roster, period)
    student_index = {name: i for i, name in enumerate(names)}

    matrix = [[0] * len(labels) for _ in names]
    if labels and names:
        for entry in log:
            if entry.period != period:
                continue
            s_idx = student_index.get(entry.student)
            i_idx = issue_index.get(entry.issue)
            if s_idx is None or i_idx is None:
                continue
            matrix[s_idx][i_idx] += 1

    totals_by_issue = [sum(row[i] for row in matrix) for i in range(len(labels))]
    totals_by_student = [sum(row) for row in matrix]

    return {
        "period": period,
        "issues": labels,
        "rows": [
            {"student": name, "counts": matrix[i], "total": totals_by_student[i]}
            for i, name in enumerate(names)
        ],
        "totals_by_issue": [
            {"issue": label, "count": totals_by_issue[i]} for i, label in enumerate(labels)
        ],
        "totals_by_student": [
            {"student": name, "total": totals_by_student[i]} for i, name in enumerate(names)
        ],
        "total_logs": sum(totals_by_student),
        "zero_students": sum(1 for total in totals_by_student if total == 0),
        "issue_variety": sum(1 for total in totals_by_issue if total > 0),
    }


def events_on(events: List[BathroomEvent], day: date) -> List[BathroomEvent]:
    return [e for e in events if e.timestamp.date() == day]


def latest_event_for(events: List[BathroomEvent], student_id: str) -> Optional[BathroomEvent]:
    """Most recent event for a student across all days."""
    latest = None
    for event in events:
        if event.student_id == student_id and (latest is None or event.timestamp >= latest.timestamp):
            latest = event
    return latest


def count_trips_on(events: List[BathroomEvent], student_id: str, day: date) -> int:
    """Number of "out" events for a student on the given day."""
    return sum(
        1 for e in events
        if e.student_id == student_id and e.direction == DIRECTION_OUT and e.timestamp.date() == day
    )


def compute_bathroom_status(events: List[BathroomEvent], today: date, period: Optional[str] = None) -> dict:
    """
    Who is out and who is back, based on each student's latest event today.

    Both lists are sorted by student name.
    """
    latest: Dict[str, BathroomEvent] = {}
    for event in events_on(events, today):
        if period and event.period != period:
            continue
        current = latest.get(event.student_id)
        if current is None or event.timestamp >= current.timestamp:
            latest[event.student_id] = event

    out, back = [], []
    for event in latest.values():
        if event.direction == DIRECTION_OUT:
            out.append({
                "student_id": event.student_id,
                "student": event.student,
                "period": event.period,
                "since": event.timestamp.isoformat(),
            })
        else:
            back.append({
                "student_id": event.student_id,
                "student": event.student,
                "period": event.period,
                "minutes": event.minutes,
            })

    return {
        "period": period or None,
        "out": sorted(out, key=lambda item: item["student"]),
        "in": sorted(back, key=lambda item: item["student"]),
    }


def compute_bathroom_analytics(events: List[BathroomEvent], today: date) -> dict:
    """Visits and minutes per student and per period, counting completed trips only."""
    students: Dict[str, dict] = {}
    periods: Dict[str, dict] = {}

    for event in events_on(events, today):
        if event.direction != DIRECTION_IN:
            continue
        minutes = event.minutes or 0

        bucket = students.setdefault(event.student_id, {
            "student_id": event.student_id,
            "student": event.student,
            "period": event.period,
            "visits": 0,
            "minutes": 0,
        })
        bucket["visits"] += 1
        bucket["minutes"] += minutes

        period_bucket = periods.setdefault(event.period, {"period": event.period, "visits": 0, "minutes": 0})
        period_bucket["visits"] += 1
        period_bucket["minutes"] += minutes

    return {
        "date": today.isoformat(),
        "students": sorted(students.values(), key=lambda item: (item["student"], item["student_id"])),
        "periods": sorted(periods.values(), key=lambda item: item["period"]),
        "total_visits": sum(b["visits"] for b in periods.values()),
        "total_minutes": sum(b["minutes"] for b in periods.values()),
    }
