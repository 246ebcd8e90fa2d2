# ABOUTME: Command line interface for the class log
# ABOUTME: Builds sheets, imports rosters from Excel, prints counts and records bathroom scans

import argparse
import json
import logging
import sys
from pathlib import Path

from classlog.config import get_settings
from classlog.models.errors import ClasslogError
from classlog.services.classroom import Classroom
from classlog.utils.excel_parser import parse_roster_file


def build_classroom() -> Classroom:
    """Classroom bound to the configured database."""
    from classlog.database import SessionLocal, init_db

    init_db()
    return Classroom(SessionLocal, get_settings())


def _print_result(result: dict) -> int:
    print(result["message"])
    return 0 if result["ok"] else 1


def cmd_build(classroom: Classroom, args) -> int:
    result = classroom.writes.build_sheets(seed=not args.no_seed, name=args.name)
    code = _print_result(result)
    if result["ok"]:
        print(f"Document: {result['doc_id']}")
        print(f"URL: {result['doc_url']}")
    return code


def cmd_import_roster(classroom: Classroom, args) -> int:
    file_path = Path(args.file_path)
    if not file_path.exists():
        print(f"Error: File not found: {args.file_path}")
        return 1

    print(f"Parsing roster file: {file_path}")
    try:
        rows = parse_roster_file(str(file_path), sheet_name=args.sheet)
    except ValueError as e:
        print(f"Error: {e}")
        return 1

    print(f"Found {len(rows)} students")
    if args.dry_run:
        print("\nDry run - no changes will be made")
        for row in rows[:10]:
            print(f"  {row['name']} (period {row['period']}, id {row['student_id']})")
        return 0

    return _print_result(classroom.writes.import_roster(rows))


def cmd_counts(classroom: Classroom, args) -> int:
    snapshot = classroom.queries.get_counts_snapshot(args.period)
    if args.json:
        print(json.dumps(snapshot, indent=2))
        return 0

    issues = snapshot["issues"]
    print("\t".join(["Student", *issues, "Total"]))
    for row in snapshot["rows"]:
        print("\t".join([row["student"], *(str(c) for c in row["counts"]), str(row["total"])]))
    print(f"\nTotal logs: {snapshot['total_logs']}  "
          f"Students with none: {snapshot['zero_students']}  "
          f"Issues seen: {snapshot['issue_variety']}")
    return 0


def cmd_scan(classroom: Classroom, args) -> int:
    print(classroom.writes.record_bathroom_event(args.student_id))
    return 0


def cmd_status(classroom: Classroom, args) -> int:
    status = classroom.queries.get_bathroom_status(args.period)
    print("Out:")
    for item in status["out"] or []:
        print(f"  {item['student']} (since {item['since']})")
    print("In:")
    for item in status["in"] or []:
        print(f"  {item['student']} (last trip {item['minutes']} min)")
    return 0


def main(argv=None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(prog="classlog", description="Classroom issue and bathroom log")
    parser.add_argument("--verbose", action="store_true", help="Log debug output")
    subparsers = parser.add_subparsers(dest="command", required=True)

    build = subparsers.add_parser("build", help="Create or complete the class log workbook")
    build.add_argument("--name", default="Classroom Log", help="Workbook title for a new class log")
    build.add_argument("--no-seed", action="store_true", help="Do not add sample roster and issues")
    build.set_defaults(func=cmd_build)

    roster = subparsers.add_parser("import-roster", help="Replace the roster from an Excel file")
    roster.add_argument("file_path", help="Path to Excel file")
    roster.add_argument("--sheet", default=None, help="Sheet to read (default: Roster or first sheet)")
    roster.add_argument("--dry-run", action="store_true", help="Preview without importing")
    roster.set_defaults(func=cmd_import_roster)

    counts = subparsers.add_parser("counts", help="Print the issue counts for a period")
    counts.add_argument("period")
    counts.add_argument("--json", action="store_true", help="Print the raw snapshot")
    counts.set_defaults(func=cmd_counts)

    scan = subparsers.add_parser("scan", help="Check a student out or back in")
    scan.add_argument("student_id")
    scan.set_defaults(func=cmd_scan)

    status = subparsers.add_parser("status", help="Show who is out right now")
    status.add_argument("--period", default=None)
    status.set_defaults(func=cmd_status)

    args = parser.parse_args(argv)

    settings = get_settings()
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else settings.log_level.upper(),
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        return args.func(build_classroom(), args)
    except ClasslogError as e:
        print(f"Error: {e.message}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
