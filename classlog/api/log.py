# ABOUTME: Issue log endpoints
# ABOUTME: Logs entries, undoes the last matching entry and clears the log

from datetime import datetime
from typing import List, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from classlog.dependencies import get_classroom
from classlog.services.classroom import Classroom

router = APIRouter(prefix="/log", tags=["log"])


class LogEntryRequest(BaseModel):
    student: str = ""
    issue: str = ""
    notes: str = ""


class LogEntriesRequest(BaseModel):
    entries: List[LogEntryRequest]
    ts: Optional[datetime] = None


class UndoRequest(BaseModel):
    student: str
    issue: str
    period: Optional[str] = None


@router.post("", responses={
    200: {"description": "Write outcome", "content": {"application/json": {"example": {
        "ok": True, "message": "Logged 2 entries."
    }}}},
})
def log_entries(request: LogEntriesRequest, classroom: Classroom = Depends(get_classroom)):
    """
    Logs one or more issue entries.

    Periods are taken from the roster. Entries missing a student or an issue
    are skipped; if none remain the response has ok false.
    """
    entries = [entry.model_dump() for entry in request.entries]
    return classroom.writes.log_entries(entries, ts=request.ts)


@router.post("/undo")
def delete_last_entry(request: UndoRequest, classroom: Classroom = Depends(get_classroom)):
    """Removes the most recent entry matching student, issue and optional period."""
    return classroom.writes.delete_last_entry(request.student, request.issue, request.period)


@router.delete("")
def clear_all_logs(classroom: Classroom = Depends(get_classroom)):
    """Removes every log entry, keeping the header row."""
    return classroom.writes.clear_all_logs()
