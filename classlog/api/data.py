# ABOUTME: Roster, issue and count endpoints
# ABOUTME: Serves cached roster/issue lists and per-period count snapshots

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from classlog.dependencies import get_classroom
from classlog.models.errors import ATTACHMENT_REQUIRED
from classlog.services.classroom import Classroom

router = APIRouter(tags=["data"])


class AddIssueRequest(BaseModel):
    label: str


@router.get("/data", responses={
    200: {"description": "Periods, students per period and issue labels", "content": {"application/json": {"example": {
        "periods": ["1", "2"],
        "per_map": {"1": ["Ada Lovelace", "Alan Turing"], "2": ["Edsger Dijkstra"]},
        "issues": ["Tardy", "Phone out"],
    }}}},
    **ATTACHMENT_REQUIRED,
})
def get_data(classroom: Classroom = Depends(get_classroom)):
    """Returns periods, the students in each period and the issue labels."""
    return classroom.queries.get_data()


@router.get("/counts/{period}", responses=ATTACHMENT_REQUIRED)
def get_counts_snapshot(period: str, classroom: Classroom = Depends(get_classroom)):
    """Returns the student x issue count matrix and rollups for a period."""
    return classroom.queries.get_counts_snapshot(period)


@router.post("/counts/{period}/export")
def export_counts(period: str, classroom: Classroom = Depends(get_classroom)):
    """Writes the period's count matrix into the Counts sheet."""
    return classroom.writes.export_counts(period)


@router.post("/issues")
def add_issue(request: AddIssueRequest, classroom: Classroom = Depends(get_classroom)):
    """Appends a new issue label."""
    return classroom.writes.add_issue(request.label)
