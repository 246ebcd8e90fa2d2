# ABOUTME: Bathroom check-in/out endpoints
# ABOUTME: Records scans and serves today's bathroom status and analytics

from typing import Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel

from classlog.dependencies import get_classroom
from classlog.models.errors import ATTACHMENT_REQUIRED, SCAN_RESPONSES
from classlog.services.classroom import Classroom

router = APIRouter(prefix="/bathroom", tags=["bathroom"])


class BathroomLimitRequest(BaseModel):
    limit: int


@router.post("/scan/{student_id}", responses={
    200: {"description": "Scan outcome", "content": {"application/json": {"example": {
        "message": "Ada Lovelace checked in after 7 min."
    }}}},
    **SCAN_RESPONSES,
})
def record_bathroom_event(student_id: str, classroom: Classroom = Depends(get_classroom)):
    """Checks a student out, or back in if they are currently out."""
    return {"message": classroom.writes.record_bathroom_event(student_id)}


@router.get("/status", responses=ATTACHMENT_REQUIRED)
def get_bathroom_status(
    period: Optional[str] = Query(default=None),
    classroom: Classroom = Depends(get_classroom),
):
    """Returns who is out and who is back today, optionally for one period."""
    return classroom.queries.get_bathroom_status(period)


@router.get("/analytics", responses=ATTACHMENT_REQUIRED)
def get_bathroom_analytics(classroom: Classroom = Depends(get_classroom)):
    """Returns today's visit counts and minutes per student and per period."""
    return classroom.queries.get_bathroom_analytics()


@router.put("/limit")
def set_bathroom_limit(request: BathroomLimitRequest, classroom: Classroom = Depends(get_classroom)):
    """Sets how many trips a student may take per day."""
    return classroom.writes.set_bathroom_limit(request.limit)
