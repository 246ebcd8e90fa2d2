# ABOUTME: App state and setup endpoints
# ABOUTME: Reports attachment status and builds the class log sheets

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from classlog.dependencies import get_classroom
from classlog.services.classroom import Classroom
from classlog.services.writes import DEFAULT_DOCUMENT_NAME

router = APIRouter(tags=["setup"])


class BuildSheetsRequest(BaseModel):
    """Request body for building the class log sheets."""
    seed: bool = True
    name: str = DEFAULT_DOCUMENT_NAME


@router.get("/state", responses={
    200: {"description": "Attachment status", "content": {"application/json": {"example": {
        "attached": True,
        "doc_id": "3f9c0a7be1d24c6e9a0b11d2",
        "doc_url": "file:///srv/classlog/documents/3f9c0a7be1d24c6e9a0b11d2.xlsx",
        "sheets_present": {"roster": True, "issues": True, "log": True, "counts": True},
        "has_data": {"roster": True, "issues": True, "log": False},
    }}}},
})
def get_app_state(classroom: Classroom = Depends(get_classroom)):
    """Returns whether a class log is attached and which sheets hold data."""
    return classroom.queries.get_app_state()


@router.post("/sheets")
def build_sheets(request: BuildSheetsRequest, classroom: Classroom = Depends(get_classroom)):
    """
    Create or complete the class log workbook.

    Creates a new workbook when none is attached. Sample roster and issue
    rows are added to empty sheets when seed is true.
    """
    return classroom.writes.build_sheets(seed=request.seed, name=request.name)
