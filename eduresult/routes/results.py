"""
Result lookup API routes
Public: students check a result by roll number and exam
"""
from fastapi import APIRouter, Depends, Query

from eduresult.core import NotFoundException
from eduresult.routes.deps import get_store
from eduresult.schemas import ResultExamsResponse, Student
from eduresult.services import RecordStore

router = APIRouter()


@router.get("/exams", response_model=ResultExamsResponse)
async def list_result_exams(store: RecordStore = Depends(get_store)):
    """
    Exam names that have published results
    """
    return ResultExamsResponse(exams=store.exam_names())


@router.get("", response_model=Student)
async def lookup_result(
    roll_no: str = Query(..., description="Roll number"),
    exam_name: str = Query(..., description="Exam name"),
    store: RecordStore = Depends(get_store)
):
    """
    Find one result; roll numbers match case-insensitively
    """
    student = store.find_by_roll_and_exam(roll_no, exam_name)
    if student is None:
        raise NotFoundException("Record", roll_no)
    return student
