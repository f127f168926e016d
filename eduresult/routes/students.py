"""
Student API routes
Manual record entry and editing

Request bodies are plain JSON objects; malformed or
missing fields are absorbed by the normalizer, never rejected.
"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query, status

from eduresult.core import BadRequestException, Messages, NotFoundException
from eduresult.grader import normalize
from eduresult.routes.deps import get_store, require_admin
from eduresult.schemas import DeleteResponse, Student
from eduresult.services import RecordStore

router = APIRouter(dependencies=[Depends(require_admin)])


def _form_data(payload: Dict[str, Any], exam_name: Optional[str]) -> Dict[str, Any]:
    data = dict(payload or {})
    # Inside an exam folder the folder decides the exam
    if exam_name:
        data["examName"] = exam_name
        data.pop("exam_name", None)
    return data


@router.post("", response_model=Student, status_code=status.HTTP_201_CREATED)
async def create_student(
    payload: Dict[str, Any] = Body(...),
    exam_name: Optional[str] = Query(default=None, description="Current exam folder"),
    store: RecordStore = Depends(get_store)
):
    """
    Normalize and store a new record
    """
    data = _form_data(payload, exam_name)
    data.pop("id", None)

    student = normalize(data)
    try:
        return store.add_student(student)
    except ValueError as e:
        raise BadRequestException(str(e))


@router.get("/{student_id}", response_model=Student)
async def get_student(student_id: str, store: RecordStore = Depends(get_store)):
    student = store.get_student(student_id)
    if student is None:
        raise NotFoundException("Student", student_id)
    return student


@router.put("/{student_id}", response_model=Student)
async def update_student(
    student_id: str,
    payload: Dict[str, Any] = Body(...),
    exam_name: Optional[str] = Query(default=None, description="Current exam folder"),
    store: RecordStore = Depends(get_store)
):
    """
    Normalize an edited record and replace the stored one
    """
    student = normalize(_form_data(payload, exam_name), record_id=student_id)
    updated = store.update_student(student)
    if updated is None:
        raise NotFoundException("Student", student_id)
    return updated


@router.delete("/{student_id}", response_model=DeleteResponse)
async def delete_student(student_id: str, store: RecordStore = Depends(get_store)):
    if not store.delete_student(student_id):
        raise NotFoundException("Student", student_id)
    return DeleteResponse(message=Messages.STUDENT_DELETED)
