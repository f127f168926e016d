"""
Exam API routes
Exam folders and their students
"""
from fastapi import APIRouter, Depends, status

from eduresult.core import BadRequestException, Messages, NotFoundException
from eduresult.routes.deps import get_store, require_admin
from eduresult.schemas import (
    Exam,
    ExamCreateRequest,
    ExamDeleteResponse,
    ExamListResponse,
    StudentListResponse,
)
from eduresult.services import RecordStore

router = APIRouter(dependencies=[Depends(require_admin)])


@router.get("", response_model=ExamListResponse)
async def list_exams(store: RecordStore = Depends(get_store)):
    """
    List exam folders
    """
    exams = store.list_exams()
    return ExamListResponse(exams=exams, total=len(exams))


@router.post("", response_model=Exam, status_code=status.HTTP_201_CREATED)
async def create_exam(request: ExamCreateRequest, store: RecordStore = Depends(get_store)):
    """
    Create an exam folder
    """
    try:
        return store.add_exam(request.name)
    except ValueError:
        raise BadRequestException(Messages.EMPTY_EXAM_NAME)


@router.delete("/{exam_id}", response_model=ExamDeleteResponse)
async def delete_exam(exam_id: str, store: RecordStore = Depends(get_store)):
    """
    Delete an exam folder together with every student filed under it
    """
    removed = store.delete_exam(exam_id)
    if removed is None:
        raise NotFoundException("Exam", exam_id)

    return ExamDeleteResponse(
        exam_id=exam_id,
        deleted_students=removed,
        message=Messages.EXAM_DELETED
    )


@router.get("/{exam_id}/students", response_model=StudentListResponse)
async def list_exam_students(exam_id: str, store: RecordStore = Depends(get_store)):
    """
    List the students in an exam folder
    """
    exam = store.get_exam(exam_id)
    if exam is None:
        raise NotFoundException("Exam", exam_id)

    students = store.list_by_exam(exam.name)
    return StudentListResponse(exam_name=exam.name, students=students, total=len(students))
