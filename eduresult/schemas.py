"""
Pydantic schemas for records and API request/response models
"""
from pydantic import BaseModel, ConfigDict, Field
from typing import List, Dict, Optional, Any

from .core.constants import DEFAULT_EXAM_NAME, MAX_SCORE, MIN_SCORE, Grade


# ===== Record Schemas =====
class Marks(BaseModel):
    """Per-subject scores; every subject is always present"""
    model_config = ConfigDict(frozen=True)

    math: int = Field(default=0, ge=MIN_SCORE, le=MAX_SCORE)
    science: int = Field(default=0, ge=MIN_SCORE, le=MAX_SCORE)
    english: int = Field(default=0, ge=MIN_SCORE, le=MAX_SCORE)
    history: int = Field(default=0, ge=MIN_SCORE, le=MAX_SCORE)
    computer: int = Field(default=0, ge=MIN_SCORE, le=MAX_SCORE)


class Student(BaseModel):
    """
    A complete student record.

    Only build these through ``grader.normalize`` so that total,
    percentage and grade always match the marks.
    """
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str = ""
    roll_no: str = Field(default="", alias="rollNo")
    class_name: str = Field(default="", alias="className")
    exam_name: str = Field(default=DEFAULT_EXAM_NAME, alias="examName")
    marks: Marks = Field(default_factory=Marks)
    total: int = 0
    percentage: float = 0.0
    grade: Grade = Grade.F


class StudentInput(BaseModel):
    """Partial record from a manual form or the extraction client"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: Optional[str] = None
    name: Optional[str] = None
    roll_no: Optional[str] = Field(default=None, alias="rollNo")
    class_name: Optional[str] = Field(default=None, alias="className")
    exam_name: Optional[str] = Field(default=None, alias="examName")
    marks: Optional[Dict[str, Any]] = None


class Exam(BaseModel):
    """An exam folder"""
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    id: str
    name: str
    created_at: str = Field(..., alias="createdAt", description="ISO-8601 timestamp")


# ===== Extraction Schemas =====
class ExtractedMarks(BaseModel):
    model_config = ConfigDict(extra="ignore")

    math: Optional[float] = None
    science: Optional[float] = None
    english: Optional[float] = None
    history: Optional[float] = None
    computer: Optional[float] = None


class AnswerSheetPayload(BaseModel):
    """Shape check for the extraction provider's JSON output"""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Optional[str] = None
    roll_no: Optional[str] = Field(default=None, alias="rollNo")
    class_name: Optional[str] = Field(default=None, alias="className")
    exam_name: Optional[str] = Field(default=None, alias="examName")
    marks: Optional[ExtractedMarks] = None


class ScanResponse(BaseModel):
    success: bool = True
    message: str
    candidate: Student


# ===== Auth Schemas =====
class LoginRequest(BaseModel):
    username: str = Field(..., description="Admin username")
    password: str = Field(..., description="Admin password")


class SessionResponse(BaseModel):
    success: bool = True
    is_admin: bool
    message: Optional[str] = None


# ===== Exam Schemas =====
class ExamCreateRequest(BaseModel):
    name: str = Field(..., description="Exam folder name")


class ExamDeleteResponse(BaseModel):
    success: bool = True
    exam_id: str
    deleted_students: int
    message: str


class ExamListResponse(BaseModel):
    exams: List[Exam]
    total: int


# ===== Student Schemas =====
class StudentListResponse(BaseModel):
    exam_name: str
    students: List[Student]
    total: int


class DeleteResponse(BaseModel):
    success: bool = True
    message: str


# ===== Result Lookup Schemas =====
class ResultExamsResponse(BaseModel):
    exams: List[str]
