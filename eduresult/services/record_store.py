"""
Record Store
Owns the student and exam collections and keeps them consistent
"""
import logging
from typing import Dict, List, Optional

from eduresult.core import PersistenceException, store_logger
from eduresult.schemas import Exam, Student
from eduresult.services.persistence import PersistenceAdapter
from eduresult.utils import generate_record_id, utc_timestamp

logger = logging.getLogger(__name__)


class RecordStore:
    """
    In-process collection of students and exam folders.

    Build one per process with an injected PersistenceAdapter and hand it to
    consumers by reference. Records are immutable pydantic models and every
    mutation swaps in a new list, so nothing outside the store can change
    its state. A mutation is applied and saved as one step: if a save fails
    the previous collections are restored in memory and in the backend.

    Students passed to ``add_student``/``update_student`` must come from
    ``eduresult.grader.normalize``.
    """

    def __init__(self, persistence: PersistenceAdapter, autoload: bool = True):
        self.persistence = persistence
        self._students: List[Student] = []
        self._exams: List[Exam] = []
        if autoload:
            self.reload()

    def reload(self) -> None:
        """Replace in-memory state with the persisted snapshot"""
        students, exams = self.persistence.load()
        self._students = list(students)
        self._exams = list(exams)

    def _commit(
        self,
        students: Optional[List[Student]] = None,
        exams: Optional[List[Exam]] = None
    ) -> None:
        """
        Swap in new collections and save them.

        Raises:
            PersistenceException: a save failed; state is back to what it was
        """
        previous_students, previous_exams = self._students, self._exams
        saved = []
        try:
            if students is not None:
                self._students = students
                self.persistence.save_students(students)
                saved.append("students")
            if exams is not None:
                self._exams = exams
                self.persistence.save_exams(exams)
                saved.append("exams")
        except PersistenceException:
            self._students, self._exams = previous_students, previous_exams
            try:
                if "students" in saved:
                    self.persistence.save_students(previous_students)
                if "exams" in saved:
                    self.persistence.save_exams(previous_exams)
            except PersistenceException as e:
                logger.error(f"Rollback of a failed save did not complete: {e.detail}")
            raise

    # ===== Students =====

    def add_student(self, student: Student) -> Student:
        """
        Add a normalized student record.

        Raises:
            ValueError: a record with the same id already exists
        """
        if any(s.id == student.id for s in self._students):
            raise ValueError(f"Student '{student.id}' already exists")

        self._commit(students=self._students + [student])
        store_logger.info(
            f"Added student {student.id} (roll {student.roll_no!r}, exam {student.exam_name!r})"
        )
        return student

    def update_student(self, student: Student) -> Optional[Student]:
        """
        Replace the record with the same id.

        Returns:
            The stored record, or None if no record has that id
        """
        if not any(s.id == student.id for s in self._students):
            return None

        self._commit(students=[student if s.id == student.id else s for s in self._students])
        store_logger.info(f"Updated student {student.id}")
        return student

    def delete_student(self, student_id: str) -> bool:
        remaining = [s for s in self._students if s.id != student_id]
        if len(remaining) == len(self._students):
            return False

        self._commit(students=remaining)
        store_logger.info(f"Deleted student {student_id}")
        return True

    def get_student(self, student_id: str) -> Optional[Student]:
        return next((s for s in self._students if s.id == student_id), None)

    def list_students(self) -> List[Student]:
        return list(self._students)

    # ===== Exams =====

    def add_exam(self, name: str) -> Exam:
        """
        Create an exam folder.

        Names are trimmed. Duplicate names are accepted; keeping them unique
        is left to whoever enters them.

        Raises:
            ValueError: the name is empty after trimming
        """
        name = (name or "").strip()
        if not name:
            raise ValueError("Exam name is required")

        exam = Exam(id=generate_record_id(), name=name, created_at=utc_timestamp())
        self._commit(exams=self._exams + [exam])
        store_logger.info(f"Added exam {exam.id} ({exam.name!r})")
        return exam

    def delete_exam(self, exam_id: str) -> Optional[int]:
        """
        Delete an exam folder and every student filed under its name.

        Both collections change in one commit. Students are saved before
        the exam, so a failure part way never leaves students on disk
        whose exam is gone.

        Returns:
            Number of students removed, or None if the exam does not exist
        """
        exam = self.get_exam(exam_id)
        if exam is None:
            return None

        exams = [e for e in self._exams if e.id != exam_id]
        students = [s for s in self._students if s.exam_name != exam.name]
        removed = len(self._students) - len(students)

        self._commit(students=students, exams=exams)

        store_logger.info(f"Deleted exam {exam_id} ({exam.name!r}) and {removed} students")
        return removed

    def get_exam(self, exam_id: str) -> Optional[Exam]:
        return next((e for e in self._exams if e.id == exam_id), None)

    def list_exams(self) -> List[Exam]:
        return list(self._exams)

    # ===== Queries =====

    def list_by_exam(self, exam_name: str) -> List[Student]:
        """Students in an exam folder (exact name match)"""
        return [s for s in self._students if s.exam_name == exam_name]

    def find_by_roll_and_exam(self, roll_no: str, exam_name: str) -> Optional[Student]:
        """
        Look up one result.

        Roll numbers compare trimmed and case-insensitive, exam names exactly.
        No match is a normal outcome and returns None.
        """
        wanted = (roll_no or "").strip().lower()
        for student in self._students:
            if student.roll_no.strip().lower() == wanted and student.exam_name == exam_name:
                return student
        return None

    def exam_names(self) -> List[str]:
        """Sorted distinct exam names that have at least one result"""
        return sorted({s.exam_name for s in self._students})

    def snapshot(self) -> Dict[str, List[Dict]]:
        """JSON-ready copy of both collections"""
        return {
            "students": [s.model_dump(by_alias=True, mode="json") for s in self._students],
            "exams": [e.model_dump(by_alias=True, mode="json") for e in self._exams],
        }
