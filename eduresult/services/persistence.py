"""
Persistence Service
Durable key-value snapshots of the student and exam collections
"""
import os
import json
import logging
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from pydantic import ValidationError

from eduresult.config import settings
from eduresult.core import PersistenceException
from eduresult.grader import normalize
from eduresult.schemas import Exam, Student
from eduresult.utils import ensure_directory, safe_filename

logger = logging.getLogger(__name__)


class KeyValueBackend(ABC):
    """String-keyed storage of opaque string blobs"""

    @abstractmethod
    def get(self, key: str) -> Optional[str]:
        """Return the stored blob, or None if the key is absent"""
        pass

    @abstractmethod
    def set(self, key: str, value: str) -> None:
        pass

    @abstractmethod
    def delete(self, key: str) -> None:
        pass


class MemoryBackend(KeyValueBackend):
    """In-process backend; lives as long as the object (tests, session scope)"""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._data: Dict[str, str] = dict(initial or {})

    def get(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def set(self, key: str, value: str) -> None:
        self._data[key] = value

    def delete(self, key: str) -> None:
        self._data.pop(key, None)


class JsonFileBackend(KeyValueBackend):
    """One ``<key>.json`` file per key inside a directory"""

    def __init__(self, directory: Optional[Union[str, Path]] = None):
        self.directory = ensure_directory(directory or settings.DATA_DIR)

    def _path(self, key: str) -> Path:
        return self.directory / f"{safe_filename(key)}.json"

    def get(self, key: str) -> Optional[str]:
        path = self._path(key)
        if not path.exists():
            return None
        with open(path, 'r', encoding='utf-8') as f:
            return f.read()

    def set(self, key: str, value: str) -> None:
        # Readers never see a partially written blob
        fd, tmp_path = tempfile.mkstemp(dir=self.directory, prefix=f".{safe_filename(key)}.", suffix=".tmp")
        try:
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                f.write(value)
            os.replace(tmp_path, self._path(key))
        except BaseException:
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise

    def delete(self, key: str) -> None:
        path = self._path(key)
        if path.exists():
            path.unlink()


class PersistenceAdapter:
    """
    Snapshot/restore of the record collections.

    Each collection is stored whole as a JSON array under its own key.
    Reads never fail: absent or corrupt data yields an empty collection.
    Writes are full overwrites.
    """

    def __init__(
        self,
        backend: KeyValueBackend,
        student_key: str = None,
        exam_key: str = None
    ):
        self.backend = backend
        self.student_key = student_key or settings.STUDENT_DB_KEY
        self.exam_key = exam_key or settings.EXAM_DB_KEY
        self._last_written: Dict[str, str] = {}

    def _read_array(self, key: str) -> List[Any]:
        try:
            blob = self.backend.get(key)
        except (OSError, UnicodeDecodeError) as e:
            logger.warning(f"Could not read '{key}': {e}")
            return []

        if blob is None:
            return []

        try:
            items = json.loads(blob)
        except (ValueError, TypeError, RecursionError) as e:
            logger.warning(f"Discarding corrupt snapshot '{key}': {e}")
            return []

        if not isinstance(items, list):
            logger.warning(f"Discarding snapshot '{key}': expected a JSON array")
            return []

        self._last_written[key] = blob
        return items

    def _write_array(self, key: str, items: List[Dict[str, Any]]) -> None:
        blob = json.dumps(items, ensure_ascii=False)
        if self._last_written.get(key) == blob:
            return

        try:
            self.backend.set(key, blob)
        except OSError as e:
            logger.error(f"Could not save '{key}': {e}")
            raise PersistenceException(key, str(e))

        self._last_written[key] = blob
        logger.info(f"Saved {len(items)} records to '{key}'")

    def load_students(self) -> List[Student]:
        """
        Restore students; every record passes through the normalizer.

        Entries stored without an id get one here, and the repaired snapshot
        is written back so the id stays the same on the next load.
        """
        students = []
        assigned_ids = 0
        for item in self._read_array(self.student_key):
            if not isinstance(item, dict):
                logger.warning(f"Skipping malformed student entry in '{self.student_key}'")
                continue
            if not item.get("id"):
                assigned_ids += 1
            students.append(normalize(item))

        if assigned_ids:
            logger.warning(f"Assigned ids to {assigned_ids} stored students without one")
            try:
                self.save_students(students)
            except PersistenceException as e:
                logger.warning(f"Could not write back repaired '{self.student_key}': {e.detail}")
        return students

    def load_exams(self) -> List[Exam]:
        exams = []
        for item in self._read_array(self.exam_key):
            try:
                exams.append(Exam.model_validate(item))
            except ValidationError as e:
                logger.warning(f"Skipping malformed exam entry in '{self.exam_key}': {e}")
        return exams

    def load(self) -> Tuple[List[Student], List[Exam]]:
        """
        Load both collections at process start.

        Returns:
            (students, exams)
        """
        students = self.load_students()
        exams = self.load_exams()
        logger.info(f"Loaded {len(students)} students and {len(exams)} exams")
        return students, exams

    def save_students(self, students: Sequence[Student]) -> None:
        self._write_array(
            self.student_key,
            [s.model_dump(by_alias=True, mode="json") for s in students]
        )

    def save_exams(self, exams: Sequence[Exam]) -> None:
        self._write_array(
            self.exam_key,
            [e.model_dump(by_alias=True, mode="json") for e in exams]
        )
