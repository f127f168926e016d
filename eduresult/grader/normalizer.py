"""
Record Normalizer
=================
Merges partial or untrusted input (manual form, AI output, stored snapshot)
into a complete Student whose derived fields match its marks.

Nothing here raises on bad input: missing text becomes "", a missing exam
becomes the placeholder exam and unusable scores become 0.
"""
import math
import logging
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Optional, Union

from ..core.constants import DEFAULT_EXAM_NAME, MAX_SCORE, MIN_SCORE, SUBJECTS
from ..schemas import Marks, Student, StudentInput
from ..utils import generate_record_id
from .grading_engine import compute_grade

logger = logging.getLogger(__name__)

PartialRecord = Union[StudentInput, Student, Mapping[str, Any], None]

# camelCase wire name -> snake_case attribute name
_FIELD_ALIASES = {
    "rollNo": "roll_no",
    "className": "class_name",
    "examName": "exam_name",
}


def _as_mapping(partial: PartialRecord) -> Dict[str, Any]:
    if partial is None:
        return {}
    if isinstance(partial, (StudentInput, Student)):
        return partial.model_dump(by_alias=True, exclude_none=True)
    if isinstance(partial, Mapping):
        return dict(partial)
    logger.warning(f"Ignoring unsupported record input of type {type(partial).__name__}")
    return {}


def _pick(data: Mapping[str, Any], key: str) -> Any:
    """Read a field by its wire name, falling back to the attribute name."""
    value = data.get(key)
    if value is None and key in _FIELD_ALIASES:
        value = data.get(_FIELD_ALIASES[key])
    return value


def _coerce_text(value: Any) -> str:
    if value is None or isinstance(value, bool):
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float)):
        if isinstance(value, float) and not math.isfinite(value):
            return ""
        return str(value)
    return ""


def coerce_score(value: Any) -> int:
    """
    Coerce one subject score to an int in [0, 100].

    Numbers and numeric strings are rounded half-up and clamped; anything
    else (None, booleans, NaN, junk text, containers) becomes 0.
    """
    if value is None or isinstance(value, bool):
        return 0

    if isinstance(value, (int, float)):
        raw = str(value)
    elif isinstance(value, str):
        raw = value.strip()
    else:
        return 0

    try:
        number = Decimal(raw)
    except (InvalidOperation, ValueError):
        return 0
    if not number.is_finite():
        return 0
    if number <= MIN_SCORE:
        return MIN_SCORE
    if number >= MAX_SCORE:
        return MAX_SCORE

    return int(number.quantize(Decimal(1), rounding=ROUND_HALF_UP))


def normalize_marks(raw: Any) -> Marks:
    """Fill absent subjects with 0 and coerce every present score."""
    if isinstance(raw, Marks):
        return raw
    if not isinstance(raw, Mapping):
        return Marks()
    return Marks(**{subject: coerce_score(raw.get(subject)) for subject in SUBJECTS})


def normalize(partial: PartialRecord, record_id: Optional[str] = None) -> Student:
    """
    Build a complete, invariant-respecting Student from partial input.

    An ``id`` already on the input is kept, so the same call serves both
    create and update; ``record_id`` overrides it when given.

    Args:
        partial: StudentInput, Student, plain dict (camelCase or snake_case keys) or None
        record_id: Optional id to force onto the record

    Returns:
        Student with total, percentage and grade computed from its marks
    """
    data = _as_mapping(partial)

    marks = normalize_marks(data.get("marks"))
    derived = compute_grade(marks)

    student_id = record_id or _coerce_text(data.get("id")) or generate_record_id()

    return Student(
        id=student_id,
        name=_coerce_text(_pick(data, "name")),
        roll_no=_coerce_text(_pick(data, "rollNo")),
        class_name=_coerce_text(_pick(data, "className")),
        exam_name=_coerce_text(_pick(data, "examName")) or DEFAULT_EXAM_NAME,
        marks=marks,
        total=derived.total,
        percentage=derived.percentage,
        grade=derived.grade,
    )
