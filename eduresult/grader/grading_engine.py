"""
Grading Engine Module
Turns subject marks into total, percentage and letter grade
"""
from dataclasses import dataclass, asdict
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Mapping, Union
import logging

from ..core.constants import SUBJECTS, Grade, GradeThresholds
from ..schemas import Marks

logger = logging.getLogger(__name__)

_TWO_PLACES = Decimal("0.01")


@dataclass(frozen=True)
class GradeResult:
    """Derived fields of a student record"""
    total: int
    percentage: float
    grade: Grade

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary"""
        result = asdict(self)
        result["grade"] = self.grade.value
        return result


def round_half_up(value: Union[int, float, Decimal], places: Decimal = _TWO_PLACES) -> float:
    """Round to two decimals, halves away from zero (89.995 -> 90.0)"""
    return float(Decimal(str(value)).quantize(places, rounding=ROUND_HALF_UP))


def classify_percentage(percentage: float) -> Grade:
    """
    Map a percentage to a letter grade.

    Thresholds are inclusive and evaluated top-down.
    """
    if percentage >= GradeThresholds.A_PLUS:
        return Grade.A_PLUS
    elif percentage >= GradeThresholds.A:
        return Grade.A
    elif percentage >= GradeThresholds.B:
        return Grade.B
    elif percentage >= GradeThresholds.C:
        return Grade.C
    elif percentage >= GradeThresholds.D:
        return Grade.D
    return Grade.F


def compute_grade(marks: Union[Marks, Mapping[str, Union[int, float]]]) -> GradeResult:
    """
    Compute total, percentage and grade for a set of marks.

    Scores are summed as given; clamping to the valid range is the
    caller's job.

    Args:
        marks: Marks model or mapping of subject -> score

    Returns:
        GradeResult with the derived fields
    """
    if isinstance(marks, Marks):
        marks = marks.model_dump()

    total = sum(marks.get(subject, 0) for subject in SUBJECTS)
    percentage = round_half_up(Decimal(str(total)) / len(SUBJECTS))

    return GradeResult(
        total=total,
        percentage=percentage,
        grade=classify_percentage(percentage),
    )
