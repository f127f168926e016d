"""
Grader Module
Derived academic metrics and the record consistency boundary

Usage:
    from eduresult.grader import compute_grade, normalize

    result = compute_grade({"math": 95, "science": 92, "english": 88,
                            "history": 90, "computer": 85})
    # GradeResult(total=450, percentage=90.0, grade=Grade.A_PLUS)

    student = normalize({"name": "Asha", "rollNo": "2024-001",
                         "marks": {"math": "78"}})
"""

from .grading_engine import (
    GradeResult,
    classify_percentage,
    compute_grade,
    round_half_up,
)

from .normalizer import (
    coerce_score,
    normalize,
    normalize_marks,
)

__all__ = [
    # Grading
    "GradeResult",
    "classify_percentage",
    "compute_grade",
    "round_half_up",
    # Normalizer
    "coerce_score",
    "normalize",
    "normalize_marks",
]
