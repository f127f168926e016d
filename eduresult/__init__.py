# EduResult package
"""
EduResult - student exam records with AI-assisted answer sheet entry
"""

from .config import settings

__all__ = [
    "settings",
]
