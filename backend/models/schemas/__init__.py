"""Domain records shared by the scoring engine and its collaborators."""

from models.schemas.calculation import CalculationRecord, CalculationSubject
from models.schemas.subject import SelectionEntry, SubjectRef, YearLevel

__all__ = [
    "CalculationRecord",
    "CalculationSubject",
    "SelectionEntry",
    "SubjectRef",
    "YearLevel",
]
