"""Persisted calculation rows (`calculations` + `calculation_subjects`)."""

from datetime import datetime

from pydantic import BaseModel

from models.schemas.subject import YearLevel


class CalculationSubject(BaseModel):
    subject_id: str
    raw_score: float
    scaled_score: float


class CalculationRecord(BaseModel):
    id: str
    student_name: str | None = None
    year_level: YearLevel
    predicted_atar: float
    created_at: datetime
    subjects: list[CalculationSubject] = []
