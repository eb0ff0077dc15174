from typing import Literal

from pydantic import BaseModel

from models.schemas.subject import SubjectRef, YearLevel


class RankedSubject(BaseModel):
    subject: SubjectRef
    raw_score: float
    scaled_score: float


class BonusContribution(BaseModel):
    subject: SubjectRef
    rule: Literal["mathematics", "languages", "flagged"]
    scaled_score: float
    bonus: float  # scaled_score * 0.1, unrounded


class ScoreResult(BaseModel):
    atar: float = 0.0
    top_four: list[RankedSubject] = []
    bonuses: list[BonusContribution] = []


class CalculationResponse(BaseModel):
    year_level: YearLevel
    entry_count: int = 0
    # False while fewer than the minimum number of subjects are selected
    has_result: bool = False
    result: ScoreResult = ScoreResult()
    recommendations: list[str] = []


class SubjectListResponse(BaseModel):
    category: str = "All"
    subjects: list[SubjectRef] = []
