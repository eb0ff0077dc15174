from pydantic import BaseModel, Field

from models.schemas.subject import YearLevel


class SelectionItem(BaseModel):
    subject_id: str = Field(..., min_length=1, description="Catalog subject id")
    raw_score: float = Field(..., ge=0, le=100, description="Predicted or actual score (0-100)")


class CalculateRequest(BaseModel):
    year_level: YearLevel = YearLevel.YEAR_11
    entries: list[SelectionItem] = Field(default_factory=list, max_length=20)


class SaveCalculationRequest(CalculateRequest):
    student_name: str | None = Field(None, max_length=200, description="Optional student name")


class ReportRequest(SaveCalculationRequest):
    pass
