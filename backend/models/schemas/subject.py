"""Subject catalog rows and the (subject, raw score) pairs fed to the scoring engine."""

from enum import Enum

from pydantic import BaseModel


class YearLevel(str, Enum):
    YEAR_10 = "Year 10"
    YEAR_11 = "Year 11"
    YEAR_12 = "Year 12"


class SubjectRef(BaseModel):
    """A row of the externally supplied subject reference table.

    `name` and `category` double as semantic keys for the bonus rules;
    `has_bonus` only controls whether a bonus badge is shown.
    """
    model_config = {"frozen": True}

    id: str
    name: str
    category: str
    scaling_factor: float
    has_bonus: bool = False


class SelectionEntry(BaseModel):
    """A selected subject with the student's raw score (0-100 expected, not enforced)."""
    model_config = {"frozen": True}

    subject: SubjectRef
    raw_score: float
