"""Caller side of the scoring engine.

1. Resolve request items against the subject catalog
2. Run the scoring engine
3. Attach advisory text / persist / render, depending on the endpoint

The catalog and store are passed in; the engine never sees them.
"""

import logging
from datetime import date

from models.requests import CalculateRequest, ReportRequest, SaveCalculationRequest
from models.responses import CalculationResponse
from models.schemas.calculation import CalculationRecord
from services import report, scoring
from services.calculation_store import CalculationStore
from services.catalog import SelectionError, SubjectCatalog

logger = logging.getLogger(__name__)


class NotEnoughSubjectsError(SelectionError):
    def __init__(self, count: int) -> None:
        super().__init__(
            f"At least {scoring.MIN_ENTRIES} subjects are required, got {count}"
        )
        self.count = count


def calculate(request: CalculateRequest, catalog: SubjectCatalog) -> CalculationResponse:
    entries = catalog.resolve(request.entries)
    result = scoring.compute_aggregate(entries)
    return CalculationResponse(
        year_level=request.year_level,
        entry_count=len(entries),
        has_result=len(entries) >= scoring.MIN_ENTRIES,
        result=result,
        recommendations=scoring.recommendations_for(request.year_level),
    )


def save_calculation(
    request: SaveCalculationRequest,
    catalog: SubjectCatalog,
    store: CalculationStore,
) -> CalculationRecord:
    entries = catalog.resolve(request.entries)
    if len(entries) < scoring.MIN_ENTRIES:
        raise NotEnoughSubjectsError(len(entries))

    result = scoring.compute_aggregate(entries)
    return store.save(
        student_name=request.student_name,
        year_level=request.year_level,
        predicted_atar=result.atar,
        entries=entries,
    )


def build_report(
    request: ReportRequest,
    catalog: SubjectCatalog,
    generated_on: date | None = None,
) -> tuple[bytes, str]:
    """Returns (pdf_bytes, download filename)."""
    entries = catalog.resolve(request.entries)
    if len(entries) < scoring.MIN_ENTRIES:
        raise NotEnoughSubjectsError(len(entries))

    generated_on = generated_on or date.today()
    result = scoring.compute_aggregate(entries)
    pdf = report.render_report(
        result,
        entries,
        request.year_level,
        student_name=request.student_name,
        generated_on=generated_on,
    )
    return pdf, report.report_filename(request.student_name, generated_on)
