from fastapi import APIRouter, Depends, HTTPException, Query, Request, Response
from slowapi import Limiter
from slowapi.util import get_remote_address

from api.dependencies import get_calculation_store, get_catalog
from config import settings
from models.requests import CalculateRequest, ReportRequest, SaveCalculationRequest
from models.responses import CalculationResponse, SubjectListResponse
from models.schemas.calculation import CalculationRecord
from models.schemas.subject import YearLevel
from services import atar_calculator, scoring
from services.calculation_store import CalculationStore, StorageError
from services.catalog import ALL_CATEGORIES, SelectionError, SubjectCatalog, UnknownSubjectError

router = APIRouter()
limiter = Limiter(key_func=get_remote_address)


@router.get("/health")
async def health(catalog: SubjectCatalog = Depends(get_catalog)):
    return {
        "status": "ok",
        "supabase_configured": settings.supabase_configured,
        "subjects": len(catalog),
    }


@router.get("/subjects", response_model=SubjectListResponse)
async def list_subjects(
    category: str = ALL_CATEGORIES,
    catalog: SubjectCatalog = Depends(get_catalog),
):
    return SubjectListResponse(category=category, subjects=catalog.by_category(category))


@router.get("/subjects/categories")
async def list_categories(catalog: SubjectCatalog = Depends(get_catalog)):
    return [ALL_CATEGORIES, *catalog.categories()]


@router.get("/recommendations/{year_level}")
async def recommendations(year_level: YearLevel):
    return {
        "year_level": year_level,
        "recommendations": scoring.recommendations_for(year_level),
    }


@router.post("/calculate", response_model=CalculationResponse)
async def calculate(body: CalculateRequest, catalog: SubjectCatalog = Depends(get_catalog)):
    try:
        return atar_calculator.calculate(body, catalog)
    except UnknownSubjectError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.post("/calculations", response_model=CalculationRecord, status_code=201)
@limiter.limit(settings.rate_limit)
async def save_calculation(
    request: Request,
    body: SaveCalculationRequest,
    catalog: SubjectCatalog = Depends(get_catalog),
    store: CalculationStore = Depends(get_calculation_store),
):
    try:
        return atar_calculator.save_calculation(body, catalog, store)
    except UnknownSubjectError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageError:
        raise HTTPException(status_code=502, detail="Failed to save calculation")


@router.get("/calculations", response_model=list[CalculationRecord])
async def list_calculations(
    limit: int = Query(settings.recent_calculations_limit, ge=1, le=100),
    store: CalculationStore = Depends(get_calculation_store),
):
    try:
        return store.list_recent(limit)
    except StorageError:
        raise HTTPException(status_code=502, detail="Failed to load calculations")


@router.get("/calculations/{calculation_id}", response_model=CalculationRecord)
async def get_calculation(
    calculation_id: str,
    store: CalculationStore = Depends(get_calculation_store),
):
    try:
        record = store.get(calculation_id)
    except StorageError:
        raise HTTPException(status_code=502, detail="Failed to load calculation")
    if record is None:
        raise HTTPException(status_code=404, detail="Calculation not found")
    return record


@router.post("/report")
@limiter.limit(settings.rate_limit)
async def export_report(
    request: Request,
    body: ReportRequest,
    catalog: SubjectCatalog = Depends(get_catalog),
):
    try:
        pdf, filename = atar_calculator.build_report(body, catalog)
    except UnknownSubjectError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except SelectionError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return Response(
        content=pdf,
        media_type="application/pdf",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
