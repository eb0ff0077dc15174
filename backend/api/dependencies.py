"""Shared dependencies for API routes."""

from functools import lru_cache

from config import settings
from services.calculation_store import (
    CalculationStore,
    InMemoryCalculationStore,
    SupabaseCalculationStore,
)
from services.catalog import SubjectCatalog
from services.supabase_client import get_client


@lru_cache
def get_catalog() -> SubjectCatalog:
    client = get_client()
    if client is not None:
        return SubjectCatalog.from_supabase(client)
    return SubjectCatalog.from_json(settings.subjects_file)


@lru_cache
def get_calculation_store() -> CalculationStore:
    client = get_client()
    if client is not None:
        return SupabaseCalculationStore(client)
    return InMemoryCalculationStore()
