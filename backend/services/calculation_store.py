"""Persistence for saved calculations.

Two backends behind one interface:
    - SupabaseCalculationStore: `calculations` + `calculation_subjects` tables
    - InMemoryCalculationStore: process-local, used when Supabase is not configured
"""

import logging
import threading
import uuid
from abc import ABC, abstractmethod
from collections.abc import Sequence
from datetime import datetime, timezone
from typing import Any

from models.schemas.calculation import CalculationRecord, CalculationSubject
from models.schemas.subject import SelectionEntry, YearLevel
from services.scoring import scaled_score

logger = logging.getLogger(__name__)


class StorageError(RuntimeError):
    pass


def _subject_rows(entries: Sequence[SelectionEntry]) -> list[CalculationSubject]:
    return [
        CalculationSubject(
            subject_id=e.subject.id,
            raw_score=e.raw_score,
            scaled_score=scaled_score(e.raw_score, e.subject.scaling_factor),
        )
        for e in entries
    ]


class CalculationStore(ABC):
    """Saves computed predictions and reads them back, newest first."""

    backend: str = ""

    @abstractmethod
    def save(
        self,
        student_name: str | None,
        year_level: YearLevel,
        predicted_atar: float,
        entries: Sequence[SelectionEntry],
    ) -> CalculationRecord:
        """Persist one calculation and its subject rows."""

    @abstractmethod
    def list_recent(self, limit: int = 20) -> list[CalculationRecord]:
        """Most recent calculations first."""

    @abstractmethod
    def get(self, calculation_id: str) -> CalculationRecord | None:
        """Fetch one calculation, or None if it does not exist."""


class InMemoryCalculationStore(CalculationStore):
    backend = "memory"

    def __init__(self) -> None:
        self._records: dict[str, CalculationRecord] = {}
        self._lock = threading.Lock()

    def save(self, student_name, year_level, predicted_atar, entries):
        record = CalculationRecord(
            id=str(uuid.uuid4()),
            student_name=student_name or None,
            year_level=year_level,
            predicted_atar=predicted_atar,
            created_at=datetime.now(timezone.utc),
            subjects=_subject_rows(entries),
        )
        with self._lock:
            self._records[record.id] = record
        logger.info("Saved calculation %s (ATAR %.2f) in memory", record.id, predicted_atar)
        return record

    def list_recent(self, limit=20):
        with self._lock:
            records = list(self._records.values())
        # Insertion order breaks created_at ties
        records.reverse()
        records.sort(key=lambda r: r.created_at, reverse=True)
        return records[:limit]

    def get(self, calculation_id):
        with self._lock:
            return self._records.get(calculation_id)

    def clear(self) -> None:
        with self._lock:
            self._records.clear()


class SupabaseCalculationStore(CalculationStore):
    backend = "supabase"

    _SELECT = "*, calculation_subjects(subject_id, raw_score, scaled_score)"

    def __init__(self, client: Any) -> None:
        self._client = client

    def save(self, student_name, year_level, predicted_atar, entries):
        subjects = _subject_rows(entries)
        try:
            response = (
                self._client.table("calculations")
                .insert({
                    "student_name": student_name or None,
                    "year_level": YearLevel(year_level).value,
                    "predicted_atar": predicted_atar,
                })
                .execute()
            )
            row = response.data[0]
        except Exception as e:
            logger.error("Failed to save calculation: %s", e)
            raise StorageError("Failed to save calculation") from e

        try:
            self._client.table("calculation_subjects").insert([
                {"calculation_id": row["id"], **s.model_dump()} for s in subjects
            ]).execute()
        except Exception as e:
            logger.error("Failed to save subjects for calculation %s: %s", row["id"], e)
            self._discard(row["id"])
            raise StorageError("Failed to save calculation") from e

        logger.info("Saved calculation %s (ATAR %.2f)", row["id"], predicted_atar)
        return _to_record(row, subjects)

    def _discard(self, calculation_id: str) -> None:
        """Remove a calculations row whose subject rows could not be written."""
        try:
            self._client.table("calculations").delete().eq("id", calculation_id).execute()
            logger.info("Rolled back calculation %s", calculation_id)
        except Exception as e:
            logger.error("Failed to roll back calculation %s: %s", calculation_id, e)

    def list_recent(self, limit=20):
        try:
            response = (
                self._client.table("calculations")
                .select(self._SELECT)
                .order("created_at", desc=True)
                .limit(limit)
                .execute()
            )
        except Exception as e:
            logger.error("Failed to list calculations: %s", e)
            raise StorageError("Failed to list calculations") from e
        return [_to_record(row) for row in response.data or []]

    def get(self, calculation_id):
        try:
            response = (
                self._client.table("calculations")
                .select(self._SELECT)
                .eq("id", calculation_id)
                .limit(1)
                .execute()
            )
        except Exception as e:
            logger.error("Failed to fetch calculation %s: %s", calculation_id, e)
            raise StorageError("Failed to fetch calculation") from e
        rows = response.data or []
        return _to_record(rows[0]) if rows else None


def _to_record(row: dict, subjects: list[CalculationSubject] | None = None) -> CalculationRecord:
    if subjects is None:
        subjects = [
            CalculationSubject.model_validate(s)
            for s in row.get("calculation_subjects") or []
        ]
    return CalculationRecord(
        id=str(row["id"]),
        student_name=row.get("student_name"),
        year_level=row["year_level"],
        predicted_atar=row["predicted_atar"],
        created_at=row["created_at"],
        subjects=subjects,
    )
