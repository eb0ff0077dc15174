"""Subject reference table: loading, lookup and request resolution."""

import json
import logging
from collections.abc import Iterable
from pathlib import Path

from pydantic import TypeAdapter

from models.requests import SelectionItem
from models.schemas.subject import SelectionEntry, SubjectRef

logger = logging.getLogger(__name__)

ALL_CATEGORIES = "All"

_subject_list = TypeAdapter(list[SubjectRef])


class UnknownSubjectError(LookupError):
    def __init__(self, subject_id: str) -> None:
        super().__init__(f"Unknown subject: {subject_id}")
        self.subject_id = subject_id


class SelectionError(ValueError):
    """A selection that the engine would accept but the form never allows."""


class SubjectCatalog:
    """In-memory view of the subject table, ordered by category then name."""

    def __init__(self, subjects: Iterable[SubjectRef]) -> None:
        self._subjects = sorted(subjects, key=lambda s: (s.category, s.name))
        self._by_id = {s.id: s for s in self._subjects}

    @classmethod
    def from_json(cls, path: str | Path) -> "SubjectCatalog":
        with open(path, encoding="utf-8") as f:
            rows = json.load(f)
        catalog = cls(_subject_list.validate_python(rows))
        logger.info("Loaded %d subjects from %s", len(catalog), path)
        return catalog

    @classmethod
    def from_supabase(cls, client) -> "SubjectCatalog":
        response = (
            client.table("subjects")
            .select("*")
            .order("category")
            .order("name")
            .execute()
        )
        catalog = cls(_subject_list.validate_python(response.data or []))
        logger.info("Loaded %d subjects from Supabase", len(catalog))
        return catalog

    def __len__(self) -> int:
        return len(self._subjects)

    def __contains__(self, subject_id: object) -> bool:
        return subject_id in self._by_id

    def all(self) -> list[SubjectRef]:
        return list(self._subjects)

    def get(self, subject_id: str) -> SubjectRef:
        try:
            return self._by_id[subject_id]
        except KeyError:
            raise UnknownSubjectError(subject_id) from None

    def categories(self) -> list[str]:
        return list(dict.fromkeys(s.category for s in self._subjects))

    def by_category(self, category: str | None = None) -> list[SubjectRef]:
        if not category or category == ALL_CATEGORIES:
            return self.all()
        return [s for s in self._subjects if s.category == category]

    def resolve(self, items: Iterable[SelectionItem]) -> list[SelectionEntry]:
        """Turn request items into engine entries, keeping input order."""
        entries: list[SelectionEntry] = []
        seen: set[str] = set()
        for item in items:
            subject = self.get(item.subject_id)
            if subject.id in seen:
                raise SelectionError(f"Subject selected more than once: {subject.name}")
            seen.add(subject.id)
            entries.append(SelectionEntry(subject=subject, raw_score=item.raw_score))
        return entries
