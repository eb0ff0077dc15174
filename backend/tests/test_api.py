from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from api.dependencies import get_calculation_store, get_catalog
from config import DEFAULT_SUBJECTS_FILE
from main import app
from services.calculation_store import InMemoryCalculationStore, StorageError
from services.catalog import SubjectCatalog

client = TestClient(app)

FOUR = [
    {"subject_id": "english", "raw_score": 90},
    {"subject_id": "physics", "raw_score": 85},
    {"subject_id": "chemistry", "raw_score": 80},
    {"subject_id": "economics", "raw_score": 75},
]


@pytest.fixture(autouse=True)
def _overrides():
    """Bundled catalog and a fresh in-memory store for every test."""
    catalog = SubjectCatalog.from_json(DEFAULT_SUBJECTS_FILE)
    store = InMemoryCalculationStore()
    app.dependency_overrides[get_catalog] = lambda: catalog
    app.dependency_overrides[get_calculation_store] = lambda: store
    yield store
    app.dependency_overrides.clear()


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["subjects"] > 0


def test_list_subjects():
    response = client.get("/subjects")
    assert response.status_code == 200
    data = response.json()
    assert data["category"] == "All"
    assert {"id", "name", "category", "scaling_factor", "has_bonus"} <= set(data["subjects"][0])


def test_list_subjects_by_category():
    response = client.get("/subjects", params={"category": "Languages"})
    subjects = response.json()["subjects"]
    assert subjects
    assert all(s["category"] == "Languages" for s in subjects)
    assert all(s["has_bonus"] for s in subjects)


def test_list_categories():
    response = client.get("/subjects/categories")
    assert response.status_code == 200
    data = response.json()
    assert data[0] == "All"
    assert "Mathematics" in data
    assert len(data) == len(set(data))


def test_recommendations():
    response = client.get("/recommendations/Year 10")
    assert response.status_code == 200
    assert len(response.json()["recommendations"]) == 4


def test_recommendations_unknown_year():
    response = client.get("/recommendations/Year 9")
    assert response.status_code == 422


def test_calculate():
    response = client.post("/calculate", json={"year_level": "Year 12", "entries": FOUR})
    assert response.status_code == 200
    data = response.json()
    assert data["has_result"] is True
    assert data["entry_count"] == 4
    assert data["result"]["atar"] > 0
    top = data["result"]["top_four"]
    assert [t["scaled_score"] for t in top] == sorted((t["scaled_score"] for t in top), reverse=True)
    assert data["recommendations"]


def test_calculate_with_bonus():
    entries = FOUR + [{"subject_id": "maths-methods", "raw_score": 60}]
    data = client.post("/calculate", json={"entries": entries}).json()
    bonuses = data["result"]["bonuses"]
    assert len(bonuses) == 1
    assert bonuses[0]["rule"] == "mathematics"
    assert bonuses[0]["subject"]["id"] == "maths-methods"


def test_calculate_partial_selection():
    response = client.post("/calculate", json={"entries": FOUR[:3]})
    assert response.status_code == 200
    data = response.json()
    assert data["has_result"] is False
    assert data["result"] == {"atar": 0.0, "top_four": [], "bonuses": []}


def test_calculate_rejects_out_of_range_score():
    entries = FOUR[:3] + [{"subject_id": "economics", "raw_score": 101}]
    response = client.post("/calculate", json={"entries": entries})
    assert response.status_code == 422


def test_calculate_unknown_subject():
    entries = FOUR[:3] + [{"subject_id": "astrology", "raw_score": 50}]
    response = client.post("/calculate", json={"entries": entries})
    assert response.status_code == 404


def test_calculate_duplicate_subject():
    entries = FOUR + [{"subject_id": "english", "raw_score": 50}]
    response = client.post("/calculate", json={"entries": entries})
    assert response.status_code == 400


def test_save_and_fetch_calculation():
    response = client.post(
        "/calculations",
        json={"student_name": "Jane Citizen", "year_level": "Year 12", "entries": FOUR},
    )
    assert response.status_code == 201
    saved = response.json()
    assert saved["student_name"] == "Jane Citizen"
    assert len(saved["subjects"]) == 4

    fetched = client.get(f"/calculations/{saved['id']}")
    assert fetched.status_code == 200
    assert fetched.json()["predicted_atar"] == saved["predicted_atar"]

    listed = client.get("/calculations").json()
    assert [r["id"] for r in listed] == [saved["id"]]


def test_save_requires_four_subjects():
    response = client.post("/calculations", json={"entries": FOUR[:2]})
    assert response.status_code == 400


def test_save_storage_failure():
    store = MagicMock()
    store.save.side_effect = StorageError("down")
    app.dependency_overrides[get_calculation_store] = lambda: store
    response = client.post("/calculations", json={"entries": FOUR})
    assert response.status_code == 502


def test_get_missing_calculation():
    response = client.get("/calculations/does-not-exist")
    assert response.status_code == 404


def test_export_report():
    response = client.post("/report", json={"student_name": "Jane Citizen", "entries": FOUR})
    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert 'filename="ATAR_Report_Jane_Citizen_' in response.headers["content-disposition"]
    assert response.content.startswith(b"%PDF")


def test_export_report_requires_four_subjects():
    response = client.post("/report", json={"entries": FOUR[:3]})
    assert response.status_code == 400
