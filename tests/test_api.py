"""
API tests through FastAPI's TestClient
"""
import pytest
from fastapi.testclient import TestClient

from eduresult.main import create_app
from eduresult.modules.sheet_extraction import ExtractionClient
from eduresult.services import MemoryBackend, PersistenceAdapter, RecordStore, SessionService
from tests.conftest import FakeProvider

SHEET_REPLY = {
    "name": "Asha Rao",
    "rollNo": "2024-001",
    "className": "10-A",
    "examName": "Printed Label",
    "marks": {"math": 95, "science": 92, "english": 88},
}


@pytest.fixture
def provider():
    return FakeProvider(reply=SHEET_REPLY)


@pytest.fixture
def api_store():
    return RecordStore(PersistenceAdapter(MemoryBackend()))


@pytest.fixture
def client(api_store, provider):
    app = create_app(
        store=api_store,
        session=SessionService(MemoryBackend()),
        extraction_client=ExtractionClient(provider),
    )
    return TestClient(app)


@pytest.fixture
def admin(client):
    response = client.post("/api/auth/login", json={"username": "admin", "password": "admin"})
    assert response.status_code == 200
    return client


class TestAuth:
    """Admin session flag"""

    def test_login_and_logout(self, client):
        assert client.get("/api/auth/session").json()["is_admin"] is False

        response = client.post("/api/auth/login", json={"username": "admin", "password": "admin"})
        assert response.json()["is_admin"] is True
        assert client.get("/api/auth/session").json()["is_admin"] is True

        client.post("/api/auth/logout")
        assert client.get("/api/auth/session").json()["is_admin"] is False

    def test_bad_credentials(self, client):
        response = client.post("/api/auth/login", json={"username": "admin", "password": "nope"})
        assert response.status_code == 401
        assert response.json()["error_code"] == "UNAUTHORIZED"

    def test_admin_routes_gated(self, client):
        assert client.get("/api/exams").status_code == 401
        assert client.post("/api/students", json={}).status_code == 401


class TestExamRoutes:

    def test_create_list_delete(self, admin, api_store):
        response = admin.post("/api/exams", json={"name": " Finals "})
        assert response.status_code == 201
        exam = response.json()
        assert exam["name"] == "Finals"
        assert "createdAt" in exam

        assert admin.get("/api/exams").json()["total"] == 1

        admin.post("/api/students", json={"rollNo": "1"}, params={"exam_name": "Finals"})
        admin.post("/api/students", json={"rollNo": "2"}, params={"exam_name": "Finals"})
        admin.post("/api/students", json={"rollNo": "3", "examName": "Other"})

        listing = admin.get(f"/api/exams/{exam['id']}/students").json()
        assert listing["total"] == 2

        response = admin.delete(f"/api/exams/{exam['id']}")
        assert response.json()["deleted_students"] == 2
        assert [s.exam_name for s in api_store.list_students()] == ["Other"]

    def test_empty_name(self, admin):
        response = admin.post("/api/exams", json={"name": "   "})
        assert response.status_code == 400

    def test_delete_unknown(self, admin):
        assert admin.delete("/api/exams/missing").status_code == 404


class TestStudentRoutes:

    def test_create_normalizes(self, admin):
        response = admin.post("/api/students", json={
            "name": "Ravi",
            "rollNo": "7",
            "marks": {"math": "80", "science": 120, "english": "x"},
            "total": 5000,
        })
        assert response.status_code == 201
        body = response.json()
        assert body["examName"] == "Standard Exam"
        assert body["marks"] == {"math": 80, "science": 100, "english": 0, "history": 0, "computer": 0}
        assert body["total"] == 180
        assert body["percentage"] == 36.0
        assert body["grade"] == "D"

    def test_create_ignores_client_id(self, admin):
        body = admin.post("/api/students", json={"id": "chosen"}).json()
        assert body["id"] != "chosen"

    def test_folder_overrides_exam_name(self, admin):
        body = admin.post("/api/students", json={"examName": "Typed"}, params={"exam_name": "Finals"}).json()
        assert body["examName"] == "Finals"

    def test_update_keeps_id_and_recomputes(self, admin):
        created = admin.post("/api/students", json={"rollNo": "1", "marks": {"math": 10}}).json()
        response = admin.put(f"/api/students/{created['id']}", json={"rollNo": "1", "marks": {"math": 100}})
        assert response.status_code == 200
        assert response.json()["id"] == created["id"]
        assert response.json()["total"] == 100

    def test_update_unknown(self, admin):
        assert admin.put("/api/students/missing", json={}).status_code == 404

    def test_delete(self, admin):
        created = admin.post("/api/students", json={}).json()
        assert admin.delete(f"/api/students/{created['id']}").status_code == 200
        assert admin.get(f"/api/students/{created['id']}").status_code == 404


class TestScanRoute:

    def test_scan_returns_candidate(self, admin, api_store):
        response = admin.post(
            "/api/scan",
            files={"file": ("sheet.jpg", b"\xff\xd8jpeg", "image/jpeg")},
            data={"exam_name": "Finals"},
        )
        assert response.status_code == 200
        candidate = response.json()["candidate"]
        assert candidate["examName"] == "Finals"
        assert candidate["marks"]["history"] == 0
        assert candidate["total"] == 275
        assert candidate["percentage"] == 55.0
        assert candidate["grade"] == "C"
        # Candidates are reviewed before saving
        assert api_store.list_students() == []

    def test_scan_failure(self, admin, api_store, provider):
        provider.error = RuntimeError("vision model offline")
        before = api_store.snapshot()
        response = admin.post("/api/scan", files={"file": ("sheet.jpg", b"\xff\xd8jpeg", "image/jpeg")})
        assert response.status_code == 502
        assert response.json()["error_code"] == "EXTRACTION_FAILED"
        assert api_store.snapshot() == before

    def test_scan_rejects_empty_upload(self, admin, provider):
        response = admin.post("/api/scan", files={"file": ("sheet.jpg", b"", "image/jpeg")})
        assert response.status_code == 400
        assert provider.calls == []

    def test_scan_rejects_non_image(self, admin):
        response = admin.post("/api/scan", files={"file": ("notes.txt", b"hello", "text/plain")})
        assert response.status_code == 400


class TestResultRoutes:
    """Public result lookup"""

    def test_lookup(self, admin, client):
        admin.post("/api/students", json={"rollNo": " 2024-001 ", "name": "Asha"}, params={"exam_name": "Finals"})
        client.post("/api/auth/logout")

        assert client.get("/api/results/exams").json() == {"exams": ["Finals"]}

        response = client.get("/api/results", params={"roll_no": "2024-001", "exam_name": "Finals"})
        assert response.status_code == 200
        assert response.json()["name"] == "Asha"

    def test_lookup_not_found(self, client):
        response = client.get("/api/results", params={"roll_no": "x", "exam_name": "Finals"})
        assert response.status_code == 404
        assert response.json()["success"] is False


class TestMeta:

    def test_health(self, client):
        assert client.get("/health").json()["status"] == "healthy"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
