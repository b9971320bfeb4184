# =============================================================================
# tests/unit/test_server.py
# Unit Tests for the Persistence Service
# =============================================================================

import sqlite3

import pytest
from fastapi.testclient import TestClient

from publi_core.server.app import create_app
from publi_core.server.storage import DocumentRowStorage


@pytest.fixture
def db_path(tmp_path):
    return tmp_path / "database.sqlite"


@pytest.fixture
def client(db_path):
    return TestClient(create_app(db_path, max_body_bytes=2048))


class FailingStorage(DocumentRowStorage):
    """Storage double whose every database call fails"""

    def read(self):
        raise sqlite3.OperationalError("database is locked")

    def write(self, document):
        raise sqlite3.OperationalError("database is locked")

    def last_updated(self):
        raise sqlite3.OperationalError("database is locked")


class TestGetData:

    def test_null_before_first_post(self, client):
        response = client.get("/api/data")

        assert response.status_code == 200
        assert response.json() is None

    def test_returns_last_posted_document(self, client):
        client.post("/api/data", json={"books": [{"id": "b1"}]})
        client.post("/api/data", json={"books": [{"id": "b2"}]})

        assert client.get("/api/data").json() == {"books": [{"id": "b2"}]}

    def test_read_error(self, db_path):
        client = TestClient(create_app(db_path, storage=FailingStorage(db_path)))

        response = client.get("/api/data")

        assert response.status_code == 500
        assert response.json() == {"error": "Database read error"}

    def test_corrupt_row(self, db_path):
        storage = DocumentRowStorage(db_path)
        storage.initialize()
        conn = sqlite3.connect(str(db_path))
        with conn:
            conn.execute("INSERT INTO application_data (id, data) VALUES (1, 'not json')")
        conn.close()
        client = TestClient(create_app(db_path, storage=storage))

        response = client.get("/api/data")

        assert response.status_code == 500
        assert response.json() == {"error": "Corrupt data in database"}


class TestPostData:

    def test_success(self, client):
        response = client.post("/api/data", json={"imprints": []})

        assert response.status_code == 200
        assert response.json() == {"success": True}

    def test_non_object_body(self, client):
        response = client.post("/api/data", json=[1, 2, 3])

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid request body"}

    def test_malformed_json(self, client):
        response = client.post(
            "/api/data", content=b"{oops", headers={"content-type": "application/json"}
        )

        assert response.status_code == 400

    def test_body_too_large(self, client):
        response = client.post("/api/data", json={"blob": "x" * 4096})

        assert response.status_code == 413
        assert client.get("/api/data").json() is None

    def test_write_error(self, db_path):
        client = TestClient(create_app(db_path, storage=FailingStorage(db_path)))

        response = client.post("/api/data", json={"books": []})

        assert response.status_code == 500
        assert response.json() == {"error": "Database write error"}

    def test_single_row_is_kept(self, client, db_path):
        for i in range(3):
            client.post("/api/data", json={"n": i})

        conn = sqlite3.connect(str(db_path))
        count = conn.execute("SELECT COUNT(*) FROM application_data").fetchone()[0]
        conn.close()
        assert count == 1


class TestHealth:

    def test_reports_last_update(self, client):
        assert client.get("/health").json() == {"status": "ok", "updated_at": None}

        client.post("/api/data", json={})

        assert client.get("/health").json()["updated_at"] is not None

    def test_cors_headers(self, client):
        response = client.get("/api/data", headers={"Origin": "http://localhost:5173"})

        assert response.headers["access-control-allow-origin"] == "*"

    def test_rejected_body_still_has_cors_headers(self, client):
        """Browsers can read the 413 instead of reporting a CORS failure"""
        response = client.post(
            "/api/data",
            json={"blob": "x" * 4096},
            headers={"Origin": "http://localhost:5173"},
        )

        assert response.status_code == 413
        assert response.headers["access-control-allow-origin"] == "*"
