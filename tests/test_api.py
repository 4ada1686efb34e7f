"""
HTTP tests for the FastAPI application.

Storage and AI providers are replaced through dependency overrides; the
lifespan (database startup) is not run.
"""

import pytest
from fastapi.testclient import TestClient

from conftest import ScriptedProvider, make_gateway
from tabular_insights.api.app import create_app
from tabular_insights.api.dependencies import get_ai_gateway, get_file_repository
from tabular_insights.core.config import Settings, get_settings

REV_CSV = b"rev,yr\n100,2020\n200,2021\n"
ALICE = {"X-User-Id": "alice"}
BOB = {"X-User-Id": "bob"}


def build_client(repository, gateway, environment="development"):
    settings = Settings(_env_file=None, environment=environment, max_file_size_mb=1)
    app = create_app(settings)
    app.dependency_overrides[get_settings] = lambda: settings
    app.dependency_overrides[get_file_repository] = lambda: repository
    app.dependency_overrides[get_ai_gateway] = lambda: gateway
    return TestClient(app, raise_server_exceptions=False)


@pytest.fixture
def provider():
    return ScriptedProvider("huggingface", answer="Revenue doubled from 2020 to 2021.")


@pytest.fixture
def client(repository, provider):
    return build_client(repository, make_gateway(huggingface=provider))


def upload_csv(client, headers=ALICE, content=REV_CSV, filename="sales.csv"):
    return client.post(
        "/api/upload/upload",
        files={"file": (filename, content, "text/csv")},
        headers=headers,
    )


class TestUploadRoutes:
    """Test upload, list, get and delete."""

    def test_upload(self, client):
        """Test a CSV upload returns the stored file."""
        resp = upload_csv(client)

        assert resp.status_code == 201
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "File uploaded and processed successfully"
        assert body["data"]["rowCount"] == 2
        assert body["data"]["columns"] == [
            {"name": "rev", "type": "number"},
            {"name": "yr", "type": "number"},
        ]

    def test_requires_user(self, client):
        """Test requests without a user id are rejected."""
        resp = upload_csv(client, headers={})
        assert resp.status_code == 401
        assert resp.json() == {"success": False, "message": "Authentication required", "type": "http_error"}

    def test_no_file(self, client):
        """Test a request without a file part."""
        resp = client.post("/api/upload/upload", data={"note": "x"}, headers=ALICE)
        assert resp.status_code == 400
        assert resp.json()["message"] == "No file uploaded"

    def test_unsupported_format(self, client, repository):
        """Test unsupported extensions are rejected."""
        resp = upload_csv(client, filename="notes.txt")
        assert resp.status_code == 400
        assert resp.json()["message"] == "Unsupported file type"
        assert repository.records == {}

    def test_file_too_large(self, client):
        """Test the upload size limit."""
        resp = upload_csv(client, content=b"a\n" + b"1" * (1024 * 1024))
        assert resp.status_code == 400
        assert "File too large" in resp.json()["message"]

    def test_corrupt_workbook(self, client):
        """Test parse failures surface as processing errors."""
        resp = upload_csv(client, content=b"garbage", filename="book.xlsx")
        assert resp.status_code == 500
        assert resp.json()["message"].startswith("Error processing file:")

    def test_list_get_delete(self, client):
        """Test the file lifecycle for its owner."""
        file_id = upload_csv(client).json()["data"]["fileId"]

        listed = client.get("/api/upload/files", headers=ALICE).json()["data"]
        assert [f["fileId"] for f in listed] == [file_id]

        detail = client.get(f"/api/upload/files/{file_id}", headers=ALICE).json()["data"]
        assert detail["data"][1] == {"rev": "200", "yr": "2021"}

        resp = client.delete(f"/api/upload/files/{file_id}", headers=ALICE)
        assert resp.json() == {"success": True, "message": "File deleted successfully"}
        assert client.get("/api/upload/files", headers=ALICE).json()["data"] == []

    def test_other_users_file(self, client, repository):
        """Test another user can neither read nor delete the file."""
        file_id = upload_csv(client).json()["data"]["fileId"]

        assert client.get(f"/api/upload/files/{file_id}", headers=BOB).status_code == 404
        resp = client.delete(f"/api/upload/files/{file_id}", headers=BOB)
        assert resp.status_code == 404
        assert resp.json()["message"] == "File not found"
        assert file_id in repository.records
        assert client.get("/api/upload/files", headers=BOB).json()["data"] == []


class TestAIRoutes:
    """Test summary, insights and chat."""

    def test_summary(self, client, provider):
        """Test statistics are returned without an AI call."""
        file_id = upload_csv(client).json()["data"]["fileId"]

        resp = client.post("/api/ai/summary", json={"fileId": file_id}, headers=ALICE)

        assert resp.status_code == 200
        stats = resp.json()["data"]["summaryStats"]
        assert stats["numericStats"]["rev"]["max"] == 200
        assert provider.calls == []

    def test_insights(self, client):
        """Test generated insights."""
        file_id = upload_csv(client).json()["data"]["fileId"]

        resp = client.post("/api/ai/insights", json={"fileId": file_id}, headers=ALICE)

        assert resp.status_code == 200
        data = resp.json()["data"]
        assert data["insights"] == "Revenue doubled from 2020 to 2021."
        assert data["fileName"] == "sales.csv"
        assert data["generatedAt"]

    def test_chat(self, client, provider):
        """Test a chat answer."""
        file_id = upload_csv(client).json()["data"]["fileId"]

        resp = client.post(
            "/api/ai/chat",
            json={"fileId": file_id, "question": "How did revenue change?"},
            headers=ALICE,
        )

        assert resp.status_code == 200
        assert resp.json()["data"]["answer"] == "Revenue doubled from 2020 to 2021."
        assert "User Question: How did revenue change?" in provider.calls[0]["prompt"]

    def test_chat_without_question(self, client, provider):
        """Test a missing question is a 400 and no provider is called."""
        file_id = upload_csv(client).json()["data"]["fileId"]

        resp = client.post("/api/ai/chat", json={"fileId": file_id}, headers=ALICE)

        assert resp.status_code == 400
        assert resp.json()["message"] == "Question is required"
        assert provider.calls == []

    def test_missing_file_id(self, client):
        """Test the request body must name a file."""
        resp = client.post("/api/ai/summary", json={}, headers=ALICE)
        assert resp.status_code == 400
        assert resp.json()["success"] is False

    def test_unknown_file(self, client):
        """Test a file id that does not exist."""
        resp = client.post(
            "/api/ai/insights",
            json={"fileId": "00000000-0000-0000-0000-000000000000"},
            headers=ALICE,
        )
        assert resp.status_code == 404

    def test_no_provider_configured(self, repository):
        """Test AI routes without any provider credential."""
        client = build_client(repository, make_gateway())
        file_id = upload_csv(client).json()["data"]["fileId"]

        resp = client.post("/api/ai/insights", json={"fileId": file_id}, headers=ALICE)

        assert resp.status_code == 500
        assert "No AI provider is configured" in resp.json()["message"]

    def test_all_providers_failed(self, repository, failing_provider):
        """Test the gateway error when every provider fails."""
        gateway = make_gateway(
            huggingface=failing_provider("huggingface"),
            openai=failing_provider("openai"),
        )
        client = build_client(repository, gateway)
        file_id = upload_csv(client).json()["data"]["fileId"]

        resp = client.post("/api/ai/chat", json={"fileId": file_id, "question": "why?"}, headers=ALICE)

        assert resp.status_code == 502
        body = resp.json()
        assert body["success"] is False
        assert body["details"]["errors"] == {
            "huggingface": "huggingface is down",
            "openai": "openai is down",
        }


class TestErrorEnvelope:
    """Test unexpected failures and debug details."""

    class BrokenRepository:
        async def list_by_owner(self, owner_id):
            raise RuntimeError("connection reset")

    def test_internal_error_in_development(self):
        """Test the raw error is included outside production."""
        client = build_client(self.BrokenRepository(), make_gateway())
        resp = client.get("/api/upload/files", headers=ALICE)

        assert resp.status_code == 500
        body = resp.json()
        assert body["message"] == "Internal server error"
        assert body["error"] == "connection reset"

    def test_internal_error_in_production(self):
        """Test production responses hide the raw error."""
        client = build_client(self.BrokenRepository(), make_gateway(), environment="production")
        body = client.get("/api/upload/files", headers=ALICE).json()

        assert body["message"] == "Internal server error"
        assert "error" not in body
        assert "traceback" not in body

    def test_error_envelope_documented(self, client):
        """Test API routes declare the error envelope for their failure statuses."""
        schema = client.get("/openapi.json").json()

        assert set(schema["components"]["schemas"]["ErrorResponse"]["properties"]) == {
            "success", "message", "type",
        }
        responses = schema["paths"]["/api/upload/upload"]["post"]["responses"]
        for code in ("400", "401", "500"):
            ref = responses[code]["content"]["application/json"]["schema"]["$ref"]
            assert ref == "#/components/schemas/ErrorResponse"


def test_health_and_root(client):
    """Test the unauthenticated info endpoints."""
    assert client.get("/health").json() == {"status": "OK", "message": "Server is running"}
    assert client.get("/").json()["name"] == "Tabular Insights API"
