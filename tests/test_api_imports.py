"""
Tests for the import API endpoints.
"""

import json
from typing import Any, Dict
from unittest.mock import AsyncMock, patch

from fastapi.testclient import TestClient

from journey_import.config import settings
from journey_import.services.scraper.errors import AccessBlockedError


def test_health(app_client: TestClient) -> None:
    response = app_client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_url_import_reports_extraction_errors(app_client: TestClient) -> None:
    with patch(
        "journey_import.services.import_service.import_from_url",
        new_callable=AsyncMock,
        side_effect=AccessBlockedError("Blocked by bot detection"),
    ):
        response = app_client.post("/api/import/url", json={"url": "https://claude.ai/share/abc"})

    assert response.status_code == 400
    assert response.json() == {"error": "Blocked by bot detection", "code": "access_blocked"}


def test_url_import_hides_unexpected_errors(app_client: TestClient) -> None:
    with patch(
        "journey_import.services.import_service.import_from_url",
        new_callable=AsyncMock,
        side_effect=RuntimeError("boom"),
    ):
        response = app_client.post("/api/import/url", json={"url": "https://claude.ai/share/abc"})

    assert response.status_code == 500
    assert "copy-paste" in response.json()["error"]


def test_paste_import(app_client: TestClient) -> None:
    text = "Human: Explain recursion briefly\nAssistant: A function that calls itself."
    response = app_client.post("/api/import/paste", json={"text": text})

    assert response.status_code == 200
    body = response.json()
    assert body["platform"] == "claude"
    assert body["steps"][0]["prompt"] == "Explain recursion briefly"
    assert body["steps"][0]["notes"] == ""


def test_paste_import_rejects_oversized_text(app_client: TestClient) -> None:
    with patch.object(settings, "MAX_PASTE_CHARS", 50):
        response = app_client.post("/api/import/paste", json={"text": "x" * 51})

    assert response.status_code == 400
    assert response.json()["code"] == "invalid_input"


def test_paste_import_reports_short_text(app_client: TestClient) -> None:
    response = app_client.post("/api/import/paste", json={"text": "too short"})
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_input"


def test_export_upload(app_client: TestClient, linear_export: Dict[str, Any]) -> None:
    response = app_client.post(
        "/api/import/chatgpt",
        files={"file": ("conversations.json", json.dumps([linear_export]), "application/json")},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["source"] == "chatgpt-json"
    assert body["title"] == "Sorting lists"
    assert len(body["steps"]) == 2


def test_export_upload_rejects_other_files(app_client: TestClient) -> None:
    response = app_client.post(
        "/api/import/chatgpt", files={"file": ("notes.txt", "User: hi", "text/plain")}
    )
    assert response.status_code == 400
    assert response.json()["code"] == "invalid_input"


def test_export_upload_rejects_large_files(app_client: TestClient) -> None:
    with patch.object(settings, "MAX_EXPORT_FILE_BYTES", 10):
        response = app_client.post(
            "/api/import/chatgpt",
            files={"file": ("conversations.json", "[" + " " * 20 + "]", "application/json")},
        )
    assert response.status_code == 400
    assert "too large" in response.json()["error"]
