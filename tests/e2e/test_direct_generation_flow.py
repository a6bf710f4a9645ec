from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from fakes import FakePool, FakeProvider, failing
from jobtracker.core import generation as generation_module
from jobtracker.llm.router import LLMRouter


@pytest.fixture
def providers(monkeypatch: pytest.MonkeyPatch) -> dict[str, FakeProvider]:
    fakes = {
        "gemini": FakeProvider("- Highlight Python\n- Add PostgreSQL metrics"),
        "openrouter": FakeProvider('{"content": "Router advice", "metadata": {"ats_score": 77}}'),
    }
    pool = FakePool(gemini=fakes["gemini"], openrouter=fakes["openrouter"])
    monkeypatch.setattr(generation_module, "LLMRouter", lambda settings: LLMRouter(settings, pool=pool))
    return fakes


FORM = {
    "company_name": "Acme",
    "job_title": "Backend Engineer",
    "job_description": "Python and PostgreSQL",
    "hiring_manager": "Jane Smith",
    "personal_experience": "Built billing systems",
}


def test_resume_analysis_with_uploaded_resume(client: TestClient, providers: dict[str, FakeProvider]) -> None:
    document = client.post(
        "/api/documents",
        files={"file": ("resume.txt", b"Jane Doe - Python engineer", "text/plain")},
        data={"file_type": "resume"},
    ).json()

    response = client.post(
        "/api/generations",
        json={"type": "resume", "form": FORM, "document_id": document["id"]},
    )

    assert response.status_code == 200
    body = response.json()
    assert body["provider"] == "gemini"
    assert body["metadata"]["keywords_found"] == ["python", "postgresql"]
    assert "Jane Doe - Python engineer" in providers["gemini"].calls[0]["prompt"]

    status = client.get(f"/api/generations/{body['request_id']}").json()
    assert status["status"] == "success"
    assert status["type"] == "resume"


def test_openrouter_resume_with_inline_content(client: TestClient, providers: dict[str, FakeProvider]) -> None:
    response = client.post(
        "/api/generations",
        json={"type": "resume", "provider": "openrouter", "form": FORM, "resume_content": "Jane Doe"},
    )

    assert response.json()["content"] == "Router advice"
    assert response.json()["metadata"] == {"ats_score": 77}


def test_cover_letter_generation(client: TestClient, providers: dict[str, FakeProvider]) -> None:
    providers["gemini"].replies = ["Dear Jane Smith,\nI would love to join Acme."]

    response = client.post("/api/generations", json={"type": "cover-letter", "form": FORM})

    assert response.status_code == 200
    metadata = response.json()["metadata"]
    assert metadata["personalization_score"] == 90
    assert metadata["tone_used"] == "professional"


def test_provider_failure_maps_to_bad_gateway(client: TestClient, providers: dict[str, FakeProvider]) -> None:
    providers["gemini"].replies = [failing("Gemini API error: 429")]

    response = client.post("/api/generations", json={"type": "resume", "form": FORM})

    assert response.status_code == 502
    assert "429" in response.json()["detail"]


def test_unknown_document_is_bad_request(client: TestClient, providers: dict[str, FakeProvider]) -> None:
    response = client.post("/api/generations", json={"type": "resume", "form": FORM, "document_id": 404})

    assert response.status_code == 400


def test_web_form_direct_generation(client: TestClient, providers: dict[str, FakeProvider]) -> None:
    response = client.post("/web/generate", data={"type": "resume", "mode": "direct", "provider": "gemini", **FORM})

    assert response.status_code == 200
    assert "Highlight Python" in response.text
    assert "ATS score" in response.text
