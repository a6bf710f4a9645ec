from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

from jobtracker.core import workflow as workflow_module


class FakeResponse:
    status_code = 200
    reason = "OK"
    text = "Workflow was started"
    ok = True


@pytest.fixture
def webhook(monkeypatch: pytest.MonkeyPatch) -> list[dict]:
    sent: list[dict] = []

    def fake_post(url, json=None, headers=None, timeout=None):
        sent.append(json)
        return FakeResponse()

    monkeypatch.setattr(workflow_module.requests, "post", fake_post)
    return sent


def _form(app_id: int) -> dict:
    return {
        "selected_job_id": f"app_{app_id}",
        "company_name": "Acme",
        "job_title": "Backend Engineer",
        "job_description": "Python, Docker, PostgreSQL",
        "tone": "friendly",
    }


def test_resume_workflow_round_trip(client: TestClient, webhook: list[dict]) -> None:
    app_id = client.post("/api/applications", json={"company_name": "Acme", "job_title": "Backend Engineer"}).json()[
        "id"
    ]

    started = client.post("/api/generations/workflow", json={"type": "resume", "form": _form(app_id)})
    assert started.status_code == 202
    request_id = started.json()["request_id"]
    assert started.json()["poll_url"] == f"/api/generations/{request_id}"
    assert webhook[0]["request_id"] == request_id
    assert webhook[0]["data"]["selected_job_id"] == str(app_id)

    pending = client.get(f"/api/generations/{request_id}").json()
    assert pending["status"] == "pending"

    history = client.get("/api/history/resume").json()
    assert history[0]["content"] == "Generating resume suggestions..."

    callback = client.post(
        "/functions/v1/n8n-response",
        json={
            "request_id": request_id,
            "type": "resume",
            "status": "success",
            "content": "1. Quantify impact\n2. Mention Docker",
            "metadata": {"ats_score": 90, "keywords_found": ["docker"], "suggestions_count": 2},
            "job_application_id": str(app_id),
        },
    )
    assert callback.status_code == 200

    done = client.get(f"/api/generations/{request_id}").json()
    assert done["status"] == "success"
    assert done["content"].startswith("1. Quantify impact")

    by_job = client.get("/api/history/resume", params={"job_id": str(app_id)}).json()
    assert by_job[0]["metadata"]["ats_score"] == 90
    assert by_job[0]["job_type"] == "application"

    item = client.get(f"/api/history/resume/{by_job[0]['id']}").json()
    assert item["request_id"] == request_id
    assert client.get("/api/history/cover-letter/999").status_code == 404

    export = client.get(f"/api/generations/{request_id}/export")
    assert export.status_code == 200
    assert export.headers["content-disposition"] == f'attachment; filename="resume-{request_id}.txt"'
    assert export.text == "1. Quantify impact\n2. Mention Docker"

    used = client.post(f"/api/generations/{request_id}/use").json()
    assert used["is_used"] is True


def test_cover_letter_workflow_error_result(client: TestClient, webhook: list[dict]) -> None:
    started = client.post(
        "/api/generations/workflow",
        json={"type": "cover-letter", "form": {**_form(1), "selected_job_id": ""}},
    )
    request_id = started.json()["request_id"]

    client.post(
        "/functions/v1/n8n-response",
        json={"request_id": request_id, "type": "cover-letter", "status": "error", "error_message": "Model overloaded"},
    )

    status = client.get(f"/api/generations/{request_id}").json()
    assert status["status"] == "error"
    assert status["error_message"] == "Error: Model overloaded"

    history = client.get("/api/history/cover-letter").json()
    assert history[0]["content"] == "Error: Model overloaded"
    assert history[0]["metadata"]["tone"] == "friendly"


def test_workflow_rejects_blank_form(client: TestClient, webhook: list[dict]) -> None:
    response = client.post(
        "/api/generations/workflow",
        json={"type": "resume", "form": {"company_name": "", "job_title": "x", "job_description": "y"}},
    )

    assert response.status_code == 422
    assert "Please enter a company name" in response.text
    assert webhook == []


def test_workflow_webhook_failure_maps_to_bad_gateway(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    class Failed(FakeResponse):
        status_code = 503
        reason = "Service Unavailable"
        text = "paused"
        ok = False

    monkeypatch.setattr(workflow_module.requests, "post", lambda *args, **kwargs: Failed())

    response = client.post("/api/generations/workflow", json={"type": "resume", "form": _form(1)})

    assert response.status_code == 502
    assert client.get("/api/history/resume").json() == []


def test_unknown_generation_is_404(client: TestClient) -> None:
    assert client.get("/api/generations/missing-1").status_code == 404
    assert client.get("/api/generations/missing-1/export").status_code == 404
    assert client.post("/api/generations/missing-1/use").status_code == 404


def test_stream_reports_completed_generation(client: TestClient, webhook: list[dict]) -> None:
    request_id = client.post("/api/generations/workflow", json={"type": "resume", "form": _form(1)}).json()[
        "request_id"
    ]
    client.post(
        "/functions/v1/n8n-response",
        json={"request_id": request_id, "type": "resume", "status": "success", "content": "All good"},
    )

    with client.websocket_connect(f"/api/generations/{request_id}/stream") as websocket:
        message = websocket.receive_json()

    assert message["status"] == "success"
    assert message["content"] == "All good"
    assert message["progress"] == 100.0
    assert message["completed"] is True
