from __future__ import annotations

from fastapi.testclient import TestClient

from jobtracker.db.repositories import Repository


def test_application_crud_api(client: TestClient) -> None:
    create_resp = client.post(
        "/api/applications",
        json={"company_name": "Acme", "job_title": "Backend Engineer", "location": "Remote"},
    )
    assert create_resp.status_code == 200
    application_id = create_resp.json()["id"]
    assert create_resp.json()["status"] == "applied"

    list_resp = client.get("/api/applications")
    assert list_resp.status_code == 200
    assert [item["id"] for item in list_resp.json()] == [application_id]

    patch_resp = client.patch(
        f"/api/applications/{application_id}",
        json={"status": "interviewing", "notes": "Phone screen on Monday"},
    )
    assert patch_resp.status_code == 200
    assert patch_resp.json()["status"] == "interviewing"
    assert patch_resp.json()["company_name"] == "Acme"

    delete_resp = client.delete(f"/api/applications/{application_id}")
    assert delete_resp.status_code == 200
    assert client.get(f"/api/applications/{application_id}").status_code == 404


def test_application_validation_and_missing_rows(client: TestClient) -> None:
    assert client.post("/api/applications", json={"company_name": "", "job_title": "x"}).status_code == 422
    assert client.post(
        "/api/applications", json={"company_name": "Acme", "job_title": "x", "status": "ghosted"}
    ).status_code == 422
    assert client.patch("/api/applications/999", json={"status": "offer"}).status_code == 404
    assert client.delete("/api/applications/999").status_code == 404


def test_unknown_header_user_is_rejected(client: TestClient) -> None:
    response = client.get("/api/applications", headers={"X-User-Id": "nobody"})

    assert response.status_code == 401
    assert response.json()["detail"] == "User not authenticated"


def test_header_user_sees_only_own_applications(client: TestClient, db_session) -> None:
    repo = Repository(db_session)
    other = repo.ensure_user("other@example.com")
    repo.create_application(user_id=other.id, company_name="Globex", job_title="Analyst")
    client.post("/api/applications", json={"company_name": "Acme", "job_title": "Engineer"})

    mine = client.get("/api/applications").json()
    theirs = client.get("/api/applications", headers={"X-User-Id": other.id}).json()

    assert [item["company_name"] for item in mine] == ["Acme"]
    assert [item["company_name"] for item in theirs] == ["Globex"]


def test_me_and_settings_roundtrip(client: TestClient) -> None:
    me = client.get("/api/me").json()
    assert me["email"] == "me@localhost"

    default_settings = client.get("/api/settings").json()
    assert default_settings["has_api_key"] is False

    update = client.put(
        "/api/settings",
        json={"ai_provider": "openrouter", "api_key": "secret-key", "model_id": "some/model"},
    )
    assert update.status_code == 200
    body = update.json()
    assert body == {"ai_provider": "openrouter", "model_id": "some/model", "has_api_key": True}
    assert "secret-key" not in update.text


def test_job_options_and_autofill_api(client: TestClient, db_session) -> None:
    app_id = client.post(
        "/api/applications",
        json={"company_name": "Acme", "job_title": "Engineer", "notes": "Build APIs"},
    ).json()["id"]
    Repository(db_session).import_linkedin_jobs(
        [{"title": "Data Scientist", "company_name": "Initech", "description": "Models"}]
    )

    options = client.get("/api/job-options").json()
    assert options[0] == {"value": "", "label": "Select a job...", "type": None}
    assert options[1]["value"] == f"app_{app_id}"
    assert options[1]["label"] == "📋 Acme - Engineer"
    assert options[2]["label"] == "💼 Initech - Data Scientist"

    autofill = client.get(f"/api/job-options/app_{app_id}").json()
    assert autofill == {"company_name": "Acme", "job_title": "Engineer", "job_description": "Build APIs"}

    assert client.get("/api/job-options/app_999").status_code == 404
    assert client.get("/api/job-options/bogus").status_code == 404


def test_linkedin_search_api(client: TestClient, db_session) -> None:
    Repository(db_session).import_linkedin_jobs(
        [
            {
                "title": "Senior Python Engineer",
                "company_name": "Acme",
                "location": "Berlin",
                "posted_at": "2024-05-01T10:00:00Z",
            },
            {"title": "Designer", "company_name": "Globex", "location": "Paris", "posted_at": "2024-05-02T10:00:00Z"},
            {"title": "Analyst", "company_name": "100%_Data", "location": "Remote"},
        ]
    )

    assert len(client.get("/api/linkedin-jobs").json()) == 3
    assert [job["title"] for job in client.get("/api/linkedin-jobs", params={"search": "PYTHON"}).json()] == [
        "Senior Python Engineer"
    ]
    assert [job["company_name"] for job in client.get("/api/linkedin-jobs", params={"search": "paris"}).json()] == [
        "Globex"
    ]
    assert [job["title"] for job in client.get("/api/linkedin-jobs", params={"search": "%_"}).json()] == ["Analyst"]

    job_id = client.get("/api/linkedin-jobs").json()[0]["id"]
    assert client.get(f"/api/linkedin-jobs/{job_id}").status_code == 200
    assert client.get("/api/linkedin-jobs/9999").status_code == 404


def test_health_reports_database(client: TestClient) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "database": "ok"}
