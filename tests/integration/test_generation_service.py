from __future__ import annotations

import pytest

from fakes import FakePool, FakeProvider
from jobtracker.config import Settings
from jobtracker.core.callbacks import record_workflow_callback
from jobtracker.core.generation import GenerationService
from jobtracker.db.repositories import Repository
from jobtracker.errors import GenerationError, GenerationTimeoutError, WorkflowError
from jobtracker.llm.router import LLMRouter
from jobtracker.types import GenerationForm, WorkflowCallback

FORM = GenerationForm(
    selected_job_id="app_5",
    company_name="Acme",
    job_title="Engineer",
    job_description="Python and SQL",
)


class RecordingWorkflow:
    def __init__(self, error: Exception | None = None):
        self.error = error
        self.payloads = []

    def trigger(self, payload):
        self.payloads.append(payload)
        if self.error:
            raise self.error
        return "OK"


def _service(db_session, *, pool=None, workflow=None, sleep=None, timeout_sec: int = 6) -> GenerationService:
    settings = Settings(workflow_poll_interval_sec=2.0, workflow_processing_timeout_sec=timeout_sec)
    return GenerationService(
        db_session,
        settings=settings,
        llm=LLMRouter(settings, pool=pool or FakePool()),
        workflow=workflow or RecordingWorkflow(),
        sleep=sleep or (lambda seconds: None),
    )


def test_generate_direct_saves_generation(db_session) -> None:
    gemini = FakeProvider("- Learn Docker")
    service = _service(db_session, pool=FakePool(gemini=gemini))
    user = service.repo.ensure_user("me@localhost")

    result = service.generate_direct(user=user, type="resume", form=FORM)

    assert result["provider"] == "gemini"
    assert result["request_id"].startswith("gemini-")
    saved = service.repo.get_generation(result["request_id"])
    assert saved.content == "- Learn Docker"
    assert saved.job_application_id == "app_5"
    assert saved.metadata_json["keywords_found"] == ["docker"]


def test_generate_direct_uses_stored_provider_settings(db_session) -> None:
    pool = FakePool(gemini=FakeProvider("advice"), openrouter=FakeProvider("router advice"))
    service = _service(db_session, pool=pool)
    user = service.repo.ensure_user("me@localhost")
    service.repo.upsert_user_settings(user.id, {"ai_provider": "openrouter", "api_key": "", "model_id": ""})

    result = service.generate_direct(user=user, type="resume", form=FORM)

    assert result["provider"] == "openrouter"
    assert result["content"] == "router advice"


def test_generate_direct_reads_resume_from_document(db_session) -> None:
    gemini = FakeProvider("resume-aware advice")
    service = _service(db_session, pool=FakePool(gemini=gemini))
    user = service.repo.ensure_user("me@localhost")
    document = service.repo.create_document(
        user_id=user.id,
        file_name="resume.txt",
        file_type="resume",
        storage_path="",
        mime_type="text/plain",
        file_size=10,
        resume_content="Jane Doe, Python engineer",
    )

    service.generate_direct(user=user, type="resume", form=FORM, document_id=document.id)

    assert "Jane Doe, Python engineer" in gemini.calls[0]["prompt"]
    with pytest.raises(ValueError):
        service.generate_direct(user=user, type="resume", form=FORM, document_id=999)


def test_start_workflow_creates_placeholder_after_trigger(db_session) -> None:
    workflow = RecordingWorkflow()
    service = _service(db_session, workflow=workflow)
    user = service.repo.ensure_user("me@localhost")

    request_id = service.start_workflow(user=user, type="resume", form=FORM)

    assert workflow.payloads[0].request_id == request_id
    assert workflow.payloads[0].data.selected_job_id == "5"
    placeholder = service.repo.get_workflow_generation("resume", request_id)
    assert placeholder.content == "Generating resume suggestions..."
    assert placeholder.job_id == "5"
    assert service.check_result(request_id) is None


def test_start_workflow_failure_leaves_no_placeholder(db_session) -> None:
    service = _service(db_session, workflow=RecordingWorkflow(error=WorkflowError("down")))
    user = service.repo.ensure_user("me@localhost")

    with pytest.raises(WorkflowError):
        service.start_workflow(user=user, type="cover-letter", form=FORM)

    assert service.repo.list_workflow_generations("cover-letter", user.id) == []


def test_wait_for_result_returns_once_callback_arrives(db_session) -> None:
    sleeps: list[float] = []
    repo = Repository(db_session)

    def sleep(seconds: float) -> None:
        sleeps.append(seconds)
        if len(sleeps) == 2:
            record_workflow_callback(
                repo,
                WorkflowCallback(request_id="resume-9", type="resume", status="success", content="Done"),
            )

    service = _service(db_session, sleep=sleep, timeout_sec=20)

    outcome = service.wait_for_result("resume-9")

    assert outcome.status == "success"
    assert outcome.content == "Done"
    assert sleeps == [2.0, 2.0]


def test_wait_for_result_raises_on_error_content(db_session) -> None:
    record_workflow_callback(
        Repository(db_session),
        WorkflowCallback(request_id="resume-10", type="resume", status="error", error_message="bad input"),
    )
    service = _service(db_session)

    with pytest.raises(GenerationError, match="Error: bad input"):
        service.wait_for_result("resume-10")


def test_wait_for_result_times_out(db_session) -> None:
    sleeps: list[float] = []
    service = _service(db_session, sleep=sleeps.append, timeout_sec=6)

    with pytest.raises(GenerationTimeoutError, match="Request timed out. Please try again."):
        service.wait_for_result("never-arrives")

    assert sleeps == [2.0, 2.0]
