from __future__ import annotations

import logging
from pathlib import Path
from typing import Literal

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, WebSocket, WebSocketDisconnect, status
from fastapi.responses import FileResponse, PlainTextResponse
from sqlalchemy.orm import Session
from starlette.concurrency import run_in_threadpool

from jobtracker.api.deps import get_current_user, get_db
from jobtracker.api.schemas import (
    ApplicationCreateRequest,
    ApplicationResponse,
    ApplicationUpdateRequest,
    DirectGenerationRequest,
    DirectGenerationResponse,
    DocumentPreviewResponse,
    DocumentResponse,
    GenerationStatusResponse,
    LinkedInJobResponse,
    UserResponse,
    UserSettingsRequest,
    UserSettingsResponse,
    WorkflowGenerationRequest,
    WorkflowGenerationResponse,
    WorkflowHistoryResponse,
)
from jobtracker.config import get_settings
from jobtracker.core.documents import DocumentStore, preview_kind
from jobtracker.core.generation import GenerationService
from jobtracker.core.job_options import autofill, list_job_options
from jobtracker.core.polling import ProgressTracker, apoll_until
from jobtracker.db.models import CoverLetterGeneration, Document, ResumeGeneration, User
from jobtracker.db.repositories import Repository
from jobtracker.db.session import SessionLocal
from jobtracker.errors import GenerationError, GenerationTimeoutError, ProviderError, WorkflowError
from jobtracker.types import DocumentType, JobAutofill, JobOption

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["api"])


def _document_response(document: Document) -> DocumentResponse:
    return DocumentResponse(
        id=document.id,
        file_name=document.file_name,
        file_type=document.file_type,
        file_url=document.file_url,
        mime_type=document.mime_type,
        file_size=document.file_size,
        linked_job_id=document.linked_job_id,
        has_resume_content=bool(document.resume_content),
        uploaded_on=document.uploaded_on.isoformat() if document.uploaded_on else None,
    )


@router.get("/me", response_model=UserResponse)
def whoami(user: User = Depends(get_current_user)) -> UserResponse:
    return UserResponse.model_validate(user)


@router.get("/settings", response_model=UserSettingsResponse)
def get_user_settings(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> UserSettingsResponse:
    row = Repository(db).get_user_settings(user.id)
    if row is None:
        settings = get_settings()
        return UserSettingsResponse(
            ai_provider=settings.default_ai_provider,
            model_id=settings.gemini_model,
            has_api_key=False,
        )
    return UserSettingsResponse(ai_provider=row.ai_provider, model_id=row.model_id, has_api_key=bool(row.api_key))


@router.put("/settings", response_model=UserSettingsResponse)
def update_user_settings(
    payload: UserSettingsRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> UserSettingsResponse:
    row = Repository(db).upsert_user_settings(user.id, payload.model_dump())
    return UserSettingsResponse(ai_provider=row.ai_provider, model_id=row.model_id, has_api_key=bool(row.api_key))


@router.post("/applications", response_model=ApplicationResponse)
def create_application(
    payload: ApplicationCreateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    application = Repository(db).create_application(user_id=user.id, **payload.model_dump())
    return ApplicationResponse.model_validate(application)


@router.get("/applications", response_model=list[ApplicationResponse])
def list_applications(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[ApplicationResponse]:
    return [ApplicationResponse.model_validate(row) for row in Repository(db).list_applications(user.id)]


@router.get("/applications/{application_id}", response_model=ApplicationResponse)
def get_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    application = Repository(db).get_application(user.id, application_id)
    if not application:
        raise HTTPException(status_code=404, detail="Application not found")
    return ApplicationResponse.model_validate(application)


@router.patch("/applications/{application_id}", response_model=ApplicationResponse)
def update_application(
    application_id: int,
    payload: ApplicationUpdateRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ApplicationResponse:
    try:
        application = Repository(db).update_application(
            user.id, application_id, payload.model_dump(exclude_unset=True)
        )
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return ApplicationResponse.model_validate(application)


@router.delete("/applications/{application_id}")
def delete_application(
    application_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        Repository(db).delete_application(user.id, application_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"deleted": application_id}


@router.post("/documents", response_model=DocumentResponse)
async def upload_document(
    file: UploadFile = File(...),
    file_type: DocumentType = Form(...),
    linked_job_id: int | None = Form(None),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentResponse:
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Uploaded file is empty")

    try:
        document = DocumentStore(db).upload(
            user_id=user.id,
            file_name=file.filename or "upload",
            file_type=file_type,
            data=data,
            mime_type=file.content_type,
            linked_job_id=linked_job_id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return _document_response(document)


@router.get("/documents", response_model=list[DocumentResponse])
def list_documents(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[DocumentResponse]:
    return [_document_response(row) for row in Repository(db).list_documents(user.id)]


@router.delete("/documents/{document_id}")
def delete_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> dict:
    try:
        DocumentStore(db).delete(user.id, document_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return {"deleted": document_id}


@router.get("/documents/{document_id}/file")
def download_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> FileResponse:
    document = Repository(db).get_document(user.id, document_id)
    if not document or not Path(document.storage_path).is_file():
        raise HTTPException(status_code=404, detail="Document not found")
    return FileResponse(document.storage_path, media_type=document.mime_type, filename=document.file_name)


@router.get("/documents/{document_id}/preview", response_model=DocumentPreviewResponse)
def preview_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DocumentPreviewResponse:
    document = Repository(db).get_document(user.id, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")

    kind = preview_kind(document.file_name)
    text = None
    if kind == "text":
        try:
            text = DocumentStore(db).read_text(document)
        except ValueError as exc:
            raise HTTPException(status_code=404, detail=str(exc)) from exc

    return DocumentPreviewResponse(
        id=document.id,
        file_name=document.file_name,
        file_type_label=document.file_type.replace("-", " "),
        file_url=document.file_url,
        kind=kind,
        text=text,
    )


@router.get("/linkedin-jobs", response_model=list[LinkedInJobResponse])
def list_linkedin_jobs(search: str = "", db: Session = Depends(get_db)) -> list[LinkedInJobResponse]:
    rows = Repository(db).search_linkedin_jobs(search)
    return [LinkedInJobResponse.model_validate(row) for row in rows]


@router.get("/linkedin-jobs/{job_id}", response_model=LinkedInJobResponse)
def get_linkedin_job(job_id: int, db: Session = Depends(get_db)) -> LinkedInJobResponse:
    job = Repository(db).get_linkedin_job(job_id)
    if not job:
        raise HTTPException(status_code=404, detail="LinkedIn job not found")
    return LinkedInJobResponse.model_validate(job)


@router.get("/job-options", response_model=list[JobOption])
def job_options(user: User = Depends(get_current_user), db: Session = Depends(get_db)) -> list[JobOption]:
    return list_job_options(db, user.id)


@router.get("/job-options/{value}", response_model=JobAutofill)
def job_option_autofill(
    value: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> JobAutofill:
    try:
        return autofill(db, user.id, value)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc


@router.post("/generations", response_model=DirectGenerationResponse)
def generate_direct(
    payload: DirectGenerationRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> DirectGenerationResponse:
    service = GenerationService(db)
    try:
        result = service.generate_direct(
            user=user,
            type=payload.type,
            form=payload.form,
            provider=payload.provider,
            resume_content=payload.resume_content,
            document_id=payload.document_id,
        )
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except ProviderError as exc:
        logger.error("Error generating content: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return DirectGenerationResponse(**result)


@router.post("/generations/workflow", response_model=WorkflowGenerationResponse, status_code=202)
def generate_via_workflow(
    payload: WorkflowGenerationRequest,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkflowGenerationResponse:
    service = GenerationService(db)
    try:
        request_id = service.start_workflow(user=user, type=payload.type, form=payload.form)
    except WorkflowError as exc:
        logger.error("Error triggering workflow: %s", exc)
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    return WorkflowGenerationResponse(request_id=request_id, poll_url=f"/api/generations/{request_id}")


def _ensure_visible(repo: Repository, request_id: str, user: User) -> None:
    owner = repo.generation_owner(request_id)
    if owner is not None and owner != user.id:
        raise HTTPException(status_code=404, detail="Generation not found")


@router.get("/generations/{request_id}", response_model=GenerationStatusResponse)
def generation_status(
    request_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GenerationStatusResponse:
    repo = Repository(db)
    _ensure_visible(repo, request_id, user)
    outcome = GenerationService(db).check_result(request_id)
    if outcome is None:
        pending = repo.get_workflow_generation("resume", request_id) or repo.get_workflow_generation(
            "cover-letter", request_id
        )
        if pending is None:
            raise HTTPException(status_code=404, detail="Generation not found")
        return GenerationStatusResponse(request_id=request_id, status="pending")

    generation = repo.get_generation(request_id)
    return GenerationStatusResponse(
        request_id=request_id,
        status=outcome.status,
        type=outcome.type,
        content=outcome.content,
        error_message=outcome.error_message,
        is_used=bool(generation and generation.is_used),
    )


@router.post("/generations/{request_id}/wait", response_model=GenerationStatusResponse)
def wait_for_generation(
    request_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GenerationStatusResponse:
    _ensure_visible(Repository(db), request_id, user)
    try:
        outcome = GenerationService(db).wait_for_result(request_id)
    except GenerationTimeoutError as exc:
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except GenerationError as exc:
        return GenerationStatusResponse(request_id=request_id, status="error", error_message=str(exc))
    return GenerationStatusResponse(
        request_id=request_id,
        status=outcome.status,
        type=outcome.type,
        content=outcome.content,
    )


@router.post("/generations/{request_id}/use", response_model=GenerationStatusResponse)
def mark_generation_used(
    request_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> GenerationStatusResponse:
    repo = Repository(db)
    _ensure_visible(repo, request_id, user)
    try:
        generation = repo.mark_generation_used(request_id)
    except ValueError as exc:
        raise HTTPException(status_code=404, detail=str(exc)) from exc
    return GenerationStatusResponse(
        request_id=request_id,
        status="success",
        type=generation.type,
        content=generation.content,
        is_used=generation.is_used,
    )


@router.get("/generations/{request_id}/export")
def export_generation(
    request_id: str,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> PlainTextResponse:
    repo = Repository(db)
    _ensure_visible(repo, request_id, user)
    generation = repo.get_generation(request_id)
    if not generation or not generation.content:
        raise HTTPException(status_code=404, detail="Generation not found")
    filename = f"{generation.type}-{request_id}.txt"
    return PlainTextResponse(
        generation.content,
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )


def _history_response(row: ResumeGeneration | CoverLetterGeneration) -> WorkflowHistoryResponse:
    if isinstance(row, CoverLetterGeneration):
        metadata = {
            "tone": row.tone,
            "personalization_score": row.personalization_score,
            "word_count": row.word_count,
        }
    else:
        metadata = {
            "ats_score": row.ats_score,
            "keywords": row.keywords_json,
            "suggestions_count": row.suggestions_count,
        }
    return WorkflowHistoryResponse(
        id=row.id,
        request_id=row.request_id,
        job_id=row.job_id,
        job_type=row.job_type,
        company_name=row.company_name,
        job_title=row.job_title,
        content=row.content,
        created_at=row.created_at.isoformat() if row.created_at else None,
        metadata=metadata,
    )


@router.get("/history/{type}", response_model=list[WorkflowHistoryResponse])
def workflow_history(
    type: Literal["resume", "cover-letter"],
    job_id: str | None = None,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[WorkflowHistoryResponse]:
    repo = Repository(db)
    if job_id:
        row = repo.get_workflow_generation_by_job(type, user.id, job_id)
        rows = [row] if row else []
    else:
        rows = repo.list_workflow_generations(type, user.id)
    return [_history_response(row) for row in rows]


@router.get("/history/{type}/{generation_id}", response_model=WorkflowHistoryResponse)
def workflow_history_item(
    type: Literal["resume", "cover-letter"],
    generation_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> WorkflowHistoryResponse:
    row = Repository(db).get_workflow_generation_by_id(type, user.id, generation_id)
    if row is None:
        raise HTTPException(status_code=404, detail="Generation not found")
    return _history_response(row)


@router.websocket("/generations/{request_id}/stream")
async def stream_generation(
    websocket: WebSocket,
    request_id: str,
    user: User = Depends(get_current_user),
) -> None:
    settings = get_settings()

    def owner() -> str | None:
        with SessionLocal() as db:
            return Repository(db).generation_owner(request_id)

    def lookup():
        with SessionLocal() as db:
            return GenerationService(db, settings=settings).check_result(request_id)

    generation_owner = await run_in_threadpool(owner)
    if generation_owner is not None and generation_owner != user.id:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    await websocket.accept()
    tracker = ProgressTracker(settings.progress_duration_sec)

    async def check():
        return await run_in_threadpool(lookup)

    async def report(attempt: int) -> None:
        snapshot = tracker.snapshot()
        await websocket.send_json({"status": "pending", "attempt": attempt, **snapshot.model_dump()})

    try:
        outcome = await apoll_until(
            check,
            interval_sec=settings.workflow_poll_interval_sec,
            max_attempts=settings.workflow_max_attempts,
            on_attempt=report,
            label=request_id,
        )
        tracker.complete()
        await websocket.send_json({**outcome.model_dump(), **tracker.snapshot().model_dump()})
    except GenerationTimeoutError as exc:
        await websocket.send_json({"status": "timeout", "error_message": str(exc)})
    except WebSocketDisconnect:
        return
    await websocket.close()
