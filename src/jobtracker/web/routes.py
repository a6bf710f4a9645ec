from __future__ import annotations

import logging
from pathlib import Path
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import FileResponse, HTMLResponse, RedirectResponse, Response
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from sqlalchemy.orm import Session

from jobtracker.api.deps import get_current_user, get_db
from jobtracker.config import get_settings
from jobtracker.core.documents import DocumentStore, preview_kind
from jobtracker.core.generation import GenerationService
from jobtracker.core.job_options import autofill, list_job_options
from jobtracker.db.models import User
from jobtracker.db.repositories import Repository
from jobtracker.errors import GenerationTimeoutError, ProviderError, WorkflowError
from jobtracker.types import TONE_OPTIONS, GenerationForm

logger = logging.getLogger(__name__)

router = APIRouter(tags=["web"])
templates = Jinja2Templates(directory=str(Path(__file__).resolve().parent / "templates"))
static_dir = Path(__file__).resolve().parent / "static"

APPLICATION_STATUSES = ["wishlist", "applied", "interviewing", "offer", "rejected", "withdrawn"]
DOCUMENT_TYPES = ["resume", "cover-letter", "portfolio", "other"]


def _validation_message(exc: ValidationError) -> str:
    errors = exc.errors()
    if not errors:
        return str(exc)
    return str(errors[0]["msg"]).removeprefix("Value error, ")


@router.get("/favicon.ico", include_in_schema=False)
def favicon() -> Response:
    icon_path = static_dir / "favicon.svg"
    if icon_path.is_file():
        return FileResponse(icon_path)
    return Response(status_code=204)


@router.get("/", response_class=HTMLResponse)
def dashboard(
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    return templates.TemplateResponse(
        request,
        "dashboard.html",
        {
            "user": user,
            "applications": repo.list_applications(user.id),
            "generations": repo.list_generations(user.id, limit=10),
            "statuses": APPLICATION_STATUSES,
        },
    )


@router.post("/web/applications")
def create_application(
    company_name: str = Form(...),
    job_title: str = Form(...),
    status: str = Form("applied"),
    location: str = Form(""),
    job_url: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if status not in APPLICATION_STATUSES:
        status = "applied"
    Repository(db).create_application(
        user_id=user.id,
        company_name=company_name.strip(),
        job_title=job_title.strip(),
        status=status,
        location=location.strip(),
        job_url=job_url.strip(),
    )
    return RedirectResponse(url="/", status_code=303)


def _generator_context(db: Session, user: User, type: str, **extra) -> dict:
    repo = Repository(db)
    settings = get_settings()
    user_settings = repo.get_user_settings(user.id)
    context = {
        "user": user,
        "type": type,
        "job_options": list_job_options(db, user.id),
        "tones": TONE_OPTIONS,
        "resumes": [doc for doc in repo.list_documents(user.id) if doc.resume_content],
        "history": repo.list_workflow_generations(type, user.id),
        "provider": user_settings.ai_provider if user_settings else settings.default_ai_provider,
        "form": {},
        "error": None,
        "result": None,
    }
    context.update(extra)
    return context


@router.get("/resume", response_class=HTMLResponse)
def resume_generator(
    request: Request,
    job: str = "",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    form = {}
    if job:
        try:
            form = {"selected_job_id": job, **autofill(db, user.id, job).model_dump()}
        except ValueError:
            form = {}
    context = _generator_context(db, user, "resume", form=form)
    return templates.TemplateResponse(request, "resume_generator.html", context)


@router.get("/cover-letters", response_class=HTMLResponse)
def cover_letters(
    request: Request,
    job: str = "",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    form = {}
    if job:
        try:
            form = {"selected_job_id": job, **autofill(db, user.id, job).model_dump()}
        except ValueError:
            form = {}
    context = _generator_context(db, user, "cover-letter", form=form)
    return templates.TemplateResponse(request, "cover_letters.html", context)


@router.post("/web/generate", response_class=HTMLResponse)
def generate(
    request: Request,
    type: str = Form("resume"),
    mode: str = Form("direct"),
    provider: str = Form(""),
    selected_job_id: str = Form(""),
    company_name: str = Form(""),
    job_title: str = Form(""),
    job_description: str = Form(""),
    hiring_manager: str = Form(""),
    tone: str = Form("professional"),
    personal_experience: str = Form(""),
    why_company: str = Form(""),
    document_id: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    if type not in ("resume", "cover-letter"):
        type = "resume"
    raw = {
        "selected_job_id": selected_job_id,
        "company_name": company_name,
        "job_title": job_title,
        "job_description": job_description,
        "hiring_manager": hiring_manager,
        "tone": tone,
        "personal_experience": personal_experience,
        "why_company": why_company,
    }
    page = "resume_generator.html" if type == "resume" else "cover_letters.html"

    try:
        form = GenerationForm.model_validate(raw)
    except ValidationError as exc:
        context = _generator_context(db, user, type, form=raw, error=_validation_message(exc))
        return templates.TemplateResponse(request, page, context, status_code=400)

    service = GenerationService(db)
    try:
        if mode == "workflow":
            request_id = service.start_workflow(user=user, type=type, form=form)
            return RedirectResponse(url=f"/generations/{request_id}", status_code=303)

        result = service.generate_direct(
            user=user,
            type=type,
            form=form,
            provider=provider or None,
            document_id=int(document_id) if document_id.isdigit() else None,
        )
    except (ValueError, ProviderError, WorkflowError) as exc:
        logger.error("Error generating content: %s", exc)
        context = _generator_context(db, user, type, form=raw, error=str(exc))
        return templates.TemplateResponse(request, page, context, status_code=502)

    context = _generator_context(db, user, type, form=raw, result=result)
    return templates.TemplateResponse(request, page, context)


@router.get("/generations/{request_id}", response_class=HTMLResponse)
def generation_status(
    request_id: str,
    request: Request,
    attempt: int = 1,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    owner = Repository(db).generation_owner(request_id)
    if owner is not None and owner != user.id:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"message": "Generation not found"},
            status_code=404,
        )

    settings = get_settings()
    outcome = GenerationService(db, settings=settings).check_result(request_id)
    timed_out = outcome is None and attempt >= settings.workflow_max_attempts
    return templates.TemplateResponse(
        request,
        "generation_status.html",
        {
            "request_id": request_id,
            "outcome": outcome,
            "next_attempt": attempt + 1,
            "timed_out": timed_out,
            "timeout_message": str(GenerationTimeoutError()),
            "refresh_sec": max(int(settings.workflow_poll_interval_sec), 1),
        },
    )


@router.get("/documents", response_class=HTMLResponse)
def documents(
    request: Request,
    error: str = "",
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    repo = Repository(db)
    return templates.TemplateResponse(
        request,
        "documents.html",
        {
            "user": user,
            "documents": repo.list_documents(user.id),
            "applications": repo.list_applications(user.id),
            "document_types": DOCUMENT_TYPES,
            "error": error or None,
        },
    )


@router.post("/web/documents")
async def upload_document(
    file: UploadFile = File(...),
    file_type: str = Form("resume"),
    linked_job_id: str = Form(""),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    data = await file.read()
    if data and file_type in DOCUMENT_TYPES:
        try:
            DocumentStore(db).upload(
                user_id=user.id,
                file_name=file.filename or "upload",
                file_type=file_type,
                data=data,
                mime_type=file.content_type,
                linked_job_id=int(linked_job_id) if linked_job_id.isdigit() else None,
            )
        except ValueError as exc:
            logger.warning("Document upload rejected: %s", exc)
            return RedirectResponse(url=f"/documents?{urlencode({'error': str(exc)})}", status_code=303)
    return RedirectResponse(url="/documents", status_code=303)


@router.get("/documents/{document_id}", response_class=HTMLResponse)
def document_viewer(
    document_id: int,
    request: Request,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HTMLResponse:
    document = Repository(db).get_document(user.id, document_id)
    if not document:
        return templates.TemplateResponse(
            request,
            "not_found.html",
            {"message": "Document not found"},
            status_code=404,
        )

    kind = preview_kind(document.file_name)
    text = None
    if kind == "text":
        try:
            text = DocumentStore(db).read_text(document)
        except ValueError:
            kind = "download"
    return templates.TemplateResponse(
        request,
        "document_viewer.html",
        {"document": document, "kind": kind, "text": text},
    )


@router.post("/web/documents/{document_id}/delete")
def delete_document(
    document_id: int,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        DocumentStore(db).delete(user.id, document_id)
    except ValueError:
        logger.warning("Delete requested for missing document id=%s", document_id)
    return RedirectResponse(url="/documents", status_code=303)
