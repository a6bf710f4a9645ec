from __future__ import annotations

import json
import mimetypes
from pathlib import Path

import typer
import uvicorn
from pydantic import ValidationError

from jobtracker.api.app import create_app
from jobtracker.config import get_settings
from jobtracker.core.documents import DocumentStore
from jobtracker.core.generation import GenerationService
from jobtracker.db.init import init_database
from jobtracker.db.repositories import Repository
from jobtracker.db.session import SessionLocal
from jobtracker.errors import GenerationError, ProviderError, WorkflowError
from jobtracker.logging_config import configure_logging
from jobtracker.types import GenerationForm

app = typer.Typer(help="Job Tracker CLI")
applications_app = typer.Typer(help="Track job applications")
documents_app = typer.Typer(help="Upload and list documents")
linkedin_app = typer.Typer(help="LinkedIn job listings")
settings_app = typer.Typer(help="Per-user AI provider settings")

app.add_typer(applications_app, name="applications")
app.add_typer(documents_app, name="documents")
app.add_typer(linkedin_app, name="linkedin")
app.add_typer(settings_app, name="settings")

_INITIALIZED = False


def ensure_initialized() -> None:
    global _INITIALIZED
    if _INITIALIZED:
        return
    init_database()
    _INITIALIZED = True


def _default_user(repo: Repository):
    return repo.ensure_user(get_settings().default_user_email)


@app.command("init")
def init_cmd() -> None:
    """Create the database schema, data directories and the local user."""
    configure_logging()
    result = init_database()
    typer.echo(json.dumps({"ok": True, **result}, indent=2))


@applications_app.command("add")
def applications_add(
    company: str = typer.Option(..., "--company"),
    title: str = typer.Option(..., "--title"),
    status: str = typer.Option("applied", "--status"),
    location: str = typer.Option("", "--location"),
    url: str = typer.Option("", "--url"),
) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        user = _default_user(repo)
        application = repo.create_application(
            user_id=user.id,
            company_name=company,
            job_title=title,
            status=status,
            location=location,
            job_url=url,
        )
        typer.echo(json.dumps({"id": application.id, "option": f"app_{application.id}"}, indent=2))


@applications_app.command("list")
def applications_list() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        user = _default_user(repo)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": row.id,
                        "company_name": row.company_name,
                        "job_title": row.job_title,
                        "status": row.status,
                        "location": row.location,
                    }
                    for row in repo.list_applications(user.id)
                ],
                indent=2,
            )
        )


@documents_app.command("upload")
def documents_upload(
    file: Path = typer.Option(..., "--file", exists=True, readable=True),
    file_type: str = typer.Option("resume", "--type"),
    linked_job_id: int | None = typer.Option(None, "--job-id"),
) -> None:
    configure_logging()
    ensure_initialized()
    mime_type, _ = mimetypes.guess_type(file.name)
    with SessionLocal() as db:
        user = _default_user(Repository(db))
        try:
            document = DocumentStore(db).upload(
                user_id=user.id,
                file_name=file.name,
                file_type=file_type,
                data=file.read_bytes(),
                mime_type=mime_type,
                linked_job_id=linked_job_id,
            )
        except ValueError as exc:
            raise typer.BadParameter(str(exc)) from exc
        typer.echo(
            json.dumps(
                {
                    "id": document.id,
                    "file_url": document.file_url,
                    "has_resume_content": bool(document.resume_content),
                },
                indent=2,
            )
        )


@documents_app.command("list")
def documents_list() -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        repo = Repository(db)
        user = _default_user(repo)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": doc.id,
                        "file_name": doc.file_name,
                        "file_type": doc.file_type,
                        "file_size": doc.file_size,
                        "uploaded_on": doc.uploaded_on.isoformat() if doc.uploaded_on else None,
                    }
                    for doc in repo.list_documents(user.id)
                ],
                indent=2,
            )
        )


@linkedin_app.command("import")
def linkedin_import(file: Path = typer.Option(..., "--file", exists=True, readable=True)) -> None:
    """Load scraped LinkedIn listings from a JSON array."""
    configure_logging()
    ensure_initialized()
    payload = json.loads(file.read_text(encoding="utf-8"))
    if not isinstance(payload, list):
        raise typer.BadParameter("expected a JSON array of job listings")

    with SessionLocal() as db:
        inserted = Repository(db).import_linkedin_jobs(payload)
    typer.echo(json.dumps({"imported": inserted}, indent=2))


@linkedin_app.command("search")
def linkedin_search(term: str = typer.Argument("")) -> None:
    configure_logging()
    ensure_initialized()
    with SessionLocal() as db:
        jobs = Repository(db).search_linkedin_jobs(term)
        typer.echo(
            json.dumps(
                [
                    {
                        "id": job.id,
                        "option": f"linkedin_{job.id}",
                        "title": job.title,
                        "company_name": job.company_name,
                        "location": job.location,
                        "posted_at": job.posted_at.isoformat() if job.posted_at else None,
                    }
                    for job in jobs
                ],
                indent=2,
            )
        )


@settings_app.command("set")
def settings_set(
    provider: str = typer.Option(..., "--provider"),
    api_key: str = typer.Option("", "--api-key"),
    model: str = typer.Option("", "--model"),
) -> None:
    configure_logging()
    ensure_initialized()
    if provider not in {"gemini", "openrouter"}:
        raise typer.BadParameter("provider must be gemini or openrouter")
    with SessionLocal() as db:
        repo = Repository(db)
        user = _default_user(repo)
        row = repo.upsert_user_settings(user.id, {"ai_provider": provider, "api_key": api_key, "model_id": model})
        typer.echo(json.dumps({"ai_provider": row.ai_provider, "model_id": row.model_id}, indent=2))


@app.command("generate")
def generate(
    type: str = typer.Option("resume", "--type"),
    company: str = typer.Option(..., "--company"),
    title: str = typer.Option(..., "--title"),
    description_file: Path = typer.Option(..., "--description-file", exists=True, readable=True),
    job: str = typer.Option("", "--job"),
    provider: str | None = typer.Option(None, "--provider"),
    document_id: int | None = typer.Option(None, "--document-id"),
    tone: str = typer.Option("professional", "--tone"),
    hiring_manager: str = typer.Option("", "--hiring-manager"),
    workflow: bool = typer.Option(False, "--workflow"),
    wait: bool = typer.Option(False, "--wait"),
) -> None:
    """Generate resume advice or a cover letter, directly or through the workflow."""
    configure_logging()
    ensure_initialized()
    if type not in {"resume", "cover-letter"}:
        raise typer.BadParameter("type must be resume or cover-letter")

    try:
        form = GenerationForm(
            selected_job_id=job,
            company_name=company,
            job_title=title,
            job_description=description_file.read_text(encoding="utf-8"),
            tone=tone,
            hiring_manager=hiring_manager,
        )
    except ValidationError as exc:
        raise typer.BadParameter(str(exc)) from exc

    with SessionLocal() as db:
        service = GenerationService(db)
        user = _default_user(service.repo)
        try:
            if not workflow:
                result = service.generate_direct(
                    user=user,
                    type=type,
                    form=form,
                    provider=provider,
                    document_id=document_id,
                )
                typer.echo(json.dumps(result, indent=2))
                return

            request_id = service.start_workflow(user=user, type=type, form=form)
            if not wait:
                typer.echo(json.dumps({"request_id": request_id, "status": "pending"}, indent=2))
                return

            outcome = service.wait_for_result(request_id)
            typer.echo(json.dumps(outcome.model_dump(), indent=2))
        except (ValueError, ProviderError, WorkflowError, GenerationError) as exc:
            typer.echo(json.dumps({"error": str(exc)}, indent=2), err=True)
            raise typer.Exit(code=1) from exc


@app.command("serve")
def serve(
    host: str | None = typer.Option(None, "--host"),
    port: int | None = typer.Option(None, "--port"),
) -> None:
    configure_logging()
    ensure_initialized()
    settings = get_settings()
    app_instance = create_app()
    uvicorn.run(app_instance, host=host or settings.app_host, port=port or settings.app_port)
