from __future__ import annotations

from datetime import UTC, date, datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from jobtracker.db.models import (
    AIGeneration,
    CoverLetterGeneration,
    Document,
    JobApplication,
    LinkedInJob,
    ResumeGeneration,
    User,
    UserSettings,
)

DOCUMENT_LIST_LIMIT = 100
LINKEDIN_LIST_LIMIT = 200

PLACEHOLDER_CONTENT = {
    "resume": "Generating resume suggestions...",
    "cover-letter": "Generating cover letter...",
}

APPLICATION_FIELDS = {"company_name", "job_title", "status", "location", "job_url", "notes", "applied_on"}
LINKEDIN_FIELDS = {
    "title",
    "location",
    "company_name",
    "posted_at",
    "description",
    "seniority",
    "employment_type",
    "apply_url",
    "source",
    "recruiter_name",
    "recruiter_profile",
    "recruiter_profile_url",
}


def _score(value: Any, default: int = 0) -> int:
    """Whole-number score from workflow metadata, which may send "85.5" or "85%"."""
    if isinstance(value, str):
        value = value.strip().rstrip("%")
    try:
        return int(float(value))
    except (TypeError, ValueError, OverflowError):
        return default


class Repository:
    def __init__(self, session: Session):
        self.session = session

    def ensure_user(self, email: str) -> User:
        existing = self.session.scalar(select(User).where(User.email == email))
        if existing:
            return existing
        user = User(email=email)
        self.session.add(user)
        self.session.commit()
        self.session.refresh(user)
        return user

    def get_user(self, user_id: str) -> User | None:
        return self.session.get(User, user_id)

    def get_user_settings(self, user_id: str) -> UserSettings | None:
        return self.session.scalar(select(UserSettings).where(UserSettings.user_id == user_id))

    def upsert_user_settings(self, user_id: str, values: dict[str, Any]) -> UserSettings:
        existing = self.get_user_settings(user_id)
        if existing:
            for key, value in values.items():
                setattr(existing, key, value)
            obj = existing
        else:
            obj = UserSettings(user_id=user_id, **values)
            self.session.add(obj)

        self.session.commit()
        self.session.refresh(obj)
        return obj

    def create_application(
        self,
        *,
        user_id: str,
        company_name: str,
        job_title: str,
        status: str = "applied",
        location: str = "",
        job_url: str = "",
        notes: str = "",
        applied_on: date | None = None,
    ) -> JobApplication:
        application = JobApplication(
            user_id=user_id,
            company_name=company_name,
            job_title=job_title,
            status=status,
            location=location,
            job_url=job_url,
            notes=notes,
            applied_on=applied_on,
        )
        self.session.add(application)
        self.session.commit()
        self.session.refresh(application)
        return application

    def list_applications(self, user_id: str) -> list[JobApplication]:
        statement = (
            select(JobApplication)
            .where(JobApplication.user_id == user_id)
            .order_by(JobApplication.created_at.desc(), JobApplication.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_application(self, user_id: str, application_id: int) -> JobApplication | None:
        application = self.session.get(JobApplication, application_id)
        if application is None or application.user_id != user_id:
            return None
        return application

    def update_application(self, user_id: str, application_id: int, values: dict[str, Any]) -> JobApplication:
        application = self.get_application(user_id, application_id)
        if not application:
            raise ValueError(f"application {application_id} not found")

        for key, value in values.items():
            if key in APPLICATION_FIELDS:
                setattr(application, key, value)

        self.session.commit()
        self.session.refresh(application)
        return application

    def delete_application(self, user_id: str, application_id: int) -> None:
        application = self.get_application(user_id, application_id)
        if not application:
            raise ValueError(f"application {application_id} not found")
        self.session.delete(application)
        self.session.commit()

    def create_document(
        self,
        *,
        user_id: str,
        file_name: str,
        file_type: str,
        storage_path: str,
        mime_type: str,
        file_size: int,
        linked_job_id: int | None = None,
        resume_content: str | None = None,
    ) -> Document:
        document = Document(
            user_id=user_id,
            file_name=file_name,
            file_type=file_type,
            storage_path=storage_path,
            mime_type=mime_type,
            file_size=file_size,
            linked_job_id=linked_job_id,
            resume_content=resume_content,
        )
        self.session.add(document)
        self.session.flush()
        document.file_url = f"/api/documents/{document.id}/file"
        self.session.commit()
        self.session.refresh(document)
        return document

    def list_documents(self, user_id: str, limit: int = DOCUMENT_LIST_LIMIT) -> list[Document]:
        statement = (
            select(Document)
            .where(Document.user_id == user_id)
            .order_by(Document.uploaded_on.desc(), Document.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def get_document(self, user_id: str, document_id: int) -> Document | None:
        document = self.session.get(Document, document_id)
        if document is None or document.user_id != user_id:
            return None
        return document

    def delete_document(self, user_id: str, document_id: int) -> str:
        document = self.get_document(user_id, document_id)
        if not document:
            raise ValueError(f"document {document_id} not found")
        storage_path = document.storage_path
        self.session.delete(document)
        self.session.commit()
        return storage_path

    def list_linkedin_jobs(self, limit: int = LINKEDIN_LIST_LIMIT) -> list[LinkedInJob]:
        statement = (
            select(LinkedInJob).order_by(LinkedInJob.posted_at.desc(), LinkedInJob.id.desc()).limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def get_linkedin_job(self, job_id: int) -> LinkedInJob | None:
        return self.session.get(LinkedInJob, job_id)

    def search_linkedin_jobs(self, term: str, limit: int = LINKEDIN_LIST_LIMIT) -> list[LinkedInJob]:
        if not term.strip():
            return self.list_linkedin_jobs(limit=limit)

        needle = term.strip().lower()
        statement = (
            select(LinkedInJob)
            .where(
                or_(
                    func.lower(LinkedInJob.title).contains(needle, autoescape=True),
                    func.lower(LinkedInJob.company_name).contains(needle, autoescape=True),
                    func.lower(LinkedInJob.location).contains(needle, autoescape=True),
                    func.lower(LinkedInJob.description).contains(needle, autoescape=True),
                )
            )
            .order_by(LinkedInJob.posted_at.desc(), LinkedInJob.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def import_linkedin_jobs(self, items: list[dict[str, Any]]) -> int:
        inserted = 0
        for item in items:
            values = {key: value for key, value in item.items() if key in LINKEDIN_FIELDS}
            if isinstance(values.get("posted_at"), str):
                values["posted_at"] = datetime.fromisoformat(values["posted_at"].replace("Z", "+00:00"))
            self.session.add(LinkedInJob(**values))
            inserted += 1
        self.session.commit()
        return inserted

    def save_generation(
        self,
        *,
        request_id: str,
        type: str,
        content: str,
        user_id: str | None = None,
        job_application_id: str | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> AIGeneration:
        generation = self.get_generation(request_id)
        if generation is None:
            generation = AIGeneration(request_id=request_id)
            self.session.add(generation)

        generation.type = type
        generation.content = content
        generation.is_used = False
        generation.job_application_id = job_application_id
        generation.metadata_json = metadata or {}
        generation.generated_on = datetime.now(UTC)
        if user_id is not None:
            generation.user_id = user_id

        self.session.commit()
        self.session.refresh(generation)
        return generation

    def get_generation(self, request_id: str) -> AIGeneration | None:
        statement = (
            select(AIGeneration)
            .where(AIGeneration.request_id == request_id)
            .execution_options(populate_existing=True)
        )
        return self.session.scalar(statement)

    def generation_owner(self, request_id: str) -> str | None:
        generation = self.get_generation(request_id)
        if generation is not None and generation.user_id:
            return generation.user_id
        placeholder = self.get_workflow_generation("resume", request_id) or self.get_workflow_generation(
            "cover-letter", request_id
        )
        return placeholder.user_id if placeholder else None

    def list_generations(self, user_id: str, limit: int = 50) -> list[AIGeneration]:
        statement = (
            select(AIGeneration)
            .where(AIGeneration.user_id == user_id)
            .order_by(AIGeneration.generated_on.desc(), AIGeneration.id.desc())
            .limit(limit)
        )
        return list(self.session.scalars(statement).all())

    def mark_generation_used(self, request_id: str) -> AIGeneration:
        generation = self.get_generation(request_id)
        if not generation:
            raise ValueError(f"generation {request_id} not found")
        generation.is_used = True
        self.session.commit()
        self.session.refresh(generation)
        return generation

    def create_workflow_placeholder(
        self,
        *,
        type: str,
        user_id: str,
        request_id: str,
        job_id: str | None,
        job_type: str,
        company_name: str,
        job_title: str,
        tone: str = "professional",
    ) -> ResumeGeneration | CoverLetterGeneration:
        row: ResumeGeneration | CoverLetterGeneration
        if type == "resume":
            row = ResumeGeneration(
                user_id=user_id,
                request_id=request_id,
                job_id=job_id,
                job_type=job_type,
                company_name=company_name,
                job_title=job_title,
                content=PLACEHOLDER_CONTENT["resume"],
                ats_score=0,
                keywords_json=[],
                suggestions_count=0,
            )
        else:
            row = CoverLetterGeneration(
                user_id=user_id,
                request_id=request_id,
                job_id=job_id,
                job_type=job_type,
                company_name=company_name,
                job_title=job_title,
                content=PLACEHOLDER_CONTENT["cover-letter"],
                tone=tone,
                personalization_score=0,
                word_count=0,
            )
        self.session.add(row)
        self.session.commit()
        self.session.refresh(row)
        return row

    def get_workflow_generation(
        self, type: str, request_id: str
    ) -> ResumeGeneration | CoverLetterGeneration | None:
        model = ResumeGeneration if type == "resume" else CoverLetterGeneration
        return self.session.scalar(select(model).where(model.request_id == request_id))

    def fill_workflow_generation(
        self, type: str, request_id: str, content: str, metadata: dict[str, Any]
    ) -> ResumeGeneration | CoverLetterGeneration | None:
        row = self.get_workflow_generation(type, request_id)
        if row is None:
            return None

        row.content = content
        if isinstance(row, ResumeGeneration):
            row.ats_score = _score(metadata.get("ats_score"))
            keywords = metadata.get("keywords_found")
            row.keywords_json = [str(keyword) for keyword in keywords] if isinstance(keywords, list) else []
            row.suggestions_count = _score(metadata.get("suggestions_count"))
        else:
            row.tone = str(metadata.get("tone_used") or row.tone)
            row.personalization_score = _score(metadata.get("personalization_score"))
            row.word_count = _score(metadata.get("word_count")) or len(content.split())

        self.session.commit()
        self.session.refresh(row)
        return row

    def list_workflow_generations(
        self, type: str, user_id: str
    ) -> list[ResumeGeneration] | list[CoverLetterGeneration]:
        model = ResumeGeneration if type == "resume" else CoverLetterGeneration
        statement = (
            select(model).where(model.user_id == user_id).order_by(model.created_at.desc(), model.id.desc())
        )
        return list(self.session.scalars(statement).all())

    def get_workflow_generation_by_id(
        self, type: str, user_id: str, generation_id: int
    ) -> ResumeGeneration | CoverLetterGeneration | None:
        model = ResumeGeneration if type == "resume" else CoverLetterGeneration
        row = self.session.get(model, generation_id)
        if row is None or row.user_id != user_id:
            return None
        return row

    def get_workflow_generation_by_job(
        self, type: str, user_id: str, job_id: str
    ) -> ResumeGeneration | CoverLetterGeneration | None:
        model = ResumeGeneration if type == "resume" else CoverLetterGeneration
        statement = (
            select(model)
            .where(model.user_id == user_id, model.job_id == job_id)
            .order_by(model.created_at.desc(), model.id.desc())
            .limit(1)
        )
        return self.session.scalar(statement)
