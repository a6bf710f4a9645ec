from __future__ import annotations

import logging
import time
from collections.abc import Callable
from typing import Any

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from jobtracker.config import Settings, get_settings
from jobtracker.core.callbacks import ERROR_PREFIX
from jobtracker.core.job_options import parse_selected_job
from jobtracker.core.polling import poll_until
from jobtracker.core.workflow import WorkflowClient, build_workflow_payload, new_request_id
from jobtracker.db.models import User
from jobtracker.db.repositories import Repository
from jobtracker.errors import GenerationError
from jobtracker.llm.router import LLMRouter
from jobtracker.types import GenerationForm, GenerationOutcome

logger = logging.getLogger(__name__)


class GenerationService:
    def __init__(
        self,
        session: Session,
        *,
        settings: Settings | None = None,
        llm: LLMRouter | None = None,
        workflow: WorkflowClient | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)
        self.llm = llm or LLMRouter(self.settings)
        self.workflow = workflow or WorkflowClient(self.settings)
        self.sleep = sleep

    def resolve_provider(self, user: User, provider: str | None = None) -> tuple[str, str, str]:
        user_settings = self.repo.get_user_settings(user.id)
        api_key = user_settings.api_key if user_settings else ""
        model = user_settings.model_id if user_settings else ""
        if provider:
            return provider, api_key, model
        if user_settings and user_settings.ai_provider:
            return user_settings.ai_provider, api_key, model
        return self.settings.default_ai_provider, api_key, model

    def generate_direct(
        self,
        *,
        user: User,
        type: str,
        form: GenerationForm,
        provider: str | None = None,
        resume_content: str | None = None,
        document_id: int | None = None,
    ) -> dict[str, Any]:
        provider_name, api_key, model = self.resolve_provider(user, provider)
        selected_job_id, _ = parse_selected_job(form.selected_job_id)

        if document_id is not None:
            document = self.repo.get_document(user.id, document_id)
            if document is None:
                raise ValueError(f"document {document_id} not found")
            resume_content = document.resume_content

        logger.info(
            "Starting content generation type=%s provider=%s has_resume=%s",
            type,
            provider_name,
            bool(resume_content),
        )

        if type == "resume":
            result = self.llm.analyze_resume(
                provider=provider_name,
                job_title=form.job_title,
                company_name=form.company_name,
                job_description=form.job_description,
                resume_content=resume_content,
                selected_job_id=selected_job_id,
                api_key=api_key,
                model=model,
            )
        else:
            result = self.llm.write_cover_letter(provider=provider_name, form=form, api_key=api_key, model=model)

        request_id = f"{provider_name}-{int(time.time() * 1000)}"
        generation = self.repo.save_generation(
            request_id=request_id,
            type=type,
            content=result.content,
            user_id=user.id,
            job_application_id=form.selected_job_id or None,
            metadata=result.metadata,
        )
        return {
            "request_id": generation.request_id,
            "type": type,
            "provider": provider_name,
            "content": result.content,
            "metadata": result.metadata,
        }

    def start_workflow(self, *, user: User, type: str, form: GenerationForm) -> str:
        request_id = new_request_id(type)
        job_id, job_type = parse_selected_job(form.selected_job_id)

        data = form.model_dump()
        data["selected_job_id"] = job_id
        payload = build_workflow_payload(
            type=type,
            user_id=user.id,
            user_email=user.email,
            request_id=request_id,
            data=data,
        )
        self.workflow.trigger(payload)

        self.repo.create_workflow_placeholder(
            type=type,
            user_id=user.id,
            request_id=request_id,
            job_id=job_id,
            job_type=job_type,
            company_name=form.company_name,
            job_title=form.job_title,
            tone=form.tone,
        )
        logger.info("Workflow request sent request_id=%s", request_id)
        return request_id

    def check_result(self, request_id: str) -> GenerationOutcome | None:
        try:
            generation = self.repo.get_generation(request_id)
        except SQLAlchemyError as exc:
            logger.error("Error checking for response request_id=%s: %s", request_id, exc)
            self.session.rollback()
            return None

        if generation is None or not generation.content:
            return None

        is_error = generation.content.startswith(ERROR_PREFIX)
        return GenerationOutcome(
            request_id=request_id,
            type=generation.type,
            status="error" if is_error else "success",
            content=generation.content,
            error_message=generation.content if is_error else None,
        )

    def wait_for_result(self, request_id: str) -> GenerationOutcome:
        outcome = poll_until(
            lambda: self.check_result(request_id),
            interval_sec=self.settings.workflow_poll_interval_sec,
            max_attempts=self.settings.workflow_max_attempts,
            sleep=self.sleep,
            label=request_id,
        )
        if outcome.status == "error":
            raise GenerationError(outcome.error_message or "Generation failed")
        return outcome
