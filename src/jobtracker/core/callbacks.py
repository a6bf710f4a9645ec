from __future__ import annotations

import logging

from jobtracker.db.models import AIGeneration
from jobtracker.db.repositories import Repository
from jobtracker.types import WorkflowCallback

logger = logging.getLogger(__name__)

ERROR_PREFIX = "Error:"


def resolve_job_reference(request_id: str, job_application_id: str | None) -> str:
    if not job_application_id or job_application_id == "null":
        return f"n8n-{request_id}"
    return job_application_id


def record_workflow_callback(repo: Repository, callback: WorkflowCallback) -> AIGeneration:
    if not callback.request_id:
        raise ValueError("Missing request_id")

    logger.info(
        "Workflow callback request_id=%s type=%s status=%s",
        callback.request_id,
        callback.type,
        callback.status,
    )

    # the callback carries no user; the placeholder row written at trigger time does
    placeholder = repo.get_workflow_generation(callback.type, callback.request_id)
    user_id = placeholder.user_id if placeholder else None

    if callback.status == "success" and callback.content:
        generation = repo.save_generation(
            request_id=callback.request_id,
            type=callback.type,
            content=callback.content,
            user_id=user_id,
            job_application_id=resolve_job_reference(callback.request_id, callback.job_application_id),
            metadata=callback.metadata,
        )
        repo.fill_workflow_generation(callback.type, callback.request_id, callback.content, callback.metadata)
        return generation

    logger.error("Workflow generation failed request_id=%s: %s", callback.request_id, callback.error_message)
    content = f"{ERROR_PREFIX} {callback.error_message or 'Generation failed'}"
    generation = repo.save_generation(
        request_id=callback.request_id,
        type=callback.type,
        content=content,
        user_id=user_id,
        job_application_id=f"error-{callback.request_id}",
        metadata=callback.metadata,
    )
    repo.fill_workflow_generation(callback.type, callback.request_id, content, {})
    return generation
