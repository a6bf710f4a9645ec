from __future__ import annotations

import logging
import time
import uuid
from typing import Any

from jobtracker.config import Settings, get_settings
from jobtracker.core.keywords import analysis_metadata, cover_letter_metadata
from jobtracker.llm.prompts import (
    COVER_LETTER_PROMPT,
    COVER_LETTER_SYSTEM_PROMPT,
    JOB_ONLY_PROMPT,
    JOB_ONLY_SYSTEM_PROMPT,
    JSON_ENVELOPE_SYSTEM_PROMPT,
    JSON_ENVELOPE_USER_PROMPT,
    RESUME_WITH_JOB_PROMPT,
    SUGGESTION_TOPICS,
)
from jobtracker.llm.providers import ProviderPool, parse_json
from jobtracker.types import AnalysisMetadata, GenerationForm, GenerationResult

logger = logging.getLogger(__name__)

OPENROUTER_RESUME_DEFAULTS = AnalysisMetadata(keywords_found=[], ats_score=85, suggestions_count=8)
OPENROUTER_JOB_ONLY_DEFAULTS = AnalysisMetadata(keywords_found=[], ats_score=80, suggestions_count=10)


def _analysis_request_id(prefix: str) -> str:
    return f"{prefix}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


class LLMRouter:
    def __init__(self, settings: Settings | None = None, pool: Any | None = None):
        self.settings = settings or get_settings()
        self.pool = pool or ProviderPool(self.settings)

    def analyze_resume(
        self,
        *,
        provider: str,
        job_title: str,
        company_name: str,
        job_description: str,
        resume_content: str | None = None,
        selected_job_id: str | None = None,
        api_key: str = "",
        model: str = "",
    ) -> GenerationResult:
        if provider == "openrouter":
            if resume_content:
                return self._openrouter_resume_with_job(
                    resume_content=resume_content,
                    job_title=job_title,
                    company_name=company_name,
                    job_description=job_description,
                    selected_job_id=selected_job_id,
                )
            return self._openrouter_job_only(
                job_title=job_title, company_name=company_name, job_description=job_description
            )

        if provider != "gemini":
            raise ValueError(f"unknown AI provider {provider!r}")

        if resume_content:
            try:
                return self._gemini_resume_with_job(
                    resume_content=resume_content,
                    job_title=job_title,
                    company_name=company_name,
                    job_description=job_description,
                    api_key=api_key,
                    model=model,
                )
            except Exception as exc:
                logger.warning("Resume analysis failed (%s); falling back to job-only analysis", exc)

        return self._gemini_job_only(
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
            api_key=api_key,
            model=model,
        )

    def write_cover_letter(
        self,
        *,
        provider: str,
        form: GenerationForm,
        api_key: str = "",
        model: str = "",
    ) -> GenerationResult:
        prompt = COVER_LETTER_PROMPT.format(
            tone=form.tone,
            company_name=form.company_name,
            job_title=form.job_title,
            hiring_manager=form.hiring_manager or "Unknown",
            job_description=form.job_description,
            personal_experience=form.personal_experience or "Not provided",
            why_company=form.why_company or "Not provided",
        )
        if provider == "openrouter":
            response = self.pool.openrouter().complete_text(prompt=prompt, system=COVER_LETTER_SYSTEM_PROMPT)
        elif provider == "gemini":
            response = self.pool.gemini(api_key=api_key, model=model).complete_text(
                prompt=prompt, system=COVER_LETTER_SYSTEM_PROMPT
            )
        else:
            raise ValueError(f"unknown AI provider {provider!r}")

        content = response.content.strip()
        return GenerationResult(
            content=content,
            metadata=cover_letter_metadata(content, form).model_dump(),
        )

    def _gemini_resume_with_job(
        self,
        *,
        resume_content: str,
        job_title: str,
        company_name: str,
        job_description: str,
        api_key: str,
        model: str,
    ) -> GenerationResult:
        prompt = RESUME_WITH_JOB_PROMPT.format(
            resume_content=resume_content,
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
            topics=SUGGESTION_TOPICS,
        )
        response = self.pool.gemini(api_key=api_key, model=model).complete_text(prompt=prompt)
        return GenerationResult(
            content=response.content,
            metadata=analysis_metadata(response.content).model_dump(),
        )

    def _gemini_job_only(
        self,
        *,
        job_title: str,
        company_name: str,
        job_description: str,
        api_key: str,
        model: str,
    ) -> GenerationResult:
        prompt = JOB_ONLY_PROMPT.format(
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
            topics=SUGGESTION_TOPICS,
        )
        response = self.pool.gemini(api_key=api_key, model=model).complete_text(prompt=prompt)
        return GenerationResult(
            content=response.content,
            metadata=analysis_metadata(response.content).model_dump(),
        )

    def _openrouter_resume_with_job(
        self,
        *,
        resume_content: str,
        job_title: str,
        company_name: str,
        job_description: str,
        selected_job_id: str | None,
    ) -> GenerationResult:
        request_id = _analysis_request_id("resume")
        system = JSON_ENVELOPE_SYSTEM_PROMPT.format(
            selected_job_id=selected_job_id or "",
            request_id=request_id,
        )
        prompt = JSON_ENVELOPE_USER_PROMPT.format(
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
            resume_content=resume_content,
            request_id=request_id,
            selected_job_id=selected_job_id or "",
        )
        response = self.pool.openrouter().complete_text(prompt=prompt, system=system)

        data = parse_json(response.content)
        content = data.get("content")
        if isinstance(content, str) and content.strip():
            metadata = data.get("metadata")
            if not isinstance(metadata, dict):
                metadata = OPENROUTER_RESUME_DEFAULTS.model_dump()
            return GenerationResult(content=content, metadata=metadata)

        return GenerationResult(content=response.content, metadata=OPENROUTER_RESUME_DEFAULTS.model_dump())

    def _openrouter_job_only(
        self,
        *,
        job_title: str,
        company_name: str,
        job_description: str,
    ) -> GenerationResult:
        prompt = JOB_ONLY_PROMPT.format(
            job_title=job_title,
            company_name=company_name,
            job_description=job_description,
            topics=SUGGESTION_TOPICS,
        )
        response = self.pool.openrouter().complete_text(prompt=prompt, system=JOB_ONLY_SYSTEM_PROMPT)
        return GenerationResult(content=response.content, metadata=OPENROUTER_JOB_ONLY_DEFAULTS.model_dump())
