from __future__ import annotations

from datetime import date
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field

from jobtracker.types import AIProvider, ApplicationStatus, GenerationForm, GenerationType, PreviewKind


class UserResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str


class UserSettingsRequest(BaseModel):
    ai_provider: AIProvider = "gemini"
    api_key: str = ""
    model_id: str = ""


class UserSettingsResponse(BaseModel):
    ai_provider: str
    model_id: str
    has_api_key: bool


class ApplicationCreateRequest(BaseModel):
    company_name: str = Field(min_length=1)
    job_title: str = Field(min_length=1)
    status: ApplicationStatus = "applied"
    location: str = ""
    job_url: str = ""
    notes: str = ""
    applied_on: date | None = None


class ApplicationUpdateRequest(BaseModel):
    company_name: str | None = Field(default=None, min_length=1)
    job_title: str | None = Field(default=None, min_length=1)
    status: ApplicationStatus | None = None
    location: str | None = None
    job_url: str | None = None
    notes: str | None = None
    applied_on: date | None = None


class ApplicationResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    company_name: str
    job_title: str
    status: str
    location: str
    job_url: str
    notes: str
    applied_on: date | None


class DocumentResponse(BaseModel):
    id: int
    file_name: str
    file_type: str
    file_url: str
    mime_type: str
    file_size: int
    linked_job_id: int | None
    has_resume_content: bool
    uploaded_on: str | None


class DocumentPreviewResponse(BaseModel):
    id: int
    file_name: str
    file_type_label: str
    file_url: str
    kind: PreviewKind
    text: str | None = None


class LinkedInJobResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    title: str
    location: str
    company_name: str
    description: str
    seniority: str
    employment_type: str
    apply_url: str
    source: str
    recruiter_name: str
    recruiter_profile: str
    recruiter_profile_url: str


class DirectGenerationRequest(BaseModel):
    type: GenerationType = "resume"
    provider: AIProvider | None = None
    form: GenerationForm
    resume_content: str | None = None
    document_id: int | None = None


class DirectGenerationResponse(BaseModel):
    request_id: str
    type: str
    provider: str
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class WorkflowGenerationRequest(BaseModel):
    type: GenerationType = "resume"
    form: GenerationForm


class WorkflowGenerationResponse(BaseModel):
    request_id: str
    status: Literal["pending"] = "pending"
    poll_url: str


class GenerationStatusResponse(BaseModel):
    request_id: str
    status: Literal["pending", "success", "error"]
    type: str | None = None
    content: str | None = None
    error_message: str | None = None
    is_used: bool = False


class WorkflowHistoryResponse(BaseModel):
    id: int
    request_id: str
    job_id: str | None
    job_type: str
    company_name: str
    job_title: str
    content: str
    created_at: str | None
    metadata: dict[str, Any] = Field(default_factory=dict)
