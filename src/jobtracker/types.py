from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, field_validator

GenerationType = Literal["resume", "cover-letter"]
AIProvider = Literal["gemini", "openrouter"]
JobType = Literal["application", "linkedin"]
Tone = Literal["professional", "friendly", "enthusiastic", "formal", "creative"]
ApplicationStatus = Literal["wishlist", "applied", "interviewing", "offer", "rejected", "withdrawn"]
DocumentType = Literal["resume", "cover-letter", "portfolio", "other"]
PreviewKind = Literal["pdf", "image", "text", "download"]

TONE_OPTIONS: list[tuple[str, str]] = [
    ("professional", "Professional"),
    ("friendly", "Friendly"),
    ("enthusiastic", "Enthusiastic"),
    ("formal", "Formal"),
    ("creative", "Creative"),
]


class GenerationForm(BaseModel):
    selected_job_id: str = ""
    company_name: str = ""
    job_title: str = ""
    job_description: str = ""
    hiring_manager: str = ""
    tone: Tone = "professional"
    personal_experience: str = ""
    why_company: str = ""

    @field_validator("company_name")
    @classmethod
    def require_company(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter a company name")
        return value.strip()

    @field_validator("job_title")
    @classmethod
    def require_title(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter a job title")
        return value.strip()

    @field_validator("job_description")
    @classmethod
    def require_description(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter a job description")
        return value.strip()


class AnalysisMetadata(BaseModel):
    keywords_found: list[str] = Field(default_factory=list)
    ats_score: int = 0
    suggestions_count: int = 0


class CoverLetterMetadata(BaseModel):
    tone_used: str = "professional"
    word_count: int = 0
    personalization_score: int = 0


class GenerationResult(BaseModel):
    content: str
    metadata: dict[str, Any] = Field(default_factory=dict)


class ModelResponse(BaseModel):
    content: str
    raw: dict[str, Any] = Field(default_factory=dict)


class WorkflowData(BaseModel):
    company_name: str = ""
    job_title: str = ""
    job_description: str = ""
    selected_job_id: str | None = None
    hiring_manager: str = ""
    tone: str = "professional"
    personal_experience: str = ""
    why_company: str = ""


class WorkflowPayload(BaseModel):
    type: GenerationType
    user_id: str
    user_email: str = ""
    request_id: str
    timestamp: str
    data: WorkflowData


class WorkflowCallback(BaseModel):
    request_id: str = ""
    type: GenerationType = "resume"
    # anything other than "success" is recorded as a failed generation
    status: str = "error"
    content: str | None = None
    error_message: str | None = None
    processing_time: float | None = None
    metadata: dict[str, Any] = Field(default_factory=dict)
    job_application_id: str | None = None

    @field_validator("metadata", mode="before")
    @classmethod
    def default_metadata(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("job_application_id", mode="before")
    @classmethod
    def stringify_job_reference(cls, value: Any) -> Any:
        if value is None or isinstance(value, str):
            return value
        return str(value)


class GenerationOutcome(BaseModel):
    request_id: str
    type: str
    status: Literal["success", "error"]
    content: str
    error_message: str | None = None


class ProgressSnapshot(BaseModel):
    progress: float
    time_remaining: int
    elapsed: float
    completed: bool = False


class JobOption(BaseModel):
    value: str
    label: str
    type: JobType | None = None


class JobAutofill(BaseModel):
    company_name: str = ""
    job_title: str = ""
    job_description: str = ""
