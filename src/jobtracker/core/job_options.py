from __future__ import annotations

from sqlalchemy.orm import Session

from jobtracker.db.repositories import Repository
from jobtracker.types import JobAutofill, JobOption

APPLICATION_PREFIX = "app_"
LINKEDIN_PREFIX = "linkedin_"


def parse_selected_job(value: str | None) -> tuple[str | None, str]:
    if value:
        if value.startswith(APPLICATION_PREFIX):
            return value[len(APPLICATION_PREFIX):], "application"
        if value.startswith(LINKEDIN_PREFIX):
            return value[len(LINKEDIN_PREFIX):], "linkedin"
    return None, "application"


def list_job_options(session: Session, user_id: str) -> list[JobOption]:
    repo = Repository(session)
    options = [JobOption(value="", label="Select a job...")]
    options.extend(
        JobOption(
            value=f"{APPLICATION_PREFIX}{app.id}",
            label=f"📋 {app.company_name} - {app.job_title}",
            type="application",
        )
        for app in repo.list_applications(user_id)
    )
    options.extend(
        JobOption(
            value=f"{LINKEDIN_PREFIX}{job.id}",
            label=f"💼 {job.company_name} - {job.title}",
            type="linkedin",
        )
        for job in repo.list_linkedin_jobs()
    )
    return options


def autofill(session: Session, user_id: str, value: str) -> JobAutofill:
    job_id, job_type = parse_selected_job(value)
    if job_id is None or not job_id.isdigit():
        raise ValueError(f"unknown job selection {value!r}")

    repo = Repository(session)
    if job_type == "application":
        app = repo.get_application(user_id, int(job_id))
        if app is None:
            raise ValueError(f"application {job_id} not found")
        return JobAutofill(company_name=app.company_name, job_title=app.job_title, job_description=app.notes or "")

    job = repo.get_linkedin_job(int(job_id))
    if job is None:
        raise ValueError(f"linkedin job {job_id} not found")
    return JobAutofill(company_name=job.company_name, job_title=job.title, job_description=job.description or "")
