import pytest
from pydantic import ValidationError

from jobtracker.core.job_options import parse_selected_job
from jobtracker.types import GenerationForm


@pytest.mark.parametrize(
    ("value", "expected"),
    [
        ("app_12", ("12", "application")),
        ("linkedin_7", ("7", "linkedin")),
        ("", (None, "application")),
        (None, (None, "application")),
        ("something-else", (None, "application")),
    ],
)
def test_parse_selected_job(value, expected) -> None:
    assert parse_selected_job(value) == expected


@pytest.mark.parametrize(
    ("field", "message"),
    [
        ("company_name", "Please enter a company name"),
        ("job_title", "Please enter a job title"),
        ("job_description", "Please enter a job description"),
    ],
)
def test_generation_form_rejects_blank_required_fields(field: str, message: str) -> None:
    values = {"company_name": "Acme", "job_title": "Engineer", "job_description": "Build things"}
    values[field] = "   "

    with pytest.raises(ValidationError, match=message):
        GenerationForm(**values)


def test_generation_form_strips_values() -> None:
    form = GenerationForm(company_name=" Acme ", job_title=" Engineer", job_description="Build things ")

    assert form.company_name == "Acme"
    assert form.job_title == "Engineer"
    assert form.job_description == "Build things"
    assert form.tone == "professional"
