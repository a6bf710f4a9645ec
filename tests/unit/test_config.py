import pytest
from pydantic import ValidationError

from jobtracker.config import Settings


def test_workflow_host_and_attempts() -> None:
    settings = Settings(
        workflow_webhook_url="https://n8n.example.com/webhook/job-application-received",
        workflow_poll_interval_sec=2.0,
        workflow_processing_timeout_sec=300,
    )

    assert settings.workflow_host == "n8n.example.com"
    assert settings.workflow_max_attempts == 150


def test_cors_origin_list_splits_and_trims() -> None:
    settings = Settings(cors_origins="http://a.test, http://b.test ,")

    assert settings.cors_origin_list == ["http://a.test", "http://b.test"]


@pytest.mark.parametrize(
    "overrides",
    [
        {"app_env": "qa"},
        {"default_ai_provider": "openai"},
        {"api_auth_mode": "oauth"},
        {"workflow_webhook_url": "ftp://example.com/hook"},
    ],
)
def test_settings_reject_invalid_values(overrides: dict) -> None:
    with pytest.raises(ValidationError):
        Settings(**overrides)
