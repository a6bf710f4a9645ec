from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from urllib.parse import urlparse

from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

load_dotenv()


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "JobTracker AI"
    app_env: str = "development"
    app_host: str = "127.0.0.1"
    app_port: int = 8787
    log_level: str = "INFO"
    sql_echo: bool = False

    database_url: str = "sqlite:///./data/jobtracker.db"
    data_dir: Path = Path("./data")
    upload_dir: Path = Path("./data/uploads")

    api_auth_mode: str = "local_session"
    default_user_email: str = "me@localhost"
    cors_origins: str = "http://127.0.0.1:8787"
    web_ui_enabled: bool = True

    default_ai_provider: str = "gemini"

    gemini_api_key: str = ""
    gemini_model: str = "gemini-2.0-flash"
    gemini_temperature: float = 0.7
    gemini_max_output_tokens: int = 8192

    openrouter_api_key: str = ""
    openrouter_base_url: str = "https://openrouter.ai/api/v1"
    openrouter_model: str = "deepseek/deepseek-r1-0528:free"
    openrouter_referer: str = "http://127.0.0.1:8787"
    openrouter_title: str = "JobTracker AI"
    openrouter_timeout_sec: int = 120

    workflow_webhook_url: str = "http://localhost:5678/webhook/job-application-received"
    workflow_request_source: str = "jobtracker-ai"
    workflow_timeout_sec: int = 30
    workflow_callback_secret: str = ""
    workflow_poll_interval_sec: float = 2.0
    workflow_processing_timeout_sec: int = 300
    progress_duration_sec: int = 300

    @field_validator("app_env")
    @classmethod
    def validate_env(cls, value: str) -> str:
        allowed = {"development", "staging", "production", "test"}
        if value not in allowed:
            raise ValueError(f"app_env must be one of {sorted(allowed)}")
        return value

    @field_validator("default_ai_provider")
    @classmethod
    def validate_provider(cls, value: str) -> str:
        allowed = {"gemini", "openrouter"}
        if value not in allowed:
            raise ValueError(f"default_ai_provider must be one of {sorted(allowed)}")
        return value

    @field_validator("api_auth_mode")
    @classmethod
    def validate_auth_mode(cls, value: str) -> str:
        allowed = {"local_session", "header"}
        if value not in allowed:
            raise ValueError(f"api_auth_mode must be one of {sorted(allowed)}")
        return value

    @field_validator("workflow_webhook_url")
    @classmethod
    def validate_webhook_url(cls, value: str) -> str:
        parsed = urlparse(value)
        if parsed.scheme not in {"http", "https"} or not parsed.netloc:
            raise ValueError("workflow_webhook_url must be an http(s) URL")
        return value

    @property
    def cors_origin_list(self) -> list[str]:
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def workflow_host(self) -> str:
        return urlparse(self.workflow_webhook_url).netloc

    @property
    def workflow_max_attempts(self) -> int:
        return max(1, int(self.workflow_processing_timeout_sec / self.workflow_poll_interval_sec))


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
