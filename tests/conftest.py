from __future__ import annotations

import os
import tempfile
from pathlib import Path

_TEST_ROOT = Path(tempfile.gettempdir()) / "jobtracker-tests"
os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("DATABASE_URL", f"sqlite:///{_TEST_ROOT / 'jobtracker_test.db'}")
os.environ.setdefault("DATA_DIR", str(_TEST_ROOT))
os.environ.setdefault("UPLOAD_DIR", str(_TEST_ROOT / "uploads"))
os.environ.setdefault("GEMINI_API_KEY", "test-gemini-key")
os.environ.setdefault("OPENROUTER_API_KEY", "test-openrouter-key")
os.environ.setdefault("WORKFLOW_WEBHOOK_URL", "http://workflow.test/webhook/job-application-received")
os.environ.setdefault("WORKFLOW_CALLBACK_SECRET", "")
_TEST_ROOT.mkdir(parents=True, exist_ok=True)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from jobtracker.api.app import create_app  # noqa: E402
from jobtracker.db.base import Base  # noqa: E402
from jobtracker.db.session import SessionLocal, engine  # noqa: E402


@pytest.fixture(autouse=True)
def reset_db() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    yield


@pytest.fixture
def db_session():
    with SessionLocal() as session:
        yield session


@pytest.fixture
def client() -> TestClient:
    return TestClient(create_app())
