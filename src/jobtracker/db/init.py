from __future__ import annotations

from pathlib import Path

from jobtracker.config import get_settings
from jobtracker.db.base import Base
from jobtracker.db.session import SessionLocal, engine
from jobtracker.db import models  # noqa: F401
from jobtracker.db.repositories import Repository


def ensure_data_directories() -> None:
    settings = get_settings()
    paths: list[Path] = [settings.data_dir, settings.upload_dir]
    for path in paths:
        path.mkdir(parents=True, exist_ok=True)


def init_database() -> dict[str, str]:
    ensure_data_directories()
    Base.metadata.create_all(bind=engine)

    with SessionLocal() as session:
        user = Repository(session).ensure_user(get_settings().default_user_email)
        return {"default_user_id": user.id}
