from __future__ import annotations

from collections.abc import Generator

from fastapi import Depends, Header, HTTPException
from sqlalchemy.orm import Session

from jobtracker.config import get_settings
from jobtracker.db.models import User
from jobtracker.db.repositories import Repository
from jobtracker.db.session import get_db_session


def get_db() -> Generator[Session, None, None]:
    yield from get_db_session()


def get_current_user(
    x_user_id: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> User:
    repo = Repository(db)
    if x_user_id:
        user = repo.get_user(x_user_id)
        if user is None:
            raise HTTPException(status_code=401, detail="User not authenticated")
        return user

    settings = get_settings()
    if settings.api_auth_mode == "local_session":
        return repo.ensure_user(settings.default_user_email)
    raise HTTPException(status_code=401, detail="User not authenticated")
