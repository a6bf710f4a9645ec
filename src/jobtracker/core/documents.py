from __future__ import annotations

import io
import logging
import mimetypes
import re
import uuid
from pathlib import Path

from pypdf import PdfReader
from sqlalchemy.orm import Session

from jobtracker.config import Settings, get_settings
from jobtracker.db.models import Document
from jobtracker.db.repositories import Repository
from jobtracker.types import PreviewKind

logger = logging.getLogger(__name__)

TEXT_EXTENSIONS = {"txt", "md", "json"}
PREVIEW_TEXT_EXTENSIONS = {"txt", "md", "html", "css", "js", "json"}
IMAGE_EXTENSIONS = {"jpg", "jpeg", "png", "gif"}

_UNSAFE_CHARS = re.compile(r"[^A-Za-z0-9._-]+")


def file_extension(file_name: str) -> str:
    if "." not in file_name:
        return ""
    return file_name.rsplit(".", 1)[-1].lower()


def preview_kind(file_name: str) -> PreviewKind:
    extension = file_extension(file_name)
    if extension == "pdf":
        return "pdf"
    if extension in IMAGE_EXTENSIONS:
        return "image"
    if extension in PREVIEW_TEXT_EXTENSIONS:
        return "text"
    return "download"


def guess_mime_type(file_name: str, declared: str | None = None) -> str:
    if declared and declared != "application/octet-stream":
        return declared
    guessed, _ = mimetypes.guess_type(file_name)
    return guessed or "application/octet-stream"


def extract_text(file_name: str, mime_type: str, data: bytes) -> str | None:
    extension = file_extension(file_name)
    if extension in TEXT_EXTENSIONS or mime_type.startswith("text/") or mime_type == "application/json":
        return data.decode("utf-8", errors="replace")

    if extension == "pdf" or mime_type == "application/pdf":
        reader = PdfReader(io.BytesIO(data))
        parts = [page.extract_text() or "" for page in reader.pages]
        text = "\n\n".join(parts).strip()
        return text or None

    return None


class DocumentStore:
    def __init__(self, session: Session, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()
        self.repo = Repository(session)

    def _target_path(self, user_id: str, file_type: str, file_name: str) -> Path:
        safe_name = _UNSAFE_CHARS.sub("_", Path(file_name).name) or "upload"
        return self.settings.upload_dir / user_id / file_type / f"{uuid.uuid4().hex[:12]}_{safe_name}"

    def upload(
        self,
        *,
        user_id: str,
        file_name: str,
        file_type: str,
        data: bytes,
        mime_type: str | None = None,
        linked_job_id: int | None = None,
    ) -> Document:
        if linked_job_id is not None and self.repo.get_application(user_id, linked_job_id) is None:
            raise ValueError(f"application {linked_job_id} not found")

        mime = guess_mime_type(file_name, mime_type)
        path = self._target_path(user_id, file_type, file_name)
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_bytes(data)

        resume_content = None
        if file_type == "resume":
            try:
                resume_content = extract_text(file_name, mime, data)
            except Exception as exc:
                logger.warning("Failed to extract text from %s: %s", file_name, exc)

        document = self.repo.create_document(
            user_id=user_id,
            file_name=file_name,
            file_type=file_type,
            storage_path=str(path),
            mime_type=mime,
            file_size=len(data),
            linked_job_id=linked_job_id,
            resume_content=resume_content,
        )
        logger.info("Stored document id=%s type=%s size=%s", document.id, file_type, len(data))
        return document

    def delete(self, user_id: str, document_id: int) -> None:
        storage_path = self.repo.delete_document(user_id, document_id)
        path = Path(storage_path)
        if storage_path and path.is_file():
            path.unlink()

    def read_text(self, document: Document) -> str:
        path = Path(document.storage_path)
        if not path.is_file():
            raise ValueError(f"stored file for document {document.id} is missing")
        return path.read_text(encoding="utf-8", errors="replace")
