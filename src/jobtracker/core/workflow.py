from __future__ import annotations

import json
import logging
import time
import uuid
from datetime import UTC, datetime
from typing import Any

import requests

from jobtracker.config import Settings, get_settings
from jobtracker.errors import WorkflowError
from jobtracker.types import WorkflowData, WorkflowPayload

logger = logging.getLogger(__name__)

USER_AGENT = "JobTracker-AI/1.0"


def new_request_id(type: str) -> str:
    return f"{type}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}"


def build_workflow_payload(
    *,
    type: str | None,
    user_id: str | None,
    request_id: str | None,
    data: dict[str, Any] | None,
    user_email: str | None = None,
) -> WorkflowPayload:
    if not type or not user_id or not request_id or data is None:
        raise ValueError("Missing required fields: type, user_id, request_id, data")

    normalized = WorkflowData(
        company_name=data.get("company_name") or "",
        job_title=data.get("job_title") or "",
        job_description=data.get("job_description") or "",
        selected_job_id=data.get("selected_job_id") or None,
        hiring_manager=data.get("hiring_manager") or "",
        tone=data.get("tone") or "professional",
        personal_experience=data.get("personal_experience") or "",
        why_company=data.get("why_company") or "",
    )
    return WorkflowPayload(
        type=type,
        user_id=user_id,
        user_email=user_email or "",
        request_id=request_id,
        timestamp=datetime.now(UTC).isoformat(),
        data=normalized,
    )


class WorkflowClient:
    def __init__(self, settings: Settings | None = None):
        self.settings = settings or get_settings()

    def headers(self) -> dict[str, str]:
        return {
            "Content-Type": "application/json",
            "Accept": "application/json",
            "User-Agent": USER_AGENT,
            "X-Request-Source": self.settings.workflow_request_source,
            "X-Railway-Domain": self.settings.workflow_host,
        }

    def trigger(self, payload: WorkflowPayload) -> str:
        body = payload.model_dump(mode="json")
        logger.info("Triggering workflow type=%s request_id=%s", payload.type, payload.request_id)
        logger.debug("Workflow payload: %s", json.dumps(body))

        try:
            response = requests.post(
                self.settings.workflow_webhook_url,
                json=body,
                headers=self.headers(),
                timeout=self.settings.workflow_timeout_sec,
            )
        except requests.RequestException as exc:
            raise WorkflowError(f"Workflow webhook unreachable: {exc}") from exc

        logger.info("Workflow webhook status=%s request_id=%s", response.status_code, payload.request_id)
        if not response.ok:
            error_text = response.text or "Unknown error"
            raise WorkflowError(
                f"Workflow webhook failed: {response.status_code} {response.reason} - {error_text}"
            )

        return response.text or "OK"
