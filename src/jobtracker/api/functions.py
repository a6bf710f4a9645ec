"""Endpoints the external workflow talks to.

``n8n-trigger`` forwards a generation request to the workflow webhook and
``n8n-response`` receives the finished result. The paths keep the names the
deployed workflow already calls.
"""

from __future__ import annotations

import hmac
import logging
from typing import Any

from fastapi import APIRouter, Depends, Header, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError
from sqlalchemy.orm import Session

from jobtracker.api.deps import get_db
from jobtracker.config import get_settings
from jobtracker.core.callbacks import record_workflow_callback
from jobtracker.core.workflow import WorkflowClient, build_workflow_payload
from jobtracker.db.repositories import Repository
from jobtracker.errors import WorkflowError
from jobtracker.types import WorkflowCallback

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/functions/v1", tags=["functions"])


def _failure(message: str, status_code: int = 400) -> JSONResponse:
    return JSONResponse({"error": message, "success": False}, status_code=status_code)


async def _json_body(request: Request) -> dict[str, Any] | None:
    try:
        body = await request.json()
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


@router.post("/n8n-trigger")
async def n8n_trigger(request: Request) -> JSONResponse:
    body = await _json_body(request)
    if body is None:
        return _failure("Invalid JSON body")

    try:
        payload = build_workflow_payload(
            type=body.get("type"),
            user_id=body.get("user_id"),
            request_id=body.get("request_id"),
            data=body.get("data"),
            user_email=body.get("user_email"),
        )
    except (ValueError, ValidationError) as exc:
        return _failure(str(exc))

    try:
        workflow_response = WorkflowClient().trigger(payload)
    except WorkflowError as exc:
        logger.error("Error in n8n-trigger function: %s", exc)
        return _failure(str(exc))

    return JSONResponse(
        {
            "success": True,
            "message": "Request sent to n8n successfully",
            "request_id": payload.request_id,
            "n8n_response": workflow_response,
            "payload_sent": payload.model_dump(mode="json"),
        }
    )


@router.post("/n8n-response")
async def n8n_response(
    request: Request,
    x_webhook_secret: str | None = Header(default=None),
    db: Session = Depends(get_db),
) -> JSONResponse:
    secret = get_settings().workflow_callback_secret
    if secret and not hmac.compare_digest(x_webhook_secret or "", secret):
        return _failure("Invalid webhook secret", status_code=401)

    body = await _json_body(request)
    if body is None:
        return _failure("Invalid JSON body")

    try:
        callback = WorkflowCallback.model_validate(body)
        record_workflow_callback(Repository(db), callback)
    except (ValueError, ValidationError) as exc:
        logger.error("Error in n8n-response function: %s", exc)
        return _failure(str(exc))

    return JSONResponse(
        {
            "success": True,
            "message": "Response processed successfully",
            "request_id": callback.request_id,
        }
    )
