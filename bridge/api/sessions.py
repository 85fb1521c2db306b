from __future__ import annotations

import logging
from datetime import UTC, datetime

import pydantic
from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from bridge.api.request_fields import read_request_fields
from bridge.container import ServiceContainer
from bridge.errors import BridgeError, ValidationError
from bridge.schemas import (
    ClearSessionsResponse,
    ErrorResponse,
    SessionCreateRequest,
    SessionCreateResponse,
    SessionListResponse,
    SessionView,
)
from bridge.services.session_store import SessionRecord, build_session_key

router = APIRouter(prefix="/sessions", tags=["sessions"])
logger = logging.getLogger(__name__)

_REQUIRED_FIELDS_MESSAGE = "user_id and channel_id are required"
_INVALID_FIELDS_MESSAGE = "user_id, channel_id and user_name must be strings or numbers"


def _get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def _to_view(session_key: str, record: SessionRecord) -> SessionView:
    return SessionView(
        session_key=session_key,
        session_uid=record.provider_session_id,
        user_id=record.user_id,
        channel_id=record.channel_id,
        user_name=record.user_name,
        created_at=record.created_at.isoformat(),
        last_activity=record.last_activity_at.isoformat(),
    )


@router.get("", response_model=SessionListResponse)
def list_sessions(request: Request) -> SessionListResponse:
    entries = _get_container(request).session_store.list_all()
    sessions = [_to_view(key, record) for key, record in entries]
    return SessionListResponse(total_sessions=len(sessions), sessions=sessions)


@router.post("/clear", response_model=ClearSessionsResponse)
def clear_sessions(request: Request) -> ClearSessionsResponse:
    count = _get_container(request).session_store.clear()
    logger.info("sessions_cleared count=%s", count)
    return ClearSessionsResponse(
        success=True,
        message=f"Cleared {count} sessions",
        timestamp=datetime.now(UTC).isoformat(),
    )


@router.post("/create", response_model=SessionCreateResponse)
async def create_session(request: Request) -> SessionCreateResponse | JSONResponse:
    container = _get_container(request)
    fields = await read_request_fields(request)
    try:
        req = SessionCreateRequest.model_validate(fields)
    except pydantic.ValidationError as exc:
        raise ValidationError(_INVALID_FIELDS_MESSAGE) from exc
    if not req.user_id or not req.channel_id:
        raise ValidationError(_REQUIRED_FIELDS_MESSAGE)

    try:
        session_uid = await container.provider_client.create_session()
    except BridgeError as exc:
        logger.warning(
            "manual_session_create_failed user_id=%s channel_id=%s error=%s",
            req.user_id,
            req.channel_id,
            exc,
        )
        return JSONResponse(status_code=500, content=ErrorResponse(error=str(exc)).to_payload())

    session_key = build_session_key(req.user_id, req.channel_id)
    now = datetime.now(UTC)
    container.session_store.put(
        session_key,
        SessionRecord(
            provider_session_id=session_uid,
            user_id=req.user_id,
            channel_id=req.channel_id,
            user_name=req.user_name or "Manual User",
            created_at=now,
            last_activity_at=now,
        ),
    )
    logger.info("manual_session_created session_key=%s session_uid=%s", session_key, session_uid)
    return SessionCreateResponse(
        success=True,
        session_key=session_key,
        session_uid=session_uid,
    )
