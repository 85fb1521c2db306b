from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, PlainTextResponse

from bridge.api.request_fields import read_request_fields
from bridge.container import ServiceContainer
from bridge.errors import InvalidSignature, ValidationError
from bridge.schemas import WebhookResult
from bridge.services.webhook_processor import WebhookEvent

router = APIRouter(tags=["trillion"])
logger = logging.getLogger(__name__)


def _get_container(request: Request) -> ServiceContainer:
    return request.app.state.container


def _text(value: Any) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def _plain_text(text: str, status_code: int) -> PlainTextResponse:
    body = text.encode("utf-8")
    return PlainTextResponse(
        content=body,
        status_code=status_code,
        headers={"content-length": str(len(body))},
    )


@router.post("/webhook/trillion", response_class=PlainTextResponse)
async def receive_trillion_webhook(request: Request) -> PlainTextResponse:
    container = _get_container(request)
    trace_id = getattr(request.state, "trace_id", str(uuid4()))
    raw_body = await request.body()

    if not container.signature_verifier.verify(
        raw_body,
        request.headers.get("x-trillion-signature"),
    ):
        logger.warning("trillion_webhook_rejected trace_id=%s reason=invalid_signature", trace_id)
        raise InvalidSignature()

    try:
        fields = await read_request_fields(request)
    except ValidationError as exc:
        logger.warning("trillion_webhook_rejected trace_id=%s reason=%s", trace_id, exc)
        return _plain_text(str(exc), 400)

    try:
        sender = _text(fields.get("from"))
        event = WebhookEvent(
            user_id=sender or "unknown_user",
            channel_id=_text(fields.get("to")) or container.settings.default_channel,
            message=_text(fields.get("message")),
            user_name=sender or "Unknown User",
            timestamp=_text(fields.get("timestamp")),
            language=_text(fields.get("language")) or "en",
            trace_id=trace_id,
        )
        logger.info(
            "trillion_webhook trace_id=%s from=%s to=%s language=%s",
            trace_id,
            event.user_id,
            event.channel_id,
            event.language,
        )
        result = await container.webhook_processor.process(event)
    except Exception:
        logger.exception("trillion_webhook_failed trace_id=%s", trace_id)
        return _plain_text("Internal server error", 500)

    if result.success:
        return _plain_text(result.reply_text or "No response", 200)
    return _plain_text(result.error or "Internal server error", 500)


@router.post("/test/webhook", response_model=WebhookResult, response_model_exclude_none=True)
async def simulate_trillion_webhook(request: Request) -> JSONResponse:
    container = _get_container(request)
    fields = await read_request_fields(request)
    event = WebhookEvent(
        user_id=str(fields.get("user_id") or "test_user_123"),
        channel_id=str(fields.get("channel_id") or "test_channel_456"),
        message=str(fields.get("message") or "Hello, this is a test message"),
        user_name=str(fields.get("user_name") or "Test User"),
        timestamp=datetime.now(UTC).isoformat(),
        trace_id=getattr(request.state, "trace_id", None),
    )
    logger.info("test_webhook trace_id=%s user_id=%s", event.trace_id, event.user_id)
    result = await container.webhook_processor.process(event)
    return JSONResponse(
        status_code=200 if result.success else 500,
        content=result.to_payload(),
    )
