from __future__ import annotations

import json
from typing import Any
from urllib.parse import parse_qsl

from fastapi import Request

from bridge.errors import ValidationError


def parse_form_fields(raw_body: bytes) -> dict[str, str]:
    text = raw_body.decode("utf-8", errors="replace")
    fields: dict[str, str] = {}
    for key, value in parse_qsl(text, keep_blank_values=True):
        fields.setdefault(key, value)
    return fields


async def read_request_fields(request: Request) -> dict[str, Any]:
    """Read a JSON object or form-encoded body into a flat dict."""
    raw_body = await request.body()
    if not raw_body.strip():
        return {}
    content_type = request.headers.get("content-type", "").lower()
    if "application/json" not in content_type:
        return parse_form_fields(raw_body)
    try:
        payload: Any = json.loads(raw_body)
    except json.JSONDecodeError as exc:
        raise ValidationError("Malformed JSON body") from exc
    if not isinstance(payload, dict):
        raise ValidationError("Request body must be a JSON object")
    return payload
