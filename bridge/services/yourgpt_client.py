from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

import httpx

from bridge.errors import ProviderError, ProviderUnavailable

logger = logging.getLogger(__name__)

_SUCCESS_TYPE = "RXSUCCESS"


@dataclass(frozen=True)
class ProviderReply:
    reply_text: str
    choices: list[Any] = field(default_factory=list)


class YourGPTClient:
    """
    YourGPT chatbot API client.
    One attempt per call; failures propagate to the caller unchanged.
    """

    def __init__(
        self,
        *,
        api_key: str,
        widget_uid: str,
        base_url: str | None,
        timeout_sec: float | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._api_key = api_key
        self._widget_uid = widget_uid
        self._base_url = (base_url or "").strip().rstrip("/")
        self._timeout = (
            httpx.Timeout(timeout=max(float(timeout_sec), 0.5)) if timeout_sec is not None else None
        )
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    async def create_session(self) -> str:
        logger.info("yourgpt_create_session widget_uid=%s", self._widget_uid)
        body = await self._post("/createSession", {"widget_uid": self._widget_uid})
        if body.get("type") != _SUCCESS_TYPE:
            raise ProviderError(f"Failed to create YourGPT session: {body.get('message')}")
        data = body.get("data")
        session_uid = data.get("session_uid") if isinstance(data, dict) else None
        if not isinstance(session_uid, str) or not session_uid.strip():
            raise ProviderError("Failed to create YourGPT session: missing session_uid")
        logger.info("yourgpt_session_created session_uid=%s", session_uid)
        return session_uid

    async def send_message(self, session_uid: str, message: str) -> ProviderReply:
        logger.info("yourgpt_send_message session_uid=%s chars=%s", session_uid, len(message))
        body = await self._post(
            "/sendMessage",
            {
                "widget_uid": self._widget_uid,
                "session_uid": session_uid,
                "message": message,
            },
        )
        if body.get("type") != _SUCCESS_TYPE:
            raise ProviderError(f"Failed to send message to YourGPT: {body.get('message')}")
        data = body.get("data")
        if not isinstance(data, dict):
            data = {}
        choices = data.get("choices")
        return ProviderReply(
            reply_text=str(data.get("message") or ""),
            choices=list(choices) if isinstance(choices, list) else [],
        )

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def _post(self, path: str, form: dict[str, str]) -> dict[str, Any]:
        if not self._base_url:
            raise ProviderUnavailable("YourGPT base URL is not configured")
        try:
            response = await self._get_client().post(
                f"{self._base_url}{path}",
                data=form,
                headers={"api-key": self._api_key},
            )
        except httpx.TransportError as exc:
            logger.warning("yourgpt_transport_error path=%s error=%s", path, exc)
            raise ProviderUnavailable() from exc

        if response.status_code >= 400:
            raise ProviderError(f"YourGPT request failed with status code {response.status_code}")
        try:
            body: Any = response.json()
        except ValueError as exc:
            raise ProviderError("YourGPT returned an invalid response") from exc
        if not isinstance(body, dict):
            raise ProviderError("YourGPT returned an invalid response")
        return body

    def _get_client(self) -> httpx.AsyncClient:
        if self._client is None:
            if self._timeout is None:
                self._client = httpx.AsyncClient(transport=self._transport)
            else:
                self._client = httpx.AsyncClient(timeout=self._timeout, transport=self._transport)
        return self._client
