from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime
from typing import Protocol

from bridge.errors import BridgeError
from bridge.schemas import WebhookResult
from bridge.services.session_store import SessionRecord, SessionStore, build_session_key
from bridge.services.yourgpt_client import ProviderReply

logger = logging.getLogger(__name__)


class ProviderClient(Protocol):
    async def create_session(self) -> str: ...

    async def send_message(self, session_uid: str, message: str) -> ProviderReply: ...


@dataclass(frozen=True)
class WebhookEvent:
    user_id: str
    channel_id: str
    message: str | None
    event_type: str = "message"
    user_name: str = "Unknown User"
    timestamp: str | None = None
    language: str = "en"
    trace_id: str | None = None


class WebhookProcessor:
    """
    Relays one inbound message to YourGPT.
    Every message gets a brand-new provider session: any record already held
    for the same user/channel is dropped first.
    """

    def __init__(
        self,
        *,
        session_store: SessionStore,
        provider_client: ProviderClient,
        clock: Callable[[], datetime] | None = None,
    ) -> None:
        self._store = session_store
        self._provider = provider_client
        self._clock = clock or (lambda: datetime.now(UTC))

    async def process(self, event: WebhookEvent) -> WebhookResult:
        if event.event_type != "message" or not event.message:
            logger.info(
                "webhook_event_skipped trace_id=%s event_type=%s empty_message=%s",
                event.trace_id,
                event.event_type,
                not event.message,
            )
            return WebhookResult(success=True, skipped=True)

        session_key = build_session_key(event.user_id, event.channel_id)
        try:
            return await self._relay(event=event, session_key=session_key)
        except BridgeError as exc:
            logger.warning(
                "webhook_relay_failed trace_id=%s session_key=%s error=%s",
                event.trace_id,
                session_key,
                exc,
            )
            return WebhookResult(
                success=False,
                error=str(exc),
                timestamp=self._clock().isoformat(),
            )
        except Exception as exc:
            logger.exception(
                "webhook_relay_crashed trace_id=%s session_key=%s",
                event.trace_id,
                session_key,
            )
            return WebhookResult(
                success=False,
                error=str(exc) or "Internal server error",
                timestamp=self._clock().isoformat(),
            )

    async def _relay(self, *, event: WebhookEvent, session_key: str) -> WebhookResult:
        if self._store.get(session_key) is not None:
            logger.info("webhook_session_replaced session_key=%s", session_key)
            self._store.remove(session_key)

        session_uid = await self._provider.create_session()
        created_at = self._clock()
        self._store.put(
            session_key,
            SessionRecord(
                provider_session_id=session_uid,
                user_id=event.user_id,
                channel_id=event.channel_id,
                user_name=event.user_name,
                created_at=created_at,
                last_activity_at=created_at,
            ),
        )

        # A failed send leaves the fresh record in place.
        reply = await self._provider.send_message(session_uid, event.message or "")
        self._store.touch(session_key, self._clock())

        logger.info(
            "webhook_relayed trace_id=%s session_key=%s session_uid=%s",
            event.trace_id,
            session_key,
            session_uid,
        )
        return WebhookResult(
            success=True,
            provider_session_id=session_uid,
            user_message=event.message,
            reply_text=reply.reply_text,
            choices=list(reply.choices),
            timestamp=self._clock().isoformat(),
        )
