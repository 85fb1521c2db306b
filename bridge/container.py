from __future__ import annotations

from dataclasses import dataclass
from os import getenv

from bridge.errors import ConfigurationError
from bridge.services.session_janitor import SessionJanitor
from bridge.services.session_store import InMemorySessionStore, SessionStore
from bridge.services.trillion_signature import TrillionSignatureVerifier
from bridge.services.webhook_processor import ProviderClient, WebhookProcessor
from bridge.services.yourgpt_client import YourGPTClient

DEFAULT_TRILLION_CHANNEL = "tricia@susmaninsurance.com"


@dataclass(frozen=True)
class BridgeSettings:
    yourgpt_api_key: str
    yourgpt_widget_uid: str
    yourgpt_base_url: str | None = None
    trillion_webhook_secret: str | None = None
    port: int = 3000
    default_channel: str = DEFAULT_TRILLION_CHANNEL
    provider_timeout_sec: float | None = None
    sweep_interval_sec: float = 1800.0
    max_idle_sec: float = 3600.0


@dataclass
class ServiceContainer:
    settings: BridgeSettings
    session_store: SessionStore
    provider_client: ProviderClient
    signature_verifier: TrillionSignatureVerifier
    webhook_processor: WebhookProcessor
    session_janitor: SessionJanitor


def load_settings() -> BridgeSettings:
    api_key = (getenv("YOURGPT_API_KEY") or "").strip()
    widget_uid = (getenv("YOURGPT_WIDGET_UID") or "").strip()
    missing = [
        name
        for name, value in (
            ("YOURGPT_API_KEY", api_key),
            ("YOURGPT_WIDGET_UID", widget_uid),
        )
        if not value
    ]
    if missing:
        raise ConfigurationError(missing)

    return BridgeSettings(
        yourgpt_api_key=api_key,
        yourgpt_widget_uid=widget_uid,
        yourgpt_base_url=(getenv("YOURGPT_APP_URL") or "").strip() or None,
        trillion_webhook_secret=getenv("TRILLION_WEBHOOK_SECRET") or None,
        port=_parse_int(getenv("PORT"), default=3000),
        default_channel=(getenv("TRILLION_DEFAULT_CHANNEL") or "").strip()
        or DEFAULT_TRILLION_CHANNEL,
        provider_timeout_sec=_parse_optional_float(getenv("YOURGPT_TIMEOUT_SEC")),
        sweep_interval_sec=_parse_float(getenv("SESSION_SWEEP_INTERVAL_SEC"), default=1800.0),
        max_idle_sec=_parse_float(getenv("SESSION_MAX_IDLE_SEC"), default=3600.0),
    )


def build_container(
    settings: BridgeSettings | None = None,
    *,
    provider_client: ProviderClient | None = None,
    session_store: SessionStore | None = None,
) -> ServiceContainer:
    settings = settings or load_settings()
    session_store = session_store or InMemorySessionStore()
    if provider_client is None:
        provider_client = YourGPTClient(
            api_key=settings.yourgpt_api_key,
            widget_uid=settings.yourgpt_widget_uid,
            base_url=settings.yourgpt_base_url,
            timeout_sec=settings.provider_timeout_sec,
        )

    return ServiceContainer(
        settings=settings,
        session_store=session_store,
        provider_client=provider_client,
        signature_verifier=TrillionSignatureVerifier(settings.trillion_webhook_secret),
        webhook_processor=WebhookProcessor(
            session_store=session_store,
            provider_client=provider_client,
        ),
        session_janitor=SessionJanitor(
            session_store=session_store,
            interval_sec=settings.sweep_interval_sec,
            max_idle_sec=settings.max_idle_sec,
        ),
    )


def _parse_int(value: str | None, *, default: int) -> int:
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _parse_float(value: str | None, *, default: float) -> float:
    if value is None:
        return default
    try:
        return float(value)
    except ValueError:
        return default


def _parse_optional_float(value: str | None) -> float | None:
    if value is None or not value.strip():
        return None
    try:
        return float(value)
    except ValueError:
        return None
