import pytest

from bridge.container import DEFAULT_TRILLION_CHANNEL, build_container, load_settings
from bridge.errors import ConfigurationError
from bridge.services.session_store import InMemorySessionStore
from bridge.services.yourgpt_client import YourGPTClient

_ENV_NAMES = (
    "YOURGPT_API_KEY",
    "YOURGPT_WIDGET_UID",
    "YOURGPT_APP_URL",
    "TRILLION_WEBHOOK_SECRET",
    "PORT",
    "TRILLION_DEFAULT_CHANNEL",
    "YOURGPT_TIMEOUT_SEC",
    "SESSION_SWEEP_INTERVAL_SEC",
    "SESSION_MAX_IDLE_SEC",
)


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)


def test_load_settings_requires_provider_credentials(monkeypatch: pytest.MonkeyPatch) -> None:
    with pytest.raises(ConfigurationError) as excinfo:
        load_settings()
    assert excinfo.value.missing == ["YOURGPT_API_KEY", "YOURGPT_WIDGET_UID"]

    monkeypatch.setenv("YOURGPT_API_KEY", "key")
    with pytest.raises(ConfigurationError, match="YOURGPT_WIDGET_UID"):
        load_settings()


def test_load_settings_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YOURGPT_API_KEY", "key")
    monkeypatch.setenv("YOURGPT_WIDGET_UID", "widget")

    settings = load_settings()

    assert settings.yourgpt_base_url is None
    assert settings.trillion_webhook_secret is None
    assert settings.port == 3000
    assert settings.default_channel == DEFAULT_TRILLION_CHANNEL
    assert settings.provider_timeout_sec is None
    assert settings.sweep_interval_sec == 1800.0
    assert settings.max_idle_sec == 3600.0


def test_load_settings_parses_overrides_leniently(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YOURGPT_API_KEY", "key")
    monkeypatch.setenv("YOURGPT_WIDGET_UID", "widget")
    monkeypatch.setenv("YOURGPT_APP_URL", " https://provider.test/api ")
    monkeypatch.setenv("TRILLION_WEBHOOK_SECRET", "shh")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("YOURGPT_TIMEOUT_SEC", "not-a-number")
    monkeypatch.setenv("SESSION_MAX_IDLE_SEC", "120")

    settings = load_settings()

    assert settings.yourgpt_base_url == "https://provider.test/api"
    assert settings.trillion_webhook_secret == "shh"
    assert settings.port == 8080
    assert settings.provider_timeout_sec is None
    assert settings.max_idle_sec == 120.0


def test_build_container_wires_shared_store(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YOURGPT_API_KEY", "key")
    monkeypatch.setenv("YOURGPT_WIDGET_UID", "widget")
    monkeypatch.setenv("TRILLION_WEBHOOK_SECRET", "shh")

    container = build_container()

    assert isinstance(container.session_store, InMemorySessionStore)
    assert isinstance(container.provider_client, YourGPTClient)
    assert container.signature_verifier.enabled is True
    assert container.session_janitor.running is False


def test_load_settings_reads_configured_provider_timeout(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("YOURGPT_API_KEY", "key")
    monkeypatch.setenv("YOURGPT_WIDGET_UID", "widget")
    monkeypatch.setenv("YOURGPT_TIMEOUT_SEC", "25")

    assert load_settings().provider_timeout_sec == 25.0
