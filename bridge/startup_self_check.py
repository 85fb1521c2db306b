from __future__ import annotations

import logging
from dataclasses import dataclass, field

from bridge.container import BridgeSettings


@dataclass(frozen=True)
class StartupSelfCheckResult:
    issues: list[str]
    warnings: list[str] = field(default_factory=list)
    signature_verification_enabled: bool = False
    provider_base_url: str | None = None


def run_startup_self_check(
    settings: BridgeSettings,
    logger: logging.Logger,
) -> StartupSelfCheckResult:
    result = analyze_settings(settings)

    for issue in result.issues:
        logger.warning("startup_self_check anomaly=%s", issue)
    if "webhook_secret_not_configured" in result.warnings:
        logger.warning(
            "startup_self_check anomaly=webhook_secret_not_configured "
            "detail=signature_verification_disabled"
        )
    if not result.issues:
        logger.info(
            "startup_self_check ok provider_base_url=%s signature_verification=%s",
            result.provider_base_url,
            result.signature_verification_enabled,
        )
    return result


def analyze_settings(settings: BridgeSettings) -> StartupSelfCheckResult:
    issues: list[str] = []
    warnings: list[str] = []

    base_url = (settings.yourgpt_base_url or "").strip() or None
    if base_url is None:
        issues.append("provider_base_url_missing")
    elif not base_url.startswith(("http://", "https://")):
        issues.append("provider_base_url_invalid_scheme")

    secret_enabled = bool(settings.trillion_webhook_secret)
    if not secret_enabled:
        warnings.append("webhook_secret_not_configured")
    if settings.sweep_interval_sec <= 0 or settings.max_idle_sec <= 0:
        issues.append("session_sweep_misconfigured")

    return StartupSelfCheckResult(
        issues=issues,
        warnings=warnings,
        signature_verification_enabled=secret_enabled,
        provider_base_url=base_url,
    )
