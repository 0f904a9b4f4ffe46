"""Health check module reporting processor configuration."""

from __future__ import annotations

import time
from typing import Any

from .payments.currencies import ProcessorType
from .payments.factory import PaymentProcessorFactory
from .settings import Settings, settings


def _is_configured(value: str | None) -> bool:
    """Return True when a config string is non-empty after trimming."""
    if value is None:
        return False
    return bool(value.strip())


class HealthChecker:
    """
    Reports whether each payment processor can be built.

    No upstream calls are made: Paystack and Stripe are checked for credentials
    only, so the endpoint stays cheap enough for liveness probes.
    """

    def __init__(self, app_settings: Settings | None = None) -> None:
        self._settings = app_settings or settings

    def check_all(self, factory: PaymentProcessorFactory) -> dict[str, Any]:
        checks = {
            "paystack": self._check_paystack(factory),
            "stripe": self._check_stripe(factory),
            "sentry": self._check_sentry(),
        }
        processors_ok = any(checks[name]["status"] == "ok" for name in ("paystack", "stripe"))
        sentry_ok = checks["sentry"]["status"] in {"ok", "disabled"}
        return {
            "status": "healthy" if processors_ok and sentry_ok else "degraded",
            "timestamp": time.time(),
            "checks": checks,
        }

    def _check_paystack(self, factory: PaymentProcessorFactory) -> dict[str, Any]:
        cfg = self._settings
        if not cfg.paystack_configured:
            return {"status": "disabled", "reason": "PAYSTACK_SECRET_KEY not configured"}
        return {
            "status": "ok",
            "currencies": factory.currencies_for_processor(ProcessorType.PAYSTACK),
            "split_payments": _is_configured(cfg.PAYSTACK_PLATFORM_SUBACCOUNT),
        }

    def _check_stripe(self, factory: PaymentProcessorFactory) -> dict[str, Any]:
        cfg = self._settings
        if not cfg.stripe_configured:
            return {"status": "disabled", "reason": "STRIPE_SECRET_KEY not configured"}
        return {
            "status": "ok",
            "currencies": factory.currencies_for_processor(ProcessorType.STRIPE),
            "webhooks": _is_configured(cfg.STRIPE_WEBHOOK_SECRET),
        }

    def _check_sentry(self) -> dict[str, Any]:
        dsn = self._settings.SENTRY_DSN
        if not _is_configured(dsn):
            return {"status": "disabled", "reason": "SENTRY_DSN not configured"}
        if "@" in dsn and "//" in dsn:
            return {
                "status": "ok",
                "environment": self._settings.SENTRY_ENVIRONMENT,
                "release": self._settings.SENTRY_RELEASE or "unset",
            }
        return {"status": "error", "error": "Invalid SENTRY_DSN format"}


# Global health checker instance
health_checker = HealthChecker()


__all__ = ["health_checker", "HealthChecker"]
