from __future__ import annotations

from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

REPO_ROOT = Path(__file__).resolve().parents[2]
ENV_FILE = REPO_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=str(ENV_FILE), env_file_encoding="utf-8", extra="ignore"
    )

    # whether to expose debug details on /health and console logs
    DEBUG: bool = False

    # bind address for the bundled uvicorn entry point
    HOST: str = "127.0.0.1"
    PORT: int = 8000

    # CORS allow origins (comma-separated). Default empty (no cross-origin).
    CORS_ALLOW_ORIGINS: str = ""

    # Platform commission taken from every split payment
    PLATFORM_FEE_PERCENTAGE: float = 10.0

    # Paystack (NGN)
    PAYSTACK_SECRET_KEY: str | None = None
    PAYSTACK_PLATFORM_SUBACCOUNT: str | None = None
    # Paystack signs webhooks with the secret key unless a dedicated one is set
    PAYSTACK_WEBHOOK_SECRET: str | None = None
    PAYSTACK_API_BASE: str = "https://api.paystack.co"
    PAYSTACK_CALLBACK_URL: str | None = None

    # Stripe (EUR, GBP, USD, CAD, AUD)
    STRIPE_SECRET_KEY: str | None = None
    STRIPE_WEBHOOK_SECRET: str | None = None
    STRIPE_API_BASE: str = "https://api.stripe.com/v1"
    STRIPE_WEBHOOK_TOLERANCE_SECONDS: int = 300  # 0 disables the timestamp check

    # Outbound provider HTTP
    PAYMENT_HTTP_TIMEOUT_SECONDS: float = 30.0
    PAYMENT_HTTP_CONNECT_TIMEOUT_SECONDS: float = 5.0

    # Booking availability
    DEFAULT_OPENING_TIME: str = "18:00"
    DEFAULT_CLOSING_TIME: str = "02:00"
    SLOT_INTERVAL_MINUTES: int = 30
    BOOKING_DURATION_HOURS: int = 4

    # Observability
    SENTRY_DSN: str | None = None
    SENTRY_ENVIRONMENT: str = "development"
    SENTRY_RELEASE: str | None = None
    SENTRY_TRACES_SAMPLE_RATE: float = 0.2

    @property
    def allow_origins(self) -> list[str]:
        s = (self.CORS_ALLOW_ORIGINS or "").strip()
        if s == "*":
            return ["*"]
        if s == "":
            return []
        return [part.strip() for part in s.split(",") if part.strip()]

    @property
    def paystack_webhook_secret(self) -> str | None:
        return self.PAYSTACK_WEBHOOK_SECRET or self.PAYSTACK_SECRET_KEY

    @property
    def paystack_configured(self) -> bool:
        return bool((self.PAYSTACK_SECRET_KEY or "").strip())

    @property
    def stripe_configured(self) -> bool:
        return bool((self.STRIPE_SECRET_KEY or "").strip())


settings = Settings()
