from __future__ import annotations

from collections.abc import Callable
from functools import lru_cache
from threading import Lock

from ..logging_config import get_logger
from ..metrics import processor_cache_size
from ..settings import Settings, settings
from .base import PaymentProcessor
from .currencies import CurrencyConfig, CurrencyRegistry, ProcessorType, normalize_code
from .errors import ProcessorMisconfigured, UnsupportedCurrency
from .http import HttpxPaymentClient, PaymentHttpClient
from .paystack import PaystackProcessor
from .stripe import StripeProcessor

logger = get_logger(__name__)

ProcessorBuilder = Callable[[CurrencyConfig], PaymentProcessor]


class PaymentProcessorFactory:
    """
    Resolves the processor for a currency and keeps one instance per code.

    Creation happens under a lock so concurrent first use of a currency never
    builds two processors. A builder that raises leaves the cache untouched,
    so a misconfigured processor is never handed out.
    """

    def __init__(
        self,
        registry: CurrencyRegistry | None = None,
        *,
        http_client: PaymentHttpClient | None = None,
        app_settings: Settings | None = None,
        builders: dict[ProcessorType, ProcessorBuilder] | None = None,
    ) -> None:
        self.registry = registry or CurrencyRegistry()
        self._settings = app_settings or settings
        self._http_client = http_client
        self._builders: dict[ProcessorType, ProcessorBuilder] = {
            ProcessorType.PAYSTACK: self._build_paystack,
            ProcessorType.STRIPE: self._build_stripe,
        }
        if builders:
            self._builders.update(builders)
        self._instances: dict[str, PaymentProcessor] = {}
        self._lock = Lock()

    @property
    def http_client(self) -> PaymentHttpClient:
        if self._http_client is None:
            self._http_client = HttpxPaymentClient(
                timeout=self._settings.PAYMENT_HTTP_TIMEOUT_SECONDS,
                connect_timeout=self._settings.PAYMENT_HTTP_CONNECT_TIMEOUT_SECONDS,
            )
        return self._http_client

    def get_processor(self, currency: str) -> PaymentProcessor:
        code = normalize_code(currency)
        if not self.registry.is_supported(code):
            raise UnsupportedCurrency(currency)

        processor = self._instances.get(code)
        if processor is not None:
            return processor

        with self._lock:
            processor = self._instances.get(code)
            if processor is None:
                config = self.registry.get_config(code)
                builder = self._builders.get(config.processor)
                if builder is None:
                    raise ProcessorMisconfigured(f"Unknown processor type: {config.processor}")
                try:
                    processor = builder(config)
                except ProcessorMisconfigured:
                    logger.error(
                        "processor_misconfigured", currency=code, processor=config.processor.value
                    )
                    raise
                self._instances[code] = processor
                processor_cache_size.set(len(self._instances))
                logger.info("processor_created", currency=code, processor=config.processor.value)
        return processor

    def get_processor_by_type(self, processor_type: ProcessorType | str) -> PaymentProcessor:
        codes = self.registry.currencies_for_processor(processor_type)
        if not codes:
            raise UnsupportedCurrency(f"<any {ProcessorType(processor_type).value} currency>")
        return self.get_processor(codes[0])

    def clear_cache(self) -> None:
        with self._lock:
            self._instances.clear()
            processor_cache_size.set(0)

    def cached_currencies(self) -> list[str]:
        return list(self._instances)

    def is_currency_supported(self, currency: str | None) -> bool:
        return self.registry.is_supported(currency)

    def supported_currencies(self) -> list[str]:
        return self.registry.codes()

    def currencies_for_processor(self, processor_type: ProcessorType | str) -> list[str]:
        return self.registry.currencies_for_processor(processor_type)

    # --- default builders ----------------------------------------------

    def _build_paystack(self, config: CurrencyConfig) -> PaymentProcessor:
        cfg = self._settings
        return PaystackProcessor(
            config,
            http_client=self.http_client,
            secret_key=cfg.PAYSTACK_SECRET_KEY,
            platform_subaccount=cfg.PAYSTACK_PLATFORM_SUBACCOUNT,
            webhook_secret=cfg.paystack_webhook_secret,
            api_base=cfg.PAYSTACK_API_BASE,
            callback_url=cfg.PAYSTACK_CALLBACK_URL,
            platform_fee_percentage=cfg.PLATFORM_FEE_PERCENTAGE,
        )

    def _build_stripe(self, config: CurrencyConfig) -> PaymentProcessor:
        cfg = self._settings
        return StripeProcessor(
            config,
            http_client=self.http_client,
            secret_key=cfg.STRIPE_SECRET_KEY,
            webhook_secret=cfg.STRIPE_WEBHOOK_SECRET,
            api_base=cfg.STRIPE_API_BASE,
            platform_fee_percentage=cfg.PLATFORM_FEE_PERCENTAGE,
            webhook_tolerance_seconds=cfg.STRIPE_WEBHOOK_TOLERANCE_SECONDS,
        )


@lru_cache(maxsize=1)
def get_payment_factory() -> PaymentProcessorFactory:
    return PaymentProcessorFactory(CurrencyRegistry(), app_settings=settings)


__all__ = ["PaymentProcessorFactory", "ProcessorBuilder", "get_payment_factory"]
