# courier_hub/modules/payments/processor.py
import logging
from functools import lru_cache
from typing import Optional, Protocol

import stripe

from courier_hub.config.settings import settings
from courier_hub.core.errors import InternalError

logger = logging.getLogger(__name__)


class PaymentProcessor(Protocol):
    def create_intent(self, amount_minor_units: int) -> str:
        """Create a payment intent and return its client secret"""
        ...


class StripePaymentProcessor:
    def __init__(self, api_key: Optional[str], currency: str = "usd", timeout: int = 10, max_network_retries: int = 2):
        self.api_key = api_key
        self.currency = currency
        stripe.max_network_retries = max_network_retries
        stripe.default_http_client = stripe.RequestsClient(timeout=timeout)

        if not api_key:
            logger.warning("STRIPE_SECRET_KEY not configured; payment intents will fail")
        elif api_key.startswith("sk_test_"):
            logger.info("Stripe running in test mode")

    def create_intent(self, amount_minor_units: int) -> str:
        if not self.api_key:
            raise InternalError("Payment processor is not configured")
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                amount=amount_minor_units,
                currency=self.currency,
                automatic_payment_methods={"enabled": True},
            )
        except stripe.StripeError as e:
            logger.error(f"Failed to create Stripe payment intent: {e}")
            raise InternalError("Failed to create payment intent") from e
        return intent.client_secret


@lru_cache()
def get_payment_processor() -> PaymentProcessor:
    return StripePaymentProcessor(
        api_key=settings.stripe_secret_key,
        currency=settings.stripe_currency,
        timeout=settings.stripe_timeout_seconds,
        max_network_retries=settings.stripe_max_network_retries,
    )
