import logging
from typing import Optional

import stripe

from chatterbox.config import Settings
from chatterbox.errors import PaymentError

logger = logging.getLogger(__name__)


class PaymentBridge:
    """Creates Stripe payment intents for the one-time Premium membership fee."""

    def __init__(self, api_key: Optional[str], amount: int, currency: str = "usd"):
        self.api_key = api_key
        self.amount = amount
        self.currency = currency

    @classmethod
    def from_settings(cls, settings: Settings) -> "PaymentBridge":
        return cls(settings.stripe_secret_key, settings.membership_fee_cents, settings.membership_currency)

    def create_intent(self, email: str) -> str:
        if not self.api_key:
            raise PaymentError("Payments are not configured")
        try:
            intent = stripe.PaymentIntent.create(
                api_key=self.api_key,
                amount=self.amount,
                currency=self.currency,
                automatic_payment_methods={"enabled": True},
                metadata={"email": email, "purpose": "premium-membership"},
            )
        except stripe.StripeError as e:
            logger.exception("Stripe refused payment intent for %s", email)
            raise PaymentError("Failed to create payment intent", error=str(e)) from e
        logger.info("Created payment intent %s for %s", intent.id, email)
        return intent.client_secret
