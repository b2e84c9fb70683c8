"""
ClauseGuard Backend — Payment Gateway Adapter (Stripe)
=======================================================

What:  Creates one-time Stripe Checkout sessions for an analysis token and
       reads back their payment status.
How:   stripe.checkout.Session.create / .retrieve. The Stripe SDK is blocking,
       so calls run in Starlette's threadpool.
Who:   Called by AnalysisService for checkout creation and release checks.

Trust model:
    Confirmation is pull-only. The release check asks Stripe directly for the
    session status each time; no webhook endpoint exists, so nothing in this
    service accepts payment state from a caller.
"""

import enum
import logging
from dataclasses import dataclass
from typing import Optional

import stripe
from starlette.concurrency import run_in_threadpool

from clauseguard.config import settings
from clauseguard.exceptions import GatewayError

logger = logging.getLogger(__name__)


class PaymentStatus(str, enum.Enum):
    PAID = "paid"
    UNPAID = "unpaid"


@dataclass(frozen=True)
class CheckoutSession:
    session_id: str
    url: str


class PaymentService:
    """Stripe Checkout adapter: single line item, fixed price."""

    def __init__(self, api_key: Optional[str] = None):
        self.api_key = (api_key if api_key is not None else settings.stripe_secret_key).strip()
        stripe.api_key = self.api_key

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    def _require_key(self) -> None:
        if not self.is_configured:
            raise GatewayError(
                message="Serviço de pagamento não configurado.",
                context={"missing": "STRIPE_SECRET_KEY"},
            )

    def _session_params(self, token: str) -> dict:
        base = settings.frontend_url
        return {
            "mode": "payment",
            "payment_method_types": ["card"],
            "line_items": [
                {
                    "price_data": {
                        "currency": settings.stripe_currency,
                        "unit_amount": settings.checkout_price_cents,
                        "product_data": {"name": settings.checkout_product_name},
                    },
                    "quantity": 1,
                }
            ],
            "success_url": f"{base}/sucesso?token={token}",
            "cancel_url": f"{base}/cancelado?token={token}",
            "client_reference_id": token,
            "metadata": {"token": token},
        }

    async def create_checkout_session(self, token: str) -> CheckoutSession:
        """
        Create a Checkout session that unlocks `token`.

        Raises:
            GatewayError: Stripe rejected the call or is not configured.
        """
        self._require_key()
        try:
            session = await run_in_threadpool(
                stripe.checkout.Session.create, **self._session_params(token)
            )
        except stripe.error.StripeError as e:
            logger.error("Stripe checkout error for token %s: %s", token, str(e))
            raise GatewayError(
                message="Erro ao criar sessão de pagamento.",
                context={"token": token, "stripe_error": type(e).__name__},
            )

        logger.info("Checkout session created for token %s: %s", token, session.id)
        return CheckoutSession(session_id=session.id, url=session.url)

    async def get_session_status(self, session_id: str) -> PaymentStatus:
        """
        Ask Stripe whether a Checkout session has been paid.

        Raises:
            GatewayError: Stripe rejected the call or is not configured.
        """
        self._require_key()
        try:
            session = await run_in_threadpool(stripe.checkout.Session.retrieve, session_id)
        except stripe.error.StripeError as e:
            logger.error("Stripe retrieve error for session %s: %s", session_id, str(e))
            raise GatewayError(
                message="Erro ao verificar pagamento.",
                context={"session_id": session_id, "stripe_error": type(e).__name__},
            )

        status = PaymentStatus.PAID if session.payment_status == "paid" else PaymentStatus.UNPAID
        logger.info("Stripe session %s payment status: %s", session_id, status.value)
        return status


payment_service = PaymentService()
