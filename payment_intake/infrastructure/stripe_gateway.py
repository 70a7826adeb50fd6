import asyncio
import logging
from typing import Any, Callable

import stripe

from payment_intake.config import settings
from payment_intake.core.entities.card import CardData
from payment_intake.core.entities.gateway import GatewayCharge
from payment_intake.core.errors import GatewayError
from payment_intake.core.interfaces.payment_gateway import PaymentGateway
from payment_intake.core.services.card_validator import parse_expiration

logger = logging.getLogger(__name__)


class StripeGateway(PaymentGateway):
    """
    Stripe-backed gateway: raw cards become PaymentMethods and charges are
    confirmed PaymentIntents.

    The Stripe SDK is blocking, so every call runs in a worker thread.
    """

    def __init__(self, api_key: str = settings.stripe_secret_key):
        if not api_key:
            logger.error('STRIPE_SECRET_KEY is not set for StripeGateway')
            raise ValueError('STRIPE_SECRET_KEY is not set for StripeGateway')
        self._api_key = api_key

    async def _call(self, func: Callable[..., Any], **params: Any) -> Any:
        try:
            return await asyncio.to_thread(
                func, api_key=self._api_key, **params
            )
        except stripe.StripeError as e:
            message = getattr(e, 'user_message', None) or str(e)
            raise GatewayError(message) from e

    async def tokenize(self, card: CardData) -> str:
        expiration = parse_expiration(card.expiration or '')
        if expiration is None:
            raise GatewayError('Card expiration is not in MM/YYYY format')
        exp_year, exp_month = expiration

        payment_method = await self._call(
            stripe.PaymentMethod.create,
            type='card',
            card={
                'number': (card.number or '').strip(),
                'exp_month': exp_month,
                'exp_year': exp_year,
                'cvc': str(card.cvv),
            },
            billing_details={'name': (card.holder_name or '').strip()},
        )
        logger.debug(f'Created Stripe payment method {payment_method.id}')
        return payment_method.id

    async def verify_token(self, token: str) -> bool:
        payment_method = await self._call(
            stripe.PaymentMethod.retrieve, id=token
        )
        return payment_method.type == 'card'

    async def create_charge(
        self, amount_minor_units: int, currency: str, token: str
    ) -> GatewayCharge:
        payment_intent = await self._call(
            stripe.PaymentIntent.create,
            amount=amount_minor_units,
            currency=currency.lower(),
            payment_method=token,
            confirm=True,
            automatic_payment_methods={
                'enabled': True,
                'allow_redirects': 'never',
            },
        )
        return GatewayCharge(
            charge_id=payment_intent.id, status=payment_intent.status
        )
