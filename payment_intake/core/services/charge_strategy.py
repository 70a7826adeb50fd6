import logging
from abc import ABC, abstractmethod
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from payment_intake.config import Settings
from payment_intake.core.consts import (
    GATEWAY_CHARGE_SUCCEEDED,
    MINOR_UNITS_PER_MAJOR,
)
from payment_intake.core.entities.card import ChargeRequest
from payment_intake.core.enums import ChargeStrategyName, PaymentStatus
from payment_intake.core.errors import PaymentProcessingFailed
from payment_intake.core.interfaces.payment_gateway import PaymentGateway
from payment_intake.core.interfaces.random_source import RandomSource
from payment_intake.metrics import PAYMENT_METRICS

logger = logging.getLogger(__name__)

DEFAULT_FAILURE_THRESHOLD = 0.1


def to_minor_units(amount: Decimal) -> int:
    return int(
        (amount * MINOR_UNITS_PER_MAJOR).quantize(
            Decimal('1'), rounding=ROUND_HALF_UP
        )
    )


def simulate_outcome(
    random_source: RandomSource,
    failure_threshold: float = DEFAULT_FAILURE_THRESHOLD,
) -> PaymentStatus:
    """
    One draw decides the outcome: values below the threshold fail.
    With the default threshold 90% of draws are PAID.
    """
    if random_source.next() >= failure_threshold:
        return PaymentStatus.PAID
    return PaymentStatus.FAILED


class ChargeStrategy(ABC):
    name: ChargeStrategyName

    @abstractmethod
    async def execute(self, request: ChargeRequest) -> PaymentStatus:
        """Returns the terminal status of the charge (PAID or FAILED)."""


class GatewayChargeStrategy(ChargeStrategy):
    name = ChargeStrategyName.GATEWAY

    def __init__(self, gateway: PaymentGateway, currency: str):
        self._gateway = gateway
        self._currency = currency

    async def execute(self, request: ChargeRequest) -> PaymentStatus:
        amount_minor_units = to_minor_units(request.amount)
        operation = 'tokenize'
        try:
            token = request.card.token
            if not token:
                token = await self._gateway.tokenize(request.card)
            operation = 'create_charge'
            charge = await self._gateway.create_charge(
                amount_minor_units=amount_minor_units,
                currency=self._currency,
                token=token,
            )
        except Exception as e:
            PAYMENT_METRICS['gateway_errors'].labels(
                operation=operation
            ).inc()
            logger.error(
                f'Gateway {operation} failed for rider {request.rider_id}: '
                f'{e}',
                exc_info=True,
            )
            raise PaymentProcessingFailed(str(e)) from e

        logger.info(
            f'Gateway charge {charge.charge_id} for rider '
            f'{request.rider_id} finished with status {charge.status}'
        )
        if charge.status == GATEWAY_CHARGE_SUCCEEDED:
            return PaymentStatus.PAID
        return PaymentStatus.FAILED


class SimulatedChargeStrategy(ChargeStrategy):
    """
    Stand-in for a real gateway in environments without credentials.
    """

    name = ChargeStrategyName.SIMULATED

    def __init__(
        self,
        random_source: RandomSource,
        failure_threshold: float = DEFAULT_FAILURE_THRESHOLD,
    ):
        self._random_source = random_source
        self._failure_threshold = failure_threshold

    async def execute(self, request: ChargeRequest) -> PaymentStatus:
        status = simulate_outcome(
            self._random_source, self._failure_threshold
        )
        logger.debug(
            f'Simulated charge for rider {request.rider_id}: {status.value}'
        )
        return status


def build_charge_strategy(
    settings: Settings,
    random_source: RandomSource,
    gateway: Optional[PaymentGateway] = None,
) -> ChargeStrategy:
    """
    Picks the charge strategy once, at startup, from the configured
    gateway credentials.
    """
    if settings.gateway_enabled:
        if gateway is None:
            raise ValueError(
                'STRIPE_SECRET_KEY is set but no payment gateway was given'
            )
        logger.info('Charges are processed through the payment gateway')
        return GatewayChargeStrategy(
            gateway=gateway, currency=settings.payment_currency
        )

    logger.warning(
        'No payment gateway configured, charges are simulated '
        f'(failure threshold {settings.simulated_failure_threshold})'
    )
    return SimulatedChargeStrategy(
        random_source=random_source,
        failure_threshold=settings.simulated_failure_threshold,
    )
