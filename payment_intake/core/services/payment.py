import logging
from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from payment_intake.config import settings
from payment_intake.core.consts import AMOUNT_QUANTUM, MAX_AMOUNT
from payment_intake.core.entities.card import (
    CardData,
    CardValidationResult,
    ChargeRequest,
)
from payment_intake.core.entities.payment import Payment, PaymentRequest
from payment_intake.core.enums import (
    ChargeStrategyName,
    PaymentStatus,
    ValidationErrorKind,
)
from payment_intake.core.errors import NotFoundError, ValidationError
from payment_intake.core.interfaces.random_source import RandomSource
from payment_intake.core.repositories.payment import PaymentRepository
from payment_intake.core.services.card_validator import CardValidator
from payment_intake.core.services.charge_strategy import (
    ChargeStrategy,
    simulate_outcome,
)
from payment_intake.metrics import PAYMENT_METRICS

logger = logging.getLogger(__name__)


def _reject(kind: ValidationErrorKind) -> ValidationError:
    PAYMENT_METRICS['validation_failures'].labels(kind=kind.value).inc()
    return ValidationError(kind)


def ensure_positive_amount(amount: Optional[Decimal]) -> Decimal:
    """
    Rounds to cents and rejects anything that is not a positive amount the
    payments table can store.
    """
    if (
        amount is None
        or not amount.is_finite()
        or not 0 < amount <= MAX_AMOUNT
    ):
        raise _reject(ValidationErrorKind.INVALID_AMOUNT)
    quantized = amount.quantize(AMOUNT_QUANTUM, rounding=ROUND_HALF_UP)
    if not 0 < quantized <= MAX_AMOUNT:
        raise _reject(ValidationErrorKind.INVALID_AMOUNT)
    return quantized


def ensure_rider(rider_id: Optional[int]) -> int:
    if rider_id is None:
        raise _reject(ValidationErrorKind.MISSING_RIDER_ID)
    return rider_id


class PaymentService:
    def __init__(
        self,
        payment_repository: PaymentRepository,
        card_validator: CardValidator,
        charge_strategy: ChargeStrategy,
        random_source: RandomSource,
        failure_threshold: float = settings.simulated_failure_threshold,
    ):
        self._payment_repository = payment_repository
        self._card_validator = card_validator
        self._charge_strategy = charge_strategy
        self._random_source = random_source
        self._failure_threshold = failure_threshold

    async def validate_card(self, card: CardData) -> CardValidationResult:
        try:
            return await self._card_validator.validate(card)
        except ValidationError as e:
            PAYMENT_METRICS['validation_failures'].labels(
                kind=e.kind.value
            ).inc()
            raise

    async def charge(self, request: ChargeRequest) -> Payment:
        """
        Validates the card, executes the charge with the configured
        strategy and records exactly one terminal payment.

        Nothing is persisted when validation fails or the gateway raises.
        """
        amount = ensure_positive_amount(request.amount)
        rider_id = ensure_rider(request.rider_id)
        await self.validate_card(request.card)

        status = await self._charge_strategy.execute(request)
        return await self._record_terminal_payment(
            amount=amount,
            rider_id=rider_id,
            status=status,
            strategy=self._charge_strategy.name,
        )

    async def create_payment(self, request: PaymentRequest) -> Payment:
        """
        Records a card-less charge whose outcome is simulated.
        """
        amount = ensure_positive_amount(request.amount)
        rider_id = ensure_rider(request.rider_id)
        status = simulate_outcome(
            self._random_source, self._failure_threshold
        )
        return await self._record_terminal_payment(
            amount=amount,
            rider_id=rider_id,
            status=status,
            strategy=ChargeStrategyName.SIMULATED,
        )

    async def get_payment(self, payment_id: int) -> Payment:
        payment = await self._payment_repository.get_by_id(payment_id)
        if payment is None:
            raise NotFoundError('Payment', payment_id)
        return payment

    async def _record_terminal_payment(
        self,
        amount: Decimal,
        rider_id: int,
        status: PaymentStatus,
        strategy: ChargeStrategyName,
    ) -> Payment:
        now = datetime.now(timezone.utc)
        draft = Payment(
            amount=amount,
            rider_id=rider_id,
            status=status,
            requested_at=now,
            finalized_at=now,
        )
        payment = await self._payment_repository.save(draft)

        PAYMENT_METRICS['charges'].labels(
            status=status.value, strategy=strategy.value
        ).inc()
        logger.info(
            f'Recorded payment {payment.payment_id} for rider {rider_id}: '
            f'{amount} -> {status.value} ({strategy.value})'
        )
        return payment
