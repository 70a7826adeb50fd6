import logging
from datetime import datetime, timezone
from typing import Awaitable, Callable, List, Optional

from payment_intake.config import settings
from payment_intake.core.entities.payment import Payment, PaymentRequest
from payment_intake.core.enums import PaymentStatus
from payment_intake.core.interfaces.random_source import RandomSource
from payment_intake.core.repositories.payment import PaymentRepository
from payment_intake.core.services.charge_strategy import simulate_outcome
from payment_intake.core.services.notification import (
    PaymentNotificationService,
)
from payment_intake.core.services.payment import (
    ensure_positive_amount,
    ensure_rider,
)
from payment_intake.metrics import PAYMENT_METRICS

logger = logging.getLogger(__name__)


class PaymentQueueService:
    """
    Deferred charges: payments are parked as PENDING and resolved later in
    batches by ``drain``.

    Queued payments carry no card data, so their outcome is always
    simulated. Only one drain should run per store at a time; overlapping
    drains are tolerated because the store only transitions rows that are
    still PENDING.
    """

    def __init__(
        self,
        payment_repository: PaymentRepository,
        notification_service: PaymentNotificationService,
        random_source: RandomSource,
        failure_threshold: float = settings.simulated_failure_threshold,
    ):
        self._payment_repository = payment_repository
        self._notification_service = notification_service
        self._random_source = random_source
        self._failure_threshold = failure_threshold

    async def enqueue(self, request: PaymentRequest) -> Payment:
        amount = ensure_positive_amount(request.amount)
        rider_id = ensure_rider(request.rider_id)

        now = datetime.now(timezone.utc)
        payment = await self._payment_repository.save(
            Payment(
                amount=amount,
                rider_id=rider_id,
                status=PaymentStatus.PENDING,
                requested_at=now,
                finalized_at=now,
            )
        )
        PAYMENT_METRICS['enqueued'].inc()
        logger.info(
            f'Queued payment {payment.payment_id} for rider {rider_id} '
            f'({amount})'
        )
        return payment

    async def drain(
        self, commit: Optional[Callable[[], Awaitable[None]]] = None
    ) -> List[Payment]:
        """
        Resolves every PENDING payment and notifies riders about the rows
        this call actually finalized.

        ``commit`` is awaited after the batch is persisted and before any
        notification goes out, so riders are only told about committed
        outcomes.
        """
        with PAYMENT_METRICS['drain_duration_seconds'].time():
            pending = await self._payment_repository.find_by_status(
                PaymentStatus.PENDING
            )
            if not pending:
                logger.debug('Payment queue is empty, nothing to drain')
                return []

            resolved = [self._resolve(payment) for payment in pending]
            processed = await self._payment_repository.finalize_pending(
                resolved
            )
            skipped = len(resolved) - len(processed)
            if skipped:
                logger.warning(
                    f'{skipped} queued payments were finalized elsewhere '
                    f'while this batch was running'
                )
            if commit is not None:
                await commit()

            for payment in processed:
                PAYMENT_METRICS['drained'].labels(
                    status=payment.status.value
                ).inc()
                await self._notification_service.notify(payment)

        logger.info(
            f'Drained {len(processed)} queued payments: '
            f'{self._summary(processed)}'
        )
        return processed

    def _resolve(self, payment: Payment) -> Payment:
        status = simulate_outcome(
            self._random_source, self._failure_threshold
        )
        return payment.model_copy(
            update={
                'status': status,
                'finalized_at': datetime.now(timezone.utc),
            }
        )

    @staticmethod
    def _summary(payments: List[Payment]) -> str:
        paid = sum(1 for p in payments if p.status == PaymentStatus.PAID)
        return f'{paid} paid, {len(payments) - paid} failed'
