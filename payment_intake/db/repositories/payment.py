import logging
from datetime import datetime, timezone
from typing import List, Optional, Sequence

from sqlalchemy import select, update
from sqlalchemy.ext.asyncio import AsyncSession
from typing_extensions import override

from payment_intake.core.entities.payment import Payment as CorePayment
from payment_intake.core.enums import PaymentStatus
from payment_intake.core.errors import NotFoundError
from payment_intake.core.repositories.payment import (
    PaymentRepository as PaymentRepositoryProtocol,
)
from payment_intake.db.models.payment import DBPayment

logger = logging.getLogger(__name__)


class SQLAlchemyPaymentRepository(PaymentRepositoryProtocol):
    def __init__(self, session: AsyncSession):
        self.session = session

    def _to_entity(self, db_payment: DBPayment) -> CorePayment:
        return CorePayment.model_validate(db_payment)

    @override
    async def save(self, payment: CorePayment) -> CorePayment:
        """
        Inserts a draft payment or updates an existing one.
        """
        if payment.payment_id is None:
            db_payment = DBPayment(
                **payment.model_dump(
                    exclude={'payment_id'}, exclude_none=True
                )
            )
            self.session.add(db_payment)
        else:
            db_payment = await self.session.get(DBPayment, payment.payment_id)
            if db_payment is None:
                raise NotFoundError('Payment', payment.payment_id)
            db_payment.amount = payment.amount
            db_payment.rider_id = payment.rider_id
            db_payment.status = payment.status
            db_payment.finalized_at = payment.finalized_at or datetime.now(
                timezone.utc
            )

        await self.session.flush()
        await self.session.refresh(db_payment)
        return self._to_entity(db_payment)

    @override
    async def finalize_pending(
        self, payments: Sequence[CorePayment]
    ) -> List[CorePayment]:
        """
        Conditional batch update: a row is only written if its stored
        status is still PENDING, so a concurrent drain that already
        finalized it wins.
        """
        finalized_ids = []
        for payment in payments:
            if payment.payment_id is None:
                raise ValueError(
                    'Cannot finalize a payment that was never saved'
                )
            if not payment.status.is_terminal:
                raise ValueError(
                    f'Cannot finalize payment {payment.payment_id} as '
                    f'{payment.status.value}'
                )
            stmt = (
                update(DBPayment)
                .where(
                    DBPayment.payment_id == payment.payment_id,
                    DBPayment.status == PaymentStatus.PENDING,
                )
                .values(
                    status=payment.status,
                    finalized_at=payment.finalized_at
                    or datetime.now(timezone.utc),
                )
                .execution_options(synchronize_session=False)
            )
            result = await self.session.execute(stmt)
            if result.rowcount == 1:
                finalized_ids.append(payment.payment_id)
            else:
                logger.debug(
                    f'Payment {payment.payment_id} is no longer pending, '
                    f'skipping'
                )

        if not finalized_ids:
            return []

        await self.session.flush()
        stmt = (
            select(DBPayment)
            .where(DBPayment.payment_id.in_(finalized_ids))
            .order_by(DBPayment.payment_id)
            .execution_options(populate_existing=True)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    @override
    async def find_by_status(
        self, status: PaymentStatus
    ) -> List[CorePayment]:
        stmt = (
            select(DBPayment)
            .where(DBPayment.status == status)
            .order_by(DBPayment.payment_id)
        )
        result = await self.session.execute(stmt)
        return [self._to_entity(row) for row in result.scalars().all()]

    @override
    async def get_by_id(self, payment_id: int) -> Optional[CorePayment]:
        db_payment = await self.session.get(DBPayment, payment_id)
        if db_payment:
            return self._to_entity(db_payment)
        return None
