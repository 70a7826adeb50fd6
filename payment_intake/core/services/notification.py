import logging
from typing import Optional, Tuple

from payment_intake.config import settings
from payment_intake.core.entities.payment import Payment
from payment_intake.core.interfaces.mailer import Mailer
from payment_intake.core.texts import (
    NOTIFICATION_TEMPLATES,
    TIMESTAMP_FORMAT,
    get_text,
)
from payment_intake.metrics import NOTIFICATION_METRICS

logger = logging.getLogger(__name__)


class PaymentNotificationService:
    """
    Emails riders about the outcome of their payments.

    Delivery is best-effort: ``notify`` never raises, so a mailer outage
    cannot undo or interrupt payment processing.
    """

    def __init__(
        self,
        mailer: Mailer,
        recipient_template: str = settings.notification_recipient_template,
    ):
        self._mailer = mailer
        self._recipient_template = recipient_template

    def recipient_for(self, rider_id: int) -> str:
        return self._recipient_template.format(rider_id=rider_id)

    def compose(self, payment: Payment) -> Optional[Tuple[str, str]]:
        """
        Returns ``(subject, body)`` for PAID and FAILED payments and
        None for statuses that are not notified.
        """
        template = NOTIFICATION_TEMPLATES.get(payment.status)
        if template is None:
            return None
        subject_key, body_key = template
        finalized_at = (
            payment.finalized_at.strftime(TIMESTAMP_FORMAT).strip()
            if payment.finalized_at
            else '-'
        )
        body = get_text(
            body_key,
            payment_id=payment.payment_id,
            amount=f'{payment.amount:.2f}',
            status=payment.status.value,
            finalized_at=finalized_at,
        )
        return get_text(subject_key), body

    async def notify(self, payment: Payment) -> None:
        try:
            recipient = await self._dispatch(payment)
        except Exception as e:
            NOTIFICATION_METRICS['failed'].labels(
                status=payment.status.value
            ).inc()
            logger.error(
                f'Failed to notify rider {payment.rider_id} about payment '
                f'{payment.payment_id}: {e}',
                exc_info=True,
            )
            return

        if recipient is None:
            return
        NOTIFICATION_METRICS['sent'].labels(
            status=payment.status.value
        ).inc()
        logger.info(
            f'Notified {recipient} about payment {payment.payment_id} '
            f'({payment.status.value})'
        )

    async def _dispatch(self, payment: Payment) -> Optional[str]:
        message = self.compose(payment)
        if message is None:
            logger.debug(
                f'No notification for payment {payment.payment_id} '
                f'in status {payment.status.value}'
            )
            return None

        subject, body = message
        recipient = self.recipient_for(payment.rider_id)
        await self._mailer.send(recipient, subject, body)
        return recipient
