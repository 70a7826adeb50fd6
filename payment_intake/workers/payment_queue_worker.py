import asyncio
import logging
from typing import List

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from payment_intake.config import settings
from payment_intake.core.entities.payment import Payment
from payment_intake.db.db import async_session_maker, session_scope
from payment_intake.dependencies import (
    Collaborators,
    get_payment_queue_service,
)

logger = logging.getLogger(__name__)


async def drain_payment_queue(
    collaborators: Collaborators,
    session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
) -> List[Payment]:
    """
    Drains the queue in its own transaction. Finalized payments are
    committed before any rider is emailed, and notification emails are
    recorded in a separate session, so a failure there never rolls back
    finalized payments.
    """
    async with session_scope(session_maker) as email_session:
        async with session_scope(session_maker) as session:
            queue_service = get_payment_queue_service(
                session, collaborators, email_session=email_session
            )
            return await queue_service.drain(commit=session.commit)


async def payment_queue_worker_loop(
    collaborators: Collaborators,
    stop_event: asyncio.Event,
    interval_seconds: float = settings.payment_queue_drain_interval_seconds,
    session_maker: async_sessionmaker[AsyncSession] = async_session_maker,
) -> None:
    """
    Drains the pending payment queue periodically until ``stop_event`` is
    set. Run exactly one of these per database.
    """
    logger.info(
        f'Payment queue worker started, draining every '
        f'{interval_seconds}s'
    )
    while not stop_event.is_set():
        try:
            processed = await drain_payment_queue(
                collaborators, session_maker
            )
            if processed:
                logger.info(
                    f'Payment queue worker processed {len(processed)} '
                    f'payments'
                )
        except asyncio.CancelledError:
            logger.info('Payment queue worker was cancelled.')
            raise
        except Exception as e:
            logger.error(
                f'Error while draining the payment queue: {e}', exc_info=True
            )

        try:
            await asyncio.wait_for(stop_event.wait(), timeout=interval_seconds)
        except asyncio.TimeoutError:
            pass

    logger.info('Payment queue worker stopped.')
