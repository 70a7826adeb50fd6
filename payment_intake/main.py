import asyncio
import logging
import signal

from payment_intake.config import settings
from payment_intake.db.db import engine, init_db
from payment_intake.dependencies import Collaborators
from payment_intake.logging_config import configure_logging
from payment_intake.sentry_sdk import sentry_init
from payment_intake.workers.payment_queue_worker import (
    payment_queue_worker_loop,
)

configure_logging()

logger = logging.getLogger(__name__)


async def main() -> None:
    if not settings.debug:
        sentry_init()

    await init_db()
    collaborators = Collaborators()

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(sig, stop_event.set)

    worker_task = asyncio.create_task(
        payment_queue_worker_loop(
            collaborators=collaborators, stop_event=stop_event
        ),
        name='payment_queue_worker_loop',
    )
    logger.info('Payment intake startup complete. Queue worker started.')

    await stop_event.wait()
    logger.info('Payment intake shutdown initiated.')
    try:
        await asyncio.wait_for(
            worker_task, timeout=settings.worker_shutdown_timeout_seconds
        )
        logger.info(
            f'Worker task {worker_task.get_name()} finished gracefully.'
        )
    except asyncio.TimeoutError:
        logger.warning(
            f'Worker task {worker_task.get_name()} timed '
            f'out during shutdown. Cancelling.'
        )
        worker_task.cancel()

    await collaborators.close()
    await engine.dispose()
    logger.info('Payment intake shutdown complete.')


if __name__ == '__main__':
    asyncio.run(main())
