from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from payment_intake.config import Settings, settings
from payment_intake.core.interfaces.mailer import EmailTransport
from payment_intake.core.interfaces.payment_gateway import PaymentGateway
from payment_intake.core.interfaces.random_source import RandomSource
from payment_intake.core.services.card_validator import CardValidator
from payment_intake.core.services.charge_strategy import (
    ChargeStrategy,
    build_charge_strategy,
)
from payment_intake.core.services.email import EmailService
from payment_intake.core.services.notification import (
    PaymentNotificationService,
)
from payment_intake.core.services.payment import PaymentService
from payment_intake.core.services.payment_queue import PaymentQueueService
from payment_intake.db.repositories.email import SQLAlchemyEmailRepository
from payment_intake.db.repositories.payment import (
    SQLAlchemyPaymentRepository,
)
from payment_intake.infrastructure.mailersend_transport import (
    MailerSendTransport,
)
from payment_intake.infrastructure.random_source import SystemRandomSource
from payment_intake.infrastructure.stripe_gateway import StripeGateway


class Collaborators:
    """
    Process-wide collaborators, created once at startup.

    The charge strategy is chosen here, from the configured credentials,
    and reused for every request.
    """

    def __init__(
        self,
        app_settings: Settings = settings,
        gateway: Optional[PaymentGateway] = None,
        transport: Optional[EmailTransport] = None,
        random_source: Optional[RandomSource] = None,
    ):
        self.settings = app_settings
        if gateway is None and app_settings.gateway_enabled:
            gateway = StripeGateway(api_key=app_settings.stripe_secret_key)
        if transport is None and app_settings.mailer_enabled:
            transport = MailerSendTransport(
                api_key=app_settings.mailersend_api_key,
                from_email=app_settings.mailersend_from_email,
                from_name=app_settings.mailersend_from_name,
                api_url=app_settings.mailersend_api_url,
            )
        self.gateway = gateway
        self.transport = transport
        self.random_source = random_source or SystemRandomSource()
        self.charge_strategy: ChargeStrategy = build_charge_strategy(
            settings=app_settings,
            random_source=self.random_source,
            gateway=gateway,
        )

    async def close(self) -> None:
        if isinstance(self.transport, MailerSendTransport):
            await self.transport.close()


def get_email_service(
    session: AsyncSession, collaborators: Collaborators
) -> EmailService:
    return EmailService(
        SQLAlchemyEmailRepository(session), collaborators.transport
    )


def get_payment_service(
    session: AsyncSession, collaborators: Collaborators
) -> PaymentService:
    return PaymentService(
        payment_repository=SQLAlchemyPaymentRepository(session),
        card_validator=CardValidator(collaborators.gateway),
        charge_strategy=collaborators.charge_strategy,
        random_source=collaborators.random_source,
        failure_threshold=collaborators.settings.simulated_failure_threshold,
    )


def get_payment_queue_service(
    session: AsyncSession,
    collaborators: Collaborators,
    email_session: Optional[AsyncSession] = None,
) -> PaymentQueueService:
    notification_service = PaymentNotificationService(
        mailer=get_email_service(email_session or session, collaborators),
        recipient_template=(
            collaborators.settings.notification_recipient_template
        ),
    )
    return PaymentQueueService(
        payment_repository=SQLAlchemyPaymentRepository(session),
        notification_service=notification_service,
        random_source=collaborators.random_source,
        failure_threshold=collaborators.settings.simulated_failure_threshold,
    )
