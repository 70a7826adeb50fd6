import logging
import re
from datetime import datetime, timezone
from typing import List, Optional

from payment_intake.core.consts import EMAIL_PATTERN
from payment_intake.core.entities.email import EmailRecord
from payment_intake.core.enums import ValidationErrorKind
from payment_intake.core.errors import NotFoundError, ValidationError
from payment_intake.core.interfaces.mailer import EmailTransport, Mailer
from payment_intake.core.repositories.email import EmailRepository

logger = logging.getLogger(__name__)


class EmailService(Mailer):
    """
    Validates, delivers and records outgoing emails.

    Without a transport (no provider credentials) emails are only
    recorded, which is what development and test environments rely on.
    """

    def __init__(
        self,
        email_repository: EmailRepository,
        transport: Optional[EmailTransport] = None,
    ):
        self._email_repository = email_repository
        self._transport = transport

    async def send(
        self, recipient: str, subject: str, body: str
    ) -> EmailRecord:
        recipient = (recipient or '').strip()
        if not recipient:
            raise ValidationError(ValidationErrorKind.MISSING_RECIPIENT)
        if not re.fullmatch(EMAIL_PATTERN, recipient):
            raise ValidationError(ValidationErrorKind.INVALID_RECIPIENT)
        if not subject or not subject.strip():
            raise ValidationError(ValidationErrorKind.MISSING_SUBJECT)
        if not body or not body.strip():
            raise ValidationError(ValidationErrorKind.MISSING_MESSAGE)

        if self._transport is not None:
            await self._transport.deliver(recipient, subject, body)
        else:
            logger.debug(
                f'No email transport configured, recording email to '
                f'{recipient} without delivery'
            )

        record = await self._email_repository.create(
            EmailRecord(
                recipient=recipient,
                subject=subject,
                message=body,
                created_at=datetime.now(timezone.utc),
            )
        )
        logger.info(f'Recorded email {record.email_id} to {recipient}')
        return record

    async def list_emails(self) -> List[EmailRecord]:
        return await self._email_repository.get_all()

    async def get_email(self, email_id: int) -> EmailRecord:
        record = await self._email_repository.get_by_id(email_id)
        if record is None:
            raise NotFoundError('Email', email_id)
        return record
