import logging
from typing import Optional

import httpx

from payment_intake.config import settings
from payment_intake.core.errors import NotificationError
from payment_intake.core.interfaces.mailer import EmailTransport

logger = logging.getLogger(__name__)


class MailerSendTransport(EmailTransport):
    """
    Sends plain-text email through the MailerSend REST API.
    """

    def __init__(
        self,
        api_key: str = settings.mailersend_api_key,
        from_email: str = settings.mailersend_from_email,
        from_name: Optional[str] = settings.mailersend_from_name,
        api_url: str = settings.mailersend_api_url,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        if not api_key:
            logger.error('MAILERSEND_API_KEY is not set for MailerSend')
            raise ValueError('MAILERSEND_API_KEY is not set for MailerSend')
        if not from_email:
            logger.error('MAILERSEND_FROM_EMAIL is not set for MailerSend')
            raise ValueError('MAILERSEND_FROM_EMAIL is not set for MailerSend')
        self._api_url = api_url
        self._from_email = from_email
        self._from_name = from_name or None
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(
            timeout=settings.mailersend_request_timeout
        )
        self._headers = {
            'Authorization': f'Bearer {api_key}',
            'Content-Type': 'application/json',
        }

    async def close(self) -> None:
        if self._owns_client:
            await self._http_client.aclose()
            logger.info('MailerSendTransport: Closed internal HTTP client.')

    def _build_payload(self, recipient: str, subject: str, body: str) -> dict:
        sender = {'email': self._from_email}
        if self._from_name:
            sender['name'] = self._from_name
        return {
            'from': sender,
            'to': [{'email': recipient, 'name': recipient}],
            'subject': subject,
            'text': body,
        }

    async def deliver(self, recipient: str, subject: str, body: str) -> None:
        payload = self._build_payload(recipient, subject, body)
        try:
            response = await self._http_client.post(
                self._api_url, json=payload, headers=self._headers
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                f'MailerSend rejected email to {recipient}: '
                f'{e.response.status_code} {e.response.text}'
            )
            raise NotificationError(
                f'Failed to send email: HTTP {e.response.status_code}'
            ) from e
        except httpx.HTTPError as e:
            logger.error(f'MailerSend request for {recipient} failed: {e}')
            raise NotificationError(f'Failed to send email: {e}') from e

        logger.debug(
            f'MailerSend accepted email to {recipient} '
            f'(message id {response.headers.get("x-message-id")})'
        )
