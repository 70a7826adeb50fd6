from enum import Enum
from typing import Dict

from payment_intake.core.enums import PaymentStatus

TIMESTAMP_FORMAT = '%Y-%m-%d %H:%M:%S %Z'


class PaymentMessages(str, Enum):
    PAID_SUBJECT = 'paid_subject'
    PAID_BODY = 'paid_body'
    FAILED_SUBJECT = 'failed_subject'
    FAILED_BODY = 'failed_body'


PAYMENT_MESSAGES: Dict[PaymentMessages, str] = {
    PaymentMessages.PAID_SUBJECT: 'Charge processed successfully',
    PaymentMessages.PAID_BODY: (
        'Hello!\n\n'
        'Your charge was processed successfully.\n\n'
        'Payment ID: {payment_id}\n'
        'Amount: {amount}\n'
        'Processed at: {finalized_at}\n\n'
        'Thank you for riding with us.'
    ),
    PaymentMessages.FAILED_SUBJECT: 'Charge processing failed',
    PaymentMessages.FAILED_BODY: (
        'Hello!\n\n'
        'We could not process your charge.\n\n'
        'Payment ID: {payment_id}\n'
        'Amount: {amount}\n'
        'Status: {status}\n\n'
        'Please verify your card details and try again.'
    ),
}

NOTIFICATION_TEMPLATES = {
    PaymentStatus.PAID: (
        PaymentMessages.PAID_SUBJECT,
        PaymentMessages.PAID_BODY,
    ),
    PaymentStatus.FAILED: (
        PaymentMessages.FAILED_SUBJECT,
        PaymentMessages.FAILED_BODY,
    ),
}


def get_text(key: PaymentMessages, **kwargs) -> str:
    text = PAYMENT_MESSAGES[key]
    if kwargs:
        return text.format(**kwargs)
    return text
