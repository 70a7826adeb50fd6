from typing import Optional

from payment_intake.core.enums import ValidationErrorKind

VALIDATION_MESSAGES = {
    ValidationErrorKind.INVALID_AMOUNT: 'Amount must be positive',
    ValidationErrorKind.MISSING_RIDER_ID: 'Rider is required',
    ValidationErrorKind.INCOMPLETE_CARD_DATA: (
        'Card holder name, number, expiration and CVV are required'
    ),
    ValidationErrorKind.MISSING_HOLDER_NAME: 'Cardholder name is required',
    ValidationErrorKind.MISSING_CARD_NUMBER: 'Card number is required',
    ValidationErrorKind.INVALID_EXPIRATION_FORMAT: 'Invalid expiration date',
    ValidationErrorKind.CARD_EXPIRED: 'Card has expired',
    ValidationErrorKind.INVALID_CARD_NUMBER: 'Invalid card number',
    ValidationErrorKind.INVALID_CVV: 'Invalid CVV',
    ValidationErrorKind.INVALID_PAYMENT_METHOD: 'Invalid payment method',
    ValidationErrorKind.MISSING_RECIPIENT: 'Email is required',
    ValidationErrorKind.INVALID_RECIPIENT: 'Invalid email format',
    ValidationErrorKind.MISSING_SUBJECT: 'Subject is required',
    ValidationErrorKind.MISSING_MESSAGE: 'Message is required',
}


class PaymentIntakeError(Exception):
    """Base class for every error raised by the payment intake core."""


class ValidationError(PaymentIntakeError, ValueError):
    """
    Client-caused error. Always raised before any state-changing effect.
    """

    def __init__(
        self, kind: ValidationErrorKind, detail: Optional[str] = None
    ):
        self.kind = kind
        self.detail = detail
        message = VALIDATION_MESSAGES[kind]
        if detail:
            message = f'{message}: {detail}'
        super().__init__(message)


class NotFoundError(PaymentIntakeError, LookupError):
    def __init__(self, entity: str, entity_id: int):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f'{entity} {entity_id} not found')


class GatewayError(PaymentIntakeError):
    """Failure reported by, or while talking to, the payment gateway."""


class PaymentProcessingFailed(GatewayError):
    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(f'Payment processing failed: {reason}')


class NotificationError(PaymentIntakeError):
    """Email could not be delivered. Never propagated out of a batch."""
