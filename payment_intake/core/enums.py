from enum import Enum


class PaymentStatus(str, Enum):
    PENDING = 'PENDING'
    PAID = 'PAID'
    FAILED = 'FAILED'
    CANCELLED = 'CANCELLED'

    @property
    def is_terminal(self) -> bool:
        return self is not PaymentStatus.PENDING


class ChargeStrategyName(str, Enum):
    GATEWAY = 'gateway'
    SIMULATED = 'simulated'


class ValidationErrorKind(str, Enum):
    INVALID_AMOUNT = 'invalid_amount'
    MISSING_RIDER_ID = 'missing_rider_id'
    INCOMPLETE_CARD_DATA = 'incomplete_card_data'
    MISSING_HOLDER_NAME = 'missing_holder_name'
    MISSING_CARD_NUMBER = 'missing_card_number'
    INVALID_EXPIRATION_FORMAT = 'invalid_expiration_format'
    CARD_EXPIRED = 'card_expired'
    INVALID_CARD_NUMBER = 'invalid_card_number'
    INVALID_CVV = 'invalid_cvv'
    INVALID_PAYMENT_METHOD = 'invalid_payment_method'
    MISSING_RECIPIENT = 'missing_recipient'
    INVALID_RECIPIENT = 'invalid_recipient'
    MISSING_SUBJECT = 'missing_subject'
    MISSING_MESSAGE = 'missing_message'
