import logging
import re
import string
from datetime import date, datetime, timezone
from typing import Optional, Tuple

from payment_intake.core.consts import CVV_PATTERN, EXPIRATION_PATTERN
from payment_intake.core.entities.card import CardData, CardValidationResult
from payment_intake.core.enums import ValidationErrorKind
from payment_intake.core.errors import GatewayError, ValidationError
from payment_intake.core.interfaces.payment_gateway import PaymentGateway

logger = logging.getLogger(__name__)


def luhn_checksum_is_valid(card_number: str) -> bool:
    digits = [int(char) for char in card_number if char in string.digits]
    if not digits:
        return False

    total = 0
    for position, digit in enumerate(reversed(digits)):
        if position % 2 == 1:
            digit *= 2
            if digit > 9:
                digit -= 9
        total += digit
    return total % 10 == 0


def parse_expiration(expiration: str) -> Optional[Tuple[int, int]]:
    """
    Parses ``MM/YYYY`` into ``(year, month)``.
    Returns None for anything that is not a real calendar month.
    """
    match = re.fullmatch(EXPIRATION_PATTERN, expiration.strip())
    if not match:
        return None
    month, year = int(match.group(1)), int(match.group(2))
    if not 1 <= month <= 12:
        return None
    return year, month


def validate_card_fields(
    card: CardData, today: Optional[date] = None
) -> CardValidationResult:
    """
    Runs the local card checks in order; the first failing rule wins.

    Side-effect free. The only time dependency is the expiration check,
    which compares against ``today`` (defaults to the current UTC date).
    """
    if (
        card.holder_name is None
        or card.number is None
        or card.expiration is None
        or card.cvv is None
    ):
        raise ValidationError(ValidationErrorKind.INCOMPLETE_CARD_DATA)

    if not card.holder_name.strip():
        raise ValidationError(ValidationErrorKind.MISSING_HOLDER_NAME)

    if not card.number.strip():
        raise ValidationError(ValidationErrorKind.MISSING_CARD_NUMBER)

    expiration = parse_expiration(card.expiration)
    if expiration is None:
        raise ValidationError(ValidationErrorKind.INVALID_EXPIRATION_FORMAT)

    today = today or datetime.now(timezone.utc).date()
    if expiration < (today.year, today.month):
        raise ValidationError(ValidationErrorKind.CARD_EXPIRED)

    if not luhn_checksum_is_valid(card.number):
        raise ValidationError(ValidationErrorKind.INVALID_CARD_NUMBER)

    if not re.fullmatch(CVV_PATTERN, str(card.cvv)):
        raise ValidationError(ValidationErrorKind.INVALID_CVV)

    return CardValidationResult(valid=True)


class CardValidator:
    def __init__(self, gateway: Optional[PaymentGateway] = None):
        self._gateway = gateway

    async def validate(self, card: CardData) -> CardValidationResult:
        if card.has_token:
            await self._verify_token(card.token)
            return CardValidationResult(valid=True)
        return validate_card_fields(card)

    async def _verify_token(self, token: str) -> None:
        if self._gateway is None:
            raise ValidationError(
                ValidationErrorKind.INVALID_PAYMENT_METHOD,
                'payment method tokens require a configured gateway',
            )
        try:
            is_valid = await self._gateway.verify_token(token)
        except GatewayError as e:
            logger.warning(f'Gateway rejected payment method token: {e}')
            raise ValidationError(
                ValidationErrorKind.INVALID_PAYMENT_METHOD, str(e)
            ) from e
        if not is_valid:
            raise ValidationError(ValidationErrorKind.INVALID_PAYMENT_METHOD)
