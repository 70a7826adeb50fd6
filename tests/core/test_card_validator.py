from datetime import date
from unittest.mock import AsyncMock

import pytest
from freezegun import freeze_time

from payment_intake.core.entities.card import CardData
from payment_intake.core.enums import ValidationErrorKind
from payment_intake.core.errors import GatewayError, ValidationError
from payment_intake.core.services.card_validator import (
    CardValidator,
    luhn_checksum_is_valid,
    parse_expiration,
    validate_card_fields,
)

TODAY = date(2026, 5, 15)


def make_card(**overrides) -> CardData:
    fields = {
        'number': '4532015112830366',
        'holder_name': 'Ana Souza',
        'expiration': '12/2099',
        'cvv': '123',
    }
    fields.update(overrides)
    return CardData(**fields)


def assert_rejected(card: CardData, kind: ValidationErrorKind, today=TODAY):
    with pytest.raises(ValidationError) as exc_info:
        validate_card_fields(card, today=today)
    assert exc_info.value.kind == kind


@pytest.mark.parametrize(
    'number',
    [
        '4532015112830366',
        '4111111111111111',
        '5555555555554444',
        '378282246310005',
        '4532 0151 1283 0366',
        '4532-0151-1283-0366',
    ],
)
def test_luhn_accepts_valid_numbers(number):
    assert luhn_checksum_is_valid(number)


@pytest.mark.parametrize(
    'number',
    ['1234567890123456', '4532015112830367', '4111111111111112', 'abcd', ''],
)
def test_luhn_rejects_invalid_numbers(number):
    assert not luhn_checksum_is_valid(number)


@pytest.mark.parametrize(
    'expiration, expected',
    [
        ('01/2030', (2030, 1)),
        ('1/2030', (2030, 1)),
        ('12/2027', (2027, 12)),
        (' 07/2028 ', (2028, 7)),
        ('13/2030', None),
        ('00/2030', None),
        ('12/30', None),
        ('12-2030', None),
        ('', None),
    ],
)
def test_parse_expiration(expiration, expected):
    assert parse_expiration(expiration) == expected


def test_valid_card_passes():
    result = validate_card_fields(make_card(), today=TODAY)
    assert result.valid is True


def test_validation_is_repeatable():
    card = make_card()
    first = validate_card_fields(card, today=TODAY)
    second = validate_card_fields(card, today=TODAY)
    assert first == second

    bad_card = make_card(cvv='12')
    kinds = []
    for _ in range(2):
        with pytest.raises(ValidationError) as exc_info:
            validate_card_fields(bad_card, today=TODAY)
        kinds.append(exc_info.value.kind)
    assert kinds == [ValidationErrorKind.INVALID_CVV] * 2


@pytest.mark.parametrize(
    'missing_field', ['number', 'holder_name', 'expiration', 'cvv']
)
def test_missing_field_is_incomplete(missing_field):
    assert_rejected(
        make_card(**{missing_field: None}),
        ValidationErrorKind.INCOMPLETE_CARD_DATA,
    )


def test_blank_holder_name():
    assert_rejected(
        make_card(holder_name='   '), ValidationErrorKind.MISSING_HOLDER_NAME
    )


def test_blank_card_number():
    assert_rejected(
        make_card(number='  '), ValidationErrorKind.MISSING_CARD_NUMBER
    )


@pytest.mark.parametrize(
    'expiration', ['13/2030', '0/2030', '12/30', '2030/12', 'soon']
)
def test_malformed_expiration(expiration):
    assert_rejected(
        make_card(expiration=expiration),
        ValidationErrorKind.INVALID_EXPIRATION_FORMAT,
    )


@pytest.mark.parametrize('expiration', ['04/2026', '12/2025', '05/2020'])
def test_expired_card(expiration):
    assert_rejected(
        make_card(expiration=expiration), ValidationErrorKind.CARD_EXPIRED
    )


@pytest.mark.parametrize('expiration', ['05/2026', '06/2026', '01/2027'])
def test_current_and_future_months_are_valid(expiration):
    result = validate_card_fields(
        make_card(expiration=expiration), today=TODAY
    )
    assert result.valid is True


@freeze_time('2026-05-31 23:59:00')
def test_expiration_uses_current_month_by_default():
    assert validate_card_fields(make_card(expiration='05/2026')).valid
    with pytest.raises(ValidationError) as exc_info:
        validate_card_fields(make_card(expiration='04/2026'))
    assert exc_info.value.kind == ValidationErrorKind.CARD_EXPIRED


def test_luhn_failure():
    assert_rejected(
        make_card(number='1234567890123456'),
        ValidationErrorKind.INVALID_CARD_NUMBER,
    )


@pytest.mark.parametrize('cvv', ['12', '12345', 'abc', '', '12a', 12])
def test_invalid_cvv(cvv):
    assert_rejected(make_card(cvv=cvv), ValidationErrorKind.INVALID_CVV)


@pytest.mark.parametrize('cvv', ['123', '1234', 123, 4321])
def test_valid_cvv(cvv):
    assert validate_card_fields(make_card(cvv=cvv), today=TODAY).valid


def test_first_failing_rule_wins():
    card = make_card(
        holder_name='',
        number='1234567890123456',
        expiration='99/2000',
        cvv='1',
    )
    assert_rejected(card, ValidationErrorKind.MISSING_HOLDER_NAME)

    card = make_card(expiration='04/2026', number='1234567890123456')
    assert_rejected(card, ValidationErrorKind.CARD_EXPIRED)


@pytest.mark.asyncio
async def test_validator_runs_local_checks_without_token():
    validator = CardValidator(gateway=None)
    with pytest.raises(ValidationError) as exc_info:
        await validator.validate(make_card(number='1234567890123456'))
    assert exc_info.value.kind == ValidationErrorKind.INVALID_CARD_NUMBER


@pytest.mark.asyncio
async def test_token_is_delegated_to_gateway(mock_gateway: AsyncMock):
    mock_gateway.verify_token.return_value = True
    validator = CardValidator(gateway=mock_gateway)

    # local rules are skipped entirely for tokens
    card = CardData(token='pm_123', number='not-a-card', cvv='1')
    result = await validator.validate(card)

    assert result.valid is True
    mock_gateway.verify_token.assert_awaited_once_with('pm_123')


@pytest.mark.asyncio
async def test_rejected_token(mock_gateway: AsyncMock):
    mock_gateway.verify_token.return_value = False
    validator = CardValidator(gateway=mock_gateway)

    with pytest.raises(ValidationError) as exc_info:
        await validator.validate(CardData(token='pm_expired'))

    assert exc_info.value.kind == ValidationErrorKind.INVALID_PAYMENT_METHOD


@pytest.mark.asyncio
async def test_gateway_error_becomes_invalid_payment_method(
    mock_gateway: AsyncMock,
):
    mock_gateway.verify_token.side_effect = GatewayError(
        'No such PaymentMethod: pm_missing'
    )
    validator = CardValidator(gateway=mock_gateway)

    with pytest.raises(ValidationError) as exc_info:
        await validator.validate(CardData(token='pm_missing'))

    assert exc_info.value.kind == ValidationErrorKind.INVALID_PAYMENT_METHOD
    assert 'No such PaymentMethod: pm_missing' in str(exc_info.value)


@pytest.mark.asyncio
async def test_token_without_gateway_is_rejected():
    validator = CardValidator(gateway=None)

    with pytest.raises(ValidationError) as exc_info:
        await validator.validate(CardData(token='pm_123'))

    assert exc_info.value.kind == ValidationErrorKind.INVALID_PAYMENT_METHOD


def test_luhn_only_counts_ascii_digits():
    # non-ASCII digit characters are ignored like separators
    assert luhn_checksum_is_valid('4532015112830366²')
    assert not luhn_checksum_is_valid('٤٥٣٢')


@pytest.mark.parametrize('number', ['²²²', '٤١١'])
def test_non_ascii_card_number_is_invalid(number):
    assert_rejected(
        make_card(number=number), ValidationErrorKind.INVALID_CARD_NUMBER
    )


@pytest.mark.parametrize('cvv', ['١٢٣', '¹²³', '１２３'])
def test_non_ascii_cvv_is_invalid(cvv):
    assert_rejected(make_card(cvv=cvv), ValidationErrorKind.INVALID_CVV)


def test_non_ascii_expiration_is_malformed():
    assert_rejected(
        make_card(expiration='١٢/٢٠٩٩'),
        ValidationErrorKind.INVALID_EXPIRATION_FORMAT,
    )
