import asyncio
from datetime import datetime, timezone
from decimal import Decimal
from typing import Dict, List, Optional, Sequence
from unittest.mock import AsyncMock

import pytest
import pytest_asyncio

from payment_intake.core.entities.card import CardData, ChargeRequest
from payment_intake.core.entities.payment import Payment
from payment_intake.core.enums import PaymentStatus
from payment_intake.core.interfaces.random_source import RandomSource
from payment_intake.core.repositories.payment import PaymentRepository

VALID_CARD_NUMBER = '4532015112830366'
INVALID_CARD_NUMBER = '1234567890123456'


class FixedRandomSource(RandomSource):
    """Returns the given values in order, repeating the last one."""

    def __init__(self, *values: float):
        self._values = list(values) or [0.5]
        self.calls = 0

    def next(self) -> float:
        index = min(self.calls, len(self._values) - 1)
        self.calls += 1
        return self._values[index]


class InMemoryPaymentRepository(PaymentRepository):
    """
    Dict-backed store. The PENDING check and the write in
    ``finalize_pending`` happen without yielding to the event loop, which
    makes the status transition atomic for concurrent coroutines.
    """

    def __init__(self):
        self.rows: Dict[int, Payment] = {}
        self.finalize_calls = 0
        self._next_id = 1

    async def save(self, payment: Payment) -> Payment:
        await asyncio.sleep(0)
        if payment.payment_id is None:
            payment = payment.model_copy(update={'payment_id': self._next_id})
            self._next_id += 1
        self.rows[payment.payment_id] = payment
        return payment.model_copy()

    async def finalize_pending(
        self, payments: Sequence[Payment]
    ) -> List[Payment]:
        self.finalize_calls += 1
        await asyncio.sleep(0)
        finalized = []
        for payment in payments:
            stored = self.rows.get(payment.payment_id)
            if stored is None or stored.status != PaymentStatus.PENDING:
                continue
            self.rows[payment.payment_id] = payment
            finalized.append(payment.model_copy())
        return finalized

    async def find_by_status(self, status: PaymentStatus) -> List[Payment]:
        await asyncio.sleep(0)
        return [
            payment.model_copy()
            for payment in self.rows.values()
            if payment.status == status
        ]

    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        payment = self.rows.get(payment_id)
        return payment.model_copy() if payment else None


@pytest.fixture
def fixed_random_source():
    return FixedRandomSource


@pytest.fixture
def in_memory_payment_repository() -> InMemoryPaymentRepository:
    return InMemoryPaymentRepository()


@pytest_asyncio.fixture
def mock_payment_repository() -> AsyncMock:
    repository = AsyncMock(spec=PaymentRepository)
    repository.save.side_effect = lambda payment: payment.model_copy(
        update={'payment_id': 1}
    )
    return repository


@pytest_asyncio.fixture
def mock_gateway() -> AsyncMock:
    return AsyncMock()


@pytest_asyncio.fixture
def mock_mailer() -> AsyncMock:
    return AsyncMock()


@pytest.fixture
def valid_card() -> CardData:
    return CardData(
        number=VALID_CARD_NUMBER,
        holder_name='Ana Souza',
        expiration='12/2099',
        cvv='123',
    )


@pytest.fixture
def token_card() -> CardData:
    return CardData(token='pm_card_visa')


@pytest.fixture
def charge_request(valid_card: CardData) -> ChargeRequest:
    return ChargeRequest(amount=Decimal('10.50'), rider_id=7, card=valid_card)


@pytest.fixture
def paid_payment() -> Payment:
    return Payment(
        payment_id=11,
        amount=Decimal('12.5'),
        rider_id=7,
        status=PaymentStatus.PAID,
        requested_at=datetime(2026, 3, 1, 9, 0, tzinfo=timezone.utc),
        finalized_at=datetime(2026, 3, 1, 9, 5, 30, tzinfo=timezone.utc),
    )


@pytest.fixture
def failed_payment(paid_payment: Payment) -> Payment:
    return paid_payment.model_copy(
        update={'payment_id': 12, 'status': PaymentStatus.FAILED}
    )
