from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from payment_intake.core.entities.payment import Payment
from payment_intake.core.enums import PaymentStatus


class PaymentRepository(ABC):
    """
    Abstract base class for payment persistence.

    A draft is a ``Payment`` whose ``payment_id`` is ``None``.
    """

    @abstractmethod
    async def save(self, payment: Payment) -> Payment:
        """
        Inserts a draft or updates a stored payment and returns the
        persisted state.
        """
        raise NotImplementedError

    @abstractmethod
    async def finalize_pending(
        self, payments: Sequence[Payment]
    ) -> List[Payment]:
        """
        Writes the terminal status of each payment in one batch, but only
        for rows that are still PENDING in storage. Returns the rows that
        were actually transitioned.
        """
        raise NotImplementedError

    @abstractmethod
    async def find_by_status(self, status: PaymentStatus) -> List[Payment]:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, payment_id: int) -> Optional[Payment]:
        raise NotImplementedError
