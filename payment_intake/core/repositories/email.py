from abc import ABC, abstractmethod
from typing import List, Optional

from payment_intake.core.entities.email import EmailRecord


class EmailRepository(ABC):
    @abstractmethod
    async def create(self, email: EmailRecord) -> EmailRecord:
        raise NotImplementedError

    @abstractmethod
    async def get_by_id(self, email_id: int) -> Optional[EmailRecord]:
        raise NotImplementedError

    @abstractmethod
    async def get_all(self) -> List[EmailRecord]:
        raise NotImplementedError
