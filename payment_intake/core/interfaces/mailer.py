from abc import ABC, abstractmethod
from typing import Any


class Mailer(ABC):
    @abstractmethod
    async def send(self, recipient: str, subject: str, body: str) -> Any:
        pass


class EmailTransport(ABC):
    """Delivers an already validated email to an external provider."""

    @abstractmethod
    async def deliver(self, recipient: str, subject: str, body: str) -> None:
        pass
