from abc import ABC, abstractmethod

from payment_intake.core.entities.card import CardData
from payment_intake.core.entities.gateway import GatewayCharge


class PaymentGateway(ABC):
    """
    Capability of an external card processor.

    Implementations raise ``GatewayError`` for any failure while talking
    to the processor.
    """

    @abstractmethod
    async def tokenize(self, card: CardData) -> str:
        """Registers raw card fields and returns a payment method token."""

    @abstractmethod
    async def verify_token(self, token: str) -> bool:
        """Checks that a previously issued token is still chargeable."""

    @abstractmethod
    async def create_charge(
        self, amount_minor_units: int, currency: str, token: str
    ) -> GatewayCharge:
        pass
