from typing import Optional, Union

from pydantic import BaseModel, Field

from payment_intake.core.entities.payment import PaymentRequest


class CardData(BaseModel):
    """
    Payment instrument supplied with a charge. Never persisted.

    Either the full set of card fields or an opaque gateway ``token`` is
    expected; when a token is present the card fields are ignored.
    """

    number: Optional[str] = None
    holder_name: Optional[str] = None
    expiration: Optional[str] = Field(
        None, description='Expiration date as MM/YYYY'
    )
    cvv: Optional[Union[str, int]] = None
    token: Optional[str] = Field(
        None, description='Pre-tokenized payment method reference'
    )

    @property
    def has_token(self) -> bool:
        return bool(self.token)

    def __repr__(self) -> str:
        last4 = (self.number or '')[-4:]
        return (
            f'CardData(holder_name={self.holder_name!r}, '
            f'last4={last4!r}, has_token={self.has_token})'
        )

    __str__ = __repr__


class ChargeRequest(PaymentRequest):
    card: CardData


class CardValidationResult(BaseModel):
    valid: bool = True
