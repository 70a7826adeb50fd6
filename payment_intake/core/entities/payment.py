from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from payment_intake.core.enums import PaymentStatus


class Payment(BaseModel):
    """
    One charge attempt for a rider.

    An instance with ``payment_id=None`` is a draft that has not been
    persisted yet.
    """

    payment_id: Optional[int] = Field(None, description='Internal payment ID')
    amount: Decimal = Field(
        ...,
        gt=0,
        max_digits=10,
        decimal_places=2,
        description='Charged amount in the configured currency',
    )
    rider_id: int = Field(..., description='ID of the charged rider')
    status: PaymentStatus = Field(
        default=PaymentStatus.PENDING,
        description='Current state of the payment',
    )
    requested_at: Optional[datetime] = Field(
        None, description='Timestamp when the payment was requested'
    )
    finalized_at: Optional[datetime] = Field(
        None, description='Timestamp of the latest status change'
    )

    model_config = ConfigDict(
        from_attributes=True,
    )


class PaymentRequest(BaseModel):
    """Card-less request used by the queue and the direct create path."""

    amount: Decimal
    rider_id: Optional[int] = None
