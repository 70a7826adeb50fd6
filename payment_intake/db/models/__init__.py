from payment_intake.db.base import Base
from payment_intake.db.models.email import DBEmail
from payment_intake.db.models.payment import DBPayment

__all__ = [
    'Base',
    'DBEmail',
    'DBPayment',
]
