from decimal import Decimal

MINOR_UNITS_PER_MAJOR = Decimal(100)
AMOUNT_QUANTUM = Decimal('0.01')
# payments.amount is NUMERIC(10, 2)
MAX_AMOUNT = Decimal('99999999.99')

GATEWAY_CHARGE_SUCCEEDED = 'succeeded'

EXPIRATION_PATTERN = r'([0-9]{1,2})/([0-9]{4})'
CVV_PATTERN = r'[0-9]{3,4}'
EMAIL_PATTERN = r'[^\s@]+@[^\s@]+\.[^\s@]+'
