from .tenancy import Business, Branch
from .inventory import Product
from .sales import Sale, SaleItem
from .communications import Notification
from .security import SecurityEvent

__all__ = [
    'Business', 'Branch',
    'Product',
    'Sale', 'SaleItem',
    'Notification',
    'SecurityEvent',
]
