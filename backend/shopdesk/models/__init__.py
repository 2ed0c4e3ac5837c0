from .catalog import Product, InventoryLog
from .orders import Order
from .customers import Customer
from .auth import User, SessionToken, PasswordResetToken
from .preferences import UserPreference

__all__ = [
    'Product', 'InventoryLog',
    'Order',
    'Customer',
    'User', 'SessionToken', 'PasswordResetToken',
    'UserPreference',
]
