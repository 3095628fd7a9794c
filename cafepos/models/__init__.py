"""Models package - exports all SQLAlchemy models."""
from cafepos.models.user import User, UserRole
from cafepos.models.category import Category
from cafepos.models.product import Product
from cafepos.models.stock_item import StockItem
from cafepos.models.expense import Expense
from cafepos.models.order_status import OrderStatus, DEFAULT_ORDER_STATUSES, KITCHEN_DONE_STATUSES
from cafepos.models.order import Order, PaymentStatus
from cafepos.models.order_item import OrderItem
from cafepos.models.setting import Setting
from cafepos.models.audit_log import AuditLog, AuditAction, SYSTEM_ACTOR_NAME

__all__ = [
    'User', 'UserRole',
    'Category', 'Product',
    'StockItem', 'Expense',
    'OrderStatus', 'DEFAULT_ORDER_STATUSES', 'KITCHEN_DONE_STATUSES',
    'Order', 'PaymentStatus', 'OrderItem',
    'Setting',
    'AuditLog', 'AuditAction', 'SYSTEM_ACTOR_NAME',
]
