"""
Audit Log model for tracking every mutating action in the system.
"""
from datetime import datetime

from sqlalchemy import Column, Integer, String, Text, DateTime

from cafepos.database import Base


class AuditAction:
    """Action labels written to the audit log."""
    LOGIN = 'Login'

    # User management
    USER_CREATED = 'Create User'
    USER_UPDATED = 'Update User'
    USER_DELETED = 'Delete User'

    # Catalog
    PRODUCT_CREATED = 'Create Product'
    PRODUCT_UPDATED = 'Update Product'
    PRODUCT_DELETED = 'Delete Product'
    CATEGORY_CREATED = 'Create Category'
    CATEGORY_UPDATED = 'Update Category'
    CATEGORY_DELETED = 'Delete Category'

    # Stock
    STOCK_CREATED = 'Create Stock'
    STOCK_UPDATED = 'Update Stock'
    STOCK_DELETED = 'Delete Stock'

    # Expenses
    EXPENSE_CREATED = 'Create Expense'
    EXPENSE_UPDATED = 'Update Expense'
    EXPENSE_ARCHIVED = 'Archive Expense'
    EXPENSE_UNARCHIVED = 'Unarchive Expense'
    EXPENSE_DELETED = 'Delete Expense'

    # Orders
    ORDER_PLACED = 'Customer Order'
    ORDER_UPDATED = 'Update Order'
    ORDER_STATUS_CHANGED = 'Update Order Status'
    ORDER_PAYMENT_CHANGED = 'Update Order Payment'
    ORDER_ARCHIVED = 'Archive Order'
    ORDER_UNARCHIVED = 'Unarchive Order'
    ORDERS_BULK_ARCHIVED = 'Bulk Archive Orders'
    ORDERS_ALL_ARCHIVED = 'Archive All Orders'
    ORDER_DELETED = 'Delete Order'
    ORDERS_CLEARED = 'Clear Orders History'

    # Settings, files, log
    SETTINGS_CHANGED = 'Update Settings'
    FILE_UPLOADED = 'File Upload'
    LOGS_CLEARED = 'Clear Audit Logs'


SYSTEM_ACTOR_NAME = 'System'


class AuditLog(Base):
    """
    Append-only audit entry. ``user_id`` is empty for actions that had no
    authenticated actor (customer orders).
    """
    __tablename__ = 'audit_logs'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    user_id = Column(Integer, nullable=True, index=True)
    user_name = Column(String(120), nullable=True)
    action = Column(String(80), nullable=False, index=True)
    details = Column(Text)
    timestamp = Column(DateTime, default=datetime.now, nullable=False, index=True)

    def to_dict(self):
        return {
            'id': self.id,
            'user_id': self.user_id,
            'user_name': self.user_name,
            'action': self.action,
            'details': self.details,
            'timestamp': self.timestamp.isoformat() if self.timestamp else None,
        }

    def __repr__(self):
        return f"<AuditLog {self.action} by {self.user_name} at {self.timestamp}>"
