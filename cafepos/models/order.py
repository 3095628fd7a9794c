"""Order model."""
import enum
from datetime import datetime
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, Boolean, DateTime, ForeignKey
from sqlalchemy.orm import relationship, validates

from cafepos.database import Base
from cafepos.utils.formatters import to_float


class PaymentStatus(str, enum.Enum):
    """Payment state of an order."""
    PAID = 'paid'
    UNPAID = 'unpaid'


class Order(Base):
    """
    Customer order.

    ``total`` is always the sum of the persisted line items; call
    ``recalculate_total`` after touching ``items``.
    """

    __tablename__ = 'orders'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    status_id = Column(Integer, ForeignKey('order_statuses.id'), nullable=False)
    total = Column(Numeric(10, 2), nullable=False, default=0)
    payment_status = Column(String(10), nullable=False, default=PaymentStatus.UNPAID.value)
    is_archived = Column(Boolean, nullable=False, default=False, index=True)
    created_at = Column(DateTime, nullable=False, default=datetime.now, index=True)

    # Relationships
    status = relationship('OrderStatus', lazy='joined')
    items = relationship(
        'OrderItem',
        back_populates='order',
        cascade='all, delete-orphan',
        order_by='OrderItem.id'
    )

    @validates('created_at')
    def _validate_created_at(self, key, value):
        if self.created_at is not None and value != self.created_at:
            raise ValueError('created_at is immutable once set')
        return value

    def recalculate_total(self) -> Decimal:
        self.total = sum((item.line_total for item in self.items), Decimal('0.00'))
        return self.total

    @property
    def status_key(self):
        return self.status.key if self.status else None

    def to_dict(self, name_ar_by_product=None):
        name_ar_by_product = name_ar_by_product or {}
        return {
            'id': self.id,
            'status_id': self.status_id,
            'status': self.status_key,
            'label': self.status.label if self.status else None,
            'label_ar': self.status.label_ar if self.status else None,
            'color': self.status.color if self.status else None,
            'total': to_float(self.total),
            'payment_status': self.payment_status,
            'is_archived': bool(self.is_archived),
            'created_at': self.created_at.isoformat() if self.created_at else None,
            'items': [
                item.to_dict(name_ar=name_ar_by_product.get(item.product_id))
                for item in self.items
            ],
        }

    def __repr__(self):
        return f"<Order(id={self.id}, total={self.total}, payment_status='{self.payment_status}')>"
