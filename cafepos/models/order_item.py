"""Order item model."""
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from cafepos.database import Base
from cafepos.utils.formatters import to_decimal, to_float


class OrderItem(Base):
    """
    Order line. ``name`` and ``price`` are a snapshot taken when the order
    was placed, so later catalog edits never rewrite history.
    """

    __tablename__ = 'order_items'
    __table_args__ = (
        CheckConstraint('qty >= 1', name='ck_order_items_qty_positive'),
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    order_id = Column(Integer, ForeignKey('orders.id', ondelete='CASCADE'), nullable=False, index=True)
    product_id = Column(Integer, ForeignKey('products.id', ondelete='SET NULL'), nullable=True)
    name = Column(String(120), nullable=False)
    price = Column(Numeric(10, 2), nullable=False)
    qty = Column(Integer, nullable=False)

    # Relationships
    order = relationship('Order', back_populates='items')
    product = relationship('Product')

    @property
    def line_total(self) -> Decimal:
        return (to_decimal(self.price) * int(self.qty)).quantize(Decimal('0.01'))

    def to_dict(self, name_ar=None):
        return {
            'id': self.id,
            'order_id': self.order_id,
            'product_id': self.product_id,
            'name': self.name,
            'name_ar': name_ar,
            'price': to_float(self.price),
            'qty': self.qty,
        }

    def __repr__(self):
        return f"<OrderItem(id={self.id}, name='{self.name}', qty={self.qty})>"
