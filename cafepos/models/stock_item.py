"""Stock item model (consumables ledger)."""
from decimal import Decimal

from sqlalchemy import Column, Integer, String, Numeric, CheckConstraint

from cafepos.database import Base
from cafepos.utils.formatters import to_decimal, to_float


class StockItem(Base):
    """
    Consumable stock item.

    Costing is expressed as ``price`` currency units per ``price_qty`` units
    (e.g. 12 USD per 1000 g).
    """

    __tablename__ = 'stock'
    __table_args__ = (
        CheckConstraint('price_qty > 0', name='ck_stock_price_qty_positive'),
        {'sqlite_autoincrement': True},
    )

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    qty = Column(Numeric(12, 3), nullable=False, default=0)
    unit = Column(String(20), nullable=False)
    price = Column(Numeric(10, 2), nullable=False, default=0)
    price_qty = Column(Numeric(12, 3), nullable=False, default=1)
    low_stock_threshold = Column(Numeric(12, 3), nullable=False, default=0)

    @property
    def is_low(self) -> bool:
        return to_decimal(self.qty) <= to_decimal(self.low_stock_threshold)

    @property
    def unit_cost(self) -> Decimal:
        price_qty = to_decimal(self.price_qty)
        if price_qty <= 0:
            return Decimal('0')
        return to_decimal(self.price) / price_qty

    @property
    def value(self) -> Decimal:
        """Value of the quantity on hand: qty x price / price_qty."""
        return to_decimal(self.qty) * self.unit_cost

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'qty': to_float(self.qty),
            'unit': self.unit,
            'price': to_float(self.price),
            'price_qty': to_float(self.price_qty),
            'low_stock_threshold': to_float(self.low_stock_threshold),
            'is_low': self.is_low,
            'unit_cost': round(float(self.unit_cost), 4),
            'value': round(float(self.value), 2),
        }

    def __repr__(self):
        return f"<StockItem(id={self.id}, name='{self.name}', qty={self.qty} {self.unit})>"
