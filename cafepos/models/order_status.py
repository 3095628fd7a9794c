"""Order status vocabulary."""
from sqlalchemy import Column, Integer, String, Boolean

from cafepos.database import Base


# Fixed vocabulary seeded at start-up: (label, label_ar, color, is_default)
DEFAULT_ORDER_STATUSES = (
    ('Pending', 'قيد الانتظار', '#f59e0b', True),
    ('Preparing', 'جاري التحضير', '#3b82f6', False),
    ('Ready', 'جاهز', '#10b981', False),
    ('Cancelled', 'ملغي', '#ef4444', False),
)

# Orders in these states leave the kitchen queue
KITCHEN_DONE_STATUSES = ('ready', 'cancelled')


class OrderStatus(Base):
    """Display label and colour for an order state."""

    __tablename__ = 'order_statuses'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    label = Column(String(40), nullable=False, unique=True)
    label_ar = Column(String(60), nullable=True)
    color = Column(String(20), nullable=False)
    is_default = Column(Boolean, nullable=False, default=False)

    @property
    def key(self) -> str:
        """Lowercase label used on the wire (e.g. ``pending``)."""
        return self.label.lower()

    def to_dict(self):
        return {
            'id': self.id,
            'status': self.key,
            'label': self.label,
            'label_ar': self.label_ar,
            'color': self.color,
            'is_default': bool(self.is_default),
        }

    def __repr__(self):
        return f"<OrderStatus(id={self.id}, label='{self.label}')>"
