"""Expense model."""
from sqlalchemy import Column, Integer, String, Numeric, Date, Boolean

from cafepos.database import Base
from cafepos.utils.formatters import to_float


class Expense(Base):
    """Operating expense. Archived expenses drop out of reports."""

    __tablename__ = 'expenses'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    title = Column(String(200), nullable=False)
    amount = Column(Numeric(10, 2), nullable=False)
    category = Column(String(120), nullable=False, default='')
    date = Column(Date, nullable=False, index=True)
    is_archived = Column(Boolean, nullable=False, default=False)

    def to_dict(self):
        return {
            'id': self.id,
            'title': self.title,
            'amount': to_float(self.amount),
            'category': self.category,
            'date': self.date.isoformat() if self.date else None,
            'is_archived': bool(self.is_archived),
        }

    def __repr__(self):
        return f"<Expense(id={self.id}, title='{self.title}', amount={self.amount})>"
