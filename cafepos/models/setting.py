"""Settings key/value model."""
from sqlalchemy import Column, String, Text

from cafepos.database import Base


class Setting(Base):
    """One configuration entry (e.g. ``exchangeRate``)."""

    __tablename__ = 'settings'

    key = Column(String(80), primary_key=True)
    value = Column(Text, nullable=True)

    def __repr__(self):
        return f"<Setting(key='{self.key}', value='{self.value}')>"
