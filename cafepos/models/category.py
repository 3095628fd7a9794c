"""Category model."""
from sqlalchemy import Column, Integer, String

from cafepos.database import Base


class Category(Base):
    """Product Category with bilingual names and a symbolic icon name."""

    __tablename__ = 'categories'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    name_ar = Column(String(120), nullable=True)
    icon = Column(String(60), nullable=True)

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'name_ar': self.name_ar,
            'icon': self.icon,
        }

    def __repr__(self):
        return f"<Category(id={self.id}, name='{self.name}')>"
