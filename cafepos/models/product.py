"""Product model."""
from sqlalchemy import Column, Integer, String, Text, Boolean, Numeric, ForeignKey
from sqlalchemy.orm import relationship

from cafepos.database import Base
from cafepos.utils.formatters import to_float


class Product(Base):
    """
    Catalog product.

    Deleting a product only clears ``active`` so that historical order
    items can still be joined to their category.
    """

    __tablename__ = 'products'
    __table_args__ = {'sqlite_autoincrement': True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String(120), nullable=False)
    name_ar = Column(String(120), nullable=True)
    description = Column(Text, nullable=True)
    description_ar = Column(Text, nullable=True)
    price = Column(Numeric(10, 2), nullable=False)
    image = Column(String(255), nullable=True)
    category_id = Column(Integer, ForeignKey('categories.id', ondelete='SET NULL'), nullable=True)
    active = Column(Boolean, nullable=False, default=True)

    # Relationships
    category = relationship('Category', foreign_keys=[category_id])

    def to_dict(self):
        return {
            'id': self.id,
            'name': self.name,
            'name_ar': self.name_ar,
            'description': self.description,
            'description_ar': self.description_ar,
            'price': to_float(self.price),
            'image': self.image,
            'category_id': self.category_id,
            'active': bool(self.active),
        }

    def __repr__(self):
        return f"<Product(id={self.id}, name='{self.name}', price={self.price})>"
