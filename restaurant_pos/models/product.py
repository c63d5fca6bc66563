# restaurant_pos/models/product.py
from sqlalchemy import Column, Integer, String, Float, Boolean, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship
from restaurant_pos.database import Base

# Product
# A single menu entry. The stock flag only marks availability,
# quantities are not tracked.
class Product(Base):
    __tablename__ = "products"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False, index=True)
    price = Column(Float, CheckConstraint("price > 0"), nullable=False)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True, index=True)
    in_stock = Column(Boolean, nullable=False, default=True)

    category = relationship("Category", back_populates="products", lazy="joined")

    @property
    def category_name(self) -> str:
        return self.category.name if self.category else "Uncategorized"
