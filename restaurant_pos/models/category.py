from sqlalchemy import Column, Integer, String
from sqlalchemy.orm import relationship
from restaurant_pos.database import Base

# Menu section a product belongs to (Main, Dessert, Drink...)
class Category(Base):
    __tablename__ = "categories"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, unique=True, nullable=False, index=True)

    products = relationship("Product", back_populates="category")
