from sqlalchemy import Column, Integer, String, Float, DateTime, CheckConstraint
from restaurant_pos.database import Base
from restaurant_pos.utils.dates import utcnow

# Cash paid out of the till (supplies, repairs...)
class Expense(Base):
    __tablename__ = "expenses"

    id = Column(Integer, primary_key=True, index=True)
    description = Column(String, nullable=False)
    amount = Column(Float, CheckConstraint("amount > 0"), nullable=False)
    created_at = Column(DateTime, nullable=False, default=utcnow, index=True)
