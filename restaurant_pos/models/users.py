# restaurant_pos/models/users.py
from sqlalchemy import Column, Integer, String, CheckConstraint
from restaurant_pos.database import Base

# Staff profile with login credentials and role
class User(Base):
    __tablename__ = "profiles"

    id = Column(Integer, primary_key=True, index=True)
    username = Column(String, unique=True, nullable=False, index=True)
    password_hash = Column(String, nullable=False)
    role = Column(String, CheckConstraint("role IN ('admin', 'waiter', 'kitchen')"), nullable=False)
