# restaurant_pos/models/settings.py
from sqlalchemy import Column, Integer, String, Float, CheckConstraint
from sqlalchemy.orm import Session
from restaurant_pos.database import Base

SETTINGS_ID = 1

# Application-wide settings. Exactly one row, id = 1.
class AppSettings(Base):
    __tablename__ = "app_settings"

    id = Column(Integer, CheckConstraint("id = 1"), primary_key=True, default=SETTINGS_ID)
    business_name = Column(String, nullable=False)
    # Stored as a percentage, e.g. 8.25 for 8.25%
    sales_tax_rate = Column(Float, CheckConstraint("sales_tax_rate >= 0 AND sales_tax_rate <= 100"), nullable=False, default=0.0)

def ensure_settings_row(db: Session, business_name: str) -> AppSettings:
    row = db.get(AppSettings, SETTINGS_ID)
    if row is None:
        row = AppSettings(id=SETTINGS_ID, business_name=business_name, sales_tax_rate=0.0)
        db.add(row)
        db.commit()
        db.refresh(row)
    return row
