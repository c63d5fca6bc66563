from pydantic import BaseModel, ConfigDict, Field
from typing import Optional


class SettingsOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    business_name: str
    sales_tax_rate: float


# Partial update; omitted fields stay unchanged
class SettingsUpdate(BaseModel):
    business_name: Optional[str] = Field(None, min_length=1, max_length=120)
    sales_tax_rate: Optional[float] = Field(None, ge=0, le=100)
