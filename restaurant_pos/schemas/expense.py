from pydantic import BaseModel, ConfigDict, Field, field_validator
from datetime import datetime


class ExpenseCreate(BaseModel):
    description: str = Field(..., min_length=1, max_length=200)
    amount: float = Field(..., gt=0)

    @field_validator("description")
    @classmethod
    def _description_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Description cannot be blank")
        return v


class ExpenseOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    description: str
    amount: float
    created_at: datetime
