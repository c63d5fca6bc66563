# restaurant_pos/schemas/product.py
from pydantic import AliasChoices, BaseModel, Field, ConfigDict, field_validator
from typing import Optional


# Base configuration for ORM compatibility
class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True)


# Schema for creating a new product
class ProductCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=120)
    price: float = Field(..., gt=0)
    category_id: int
    in_stock: bool = True

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, v):
        v = v.strip()
        if not v:
            raise ValueError("Product name cannot be blank")
        return v


# Schema for the stock flag toggle
class ProductStockUpdate(BaseModel):
    in_stock: bool


# Full product representation; category is the category name
class ProductOut(ORMBase):
    id: int
    name: str
    price: float
    category_id: Optional[int] = None
    category: str = Field(validation_alias=AliasChoices("category_name", "category"))
    in_stock: bool
