from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime
from decimal import Decimal


class ProductCreate(BaseModel):
    name: str = Field(min_length=1)
    price: Decimal = Field(ge=0)
    category: Optional[str] = None
    is_active: bool = True


class ProductResponse(BaseModel):
    id: str
    name: str
    price: Optional[Decimal] = None
    category: Optional[str] = None
    is_active: bool
    created_at: datetime

    class Config:
        from_attributes = True
