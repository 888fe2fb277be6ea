from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from decimal import Decimal
from promo_engine.models.promotion import PromotionType, PromotionScope, ComboItem


class PromotionResponse(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    type: PromotionType
    scope: PromotionScope
    value: Decimal
    start_date: datetime
    end_date: datetime
    min_order_total: Optional[Decimal] = None
    is_active: bool
    product_ids: List[str] = []
    categories: List[str] = []
    combo_items: List[ComboItem] = []
    created_at: datetime

    class Config:
        from_attributes = True


class PromotionCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    type: PromotionType
    scope: PromotionScope
    value: Decimal = Field(ge=0)
    start_date: datetime
    end_date: datetime
    min_order_total: Optional[Decimal] = Field(default=None, ge=0)
    is_active: bool = True

    # Нужно только поле, соответствующее scope
    product_ids: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    combo_items: Optional[List[ComboItem]] = None


class PromotionUpdate(BaseModel):
    name: Optional[str] = Field(default=None, min_length=1)
    description: Optional[str] = None
    type: Optional[PromotionType] = None
    scope: Optional[PromotionScope] = None
    value: Optional[Decimal] = Field(default=None, ge=0)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    min_order_total: Optional[Decimal] = Field(default=None, ge=0)
    is_active: Optional[bool] = None
    product_ids: Optional[List[str]] = None
    categories: Optional[List[str]] = None
    combo_items: Optional[List[ComboItem]] = None
