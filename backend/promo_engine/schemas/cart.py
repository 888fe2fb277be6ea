from pydantic import BaseModel, Field
from typing import List
from decimal import Decimal


class CartItem(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)


class CartCalculateRequest(BaseModel):
    items: List[CartItem]
    subtotal: Decimal = Field(ge=0)


class AppliedPromotionResponse(BaseModel):
    promotion_id: str
    name: str
    discount_amount: Decimal

    class Config:
        from_attributes = True


class CartDiscountResponse(BaseModel):
    applicable_promotions: List[AppliedPromotionResponse]
    total_discount: Decimal
    final_total: Decimal

    class Config:
        from_attributes = True
