from sqlmodel import SQLModel, Field
from sqlalchemy import Column, JSON
from pydantic import BaseModel
from pydantic import Field as PydanticField
from typing import Optional, List, Literal, Union, Annotated
from datetime import datetime
from decimal import Decimal
from enum import Enum

from promo_engine.models.product import new_id, utcnow, naive_datetime_column


class PromotionType(str, Enum):
    PERCENT = "PERCENT"
    FIXED_AMOUNT = "FIXED_AMOUNT"
    FIXED_PRICE_COMBO = "FIXED_PRICE_COMBO"


class PromotionScope(str, Enum):
    ORDER = "ORDER"
    PRODUCT = "PRODUCT"
    CATEGORY = "CATEGORY"
    COMBO = "COMBO"


class ComboItem(BaseModel):
    product_id: str
    required_qty: int = PydanticField(gt=0)


# Цель акции: у каждого scope только свои данные
class OrderTarget(BaseModel):
    scope: Literal[PromotionScope.ORDER] = PromotionScope.ORDER


class ProductTarget(BaseModel):
    scope: Literal[PromotionScope.PRODUCT] = PromotionScope.PRODUCT
    product_ids: List[str] = PydanticField(min_length=1)


class CategoryTarget(BaseModel):
    scope: Literal[PromotionScope.CATEGORY] = PromotionScope.CATEGORY
    categories: List[str] = PydanticField(min_length=1)


class ComboTarget(BaseModel):
    scope: Literal[PromotionScope.COMBO] = PromotionScope.COMBO
    combo_items: List[ComboItem] = PydanticField(min_length=1)


PromotionTarget = Annotated[
    Union[OrderTarget, ProductTarget, CategoryTarget, ComboTarget],
    PydanticField(discriminator="scope"),
]


class Promotion(SQLModel, table=True):
    __tablename__ = "promotions"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str
    description: Optional[str] = None

    type: PromotionType
    scope: PromotionScope = Field(index=True)

    # Процент, фикс. сумма или фикс. цена комбо — зависит от type
    value: Decimal = Field(max_digits=12, decimal_places=2)

    start_date: datetime = Field(sa_column=naive_datetime_column())
    end_date: datetime = Field(sa_column=naive_datetime_column())
    min_order_total: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    is_active: bool = Field(default=True)

    # Заполнено только поле текущего scope, см. set_target
    product_ids: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    categories: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    combo_items: List[dict] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    created_at: datetime = Field(default_factory=utcnow, sa_column=naive_datetime_column())

    @property
    def target(self) -> Union[OrderTarget, ProductTarget, CategoryTarget, ComboTarget]:
        if self.scope == PromotionScope.PRODUCT:
            return ProductTarget(product_ids=self.product_ids)
        if self.scope == PromotionScope.CATEGORY:
            return CategoryTarget(categories=self.categories)
        if self.scope == PromotionScope.COMBO:
            return ComboTarget(combo_items=self.combo_items)
        return OrderTarget()

    def set_target(self, target: Union[OrderTarget, ProductTarget, CategoryTarget, ComboTarget]) -> None:
        """Записать цель акции, очистив данные остальных scope"""
        self.scope = target.scope
        self.product_ids = []
        self.categories = []
        self.combo_items = []

        if isinstance(target, ProductTarget):
            self.product_ids = list(target.product_ids)
        elif isinstance(target, CategoryTarget):
            self.categories = list(target.categories)
        elif isinstance(target, ComboTarget):
            self.combo_items = [item.model_dump() for item in target.combo_items]
