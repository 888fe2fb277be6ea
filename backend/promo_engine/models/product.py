from sqlmodel import SQLModel, Field
from sqlalchemy import Column, DateTime
from typing import Optional
from datetime import datetime, timezone
from decimal import Decimal
from uuid import uuid4


def new_id() -> str:
    return uuid4().hex


def utcnow() -> datetime:
    # В базе храним naive UTC
    return datetime.now(timezone.utc).replace(tzinfo=None)


def naive_datetime_column() -> Column:
    """Колонка без таймзоны: значения всегда приводятся к naive UTC"""
    return Column(DateTime(timezone=False), nullable=False)


class Product(SQLModel, table=True):
    __tablename__ = "products"

    id: str = Field(default_factory=new_id, primary_key=True)
    name: str = Field(index=True)

    price: Optional[Decimal] = Field(default=None, max_digits=12, decimal_places=2)
    category: Optional[str] = Field(default=None, index=True)

    is_active: bool = Field(default=True)

    created_at: datetime = Field(default_factory=utcnow, sa_column=naive_datetime_column())


def as_utc_naive(value: datetime) -> datetime:
    """Aware datetime переводится в UTC и теряет tzinfo"""
    if value.tzinfo is not None:
        return value.astimezone(timezone.utc).replace(tzinfo=None)
    return value
