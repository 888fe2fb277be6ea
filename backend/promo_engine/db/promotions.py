from datetime import datetime
from typing import Dict, List, Optional
from sqlmodel import Session, select
from promo_engine.models.product import as_utc_naive
from promo_engine.models.promotion import Promotion, PromotionScope, PromotionType


def safe_str(value) -> str:
    """ID в виде строки; None превращается в пустую строку"""
    return "" if value is None else str(value)


class PromotionStore:
    """Хранилище акций поверх сессии SQLModel"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, promotion_id: str) -> Optional[Promotion]:
        return self.db.get(Promotion, promotion_id)

    def list(
        self,
        is_active: Optional[bool] = None,
        scope: Optional[PromotionScope] = None,
        type: Optional[PromotionType] = None,
    ) -> List[Promotion]:
        stmt = select(Promotion)
        if is_active is not None:
            stmt = stmt.where(Promotion.is_active == is_active)
        if scope is not None:
            stmt = stmt.where(Promotion.scope == scope)
        if type is not None:
            stmt = stmt.where(Promotion.type == type)

        stmt = stmt.order_by(Promotion.created_at.desc())
        return list(self.db.exec(stmt).all())

    def find_all_by_scope(self, scope: PromotionScope, exclude_id: Optional[str] = None) -> List[Promotion]:
        stmt = select(Promotion).where(Promotion.scope == scope)
        if exclude_id:
            stmt = stmt.where(Promotion.id != exclude_id)

        stmt = stmt.order_by(Promotion.created_at)
        return list(self.db.exec(stmt).all())

    def target_owners(self, scope: PromotionScope, exclude_id: Optional[str] = None) -> Dict[str, Promotion]:
        """
        Индекс target -> первая (самая старая) акция scope, которая его содержит.
        """
        owners: Dict[str, Promotion] = {}

        for promo in self.find_all_by_scope(scope, exclude_id):
            if scope == PromotionScope.PRODUCT:
                values = promo.product_ids or []
            elif scope == PromotionScope.CATEGORY:
                values = promo.categories or []
            else:
                continue

            for value in values:
                owners.setdefault(safe_str(value), promo)

        return owners

    def find_by_scope_and_target(
        self,
        scope: PromotionScope,
        target: str,
        exclude_id: Optional[str] = None,
    ) -> Optional[Promotion]:
        """Первая акция данного scope, у которой в списке есть target"""
        return self.target_owners(scope, exclude_id).get(safe_str(target))

    def find_active(self, now: datetime) -> List[Promotion]:
        """Включённые акции, у которых now попадает в [start_date, end_date]"""
        now = as_utc_naive(now)
        stmt = select(Promotion).where(
            Promotion.is_active == True,
            Promotion.start_date <= now,
            Promotion.end_date >= now,
        ).order_by(Promotion.start_date.desc())

        return list(self.db.exec(stmt).all())

    def create(self, promo: Promotion) -> Promotion:
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)
        return promo

    def update(self, promo: Promotion) -> Promotion:
        self.db.add(promo)
        self.db.commit()
        self.db.refresh(promo)
        return promo

    def delete(self, promo: Promotion) -> None:
        self.db.delete(promo)
        self.db.commit()

    def rollback(self) -> None:
        self.db.rollback()
