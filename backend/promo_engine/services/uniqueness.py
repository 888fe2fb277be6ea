import logging
from typing import List, Optional, Tuple

from promo_engine.db.promotions import PromotionStore, safe_str
from promo_engine.models.promotion import (
    PromotionScope,
    PromotionTarget,
    ProductTarget,
    CategoryTarget,
    ComboTarget,
)

logger = logging.getLogger(__name__)


ComboSignature = List[Tuple[str, int]]


def _qty(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def combo_signature(items) -> ComboSignature:
    """
    Каноническая форма комбо: пары (product_id, required_qty),
    отсортированные по строковому product_id.
    Принимает и ComboItem, и сырые dict из базы.
    """
    pairs = []
    for item in items or []:
        if isinstance(item, dict):
            product_id, required_qty = item.get("product_id"), item.get("required_qty")
        else:
            product_id, required_qty = item.product_id, item.required_qty
        pairs.append((safe_str(product_id), _qty(required_qty)))

    return sorted(pairs, key=lambda pair: pair[0])


def validate_promotion(
    store: PromotionStore,
    target: PromotionTarget,
    exclude_id: Optional[str] = None,
) -> List[str]:
    """
    Проверка, что цель акции не пересекается с другими акциями того же scope.

    Пустой список — акцию можно сохранять. Ошибки хранилища не пробрасываются,
    а попадают в список, так что непустой результат всегда означает отказ.
    """
    errors: List[str] = []

    try:
        if isinstance(target, ProductTarget):
            # Проверяем все товары, не останавливаясь на первом конфликте
            owners = store.target_owners(PromotionScope.PRODUCT, exclude_id)
            for product_id in target.product_ids:
                existing = owners.get(safe_str(product_id))
                if existing:
                    errors.append(f"Product {product_id} already has a promotion (ID: {existing.id}).")

        elif isinstance(target, CategoryTarget):
            owners = store.target_owners(PromotionScope.CATEGORY, exclude_id)
            for category in target.categories:
                existing = owners.get(safe_str(category))
                if existing:
                    errors.append(f'Category "{category}" already has a promotion (ID: {existing.id}).')

        elif isinstance(target, ComboTarget):
            candidate = combo_signature(target.combo_items)

            for existing in store.find_all_by_scope(PromotionScope.COMBO, exclude_id):
                if not existing.combo_items or len(existing.combo_items) != len(candidate):
                    continue

                if combo_signature(existing.combo_items) == candidate:
                    errors.append(f"This combo already exists in another promotion (ID: {existing.id}).")
                    break

    except Exception as exc:
        logger.exception("Promotion uniqueness check failed for scope %s", target.scope)
        errors.append(f"Failed to check promotion data: {exc}")

    return errors
