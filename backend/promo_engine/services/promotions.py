import logging
from contextlib import contextmanager
from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID

from sqlalchemy.exc import SQLAlchemyError

from promo_engine.core.errors import (
    ConflictError,
    InternalError,
    MalformedIdError,
    NotFoundError,
    ValidationError,
)
from promo_engine.db.products import ProductCatalog
from promo_engine.db.promotions import PromotionStore, safe_str
from promo_engine.models.product import as_utc_naive, utcnow
from promo_engine.models.promotion import (
    Promotion,
    PromotionScope,
    PromotionTarget,
    PromotionType,
    OrderTarget,
    ProductTarget,
    CategoryTarget,
    ComboTarget,
    ComboItem,
)
from promo_engine.schemas.cart import CartItem
from promo_engine.schemas.promotion import PromotionCreate, PromotionUpdate
from promo_engine.services.pricing import DiscountBreakdown, calculate_discount, get_active_promotions
from promo_engine.services.uniqueness import validate_promotion

logger = logging.getLogger(__name__)

# Поля, которые нельзя обнулить через PUT
NON_NULLABLE_FIELDS = {"name", "type", "value", "start_date", "end_date", "is_active"}


@contextmanager
def store_errors(store: PromotionStore, action: str):
    try:
        yield
    except SQLAlchemyError as exc:
        store.rollback()
        logger.exception("Promotion store failure during %s", action)
        raise InternalError() from exc


def parse_id(value) -> str:
    """Нормализовать ID акции; невалидный ID — MalformedIdError"""
    try:
        return UUID(str(value)).hex
    except (TypeError, ValueError, AttributeError):
        raise MalformedIdError()


def build_target(
    scope: PromotionScope,
    product_ids: Optional[List[str]] = None,
    categories: Optional[List[str]] = None,
    combo_items: Optional[List] = None,
) -> PromotionTarget:
    """Собрать цель акции для scope; данные других scope игнорируются"""
    if scope == PromotionScope.ORDER:
        return OrderTarget()

    if scope == PromotionScope.PRODUCT:
        ids = [safe_str(pid) for pid in product_ids or [] if safe_str(pid)]
        if not ids:
            raise ValidationError("product_ids is required for PRODUCT scope")
        return ProductTarget(product_ids=list(dict.fromkeys(ids)))

    if scope == PromotionScope.CATEGORY:
        names = [name for name in categories or [] if name]
        if not names:
            raise ValidationError("categories is required for CATEGORY scope")
        return CategoryTarget(categories=list(dict.fromkeys(names)))

    if scope == PromotionScope.COMBO:
        if not combo_items:
            raise ValidationError("combo_items is required for COMBO scope")

        items = [item if isinstance(item, ComboItem) else ComboItem(**item) for item in combo_items]
        product_ids_seen = [item.product_id for item in items]
        if len(set(product_ids_seen)) != len(product_ids_seen):
            raise ValidationError("combo_items must not repeat a product")
        return ComboTarget(combo_items=items)

    raise ValidationError("Invalid scope")


def _check_window(start_date: datetime, end_date: datetime) -> None:
    if start_date > end_date:
        raise ValidationError("start_date must not be after end_date")


def _ensure_unique(store: PromotionStore, target: PromotionTarget, exclude_id: Optional[str] = None) -> None:
    conflicts = validate_promotion(store, target, exclude_id=exclude_id)
    if conflicts:
        logger.info("Promotion rejected by uniqueness check: %s", conflicts)
        raise ConflictError(conflicts)


def get_promotion(store: PromotionStore, promotion_id: str) -> Promotion:
    promotion_id = parse_id(promotion_id)
    with store_errors(store, "get"):
        promo = store.get(promotion_id)
    if not promo:
        raise NotFoundError()
    return promo


def list_promotions(
    store: PromotionStore,
    is_active: Optional[bool] = None,
    scope: Optional[PromotionScope] = None,
    type: Optional[PromotionType] = None,
) -> List[Promotion]:
    with store_errors(store, "list"):
        return store.list(is_active=is_active, scope=scope, type=type)


def list_active_promotions(store: PromotionStore, now: Optional[datetime] = None) -> List[Promotion]:
    with store_errors(store, "list active"):
        return get_active_promotions(store, now)


def create_promotion(store: PromotionStore, data: PromotionCreate) -> Promotion:
    """Создать акцию после проверки полей и уникальности цели"""
    target = build_target(data.scope, data.product_ids, data.categories, data.combo_items)
    start_date, end_date = as_utc_naive(data.start_date), as_utc_naive(data.end_date)
    _check_window(start_date, end_date)

    _ensure_unique(store, target)

    promo = Promotion(
        name=data.name,
        description=data.description,
        type=data.type,
        scope=data.scope,
        value=data.value,
        start_date=start_date,
        end_date=end_date,
        min_order_total=data.min_order_total,
        is_active=data.is_active,
    )
    promo.set_target(target)

    with store_errors(store, "create"):
        promo = store.create(promo)

    logger.info("Promotion %s created (%s/%s)", promo.id, promo.scope.value, promo.type.value)
    return promo


def update_promotion(store: PromotionStore, promotion_id: str, data: PromotionUpdate) -> Promotion:
    """
    Частичное обновление акции.

    При смене scope данные всех scope сбрасываются, и берётся только
    переданное поле нового scope. Уникальность проверяется без учёта
    самой акции.
    """
    promo = get_promotion(store, promotion_id)
    update_data = data.model_dump(exclude_unset=True)

    scope = update_data.pop("scope", None) or promo.scope
    payload = {
        key: update_data.pop(key, None)
        for key in ("product_ids", "categories", "combo_items")
    }

    if scope == promo.scope:
        current = {
            "product_ids": promo.product_ids,
            "categories": promo.categories,
            "combo_items": promo.combo_items,
        }
    else:
        current = {"product_ids": [], "categories": [], "combo_items": []}

    for key, value in payload.items():
        if value is not None:
            current[key] = value

    target = build_target(scope, current["product_ids"], current["categories"], current["combo_items"])

    for key in ("start_date", "end_date"):
        if update_data.get(key) is not None:
            update_data[key] = as_utc_naive(update_data[key])

    _check_window(
        update_data.get("start_date") or promo.start_date,
        update_data.get("end_date") or promo.end_date,
    )

    _ensure_unique(store, target, exclude_id=promo.id)

    for key, value in update_data.items():
        if value is None and key in NON_NULLABLE_FIELDS:
            continue
        setattr(promo, key, value)
    promo.set_target(target)

    with store_errors(store, "update"):
        promo = store.update(promo)

    logger.info("Promotion %s updated", promo.id)
    return promo


def delete_promotion(store: PromotionStore, promotion_id: str) -> None:
    promo = get_promotion(store, promotion_id)

    with store_errors(store, "delete"):
        store.delete(promo)

    logger.info("Promotion %s deleted", promotion_id)


def calculate_cart_discount(
    store: PromotionStore,
    catalog: ProductCatalog,
    items: List[CartItem],
    subtotal: Decimal,
    now: Optional[datetime] = None,
) -> DiscountBreakdown:
    """Загрузить активные акции и товары корзины и посчитать скидку"""
    with store_errors(store, "calculate"):
        promotions = get_active_promotions(store, now or utcnow())
        products = catalog.find_by_ids(item.product_id for item in items)

    return calculate_discount(items, subtotal, promotions, products)
