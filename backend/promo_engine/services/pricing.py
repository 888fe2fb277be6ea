import logging
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from datetime import datetime
from pydantic import ValidationError as PydanticValidationError
from typing import Dict, Iterable, List, Mapping, Optional

from promo_engine.db.promotions import PromotionStore, safe_str
from promo_engine.models.product import Product, utcnow
from promo_engine.models.promotion import (
    Promotion,
    PromotionType,
    PromotionScope,
    ProductTarget,
    CategoryTarget,
    ComboTarget,
)

logger = logging.getLogger(__name__)

MONEY_QUANT = Decimal("0.01")
ZERO = Decimal("0")


@dataclass(frozen=True)
class AppliedPromotion:
    promotion_id: str
    name: str
    discount_amount: Decimal


@dataclass(frozen=True)
class DiscountBreakdown:
    applicable_promotions: List[AppliedPromotion] = field(default_factory=list)
    total_discount: Decimal = ZERO
    final_total: Decimal = ZERO


def quantize_money(value: Decimal) -> Decimal:
    return Decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def to_decimal(value) -> Decimal:
    """Цена/сумма в Decimal; отсутствующее или битое значение — 0"""
    if value is None:
        return ZERO
    try:
        return Decimal(str(value))
    except (InvalidOperation, ValueError):
        return ZERO


def get_active_promotions(store: PromotionStore, now: Optional[datetime] = None) -> List[Promotion]:
    """Получить все активные акции"""
    return store.find_active(now or utcnow())


def _price(products: Mapping[str, Product], product_id) -> Decimal:
    product = products.get(safe_str(product_id))
    if product is None:
        return ZERO
    return to_decimal(product.price)


def _quantities(cart) -> Dict[str, int]:
    # Одинаковые товары в разных строках корзины суммируются
    counts: Dict[str, int] = {}
    for item in cart:
        pid = safe_str(item.product_id)
        counts[pid] = counts.get(pid, 0) + int(item.quantity)
    return counts


def _items_subtotal(items: Iterable, products: Mapping[str, Product]) -> Decimal:
    return sum((_price(products, item.product_id) * int(item.quantity) for item in items), ZERO)


def _basic_discount(basis: Decimal, promo: Promotion) -> Decimal:
    """PERCENT и FIXED_AMOUNT; FIXED_PRICE_COMBO вне комбо ничего не даёт"""
    value = to_decimal(promo.value)
    if promo.type == PromotionType.PERCENT:
        return basis * value / 100
    elif promo.type == PromotionType.FIXED_AMOUNT:
        return value
    return ZERO


def evaluate_promotion(
    promo: Promotion,
    cart,
    subtotal: Decimal,
    products: Mapping[str, Product],
) -> Decimal:
    """Скидка одной акции по корзине; 0 если акция не подходит"""
    subtotal = to_decimal(subtotal)

    if promo.scope == PromotionScope.ORDER:
        if subtotal >= to_decimal(promo.min_order_total):
            return _basic_discount(subtotal, promo)
        return ZERO

    try:
        target = promo.target
    except PydanticValidationError:
        # Битая запись в базе: акция просто не применяется
        logger.debug("Promotion %s has malformed target data, skipped", promo.id)
        return ZERO

    if isinstance(target, CategoryTarget):
        categories = set(target.categories)
        matched = []
        for item in cart:
            product = products.get(safe_str(item.product_id))
            if product is not None and product.category in categories:
                matched.append(item)

        if not matched:
            return ZERO
        return _basic_discount(_items_subtotal(matched, products), promo)

    if isinstance(target, ProductTarget):
        wanted = {safe_str(pid) for pid in target.product_ids}
        matched = [item for item in cart if safe_str(item.product_id) in wanted]

        if not matched:
            return ZERO
        return _basic_discount(_items_subtotal(matched, products), promo)

    if isinstance(target, ComboTarget):
        counts = _quantities(cart)
        for combo_item in target.combo_items:
            if counts.get(safe_str(combo_item.product_id), 0) < combo_item.required_qty:
                return ZERO

        original_price = sum(
            (_price(products, combo_item.product_id) * combo_item.required_qty for combo_item in target.combo_items),
            ZERO,
        )

        if promo.type == PromotionType.FIXED_PRICE_COMBO:
            # Скидка — разница между обычной ценой набора и ценой комбо
            return max(original_price - to_decimal(promo.value), ZERO)
        return _basic_discount(original_price, promo)

    return ZERO


def calculate_discount(
    cart,
    subtotal: Decimal,
    active_promotions: Iterable[Promotion],
    products: Mapping[str, Product],
) -> DiscountBreakdown:
    """
    Рассчитать скидки по корзине.

    Каждая активная акция проверяется независимо, все подходящие
    суммируются. subtotal берётся от вызывающего как есть и не
    пересчитывается по ценам товаров. Округляются только суммы в ответе.
    """
    subtotal = to_decimal(subtotal)
    applicable: List[AppliedPromotion] = []
    total_discount = ZERO

    for promo in active_promotions:
        discount = evaluate_promotion(promo, cart, subtotal, products)
        if discount <= 0:
            continue

        logger.debug("Promotion %s applies with discount %s", promo.id, discount)
        applicable.append(AppliedPromotion(
            promotion_id=promo.id,
            name=promo.name,
            discount_amount=quantize_money(discount),
        ))
        total_discount += discount

    final_total = max(subtotal - total_discount, ZERO)

    return DiscountBreakdown(
        applicable_promotions=applicable,
        total_discount=quantize_money(total_discount),
        final_total=quantize_money(final_total),
    )
