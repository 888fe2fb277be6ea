from fastapi import APIRouter, Depends, status
from typing import List, Optional
from promo_engine.api.deps import get_promotion_store, get_product_catalog
from promo_engine.db.promotions import PromotionStore
from promo_engine.db.products import ProductCatalog
from promo_engine.models.promotion import PromotionScope, PromotionType
from promo_engine.schemas.cart import CartCalculateRequest, CartDiscountResponse
from promo_engine.schemas.promotion import PromotionResponse, PromotionCreate, PromotionUpdate
from promo_engine.services import promotions as service

router = APIRouter(prefix="/api/promotions", tags=["promotions"])


@router.get("/", response_model=List[PromotionResponse])
def list_promotions(
    is_active: Optional[bool] = None,
    scope: Optional[PromotionScope] = None,
    type: Optional[PromotionType] = None,
    store: PromotionStore = Depends(get_promotion_store),
):
    """Список акций с фильтрами"""
    return service.list_promotions(store, is_active=is_active, scope=scope, type=type)


@router.get("/active", response_model=List[PromotionResponse])
def list_active_promotions(store: PromotionStore = Depends(get_promotion_store)):
    """Акции, действующие прямо сейчас"""
    return service.list_active_promotions(store)


@router.post("/calculate", response_model=CartDiscountResponse)
def calculate_cart_discount(
    data: CartCalculateRequest,
    store: PromotionStore = Depends(get_promotion_store),
    catalog: ProductCatalog = Depends(get_product_catalog),
):
    """Подходящие акции и итоговая скидка для корзины"""
    return service.calculate_cart_discount(store, catalog, data.items, data.subtotal)


@router.get("/{promotion_id}", response_model=PromotionResponse)
def get_promotion(promotion_id: str, store: PromotionStore = Depends(get_promotion_store)):
    return service.get_promotion(store, promotion_id)


@router.post("/", response_model=PromotionResponse, status_code=status.HTTP_201_CREATED)
def create_promotion(data: PromotionCreate, store: PromotionStore = Depends(get_promotion_store)):
    """Создать акцию"""
    return service.create_promotion(store, data)


@router.put("/{promotion_id}", response_model=PromotionResponse)
def update_promotion(
    promotion_id: str,
    data: PromotionUpdate,
    store: PromotionStore = Depends(get_promotion_store),
):
    """Обновить акцию"""
    return service.update_promotion(store, promotion_id, data)


@router.delete("/{promotion_id}")
def delete_promotion(promotion_id: str, store: PromotionStore = Depends(get_promotion_store)):
    """Удалить акцию"""
    service.delete_promotion(store, promotion_id)
    return {"message": "Promotion deleted"}
