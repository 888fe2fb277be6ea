from .cart import CartItem, CartCalculateRequest, CartDiscountResponse
from .product import ProductCreate, ProductResponse
from .promotion import PromotionResponse, PromotionCreate, PromotionUpdate

__all__ = [
    "CartItem", "CartCalculateRequest", "CartDiscountResponse",
    "ProductCreate", "ProductResponse",
    "PromotionResponse", "PromotionCreate", "PromotionUpdate",
]
