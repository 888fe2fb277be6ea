from .product import Product
from .promotion import (
    Promotion,
    PromotionType,
    PromotionScope,
    PromotionTarget,
    OrderTarget,
    ProductTarget,
    CategoryTarget,
    ComboTarget,
    ComboItem,
)

__all__ = [
    "Product",
    "Promotion", "PromotionType", "PromotionScope",
    "PromotionTarget", "OrderTarget", "ProductTarget", "CategoryTarget", "ComboTarget",
    "ComboItem",
]
