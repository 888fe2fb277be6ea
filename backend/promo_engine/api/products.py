from fastapi import APIRouter, Depends, HTTPException, status
from typing import List, Optional
from promo_engine.api.deps import get_product_catalog
from promo_engine.db.products import ProductCatalog
from promo_engine.models.product import Product
from promo_engine.schemas.product import ProductCreate, ProductResponse

router = APIRouter(prefix="/api/products", tags=["products"])


@router.get("/", response_model=List[ProductResponse])
def list_products(
    category: Optional[str] = None,
    catalog: ProductCatalog = Depends(get_product_catalog),
):
    """Список товаров"""
    return catalog.list(category=category)


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(product_id: str, catalog: ProductCatalog = Depends(get_product_catalog)):
    product = catalog.get(product_id)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")
    return product


@router.post("/", response_model=ProductResponse, status_code=status.HTTP_201_CREATED)
def create_product(data: ProductCreate, catalog: ProductCatalog = Depends(get_product_catalog)):
    """Добавить товар в каталог"""
    return catalog.create(Product(**data.model_dump()))
