from fastapi import Depends
from sqlmodel import Session
from promo_engine.db.session import engine
from promo_engine.db.promotions import PromotionStore
from promo_engine.db.products import ProductCatalog


def get_db():
    with Session(engine) as session:
        yield session


def get_promotion_store(db: Session = Depends(get_db)) -> PromotionStore:
    return PromotionStore(db)


def get_product_catalog(db: Session = Depends(get_db)) -> ProductCatalog:
    return ProductCatalog(db)
