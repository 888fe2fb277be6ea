from typing import Dict, Iterable, List, Optional
from sqlmodel import Session, select
from promo_engine.models.product import Product


class ProductCatalog:
    """Каталог товаров: цены и категории для расчёта скидок"""

    def __init__(self, db: Session):
        self.db = db

    def get(self, product_id: str) -> Optional[Product]:
        return self.db.get(Product, product_id)

    def list(self, category: Optional[str] = None) -> List[Product]:
        stmt = select(Product)
        if category:
            stmt = stmt.where(Product.category == category)
        return list(self.db.exec(stmt.order_by(Product.name)).all())

    def find_by_ids(self, ids: Iterable[str]) -> Dict[str, Product]:
        wanted = {str(product_id) for product_id in ids if product_id is not None}
        if not wanted:
            return {}

        stmt = select(Product).where(Product.id.in_(sorted(wanted)))
        return {product.id: product for product in self.db.exec(stmt).all()}

    def create(self, product: Product) -> Product:
        self.db.add(product)
        self.db.commit()
        self.db.refresh(product)
        return product
