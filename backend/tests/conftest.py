from collections.abc import Generator
from datetime import timedelta
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool
from sqlmodel import Session, create_engine

from promo_engine.api.deps import get_db
from promo_engine.db.session import create_tables
from promo_engine.main import app
from promo_engine.models.product import Product, utcnow


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    create_tables(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session(engine) -> Generator[Session, None, None]:
    with Session(engine) as session:
        yield session


@pytest.fixture
def client(engine) -> Generator[TestClient, None, None]:
    def override_get_db():
        with Session(engine) as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    test_client = TestClient(app)
    yield test_client
    test_client.close()
    app.dependency_overrides.clear()


@pytest.fixture
def window() -> dict:
    now = utcnow()
    return {
        "start_date": (now - timedelta(days=1)).isoformat(),
        "end_date": (now + timedelta(days=30)).isoformat(),
    }


@pytest.fixture
def products(session: Session) -> dict[str, Product]:
    items = {
        "latte": Product(name="Latte", price=Decimal("45000"), category="coffee"),
        "espresso": Product(name="Espresso", price=Decimal("30000"), category="coffee"),
        "croissant": Product(name="Croissant", price=Decimal("25000"), category="bakery"),
    }
    session.add_all(items.values())
    session.commit()
    for product in items.values():
        session.refresh(product)
    return items
