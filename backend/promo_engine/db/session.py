from sqlmodel import SQLModel, create_engine

from promo_engine.core.config import settings

connect_args = {"check_same_thread": False} if settings.DATABASE_URL.startswith("sqlite") else {}

engine = create_engine(settings.DATABASE_URL, echo=False, connect_args=connect_args)


def create_tables(bind=None) -> None:
    """Создание всех таблиц"""
    # Импорт моделей регистрирует таблицы в metadata
    import promo_engine.models  # noqa: F401

    SQLModel.metadata.create_all(bind or engine)
