"""
База данных Asset Tracker.

Движок и фабрика сессий живут в объекте Database, который создаётся при старте
приложения (create_app) и закрывается при остановке.
"""
from typing import Generator

from fastapi import Request
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

# Базовый класс для всех моделей
Base = declarative_base()


def build_engine(database_url: str, echo: bool = False) -> Engine:
    """Создаёт движок: для SQLite без пула, для остальных СУБД с настройками пула."""
    if database_url.startswith("sqlite"):
        return create_engine(
            database_url,
            echo=echo,
            connect_args={"check_same_thread": False},
        )
    return create_engine(
        database_url,
        echo=echo,
        pool_pre_ping=True,
        pool_size=5,
        max_overflow=10,
        pool_recycle=3600,
    )


class Database:
    """Хранилище: движок + фабрика сессий."""

    def __init__(self, database_url: str, echo: bool = False):
        self.engine = build_engine(database_url, echo=echo)
        self.SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=self.engine)

    def create_all(self) -> None:
        # Импорт регистрирует модели в Base.metadata
        from asset_tracker.modules.assets import models  # noqa: F401

        Base.metadata.create_all(self.engine)

    def session(self) -> Generator[Session, None, None]:
        db = self.SessionLocal()
        try:
            yield db
        finally:
            db.close()

    def dispose(self) -> None:
        self.engine.dispose()


def get_db(request: Request) -> Generator[Session, None, None]:
    """
    Dependency для получения сессии БД.

    Usage:
        @router.get("/")
        def endpoint(db: Session = Depends(get_db)):
            ...
    """
    yield from request.app.state.db.session()
