"""
Модели модуля учёта имущества
"""

from decimal import ROUND_HALF_UP, Decimal
from typing import Optional

from sqlalchemy import Column, Date, Integer, String, Text
from sqlalchemy.types import TypeDecorator

from asset_tracker.core.database import Base

COST_QUANT = Decimal("0.01")


class FixedPointDecimal(TypeDecorator):
    """Decimal с двумя знаками, хранится текстом (одинаково на SQLite и PostgreSQL)."""

    impl = String(32)
    cache_ok = True

    def process_bind_param(self, value, dialect) -> Optional[str]:
        if value is None:
            return None
        return str(Decimal(value).quantize(COST_QUANT, rounding=ROUND_HALF_UP))

    def process_result_value(self, value, dialect) -> Optional[Decimal]:
        if value is None:
            return None
        return Decimal(value).quantize(COST_QUANT, rounding=ROUND_HALF_UP)


class Asset(Base):
    """Единица имущества"""

    __tablename__ = "assets"
    # id не переиспользуется после удаления (SQLite)
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(Text, nullable=False)
    type = Column(Text, nullable=False)  # laptop, monitor, furniture, vehicle, other
    tag = Column(Text, unique=True, nullable=False)
    serial_number = Column(Text, nullable=True)
    cost = Column(FixedPointDecimal, nullable=False)
    acquisition_date = Column(Date, nullable=True)

    def __repr__(self) -> str:
        return f"<Asset id={self.id} tag={self.tag!r}>"


class User(Base):
    """Пользователь (заготовка, в API не используется)"""

    __tablename__ = "users"

    id = Column(Integer, primary_key=True, autoincrement=True)
    username = Column(Text, unique=True, nullable=False)
    password = Column(Text, nullable=False)  # bcrypt-хеш
