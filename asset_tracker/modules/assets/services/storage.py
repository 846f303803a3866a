"""Хранилище имущества: CRUD над таблицей assets и заготовка пользователей."""

import logging
from decimal import Decimal
from typing import Any, Dict, Iterable, List, Optional

from sqlalchemy import func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from asset_tracker.core.auth import get_password_hash
from asset_tracker.core.exceptions import ConflictError, NotFoundError
from asset_tracker.modules.assets.models import Asset, User

logger = logging.getLogger(__name__)

ASSET_COLUMNS = ("name", "type", "tag", "serial_number", "cost", "acquisition_date")


def merge_fields(base: Dict[str, Any], patch: Dict[str, Any]) -> Dict[str, Any]:
    """Базовая запись, в которой перезаписаны только ключи, присутствующие в patch."""
    merged = dict(base)
    for key, value in patch.items():
        if key in ASSET_COLUMNS:
            merged[key] = value
    return merged


def asset_fields(asset: Asset) -> Dict[str, Any]:
    return {key: getattr(asset, key) for key in ASSET_COLUMNS}


class AssetStorage:
    """
    Операции над таблицей assets.

    Каждая операция сразу фиксирует изменения (commit), кеша нет:
    каждый вызов видит текущее состояние БД.
    """

    def __init__(self, db: Session):
        self.db = db

    # --- Чтение ---

    def get_all(self, search: Optional[str] = None, asset_type: Optional[str] = None) -> List[Asset]:
        q = self.db.query(Asset)
        if asset_type:
            q = q.filter(Asset.type == asset_type)
        if search and search.strip():
            s = f"%{search.strip().lower()}%"
            q = q.filter(or_(func.lower(Asset.name).like(s), func.lower(Asset.tag).like(s)))
        return q.order_by(Asset.id).all()

    def get_by_id(self, asset_id: int) -> Optional[Asset]:
        return self.db.query(Asset).filter(Asset.id == asset_id).first()

    def get_by_tag(self, tag: str) -> Optional[Asset]:
        return self.db.query(Asset).filter(Asset.tag == tag).first()

    def get_types(self) -> List[str]:
        rows = self.db.query(Asset.type).distinct().all()
        return sorted(r[0] for r in rows if r[0])

    # --- Изменение ---

    def create(self, fields: Dict[str, Any]) -> Asset:
        tag = fields.get("tag")
        if tag and self.get_by_tag(tag):
            raise ConflictError("Asset tag already exists")

        asset = Asset(**{k: v for k, v in fields.items() if k in ASSET_COLUMNS})
        self.db.add(asset)
        self._commit_or_conflict()
        self.db.refresh(asset)
        logger.info("Создано имущество id=%s tag=%s", asset.id, asset.tag)
        return asset

    def update(self, asset_id: int, patch: Dict[str, Any]) -> Asset:
        asset = self.get_by_id(asset_id)
        if not asset:
            raise NotFoundError("Asset not found")

        new_tag = patch.get("tag")
        if new_tag:
            existing = self.get_by_tag(new_tag)
            if existing and existing.id != asset_id:
                raise ConflictError("Asset tag already exists")

        merged = merge_fields(asset_fields(asset), patch)
        for key, value in merged.items():
            setattr(asset, key, value)
        self._commit_or_conflict()
        self.db.refresh(asset)
        logger.info("Обновлено имущество id=%s (поля: %s)", asset.id, ", ".join(sorted(patch)) or "-")
        return asset

    def delete(self, asset_id: int) -> bool:
        """True, если строка удалена; отсутствующий id — не ошибка."""
        deleted = self.db.query(Asset).filter(Asset.id == asset_id).delete(synchronize_session=False)
        self.db.commit()
        if deleted:
            logger.info("Удалено имущество id=%s", asset_id)
        return deleted > 0

    def create_many(self, fields_list: Iterable[Dict[str, Any]]) -> List[Asset]:
        """
        Пакетная вставка без общей транзакции: каждая строка фиксируется отдельно.
        Строка, проигравшая гонку за уникальный тег, пропускается.
        """
        created: List[Asset] = []
        for fields in fields_list:
            asset = Asset(**{k: v for k, v in fields.items() if k in ASSET_COLUMNS})
            self.db.add(asset)
            try:
                self.db.commit()
            except IntegrityError:
                self.db.rollback()
                logger.warning("Пропущена строка пакета: тег %s уже существует", fields.get("tag"))
                continue
            self.db.refresh(asset)
            created.append(asset)
        return created

    def total_value(self, assets: Iterable[Asset]) -> Decimal:
        return sum((a.cost for a in assets if a.cost is not None), Decimal("0.00"))

    def _commit_or_conflict(self) -> None:
        try:
            self.db.commit()
        except IntegrityError:
            # Параллельная запись заняла тег между проверкой и commit
            self.db.rollback()
            logger.warning("Конфликт уникальности тега при commit")
            raise ConflictError("Asset tag already exists")

    # --- Пользователи (заготовка) ---

    def get_user(self, user_id: int) -> Optional[User]:
        return self.db.query(User).filter(User.id == user_id).first()

    def get_user_by_username(self, username: str) -> Optional[User]:
        return self.db.query(User).filter(User.username == username).first()

    def create_user(self, username: str, password: str) -> User:
        if self.get_user_by_username(username):
            raise ConflictError("Username already exists")
        user = User(username=username, password=get_password_hash(password))
        self.db.add(user)
        try:
            self.db.commit()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("Username already exists")
        self.db.refresh(user)
        return user
