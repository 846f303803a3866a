"""
Dependencies для модуля имущества.
get_db — общий с core; хранилище создаётся на одну сессию запроса.
"""
from fastapi import Depends
from sqlalchemy.orm import Session

from asset_tracker.core.database import get_db
from asset_tracker.modules.assets.services.storage import AssetStorage


def get_storage(db: Session = Depends(get_db)) -> AssetStorage:
    return AssetStorage(db)
