"""
API роуты модуля имущества.
Префикс: settings.api_prefix (по умолчанию /api). Подроуты: /assets.
"""

from fastapi import APIRouter

from .routes import assets


def build_router(prefix: str) -> APIRouter:
    router = APIRouter(prefix=prefix)
    router.include_router(assets.router)
    return router
