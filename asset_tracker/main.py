"""
Главный файл Asset Tracker
"""
import logging
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from asset_tracker.core.config import Settings, settings as default_settings
from asset_tracker.core.database import Database
from asset_tracker.core.exceptions import AssetTrackerError, format_field_errors
from asset_tracker.modules.assets import api as assets_api

logger = logging.getLogger(__name__)


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or default_settings

    # Настройка логирования
    logging.basicConfig(level=settings.log_level.upper())

    app = FastAPI(
        title=settings.app_name,
        description="Учёт имущества компании",
        version="1.0.0",
    )
    app.state.settings = settings

    # Хранилище открывается при старте процесса и закрывается при остановке
    db = Database(settings.database_url, echo=settings.debug)
    db.create_all()
    app.state.db = db

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.get_cors_origins(),
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.exception_handler(AssetTrackerError)
    async def _domain_exception_handler(request: Request, exc: AssetTrackerError):
        if exc.status_code >= 500:
            logger.error("%s %s: %s", request.method, request.url.path, exc.message)
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict())

    @app.exception_handler(RequestValidationError)
    async def _validation_exception_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"message": "Validation error", "errors": format_field_errors(exc.errors())},
        )

    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.exception("Необработанная ошибка %s %s", request.method, request.url.path)
        return JSONResponse(status_code=500, content={"message": "Internal server error"})

    # Подключаем роутеры модулей
    app.include_router(assets_api.build_router(settings.api_prefix))

    @app.get("/health")
    async def health_check():
        """Health check endpoint"""
        return {"status": "ok", "service": settings.app_name}

    @app.on_event("startup")
    async def on_startup():
        logger.info("Запуск %s...", settings.app_name)

    @app.on_event("shutdown")
    async def on_shutdown():
        """Закрываем пул соединений"""
        app.state.db.dispose()
        logger.info("%s остановлен", settings.app_name)

    return app


app = create_app()


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
