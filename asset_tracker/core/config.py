"""
Конфигурация Asset Tracker
"""
from typing import List
from pydantic_settings import BaseSettings, SettingsConfigDict


def _split_strip(s: str) -> List[str]:
    """Разбивает строку по запятой и убирает пробелы."""
    return [x.strip() for x in s.split(",") if x.strip()]


class Settings(BaseSettings):
    """Настройки приложения"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_prefix="",
    )

    # Основные настройки
    app_name: str = "Asset Tracker"
    api_prefix: str = "/api"
    debug: bool = False
    log_level: str = "INFO"

    # База данных
    database_url: str = "sqlite:///./asset_tracker.db"

    # CORS — в .env строка "*" или "http://a,http://b"
    cors_origins: str = "*"

    # Импорт из Excel
    max_upload_size_mb: int = 10

    def get_cors_origins(self) -> List[str]:
        out = _split_strip(self.cors_origins)
        return out if out else ["*"]

    @property
    def max_upload_size(self) -> int:
        return self.max_upload_size_mb * 1024 * 1024


# Глобальный экземпляр настроек
settings = Settings()
