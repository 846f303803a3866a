"""
Ошибки предметной области и их HTTP-коды.

Обработчики регистрируются в main.create_app и превращают исключения
в JSON-ответы вида {"message": ..., "errors": [...]}.
"""
from typing import Any, Dict, List, Optional

from pydantic import ValidationError as PydanticValidationError


FieldError = Dict[str, str]


class AssetTrackerError(Exception):
    """Базовая ошибка приложения."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message}


class ValidationError(AssetTrackerError):
    """Ошибки по полям, которые пользователь может исправить."""

    status_code = 400

    def __init__(self, message: str = "Validation error", errors: Optional[List[FieldError]] = None):
        super().__init__(message)
        self.errors = errors or []

    def to_dict(self) -> Dict[str, Any]:
        data = super().to_dict()
        if self.errors:
            data["errors"] = self.errors
        return data


class NotFoundError(AssetTrackerError):
    status_code = 404


class ConflictError(AssetTrackerError):
    """Нарушение уникальности тега."""

    status_code = 409


class UnsupportedMediaError(AssetTrackerError):
    """Неподходящий тип или размер загружаемого файла."""

    status_code = 400


class InternalError(AssetTrackerError):
    status_code = 500


class ImportRejectedError(ValidationError):
    """В файле импорта нет ни одной валидной строки."""

    def __init__(self, message: str, row_errors: List[str]):
        super().__init__(message)
        self.row_errors = row_errors

    def to_dict(self) -> Dict[str, Any]:
        return {"message": self.message, "imported": 0, "errors": self.row_errors}


def _clean_message(msg: str) -> str:
    # pydantic добавляет "Value error, " к сообщениям из валидаторов
    prefix = "Value error, "
    return msg[len(prefix):] if msg.startswith(prefix) else msg


def format_field_errors(errors: List[Dict[str, Any]]) -> List[FieldError]:
    """Преобразует ошибки pydantic/FastAPI в список {"path", "message"}."""
    result = []
    for err in errors:
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path", "form")]
        result.append({"path": ".".join(loc), "message": _clean_message(err.get("msg", ""))})
    return result


def field_errors_from_pydantic(exc: PydanticValidationError) -> List[FieldError]:
    return format_field_errors(exc.errors())
