"""Схемы для имущества (Asset): вход API, строки импорта, ответы."""

from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, field_serializer, field_validator, model_serializer
from pydantic.alias_generators import to_camel

COST_QUANT = Decimal("0.01")
MAX_COST = Decimal("99999999.99")  # DECIMAL(10, 2)

REQUIRED_TEXT_FIELDS = ("name", "type", "tag")


def _scalar_to_text(value: Any) -> Any:
    if isinstance(value, bool):
        return value
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float, Decimal)):
        return str(value)
    return value


def parse_cost(value: Any) -> Decimal:
    """Строка или число -> неотрицательный Decimal с двумя знаками."""
    if value is None:
        raise ValueError("must not be null")
    if isinstance(value, bool):
        raise ValueError("must be a valid non-negative number")
    try:
        if isinstance(value, Decimal):
            cost = value
        elif isinstance(value, (int, float)):
            cost = Decimal(str(value))
        elif isinstance(value, str) and value.strip():
            cost = Decimal(value.strip())
        else:
            raise ValueError("must be a valid non-negative number")
    except InvalidOperation:
        raise ValueError("must be a valid non-negative number")
    if not cost.is_finite() or cost < 0:
        raise ValueError("must be a valid non-negative number")
    # quantize падает на числах длиннее точности контекста
    if cost > MAX_COST:
        raise ValueError(f"must not exceed {MAX_COST}")
    cost = cost.quantize(COST_QUANT, rounding=ROUND_HALF_UP)
    if cost > MAX_COST:
        raise ValueError(f"must not exceed {MAX_COST}")
    if cost == 0:
        # -0.00 -> 0.00
        cost = Decimal("0.00")
    return cost


class _AssetRules(BaseModel):
    """Общие правила полей для создания и частичного обновления."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    @field_validator(*REQUIRED_TEXT_FIELDS, mode="before", check_fields=False)
    @classmethod
    def validate_required_text(cls, v: Any) -> str:
        if v is None:
            raise ValueError("must not be null")
        v = _scalar_to_text(v)
        if not isinstance(v, str):
            raise ValueError("must be a string")
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v

    @field_validator("serial_number", mode="before", check_fields=False)
    @classmethod
    def validate_serial_number(cls, v: Any) -> Optional[str]:
        v = _scalar_to_text(v)
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("cost", mode="before", check_fields=False)
    @classmethod
    def validate_cost(cls, v: Any) -> Decimal:
        return parse_cost(v)

    @field_validator("acquisition_date", mode="before", check_fields=False)
    @classmethod
    def validate_acquisition_date(cls, v: Any) -> Any:
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v


class AssetBase(_AssetRules):
    name: str
    type: str  # laptop, monitor, furniture, vehicle, other — не закрытый список
    tag: str
    serial_number: Optional[str] = None
    cost: Decimal
    acquisition_date: Optional[date] = None


class AssetCreate(AssetBase):
    pass


class AssetUpdate(_AssetRules):
    """Частичное обновление: учитываются только переданные ключи."""

    name: Optional[str] = None
    type: Optional[str] = None
    tag: Optional[str] = None
    serial_number: Optional[str] = None
    cost: Optional[Decimal] = None
    acquisition_date: Optional[date] = None


class AssetOut(AssetBase):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, from_attributes=True
    )

    id: int

    @field_serializer("cost")
    def serialize_cost(self, cost: Decimal) -> str:
        return f"{cost:.2f}"


class ImportResult(BaseModel):
    message: str
    imported: int
    errors: Optional[List[str]] = None
    assets: List[AssetOut]

    @model_serializer(mode="wrap")
    def _omit_empty_errors(self, handler):
        # Ключ errors есть только если строки были пропущены
        data = handler(self)
        if data.get("errors") is None:
            data.pop("errors", None)
        return data


class AssetSummary(BaseModel):
    """Сводка по имуществу (количество и общая стоимость)."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    total: int
    total_value: Decimal
    types: List[str]

    @field_serializer("total_value")
    def serialize_total_value(self, value: Decimal) -> str:
        return f"{value:.2f}"
