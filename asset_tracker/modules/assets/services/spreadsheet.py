"""
Импорт и экспорт имущества в Excel (.xlsx).

Импорт: первый лист, первая строка — заголовки. Колонки сопоставляются с полями
по таблице псевдонимов (порядок псевдонимов фиксирован), затем каждая строка
проходит ту же валидацию, что и тело запроса API. Ошибки копятся по строкам,
валидные строки вставляются пакетом.
"""

import io
import logging
import re
from dataclasses import dataclass, fields
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Optional, Tuple

from openpyxl import Workbook, load_workbook
from openpyxl.styles import Font
from pydantic import ValidationError as PydanticValidationError

from asset_tracker.core.exceptions import (
    ImportRejectedError,
    ValidationError,
    field_errors_from_pydantic,
)
from asset_tracker.modules.assets.models import Asset
from asset_tracker.modules.assets.schemas.asset import AssetCreate
from asset_tracker.modules.assets.services.storage import AssetStorage

logger = logging.getLogger(__name__)

XLSX_MIME = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
XLS_MIME = "application/vnd.ms-excel"
ALLOWED_MIME_TYPES = (XLSX_MIME, XLS_MIME)

EXPORT_FILENAME = "assets.xlsx"
EXPORT_SHEET_TITLE = "Assets"
EXPORT_HEADERS = [
    "Asset Name",
    "Asset Type",
    "Asset Tag",
    "Serial Number",
    "Cost",
    "Acquisition Date",
]

# Порядок важен: первый найденный псевдоним побеждает
FIELD_ALIASES: Dict[str, Tuple[str, ...]] = {
    "name": ("Asset Name", "Name", "asset_name", "name"),
    "type": ("Asset Type", "Type", "asset_type", "type"),
    "tag": ("Asset Tag", "Tag", "asset_tag", "tag"),
    "cost": ("Cost", "cost", "Price", "price"),
    "serial_number": ("Serial Number", "SerialNumber", "serial_number", "serial"),
    "acquisition_date": ("Acquisition Date", "AcquisitionDate", "acquisition_date", "date"),
}

REQUIRED_FIELDS = ("name", "type", "tag", "cost")


def normalize_header(header: str) -> str:
    """'Asset Name', 'asset_name', 'ASSET-NAME' -> 'assetname'."""
    return re.sub(r"[\s_\-]+", "", header.strip().lower())


def cell_to_text(value: Any) -> Optional[str]:
    """Значение ячейки -> текст; пустая ячейка -> None."""
    if value is None:
        return None
    if isinstance(value, datetime):
        return value.date().isoformat()
    if isinstance(value, date):
        return value.isoformat()
    if isinstance(value, bool):
        return str(value)
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    text = str(value).strip()
    return text or None


@dataclass
class RawRow:
    """Строка таблицы, приведённая к полям имущества (все значения — текст или None)."""

    name: Optional[str] = None
    type: Optional[str] = None
    tag: Optional[str] = None
    cost: Optional[str] = None
    serial_number: Optional[str] = None
    acquisition_date: Optional[str] = None

    @classmethod
    def from_cells(cls, cells: Dict[str, Any]) -> "RawRow":
        exact = {str(k): v for k, v in cells.items() if k is not None}
        normalized: Dict[str, Any] = {}
        for key, value in exact.items():
            normalized.setdefault(normalize_header(key), value)

        values = {}
        for field_name, aliases in FIELD_ALIASES.items():
            values[field_name] = resolve_alias(exact, normalized, aliases)
        return cls(**values)

    def missing_required(self) -> bool:
        return any(getattr(self, name) is None for name in REQUIRED_FIELDS)

    def to_fields(self) -> Dict[str, Optional[str]]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


def resolve_alias(
    exact: Dict[str, Any], normalized: Dict[str, Any], aliases: Iterable[str]
) -> Optional[str]:
    """Псевдонимы по приоритету; для каждого сначала точное имя колонки, затем без учёта регистра и пробелов."""
    for alias in aliases:
        text = cell_to_text(exact.get(alias))
        if text is None:
            text = cell_to_text(normalized.get(normalize_header(alias)))
        if text is not None:
            return text
    return None


def read_rows(content: bytes) -> List[Tuple[int, Dict[str, Any]]]:
    """Читает первый лист; возвращает (номер строки на листе, {заголовок: значение})."""
    try:
        wb = load_workbook(io.BytesIO(content), data_only=True)
    except Exception as e:
        logger.warning("Не удалось прочитать Excel-файл: %s", e)
        raise ValidationError("Failed to read Excel file")

    try:
        if not wb.worksheets:
            return []
        ws = wb.worksheets[0]
        rows: List[Tuple[int, Dict[str, Any]]] = []
        headers: List[Optional[str]] = []
        for row_number, row in enumerate(ws.iter_rows(values_only=True), start=1):
            if row_number == 1:
                headers = [str(h).strip() if h is not None else None for h in row]
                continue
            # Полностью пустые строки пропускаем, нумерация остаётся по листу
            if all(cell is None or str(cell).strip() == "" for cell in row):
                continue
            row_dict = {}
            for j, cell in enumerate(row):
                if j < len(headers) and headers[j]:
                    row_dict.setdefault(headers[j], cell)
            rows.append((row_number, row_dict))
        return rows
    finally:
        wb.close()


class AssetImporter:
    """Импорт строк таблицы в хранилище с накоплением ошибок по строкам."""

    def __init__(self, storage: AssetStorage):
        self.storage = storage

    def import_workbook(self, content: bytes) -> Tuple[List[Asset], List[str]]:
        rows = read_rows(content)
        if not rows:
            raise ValidationError("Excel file is empty")
        return self.import_rows(rows)

    def import_rows(self, rows: List[Tuple[int, Dict[str, Any]]]) -> Tuple[List[Asset], List[str]]:
        errors: List[str] = []
        to_create: List[Dict[str, Any]] = []
        row_by_tag: Dict[str, int] = {}

        for row_number, cells in rows:
            raw = RawRow.from_cells(cells)

            if raw.missing_required():
                errors.append(f"Row {row_number}: Missing required fields (Name, Type, Tag, Cost)")
                continue

            if self.storage.get_by_tag(raw.tag):
                errors.append(f"Row {row_number}: Asset tag '{raw.tag}' already exists")
                continue

            try:
                validated = AssetCreate.model_validate(raw.to_fields())
            except PydanticValidationError as e:
                messages = [
                    f"{err['path']}: {err['message']}" if err["path"] else err["message"]
                    for err in field_errors_from_pydantic(e)
                ]
                errors.append(f"Row {row_number}: {', '.join(messages)}")
                continue

            if validated.tag in row_by_tag:
                errors.append(f"Row {row_number}: Duplicate asset tag '{validated.tag}' in file")
                continue

            row_by_tag[validated.tag] = row_number
            to_create.append(validated.model_dump())

        if not to_create:
            raise ImportRejectedError("No valid assets found in file", errors)

        created = self.storage.create_many(to_create)

        created_tags = {a.tag for a in created}
        for fields_ in to_create:
            if fields_["tag"] not in created_tags:
                errors.append(
                    f"Row {row_by_tag[fields_['tag']]}: Asset tag '{fields_['tag']}' already exists"
                )

        for message in errors:
            logger.warning("Импорт: %s", message)
        logger.info("Импортировано %s из %s строк", len(created), len(rows))
        return created, errors


def export_workbook(assets: Iterable[Asset]) -> bytes:
    """Все записи -> один лист с фиксированной строкой заголовков."""
    wb = Workbook()
    ws = wb.active
    ws.title = EXPORT_SHEET_TITLE
    ws.append(EXPORT_HEADERS)
    for cell in ws[1]:
        cell.font = Font(bold=True)

    for asset in assets:
        ws.append(
            [
                asset.name,
                asset.type,
                asset.tag,
                asset.serial_number or "",
                f"{asset.cost:.2f}",
                asset.acquisition_date.isoformat() if asset.acquisition_date else "",
            ]
        )

    output = io.BytesIO()
    wb.save(output)
    return output.getvalue()
