"""Роуты /assets — CRUD имущества, импорт и экспорт Excel."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Query, Request, Response, UploadFile

from asset_tracker.core.exceptions import (
    AssetTrackerError,
    InternalError,
    NotFoundError,
    UnsupportedMediaError,
    ValidationError,
)
from asset_tracker.modules.assets.dependencies import get_storage
from asset_tracker.modules.assets.schemas.asset import (
    AssetCreate,
    AssetOut,
    AssetSummary,
    AssetUpdate,
    ImportResult,
)
from asset_tracker.modules.assets.services.spreadsheet import (
    ALLOWED_MIME_TYPES,
    EXPORT_FILENAME,
    XLSX_MIME,
    AssetImporter,
    export_workbook,
)
from asset_tracker.modules.assets.services.storage import AssetStorage

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/assets", tags=["assets"])

# Подсказки для выбора типа в UI; тип не ограничен этим списком
SUGGESTED_TYPES = ["laptop", "monitor", "furniture", "vehicle", "other"]


@router.get("", response_model=List[AssetOut])
def list_assets(
    storage: AssetStorage = Depends(get_storage),
    search: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
):
    return storage.get_all(search=search, asset_type=type)


@router.get("/summary", response_model=AssetSummary)
def get_summary(
    storage: AssetStorage = Depends(get_storage),
    search: Optional[str] = Query(None),
    type: Optional[str] = Query(None),
):
    """Количество и общая стоимость (с теми же фильтрами, что и список)."""
    assets = storage.get_all(search=search, asset_type=type)
    return AssetSummary(
        total=len(assets),
        total_value=storage.total_value(assets),
        types=sorted({a.type for a in assets}),
    )


@router.get("/types", response_model=List[str])
def list_types(storage: AssetStorage = Depends(get_storage)):
    return sorted(set(SUGGESTED_TYPES) | set(storage.get_types()))


@router.get("/export")
def export_assets(storage: AssetStorage = Depends(get_storage)) -> Response:
    content = export_workbook(storage.get_all())
    return Response(
        content=content,
        media_type=XLSX_MIME,
        headers={"Content-Disposition": f"attachment; filename={EXPORT_FILENAME}"},
    )


@router.post("/import", response_model=ImportResult)
async def import_assets(
    request: Request,
    file: Optional[UploadFile] = File(None),
    storage: AssetStorage = Depends(get_storage),
):
    if file is None:
        raise ValidationError("No file uploaded")
    if file.content_type not in ALLOWED_MIME_TYPES:
        raise UnsupportedMediaError("Invalid file type. Only .xlsx and .xls files are allowed.")

    max_size = request.app.state.settings.max_upload_size
    content = await file.read(max_size + 1)
    if len(content) > max_size:
        raise UnsupportedMediaError(
            f"File too large. Maximum size is {request.app.state.settings.max_upload_size_mb}MB."
        )

    try:
        created, errors = AssetImporter(storage).import_workbook(content)
    except AssetTrackerError:
        raise
    except Exception as e:
        logger.exception("Ошибка импорта из Excel (%s): %s", file.filename, e)
        raise InternalError("Failed to import assets from Excel file")

    return ImportResult(
        message=f"Successfully imported {len(created)} assets",
        imported=len(created),
        errors=errors or None,
        assets=[AssetOut.model_validate(a) for a in created],
    )


@router.get("/{asset_id}", response_model=AssetOut)
def get_asset(asset_id: int, storage: AssetStorage = Depends(get_storage)):
    asset = storage.get_by_id(asset_id)
    if not asset:
        raise NotFoundError("Asset not found")
    return asset


@router.post("", response_model=AssetOut, status_code=201)
def create_asset(payload: AssetCreate, storage: AssetStorage = Depends(get_storage)):
    return storage.create(payload.model_dump())


@router.put("/{asset_id}", response_model=AssetOut)
def update_asset(
    asset_id: int,
    payload: AssetUpdate,
    storage: AssetStorage = Depends(get_storage),
):
    return storage.update(asset_id, payload.model_dump(exclude_unset=True))


@router.delete("/{asset_id}")
def delete_asset(asset_id: int, storage: AssetStorage = Depends(get_storage)) -> dict:
    if not storage.delete(asset_id):
        raise NotFoundError("Asset not found")
    return {"message": "Asset deleted successfully"}
