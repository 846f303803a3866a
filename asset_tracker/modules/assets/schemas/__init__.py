"""Схемы модуля имущества."""
from .asset import AssetCreate, AssetOut, AssetSummary, AssetUpdate, ImportResult

__all__ = [
    "AssetCreate",
    "AssetOut",
    "AssetSummary",
    "AssetUpdate",
    "ImportResult",
]
