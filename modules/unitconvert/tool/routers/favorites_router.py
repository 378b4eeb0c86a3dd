from __future__ import annotations

from collections.abc import Mapping

from fastapi import APIRouter

from modules.unitconvert.core.convert import utc_timestamp
from modules.unitconvert.core.favorites import (
    export_favorites,
    favorites_info,
    favorites_stats,
    import_favorites,
    validate_favorite,
)
from modules.unitconvert.tool.schemas import (
    FavoriteRequest,
    FavoritesImportRequest,
    FavoritesRequest,
)
from universe.errors import error_response

router = APIRouter(prefix="/api/v1/favorites", tags=["favorites"])


def _invalid_favorites():
    return error_response("Favorites must be an array", "INVALID_FAVORITES_FORMAT")


@router.get("")
def info():
    return {"success": True, **favorites_info(), "timestamp": utc_timestamp()}


@router.post("/validate")
def validate(payload: FavoriteRequest):
    errors = validate_favorite(payload.as_wire())
    return {"valid": not errors, "errors": errors, "timestamp": utc_timestamp()}


@router.post("/export")
def export(payload: FavoritesRequest):
    if not isinstance(payload.favorites, list):
        return _invalid_favorites()
    return {
        "success": True,
        "exportData": export_favorites(payload.favorites),
        "timestamp": utc_timestamp(),
    }


@router.post("/import")
def import_(payload: FavoritesImportRequest):
    export_data = payload.export_data
    if not isinstance(export_data, Mapping):
        return error_response(
            "Export data is required and must be an object", "INVALID_EXPORT_DATA"
        )
    favorites = export_data.get("favorites")
    if not isinstance(favorites, list):
        return error_response(
            "Export data must contain a favorites array", "INVALID_FAVORITES_ARRAY"
        )
    return {"success": True, **import_favorites(favorites), "timestamp": utc_timestamp()}


@router.post("/stats")
def stats(payload: FavoritesRequest):
    if not isinstance(payload.favorites, list):
        return _invalid_favorites()
    return {
        "success": True,
        "stats": favorites_stats(payload.favorites),
        "timestamp": utc_timestamp(),
    }


__all__ = ["router"]
