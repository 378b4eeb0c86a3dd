from __future__ import annotations

from fastapi import APIRouter, Depends, Query

from modules.unitconvert.core.convert import utc_timestamp
from modules.unitconvert.core.units import (
    clamp_limit,
    get_category,
    get_unit,
    list_categories,
    search_units,
)
from modules.unitconvert.tool.deps import app_settings
from universe.errors import error_response
from universe.settings import Settings

router = APIRouter(prefix="/api/v1/categories", tags=["categories"])


@router.get("")
def categories():
    items = list_categories()
    return {
        "success": True,
        "count": len(items),
        "categories": items,
        "timestamp": utc_timestamp(),
    }


@router.get("/{category}")
def category_detail(category: str):
    data = get_category(category)
    return {"success": True, **data.to_dict(), "timestamp": utc_timestamp()}


@router.get("/{category}/units/{unit}")
def unit_detail(category: str, unit: str):
    data = get_category(category)
    unit_data = get_unit(category, unit)
    return {
        "success": True,
        "category": data.key,
        "categoryName": data.name,
        "categoryIcon": data.icon,
        "unit": unit_data.to_dict(),
        "timestamp": utc_timestamp(),
    }


@router.get("/{category}/search")
def search(
    category: str,
    q: str | None = Query(None),
    limit: str | None = Query(None),
    settings: Settings = Depends(app_settings),
):
    if not q:
        return error_response("Search query (q) parameter is required", "MISSING_QUERY")
    data = get_category(category)

    matches = [
        unit.to_dict()
        for unit in search_units(
            category, q, clamp_limit(limit, settings.search_default_limit)
        )
    ]
    return {
        "success": True,
        "category": data.key,
        "categoryName": data.name,
        "searchQuery": q,
        "resultCount": len(matches),
        "units": matches,
        "timestamp": utc_timestamp(),
    }


__all__ = ["router"]
