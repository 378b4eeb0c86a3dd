from __future__ import annotations

import re
import time
from collections import Counter
from datetime import datetime, timezone
from numbers import Real
from typing import Any, Dict, List, Mapping, Tuple

from modules.unitconvert.core.convert import utc_timestamp
from modules.unitconvert.core.precision import round_half_up

STORAGE_KEY = "unitConverterFavorites"
EXPORT_VERSION = "1.0.0"
APP_NAME = "Unit Converter Hub"
MAX_NAME_LENGTH = 100
# largest integer a browser client stores exactly
MAX_USE_COUNT = 2**53 - 1
_MAX_COUNT_DIGITS = len(str(MAX_USE_COUNT))

FAVORITE_STRUCTURE = {
    "id": "string",
    "name": "string",
    "category": "string",
    "fromUnit": "string",
    "toUnit": "string",
    "lastUsed": "ISO date string",
    "createdAt": "ISO date string",
    "useCount": "number",
}

_LEADING_INT = re.compile(r"^\s*([+-]?\d+)")
_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def favorites_info() -> Dict[str, Any]:
    return {
        "message": "Favorites are stored locally in your browser",
        "structure": {"favorites": [dict(FAVORITE_STRUCTURE)]},
        "storageKey": STORAGE_KEY,
    }


def parse_count(value: Any) -> int:
    """Leading integer of ``value``, clamped to ``MAX_USE_COUNT``. Anything else counts as 0."""
    if isinstance(value, bool):
        return 0
    if isinstance(value, Real):
        try:
            count = int(value)
        except (OverflowError, ValueError):
            return 0
    else:
        match = _LEADING_INT.match(str(value)) if value is not None else None
        if not match:
            return 0
        digits = match.group(1)
        if len(digits.lstrip("+-")) > _MAX_COUNT_DIGITS:
            count = -MAX_USE_COUNT if digits.startswith("-") else MAX_USE_COUNT
        else:
            count = int(digits)
    return max(-MAX_USE_COUNT, min(MAX_USE_COUNT, count))


def _parse_date(value: Any) -> datetime:
    if not isinstance(value, str) or not value.strip():
        return _EPOCH
    raw = value.strip()
    if raw.endswith("Z"):
        raw = raw[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(raw)
    except ValueError:
        return _EPOCH
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def _hashable(value: Any) -> Any:
    if value is None or isinstance(value, (str, int, float)):
        return value
    return str(value)


def _non_empty_str(value: Any) -> bool:
    return isinstance(value, str) and bool(value)


def validate_favorite(data: Mapping[str, Any]) -> List[str]:
    errors: List[str] = []

    name = data.get("name")
    if not isinstance(name, str) or not name.strip():
        errors.append("Name is required and must be a non-empty string")
    elif len(name) > MAX_NAME_LENGTH:
        errors.append(f"Name must be {MAX_NAME_LENGTH} characters or less")

    if not _non_empty_str(data.get("category")):
        errors.append("Category is required and must be a string")
    if not _non_empty_str(data.get("fromUnit")):
        errors.append("From unit is required and must be a string")
    if not _non_empty_str(data.get("toUnit")):
        errors.append("To unit is required and must be a string")

    from_unit = data.get("fromUnit")
    to_unit = data.get("toUnit")
    if from_unit and to_unit and from_unit == to_unit:
        errors.append("From unit and to unit cannot be the same")

    return errors


def _clean(favorite: Mapping[str, Any], fallback_id: str, now: str) -> Dict[str, Any]:
    return {
        "id": favorite.get("id") or fallback_id,
        "name": _text(favorite.get("name")),
        "category": favorite.get("category") or "",
        "fromUnit": favorite.get("fromUnit") or "",
        "toUnit": favorite.get("toUnit") or "",
        "lastUsed": favorite.get("lastUsed") or now,
        "createdAt": favorite.get("createdAt") or now,
        "useCount": parse_count(favorite.get("useCount")),
    }


def export_favorites(favorites: List[Any]) -> Dict[str, Any]:
    now = utc_timestamp()
    stamp = int(time.time() * 1000)
    cleaned = [
        _clean(favorite, f"fav_{stamp}_{index}", now)
        for index, favorite in enumerate(favorites)
        if isinstance(favorite, Mapping)
    ]
    cleaned = [
        favorite
        for favorite in cleaned
        if favorite["name"]
        and favorite["category"]
        and favorite["fromUnit"]
        and favorite["toUnit"]
    ]
    return {
        "version": EXPORT_VERSION,
        "exportedAt": now,
        "appName": APP_NAME,
        "favoritesCount": len(cleaned),
        "favorites": cleaned,
    }


def import_favorites(favorites: List[Any]) -> Dict[str, Any]:
    now = utc_timestamp()
    stamp = int(time.time() * 1000)
    processed: List[Dict[str, Any]] = []
    errors: List[str] = []

    for index, favorite in enumerate(favorites):
        if not isinstance(favorite, Mapping):
            errors.append(f"Favorite at index {index}: Favorite must be an object")
            continue
        if not all(favorite.get(key) for key in ("name", "category", "fromUnit", "toUnit")):
            errors.append(f"Favorite at index {index}: Missing required fields")
            continue
        if not isinstance(favorite.get("name"), str):
            errors.append(f"Favorite at index {index}: Name must be a string")
            continue
        if favorite.get("fromUnit") == favorite.get("toUnit"):
            errors.append(
                f"Favorite at index {index}: From unit and to unit cannot be the same"
            )
            continue
        processed.append(_clean(favorite, f"imported_{stamp}_{index}", now))

    return {
        "importedCount": len(processed),
        "totalCount": len(favorites),
        "errorCount": len(errors),
        "errors": errors,
        "processedFavorites": processed,
    }


def _most_used_category(favorites: List[Mapping[str, Any]]) -> Any:
    counts: Counter = Counter(
        _hashable(favorite.get("category")) for favorite in favorites
    )
    best: Any = None
    best_count = -1
    # ties go to the category seen last
    for category, count in counts.items():
        if count >= best_count:
            best, best_count = category, count
    return best


def _most_used_favorite(favorites: List[Mapping[str, Any]]) -> Mapping[str, Any]:
    best = favorites[0]
    for favorite in favorites[1:]:
        if parse_count(favorite.get("useCount")) > parse_count(best.get("useCount")):
            best = favorite
    return best


def favorites_stats(favorites: List[Any]) -> Dict[str, Any]:
    items = [favorite for favorite in favorites if isinstance(favorite, Mapping)]
    categories: List[Any] = []
    for favorite in items:
        category = favorite.get("category")
        if category not in categories:
            categories.append(category)

    total_use = sum(parse_count(favorite.get("useCount")) for favorite in items)
    stats: Dict[str, Any] = {
        "totalFavorites": len(items),
        "categoriesUsed": categories,
        "mostUsedCategory": None,
        "mostUsedFavorite": None,
        "totalUseCount": total_use,
        "averageUseCount": 0,
        "oldestFavorite": None,
        "newestFavorite": None,
        "lastUsed": None,
    }
    if not items:
        return stats

    by_created: List[Tuple[datetime, Mapping[str, Any]]] = sorted(
        ((_parse_date(item.get("createdAt")), item) for item in items),
        key=lambda pair: pair[0],
    )
    by_used = sorted(
        items,
        key=lambda item: _parse_date(item.get("lastUsed")),
        reverse=True,
    )

    stats.update(
        {
            "mostUsedCategory": _most_used_category(items),
            "mostUsedFavorite": _most_used_favorite(items),
            "averageUseCount": round_half_up(total_use / len(items) * 100) / 100,
            "oldestFavorite": by_created[0][1],
            "newestFavorite": by_created[-1][1],
            "lastUsed": by_used[0],
        }
    )
    return stats


__all__ = [
    "MAX_USE_COUNT",
    "STORAGE_KEY",
    "export_favorites",
    "favorites_info",
    "favorites_stats",
    "import_favorites",
    "parse_count",
    "validate_favorite",
]
