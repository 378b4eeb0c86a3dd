import pytest

from modules.unitconvert.core.favorites import (
    MAX_USE_COUNT,
    STORAGE_KEY,
    export_favorites,
    favorites_info,
    favorites_stats,
    import_favorites,
    parse_count,
    validate_favorite,
)


def _favorite(**overrides):
    data = {
        "id": "fav1",
        "name": "Run distance",
        "category": "length",
        "fromUnit": "kilometer",
        "toUnit": "mile",
        "useCount": 2,
        "createdAt": "2025-01-01T00:00:00.000Z",
        "lastUsed": "2025-01-02T00:00:00.000Z",
    }
    data.update(overrides)
    return data


def test_info_describes_client_storage():
    info = favorites_info()
    assert info["storageKey"] == STORAGE_KEY == "unitConverterFavorites"
    assert "stored locally" in info["message"]
    assert set(info["structure"]["favorites"][0]) >= {"name", "fromUnit", "useCount"}


def test_validate_accepts_good_favorite():
    assert validate_favorite(_favorite()) == []


def test_validate_collects_every_problem():
    errors = validate_favorite({"name": "", "category": "length", "fromUnit": "meter", "toUnit": "meter"})
    assert errors == [
        "Name is required and must be a non-empty string",
        "From unit and to unit cannot be the same",
    ]
    errors = validate_favorite({"name": "x" * 101, "category": 3})
    assert "Name must be 100 characters or less" in errors
    assert "Category is required and must be a string" in errors
    assert "From unit is required and must be a string" in errors
    assert "To unit is required and must be a string" in errors


def test_export_cleans_and_drops_incomplete_entries():
    data = export_favorites(
        [
            _favorite(name="  Padded  ", useCount="7"),
            {"name": "No units", "category": "length"},
            {"name": "Fresh", "category": "weight", "fromUnit": "kilogram", "toUnit": "pound"},
        ]
    )
    assert data["version"] == "1.0.0"
    assert data["appName"] == "Unit Converter Hub"
    assert data["favoritesCount"] == 2
    first, second = data["favorites"]
    assert first["name"] == "Padded"
    assert first["useCount"] == 7
    assert second["id"].startswith("fav_")
    assert second["id"].endswith("_2")
    assert second["useCount"] == 0
    assert second["createdAt"] == data["exportedAt"]


def test_import_reports_errors_per_index():
    report = import_favorites(
        [
            _favorite(id=None),
            {"name": "Broken", "category": "length"},
            _favorite(toUnit="kilometer"),
        ]
    )
    assert report["importedCount"] == 1
    assert report["totalCount"] == 3
    assert report["errorCount"] == 2
    assert report["errors"] == [
        "Favorite at index 1: Missing required fields",
        "Favorite at index 2: From unit and to unit cannot be the same",
    ]
    assert report["processedFavorites"][0]["id"].startswith("imported_")


def test_stats():
    favorites = [
        _favorite(id="a", category="length", useCount=5,
                  createdAt="2025-01-01T00:00:00.000Z", lastUsed="2025-01-10T00:00:00.000Z"),
        _favorite(id="b", category="weight", useCount=3,
                  createdAt="2025-01-05T00:00:00.000Z", lastUsed="2025-01-08T00:00:00.000Z"),
    ]
    stats = favorites_stats(favorites)
    assert stats["totalFavorites"] == 2
    assert stats["totalUseCount"] == 8
    assert stats["averageUseCount"] == 4
    assert stats["categoriesUsed"] == ["length", "weight"]
    # ties go to the category counted last
    assert stats["mostUsedCategory"] == "weight"
    assert stats["mostUsedFavorite"]["id"] == "a"
    assert stats["oldestFavorite"]["id"] == "a"
    assert stats["newestFavorite"]["id"] == "b"
    assert stats["lastUsed"]["id"] == "a"


def test_stats_for_empty_list():
    stats = favorites_stats([])
    assert stats["totalFavorites"] == 0
    assert stats["mostUsedCategory"] is None
    assert stats["averageUseCount"] == 0


@pytest.mark.parametrize(
    "raw, expected",
    [(5, 5), (5.9, 5), ("12", 12), ("7abc", 7), ("abc", 0), (None, 0), (True, 0)],
)
def test_parse_count(raw, expected):
    assert parse_count(raw) == expected


def test_huge_use_counts_are_clamped():
    favorites = [_favorite(id="a", useCount=1e307), _favorite(id="b", useCount="9" * 5000)]
    stats = favorites_stats(favorites)
    assert stats["totalUseCount"] == 2 * MAX_USE_COUNT
    assert stats["averageUseCount"] == pytest.approx(MAX_USE_COUNT)

    exported = export_favorites(favorites)["favorites"]
    assert [item["useCount"] for item in exported] == [MAX_USE_COUNT, MAX_USE_COUNT]


@pytest.mark.parametrize(
    "raw, expected",
    [(10**40, MAX_USE_COUNT), ("-" + "9" * 30, -MAX_USE_COUNT), (float("inf"), 0)],
)
def test_parse_count_bounds(raw, expected):
    assert parse_count(raw) == expected
