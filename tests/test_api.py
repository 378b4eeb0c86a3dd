"""
HTTP tests for the unit converter API.
"""
import pytest

CONVERSION = {
    "value": 1,
    "fromUnit": "meter",
    "toUnit": "centimeter",
    "category": "length",
}


class TestHealthAndIndex:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["environment"] == "test"
        assert body["version"] == "1.0.0"
        assert body["uptime"] >= 0
        assert body["timestamp"]

    def test_index_lists_categories(self, client):
        response = client.get("/")
        assert response.status_code == 200
        assert "text/html" in response.headers["content-type"]
        assert "Temperature" in response.text
        assert "Nautical Mile" in response.text


class TestCategories:
    def test_list(self, client):
        body = client.get("/api/v1/categories").json()
        assert body["success"] is True
        assert body["count"] == 8
        assert body["categories"][0]["key"] == "length"

    def test_detail(self, client):
        body = client.get("/api/v1/categories/length").json()
        assert body["success"] is True
        assert body["category"] == "length"
        assert body["icon"] == "📏"
        assert body["baseUnit"] == "meter"
        assert len(body["units"]) == 12
        assert body["units"][0]["key"] == "nanometer"

    def test_unknown_category(self, client):
        response = client.get("/api/v1/categories/invalid")
        assert response.status_code == 404
        body = response.json()
        assert "Unknown category" in body["error"]
        assert body["code"] == "CATEGORY_NOT_FOUND"

    def test_unit(self, client):
        body = client.get("/api/v1/categories/length/units/meter").json()
        assert body["category"] == "length"
        assert body["categoryName"] == "Length"
        assert body["unit"]["key"] == "meter"
        assert body["unit"]["symbol"] == "m"

    def test_unknown_unit(self, client):
        response = client.get("/api/v1/categories/length/units/invalid")
        assert response.status_code == 404
        body = response.json()
        assert "Unit 'invalid' not found" in body["error"]
        assert body["code"] == "UNIT_NOT_FOUND"

    def test_search(self, client):
        body = client.get("/api/v1/categories/length/search", params={"q": "meter", "limit": 2}).json()
        assert body["searchQuery"] == "meter"
        assert body["resultCount"] == 2
        assert [unit["key"] for unit in body["units"]] == ["nanometer", "micrometer"]

    def test_search_requires_query(self, client):
        response = client.get("/api/v1/categories/length/search")
        assert response.status_code == 400
        body = response.json()
        assert "Search query (q) parameter is required" in body["error"]
        assert body["code"] == "MISSING_QUERY"


class TestConvert:
    def test_convert(self, client):
        response = client.post("/api/v1/convert", json=CONVERSION)
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["originalValue"] == 1
        assert body["convertedValue"] == 100
        assert body["formula"] == "1 m = 1 × 100 = 100 cm"

    def test_temperature(self, client):
        body = client.post(
            "/api/v1/convert",
            json={"value": 0, "fromUnit": "celsius", "toUnit": "fahrenheit", "category": "temperature"},
        ).json()
        assert body["convertedValue"] == 32
        assert body["formula"] == "°C × 9/5 + 32 = °F"

    def test_numeric_strings_are_accepted(self, client):
        body = client.post("/api/v1/convert", json={**CONVERSION, "value": "2,5"}).json()
        assert body["convertedValue"] == 250

    @pytest.mark.parametrize(
        "payload, code",
        [
            ({}, "MISSING_VALUE"),
            ({"value": 1}, "MISSING_FROM_UNIT"),
            ({"value": 1, "fromUnit": "meter"}, "MISSING_TO_UNIT"),
            ({"value": 1, "fromUnit": "meter", "toUnit": "centimeter"}, "MISSING_CATEGORY"),
            ({**CONVERSION, "value": "invalid"}, "INVALID_VALUE"),
        ],
    )
    def test_request_errors(self, client, payload, code):
        response = client.post("/api/v1/convert", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == code

    def test_invalid_value_message(self, client):
        body = client.post("/api/v1/convert", json={**CONVERSION, "value": "invalid"}).json()
        assert "valid number" in body["error"]

    def test_integer_beyond_float_range(self, client):
        response = client.post(
            "/api/v1/convert",
            content='{"value": 1' + "0" * 400 + ', "fromUnit": "meter", "toUnit": "centimeter", "category": "length"}',
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_VALUE"

    def test_conversion_error_carries_details(self, client):
        response = client.post("/api/v1/convert", json={**CONVERSION, "fromUnit": "invalid"})
        assert response.status_code == 400
        body = response.json()
        assert body["code"] == "CONVERSION_ERROR"
        assert body["details"]["success"] is False
        assert body["details"]["fromUnit"] == "invalid"

    def test_malformed_json(self, client):
        response = client.post(
            "/api/v1/convert",
            content="invalid json",
            headers={"Content-Type": "application/json"},
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid input."}

    def test_form_body_is_rejected(self, client):
        response = client.post(
            "/api/v1/convert",
            content="value=1&fromUnit=meter&toUnit=centimeter&category=length",
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
        assert response.status_code == 400


class TestBatch:
    def test_batch(self, client):
        response = client.post(
            "/api/v1/convert/batch",
            json={
                "conversions": [
                    CONVERSION,
                    {"value": 0, "fromUnit": "celsius", "toUnit": "fahrenheit", "category": "temperature"},
                    {"value": "x", "fromUnit": "meter", "toUnit": "foot", "category": "length"},
                ]
            },
        )
        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["totalConversions"] == 3
        assert body["successfulConversions"] == 2
        assert body["failedConversions"] == 1
        assert [item["index"] for item in body["results"]] == [0, 1, 2]

    @pytest.mark.parametrize(
        "payload, code",
        [
            ({"conversions": "invalid"}, "INVALID_CONVERSIONS_FORMAT"),
            ({}, "INVALID_CONVERSIONS_FORMAT"),
            ({"conversions": []}, "EMPTY_CONVERSIONS"),
            ({"conversions": [CONVERSION] * 101}, "TOO_MANY_CONVERSIONS"),
        ],
    )
    def test_batch_errors(self, client, payload, code):
        response = client.post("/api/v1/convert/batch", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == code

    def test_batch_cap_message(self, client):
        body = client.post("/api/v1/convert/batch", json={"conversions": [CONVERSION] * 101}).json()
        assert "Maximum 100 conversions allowed" in body["error"]


class TestFormulaAndValidate:
    def test_formula(self, client):
        body = client.get("/api/v1/convert/formula/length/meter/centimeter").json()
        assert body["success"] is True
        assert body["fromUnit"] == "meter"
        assert body["formula"] == "1 m = 1 × 100 = 100 cm"

    def test_formula_for_unknown_units_is_empty(self, client):
        body = client.get("/api/v1/convert/formula/length/meter/cubit").json()
        assert body["formula"] == ""

    def test_validate(self, client):
        body = client.post("/api/v1/convert/validate", json=CONVERSION).json()
        assert body["valid"] is True
        assert body["errors"] == []
        assert body["conversionValid"] is True

    def test_validate_reports_errors(self, client):
        body = client.post("/api/v1/convert/validate", json={"value": "abc"}).json()
        assert body["valid"] is False
        assert body["errors"] == [
            "Value must be a valid number",
            "From unit is required",
            "To unit is required",
            "Category is required",
        ]


class TestFavorites:
    def test_info(self, client):
        body = client.get("/api/v1/favorites").json()
        assert body["success"] is True
        assert "stored locally" in body["message"]
        assert body["storageKey"] == "unitConverterFavorites"

    def test_validate(self, client):
        good = {"name": "Test", "category": "length", "fromUnit": "meter", "toUnit": "centimeter"}
        body = client.post("/api/v1/favorites/validate", json=good).json()
        assert body == {"valid": True, "errors": [], "timestamp": body["timestamp"]}

        bad = {**good, "name": "", "toUnit": "meter"}
        body = client.post("/api/v1/favorites/validate", json=bad).json()
        assert body["valid"] is False
        assert len(body["errors"]) == 2

    def test_export(self, client):
        favorites = [{"id": "t1", "name": "Test", "category": "length",
                      "fromUnit": "meter", "toUnit": "centimeter", "useCount": 5}]
        body = client.post("/api/v1/favorites/export", json={"favorites": favorites}).json()
        assert body["exportData"]["version"] == "1.0.0"
        assert body["exportData"]["favoritesCount"] == 1

    def test_import(self, client):
        export_data = {
            "version": "1.0.0",
            "favorites": [{"name": "Imported", "category": "length",
                           "fromUnit": "meter", "toUnit": "centimeter"}],
        }
        body = client.post("/api/v1/favorites/import", json={"exportData": export_data}).json()
        assert body["success"] is True
        assert body["importedCount"] == 1

    @pytest.mark.parametrize(
        "payload, code",
        [
            ({}, "INVALID_EXPORT_DATA"),
            ({"exportData": {"favorites": "nope"}}, "INVALID_FAVORITES_ARRAY"),
        ],
    )
    def test_import_errors(self, client, payload, code):
        response = client.post("/api/v1/favorites/import", json=payload)
        assert response.status_code == 400
        assert response.json()["code"] == code

    def test_stats(self, client):
        favorites = [
            {"name": "A", "category": "length", "useCount": 5},
            {"name": "B", "category": "weight", "useCount": 3},
        ]
        body = client.post("/api/v1/favorites/stats", json={"favorites": favorites}).json()
        assert body["stats"]["totalUseCount"] == 8
        assert body["stats"]["averageUseCount"] == 4
        assert set(body["stats"]["categoriesUsed"]) == {"length", "weight"}

    @pytest.mark.parametrize("path", ["/api/v1/favorites/export", "/api/v1/favorites/stats"])
    def test_favorites_must_be_a_list(self, client, path):
        response = client.post(path, json={"favorites": {}})
        assert response.status_code == 400
        assert response.json()["code"] == "INVALID_FAVORITES_FORMAT"


def test_unknown_api_endpoint(client):
    response = client.get("/api/v1/unknown")
    assert response.status_code == 404
    assert response.json() == {
        "error": "API endpoint not found",
        "path": "/api/v1/unknown",
        "method": "GET",
    }
