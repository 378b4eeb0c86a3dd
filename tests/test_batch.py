from modules.unitconvert.core.batch import convert_batch


def test_results_keep_input_order_and_indices():
    requests = [
        {"value": 1, "fromUnit": "meter", "toUnit": "centimeter", "category": "length"},
        {"value": "abc", "fromUnit": "meter", "toUnit": "centimeter", "category": "length"},
        {"value": 0, "fromUnit": "celsius", "toUnit": "fahrenheit", "category": "temperature"},
        {"value": 1, "fromUnit": "meter", "toUnit": "foot", "category": "unknown"},
        "not an object",
        {"value": "5", "fromUnit": "pound", "toUnit": "kilogram", "category": "weight"},
    ]
    summary = convert_batch(requests)

    assert summary.total == len(requests)
    assert [item["index"] for item in summary.results] == list(range(len(requests)))
    assert [item["success"] for item in summary.results] == [
        True,
        False,
        True,
        False,
        False,
        True,
    ]
    assert summary.succeeded == 3
    assert summary.failed == 3


def test_invalid_value_item_echoes_request():
    request = {"value": None, "fromUnit": "meter", "toUnit": "centimeter", "category": "length"}
    item = convert_batch([request]).results[0]
    assert item == {
        "index": 0,
        "success": False,
        "error": "Invalid value",
        "conversion": request,
    }


def test_summary_payload():
    payload = convert_batch(
        [{"value": 1, "fromUnit": "kilometer", "toUnit": "meter", "category": "length"}]
    ).to_dict()
    assert payload["totalConversions"] == 1
    assert payload["successfulConversions"] == 1
    assert payload["failedConversions"] == 0
    assert payload["results"][0]["convertedValue"] == 1000


def test_empty_batch():
    summary = convert_batch([])
    assert summary.total == 0
    assert summary.failed == 0
