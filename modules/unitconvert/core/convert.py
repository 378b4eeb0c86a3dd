from __future__ import annotations

import math
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Callable, Dict, List, Tuple

from modules.unitconvert.core.formula import conversion_formula
from modules.unitconvert.core.precision import is_number, round_to_precision
from modules.unitconvert.core.units import TEMPERATURE, Category, find_category


class ErrorKind(str, Enum):
    INVALID_VALUE = "InvalidValue"
    MISSING_FIELD = "MissingField"
    CATEGORY_NOT_FOUND = "CategoryNotFound"
    UNIT_NOT_FOUND = "UnitNotFound"


@dataclass(frozen=True)
class ConversionError:
    kind: ErrorKind
    message: str
    # offending field ("value", "fromUnit", ...) or unit key
    subject: str | None = None


@dataclass(frozen=True)
class ConversionResult:
    success: bool
    original_value: Any
    from_unit: Any
    to_unit: Any
    category: Any
    timestamp: str
    converted_value: float | None = None
    formula: str = ""
    error: ConversionError | None = None

    def to_dict(self) -> Dict[str, Any]:
        if self.success:
            return {
                "success": True,
                "originalValue": self.original_value,
                "convertedValue": self.converted_value,
                "fromUnit": self.from_unit,
                "toUnit": self.to_unit,
                "category": self.category,
                "formula": self.formula,
                "timestamp": self.timestamp,
            }
        return {
            "success": False,
            "error": self.error.message if self.error else "",
            "originalValue": self.original_value,
            "fromUnit": self.from_unit,
            "toUnit": self.to_unit,
            "category": self.category,
            "timestamp": self.timestamp,
        }


Outcome = Tuple[float | None, ConversionError | None]


def utc_timestamp() -> str:
    now = datetime.now(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def _unknown_temperature(unit: str) -> ConversionError:
    return ConversionError(
        ErrorKind.UNIT_NOT_FOUND, f"Unknown temperature unit: {unit}", unit
    )


_TO_CELSIUS: Dict[str, Callable[[float], float]] = {
    "celsius": lambda v: v,
    "fahrenheit": lambda v: (v - 32) * 5 / 9,
    "kelvin": lambda v: v - 273.15,
    "rankine": lambda v: (v - 491.67) * 5 / 9,
}

_FROM_CELSIUS: Dict[str, Callable[[float], float]] = {
    "celsius": lambda c: c,
    "fahrenheit": lambda c: c * 9 / 5 + 32,
    "kelvin": lambda c: c + 273.15,
    "rankine": lambda c: c * 9 / 5 + 491.67,
}


def convert_temperature(value: float, from_unit: str, to_unit: str) -> Outcome:
    """Affine conversion pivoting through Celsius. Unit keys are checked before the same-unit shortcut."""
    to_celsius = _TO_CELSIUS.get(from_unit)
    if to_celsius is None:
        return None, _unknown_temperature(from_unit)
    from_celsius = _FROM_CELSIUS.get(to_unit)
    if from_celsius is None:
        return None, _unknown_temperature(to_unit)

    if from_unit == to_unit:
        return value, None

    return round_to_precision(from_celsius(to_celsius(value))), None


def convert_with_factors(
    value: float, from_unit: str, to_unit: str, category: Category
) -> Outcome:
    """Linear conversion through the base unit. Unit keys are checked before the same-unit shortcut."""
    for unit in (from_unit, to_unit):
        if unit not in category.units:
            return None, ConversionError(
                ErrorKind.UNIT_NOT_FOUND,
                f"Unknown unit '{unit}' in category '{category.key}'",
                unit,
            )

    if from_unit == to_unit:
        return value, None

    base_value = value * category.units[from_unit].factor
    result = base_value / category.units[to_unit].factor
    return round_to_precision(result), None


def _missing(field: str, label: str) -> ConversionError:
    return ConversionError(ErrorKind.MISSING_FIELD, f"{label} is required", field)


def _validate(value: Any, from_unit: Any, to_unit: Any, category: Any) -> List[ConversionError]:
    errors: List[ConversionError] = []
    if value is None:
        errors.append(_missing("value", "Value"))
    elif not is_number(value):
        errors.append(
            ConversionError(ErrorKind.INVALID_VALUE, "Value must be a valid number", "value")
        )

    for field, label, raw in (
        ("fromUnit", "From unit", from_unit),
        ("toUnit", "To unit", to_unit),
        ("category", "Category", category),
    ):
        if not isinstance(raw, str) or not raw.strip():
            errors.append(_missing(field, label))
    return errors


def _compute(value: Any, from_unit: Any, to_unit: Any, category: Any) -> Outcome:
    errors = _validate(value, from_unit, to_unit, category)
    if errors:
        return None, errors[0]

    category_data = find_category(category)
    if category_data is None:
        return None, ConversionError(
            ErrorKind.CATEGORY_NOT_FOUND, f"Unknown category: {category}", category
        )

    if category_data.key == TEMPERATURE:
        result, error = convert_temperature(value, from_unit, to_unit)
    else:
        result, error = convert_with_factors(value, from_unit, to_unit, category_data)
    if error:
        return None, error

    if not math.isfinite(result):
        return None, ConversionError(
            ErrorKind.INVALID_VALUE, "Converted value is out of range", "value"
        )
    return result, None


def convert(value: Any, from_unit: Any, to_unit: Any, category: Any) -> ConversionResult:
    result, error = _compute(value, from_unit, to_unit, category)
    timestamp = utc_timestamp()

    if error:
        return ConversionResult(
            success=False,
            original_value=value,
            from_unit=from_unit,
            to_unit=to_unit,
            category=category,
            timestamp=timestamp,
            error=error,
        )

    return ConversionResult(
        success=True,
        original_value=value,
        from_unit=from_unit,
        to_unit=to_unit,
        category=category,
        timestamp=timestamp,
        converted_value=result,
        formula=conversion_formula(value, from_unit, to_unit, category),
    )


def validate_conversion(
    value: Any, from_unit: Any, to_unit: Any, category: Any
) -> Dict[str, Any]:
    """Report field errors, then try the conversion when the fields look sane."""
    errors = [error.message for error in _validate(value, from_unit, to_unit, category)]

    conversion_valid = False
    conversion_error: str | None = None
    if not errors:
        outcome = convert(value, from_unit, to_unit, category)
        conversion_valid = outcome.success
        if outcome.error:
            conversion_error = outcome.error.message

    return {
        "valid": not errors and conversion_valid,
        "errors": errors,
        "conversionValid": conversion_valid,
        "conversionError": conversion_error,
    }


__all__ = [
    "ConversionError",
    "ConversionResult",
    "ErrorKind",
    "convert",
    "convert_temperature",
    "convert_with_factors",
    "utc_timestamp",
    "validate_conversion",
]
