from __future__ import annotations

from typing import Any, Dict, Tuple

from modules.unitconvert.core.precision import format_number, is_number, round_to_precision
from modules.unitconvert.core.units import TEMPERATURE, find_category

TEMPERATURE_FORMULAS: Dict[Tuple[str, str], str] = {
    ("celsius", "fahrenheit"): "°C × 9/5 + 32 = °F",
    ("fahrenheit", "celsius"): "(°F - 32) × 5/9 = °C",
    ("celsius", "kelvin"): "°C + 273.15 = K",
    ("kelvin", "celsius"): "K - 273.15 = °C",
    ("fahrenheit", "kelvin"): "(°F - 32) × 5/9 + 273.15 = K",
    ("kelvin", "fahrenheit"): "(K - 273.15) × 9/5 + 32 = °F",
    ("celsius", "rankine"): "°C × 9/5 + 491.67 = °R",
    ("rankine", "celsius"): "(°R - 491.67) × 5/9 = °C",
    ("fahrenheit", "rankine"): "°F + 459.67 = °R",
    ("rankine", "fahrenheit"): "°R - 459.67 = °F",
    ("kelvin", "rankine"): "K × 9/5 = °R",
    ("rankine", "kelvin"): "°R × 5/9 = K",
}


def temperature_formula(from_unit: str, to_unit: str) -> str:
    return TEMPERATURE_FORMULAS.get((from_unit, to_unit), "")


def conversion_formula(value: Any, from_unit: Any, to_unit: Any, category: Any) -> str:
    """Human readable formula for display. Returns "" for anything it cannot resolve."""
    category_data = find_category(category)
    if category_data is None:
        return ""

    from_data = category_data.units.get(from_unit) if isinstance(from_unit, str) else None
    to_data = category_data.units.get(to_unit) if isinstance(to_unit, str) else None
    if from_data is None or to_data is None:
        return ""

    if category_data.key == TEMPERATURE:
        return temperature_formula(from_unit, to_unit)

    if not is_number(value):
        return ""

    factor = from_data.factor / to_data.factor
    result = round_to_precision(value * factor)
    shown = format_number(value)
    return (
        f"{shown} {from_data.symbol} = {shown} × {format_number(factor)} "
        f"= {format_number(result)} {to_data.symbol}"
    )


__all__ = ["TEMPERATURE_FORMULAS", "conversion_formula", "temperature_formula"]
