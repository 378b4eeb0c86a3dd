from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Any, Dict, Iterator, List, Mapping, Tuple

from fastapi import status

from universe.errors import DomainError

TEMPERATURE = "temperature"

SEARCH_DEFAULT_LIMIT = 10
SEARCH_MAX_LIMIT = 50


class CategoryNotFound(DomainError):
    def __init__(self, category: str) -> None:
        super().__init__(
            f"Unknown category: {category}",
            status_code=status.HTTP_404_NOT_FOUND,
            code="CATEGORY_NOT_FOUND",
        )
        self.category = category


class UnitNotFound(DomainError):
    def __init__(self, category: str, unit: str) -> None:
        super().__init__(
            f"Unit '{unit}' not found in category '{category}'",
            status_code=status.HTTP_404_NOT_FOUND,
            code="UNIT_NOT_FOUND",
        )
        self.category = category
        self.unit = unit


@dataclass(frozen=True)
class Unit:
    key: str
    name: str
    symbol: str
    factor: float
    system: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "symbol": self.symbol,
            "factor": self.factor,
            "category": self.system,
        }


@dataclass(frozen=True)
class Category:
    key: str
    name: str
    icon: str
    base_unit: str
    units: Mapping[str, Unit]

    def summary(self) -> Dict[str, Any]:
        return {
            "key": self.key,
            "name": self.name,
            "icon": self.icon,
            "baseUnit": self.base_unit,
            "unitCount": len(self.units),
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "category": self.key,
            "name": self.name,
            "icon": self.icon,
            "baseUnit": self.base_unit,
            "units": [unit.to_dict() for unit in self.units.values()],
        }


UnitRow = Tuple[str, str, str, float, str]

# (key, name, icon, base unit, [(unit key, name, symbol, factor, system), ...])
# Factors convert one unit into the base unit. Temperature keeps a nominal 1.
_TABLE: List[Tuple[str, str, str, str, List[UnitRow]]] = [
    ("length", "Length", "📏", "meter", [
        ("nanometer", "Nanometer", "nm", 1e-9, "metric"),
        ("micrometer", "Micrometer", "μm", 1e-6, "metric"),
        ("millimeter", "Millimeter", "mm", 0.001, "metric"),
        ("centimeter", "Centimeter", "cm", 0.01, "metric"),
        ("meter", "Meter", "m", 1, "metric"),
        ("kilometer", "Kilometer", "km", 1000, "metric"),
        ("inch", "Inch", "in", 0.0254, "imperial"),
        ("foot", "Foot", "ft", 0.3048, "imperial"),
        ("yard", "Yard", "yd", 0.9144, "imperial"),
        ("mile", "Mile", "mi", 1609.344, "imperial"),
        ("nauticalMile", "Nautical Mile", "nmi", 1852, "nautical"),
        ("lightYear", "Light Year", "ly", 9.461e15, "astronomical"),
    ]),
    ("weight", "Weight", "⚖️", "kilogram", [
        ("milligram", "Milligram", "mg", 1e-6, "metric"),
        ("gram", "Gram", "g", 0.001, "metric"),
        ("kilogram", "Kilogram", "kg", 1, "metric"),
        ("tonne", "Tonne", "t", 1000, "metric"),
        ("ounce", "Ounce", "oz", 0.0283495, "imperial"),
        ("pound", "Pound", "lb", 0.453592, "imperial"),
        ("stone", "Stone", "st", 6.35029, "imperial"),
        ("ton", "Ton (US)", "ton", 907.185, "imperial"),
    ]),
    ("volume", "Volume", "🥤", "liter", [
        ("milliliter", "Milliliter", "ml", 0.001, "metric"),
        ("liter", "Liter", "l", 1, "metric"),
        ("cubicMeter", "Cubic Meter", "m³", 1000, "metric"),
        ("fluidOunce", "Fluid Ounce (US)", "fl oz", 0.0295735, "imperial"),
        ("cup", "Cup (US)", "cup", 0.236588, "imperial"),
        ("pint", "Pint (US)", "pt", 0.473176, "imperial"),
        ("quart", "Quart (US)", "qt", 0.946353, "imperial"),
        ("gallon", "Gallon (US)", "gal", 3.78541, "imperial"),
        ("fluidOunceUK", "Fluid Ounce (UK)", "fl oz (UK)", 0.0284131, "uk-imperial"),
        ("pintUK", "Pint (UK)", "pt (UK)", 0.568261, "uk-imperial"),
        ("gallonUK", "Gallon (UK)", "gal (UK)", 4.54609, "uk-imperial"),
    ]),
    (TEMPERATURE, "Temperature", "🌡️", "celsius", [
        ("celsius", "Celsius", "°C", 1, "metric"),
        ("fahrenheit", "Fahrenheit", "°F", 1, "imperial"),
        ("kelvin", "Kelvin", "K", 1, "scientific"),
        ("rankine", "Rankine", "°R", 1, "scientific"),
    ]),
    ("area", "Area", "📐", "squareMeter", [
        ("squareMillimeter", "Square Millimeter", "mm²", 1e-6, "metric"),
        ("squareCentimeter", "Square Centimeter", "cm²", 1e-4, "metric"),
        ("squareMeter", "Square Meter", "m²", 1, "metric"),
        ("hectare", "Hectare", "ha", 10000, "metric"),
        ("squareKilometer", "Square Kilometer", "km²", 1e6, "metric"),
        ("squareInch", "Square Inch", "in²", 0.00064516, "imperial"),
        ("squareFoot", "Square Foot", "ft²", 0.092903, "imperial"),
        ("squareYard", "Square Yard", "yd²", 0.836127, "imperial"),
        ("acre", "Acre", "ac", 4046.86, "imperial"),
        ("squareMile", "Square Mile", "mi²", 2.59e6, "imperial"),
    ]),
    ("time", "Time", "⏰", "second", [
        ("nanosecond", "Nanosecond", "ns", 1e-9, "scientific"),
        ("microsecond", "Microsecond", "μs", 1e-6, "scientific"),
        ("millisecond", "Millisecond", "ms", 0.001, "metric"),
        ("second", "Second", "s", 1, "metric"),
        ("minute", "Minute", "min", 60, "common"),
        ("hour", "Hour", "h", 3600, "common"),
        ("day", "Day", "d", 86400, "common"),
        ("week", "Week", "wk", 604800, "common"),
        ("month", "Month", "mo", 2629746, "common"),
        ("year", "Year", "yr", 31556952, "common"),
    ]),
    ("speed", "Speed", "🏃", "meterPerSecond", [
        ("meterPerSecond", "Meter per Second", "m/s", 1, "metric"),
        ("kilometerPerHour", "Kilometer per Hour", "km/h", 0.277778, "metric"),
        ("milePerHour", "Mile per Hour", "mph", 0.44704, "imperial"),
        ("footPerSecond", "Foot per Second", "ft/s", 0.3048, "imperial"),
        ("knot", "Knot", "kn", 0.514444, "nautical"),
        ("mach", "Mach", "Ma", 343, "scientific"),
    ]),
    ("energy", "Energy", "⚡", "joule", [
        ("joule", "Joule", "J", 1, "metric"),
        ("kilojoule", "Kilojoule", "kJ", 1000, "metric"),
        ("calorie", "Calorie", "cal", 4.184, "metric"),
        ("kilocalorie", "Kilocalorie", "kcal", 4184, "metric"),
        ("wattHour", "Watt Hour", "Wh", 3600, "electrical"),
        ("kilowattHour", "Kilowatt Hour", "kWh", 3.6e6, "electrical"),
        ("btu", "British Thermal Unit", "BTU", 1055.06, "imperial"),
    ]),
]


def _build_categories() -> Mapping[str, Category]:
    categories: Dict[str, Category] = {}
    for key, name, icon, base_unit, rows in _TABLE:
        units = {
            unit_key: Unit(unit_key, unit_name, symbol, factor, system)
            for unit_key, unit_name, symbol, factor, system in rows
        }
        if base_unit not in units:
            raise ValueError(f"Base unit '{base_unit}' missing from category '{key}'.")
        categories[key] = Category(
            key=key,
            name=name,
            icon=icon,
            base_unit=base_unit,
            units=MappingProxyType(units),
        )
    return MappingProxyType(categories)


CATEGORIES: Mapping[str, Category] = _build_categories()


def list_categories() -> List[Dict[str, Any]]:
    return [category.summary() for category in CATEGORIES.values()]


def find_category(key: Any) -> Category | None:
    if not isinstance(key, str):
        return None
    return CATEGORIES.get(key)


def get_category(key: str) -> Category:
    category = find_category(key)
    if category is None:
        raise CategoryNotFound(key)
    return category


def get_unit(category_key: str, unit_key: str) -> Unit:
    category = get_category(category_key)
    unit = category.units.get(unit_key)
    if unit is None:
        raise UnitNotFound(category_key, unit_key)
    return unit


def clamp_limit(limit: Any, default: int = SEARCH_DEFAULT_LIMIT) -> int:
    try:
        parsed = int(limit)
    except (TypeError, ValueError):
        parsed = 0
    if parsed <= 0:
        parsed = default
    return max(1, min(parsed, SEARCH_MAX_LIMIT))


class UnitSearch:
    """Lazy view over the units of one category matching a query.

    Every iteration starts from the beginning of the category.
    """

    def __init__(self, category: Category, query: str, limit: int) -> None:
        self.category = category
        self.query = query
        self.limit = limit

    def __iter__(self) -> Iterator[Unit]:
        needle = self.query.lower()
        found = 0
        for unit in self.category.units.values():
            if found >= self.limit:
                return
            if (
                needle in unit.key.lower()
                or needle in unit.name.lower()
                or needle in unit.symbol.lower()
            ):
                found += 1
                yield unit


def search_units(category_key: str, query: str, limit: Any = None) -> UnitSearch:
    category = get_category(category_key)
    return UnitSearch(category, str(query or ""), clamp_limit(limit))


__all__ = [
    "CATEGORIES",
    "Category",
    "CategoryNotFound",
    "TEMPERATURE",
    "Unit",
    "UnitNotFound",
    "UnitSearch",
    "clamp_limit",
    "find_category",
    "get_category",
    "get_unit",
    "list_categories",
    "search_units",
]
