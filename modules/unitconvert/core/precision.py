from __future__ import annotations

import math
import sys
from decimal import Decimal
from numbers import Real
from typing import Any, Tuple

PRECISION = 10
EPSILON = sys.float_info.epsilon


def is_number(value: Any) -> bool:
    """True for real, finite numbers. Booleans are not numbers here."""
    if isinstance(value, bool) or not isinstance(value, Real):
        return False
    try:
        return math.isfinite(float(value))
    except OverflowError:
        return False


def round_half_up(value: float) -> float:
    return float(math.floor(value + 0.5))


def round_to_precision(value: float, decimals: int = PRECISION) -> float:
    """Round to ``decimals`` places after nudging by machine epsilon.

    The nudge absorbs binary representation error (``1.005`` is stored as
    ``1.00499999...``). Values too large to scale are returned unchanged.
    """
    scale = 10 ** decimals
    scaled = (value + EPSILON) * scale
    if not math.isfinite(scaled):
        return value
    return round_half_up(scaled) / scale


def format_number(value: Any) -> str:
    """Render a number the way a JavaScript client prints it.

    ``100.0`` -> ``100``, ``1e-09`` -> ``1e-9``, ``1e-05`` -> ``0.00001``.
    """
    if isinstance(value, bool) or not isinstance(value, Real):
        return str(value)
    number = float(value)
    if math.isnan(number):
        return "NaN"
    if math.isinf(number):
        return "Infinity" if number > 0 else "-Infinity"
    if number == 0:
        return "0"
    if number.is_integer() and abs(number) < 1e21:
        return str(int(number))

    magnitude = abs(number)
    text = repr(number)
    if 1e-6 <= magnitude < 1e21 and "e" in text:
        return format(Decimal(text), "f")
    if "e" in text:
        mantissa, exponent = text.split("e")
        if mantissa.endswith(".0"):
            mantissa = mantissa[:-2]
        exp = int(exponent)
        return f"{mantissa}e{'+' if exp > 0 else '-'}{abs(exp)}"
    return text


def parse_number(value: Any) -> Tuple[float | None, str | None]:
    """Coerce a wire value into a float.

    Numbers pass through. Strings accept spaces and a decimal comma
    (``"1 234,5"``).
    """
    if value is None:
        return None, "Value is required"
    if isinstance(value, bool):
        return None, "Value must be a valid number"
    if isinstance(value, Real):
        if not is_number(value):
            return None, "Value must be a valid number"
        return value, None

    raw = str(value).strip()
    if not raw:
        return None, "Value is required"

    compact = raw.replace(" ", "")
    if "," in compact and "." in compact:
        last_comma = compact.rfind(",")
        last_dot = compact.rfind(".")
        if last_comma > last_dot:
            compact = compact.replace(".", "")
            compact = compact.replace(",", ".")
        else:
            compact = compact.replace(",", "")
    elif "," in compact:
        compact = compact.replace(",", ".")

    try:
        parsed = float(compact)
    except ValueError:
        return None, "Value must be a valid number"
    if not math.isfinite(parsed):
        return None, "Value must be a valid number"
    return parsed, None
