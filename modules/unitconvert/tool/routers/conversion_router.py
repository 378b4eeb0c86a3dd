from __future__ import annotations

import structlog
from fastapi import APIRouter, Depends

from modules.unitconvert.core.batch import convert_batch
from modules.unitconvert.core.convert import convert, utc_timestamp, validate_conversion
from modules.unitconvert.core.formula import conversion_formula
from modules.unitconvert.core.precision import parse_number
from modules.unitconvert.tool.deps import app_settings
from modules.unitconvert.tool.schemas import BatchRequest, ConversionRequest
from universe.errors import error_response
from universe.settings import Settings

logger = structlog.get_logger(__name__)

router = APIRouter(prefix="/api/v1/convert", tags=["convert"])

_REQUIRED = (
    ("from_unit", "From unit is required", "MISSING_FROM_UNIT"),
    ("to_unit", "To unit is required", "MISSING_TO_UNIT"),
    ("category", "Category is required", "MISSING_CATEGORY"),
)


@router.post("")
def convert_value(payload: ConversionRequest):
    if payload.value is None:
        return error_response("Value is required", "MISSING_VALUE")
    for attr, message, code in _REQUIRED:
        if not getattr(payload, attr):
            return error_response(message, code)

    value, error = parse_number(payload.value)
    if error or value is None:
        return error_response("Value must be a valid number", "INVALID_VALUE")

    outcome = convert(value, payload.from_unit, payload.to_unit, payload.category)
    if not outcome.success:
        logger.warning(
            "conversion_failed",
            category=payload.category,
            from_unit=payload.from_unit,
            to_unit=payload.to_unit,
            error=outcome.error.kind.value if outcome.error else None,
        )
        return error_response(
            outcome.error.message if outcome.error else "Conversion failed",
            "CONVERSION_ERROR",
            details=outcome.to_dict(),
        )
    return outcome.to_dict()


@router.post("/batch")
def convert_many(payload: BatchRequest, settings: Settings = Depends(app_settings)):
    conversions = payload.conversions
    if not isinstance(conversions, list):
        return error_response("Conversions must be an array", "INVALID_CONVERSIONS_FORMAT")
    if not conversions:
        return error_response("At least one conversion is required", "EMPTY_CONVERSIONS")
    limit = settings.batch_max_conversions
    if len(conversions) > limit:
        return error_response(
            f"Maximum {limit} conversions allowed per batch",
            "TOO_MANY_CONVERSIONS",
        )

    summary = convert_batch(conversions)
    logger.info(
        "batch_converted",
        total=summary.total,
        succeeded=summary.succeeded,
        failed=summary.failed,
    )
    return {"success": True, **summary.to_dict(), "timestamp": utc_timestamp()}


@router.get("/formula/{category}/{from_unit}/{to_unit}")
def formula(category: str, from_unit: str, to_unit: str):
    return {
        "success": True,
        "category": category,
        "fromUnit": from_unit,
        "toUnit": to_unit,
        "formula": conversion_formula(1, from_unit, to_unit, category),
        "timestamp": utc_timestamp(),
    }


@router.post("/validate")
def validate(payload: ConversionRequest):
    value = payload.value
    parsed, error = parse_number(value)
    if not error:
        value = parsed

    report = validate_conversion(value, payload.from_unit, payload.to_unit, payload.category)
    return {**report, "timestamp": utc_timestamp()}


__all__ = ["router"]
