from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Mapping

from modules.unitconvert.core.convert import convert
from modules.unitconvert.core.precision import parse_number


@dataclass
class BatchSummary:
    results: List[Dict[str, Any]] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def succeeded(self) -> int:
        return sum(1 for item in self.results if item.get("success"))

    @property
    def failed(self) -> int:
        return self.total - self.succeeded

    def to_dict(self) -> Dict[str, Any]:
        return {
            "totalConversions": self.total,
            "successfulConversions": self.succeeded,
            "failedConversions": self.failed,
            "results": self.results,
        }


def convert_one(index: int, request: Any) -> Dict[str, Any]:
    if not isinstance(request, Mapping):
        return {
            "index": index,
            "success": False,
            "error": "Conversion must be an object",
            "conversion": request,
        }

    value, error = parse_number(request.get("value"))
    if error or value is None:
        return {
            "index": index,
            "success": False,
            "error": "Invalid value",
            "conversion": dict(request),
        }

    outcome = convert(
        value,
        request.get("fromUnit"),
        request.get("toUnit"),
        request.get("category"),
    )
    return {"index": index, **outcome.to_dict()}


def convert_batch(requests: Iterable[Any]) -> BatchSummary:
    """Convert each request independently; results keep input order."""
    return BatchSummary(
        results=[convert_one(index, request) for index, request in enumerate(requests)]
    )


__all__ = ["BatchSummary", "convert_batch", "convert_one"]
