from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

# Fields stay loosely typed; the routes report missing or malformed values
# with their own error codes.


class ConversionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    value: Any = None
    from_unit: Any = Field(default=None, alias="fromUnit")
    to_unit: Any = Field(default=None, alias="toUnit")
    category: Any = None


class BatchRequest(BaseModel):
    conversions: Any = None


class FavoriteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    name: Any = None
    category: Any = None
    from_unit: Any = Field(default=None, alias="fromUnit")
    to_unit: Any = Field(default=None, alias="toUnit")

    def as_wire(self) -> dict[str, Any]:
        return self.model_dump(by_alias=True)


class FavoritesRequest(BaseModel):
    favorites: Any = None


class FavoritesImportRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    export_data: Any = Field(default=None, alias="exportData")


__all__ = [
    "BatchRequest",
    "ConversionRequest",
    "FavoriteRequest",
    "FavoritesImportRequest",
    "FavoritesRequest",
]
