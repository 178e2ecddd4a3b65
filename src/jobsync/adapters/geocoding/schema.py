"""Pydantic models describing Nominatim search results."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, RootModel, field_validator


class NominatimBaseModel(BaseModel):
    model_config = ConfigDict(extra="ignore", populate_by_name=True)


class PlacePayload(NominatimBaseModel):
    lat: float
    lon: float
    display_name: str | None = None
    importance: float | None = None

    @field_validator("lat", "lon", mode="before")
    @classmethod
    def parse_coordinate(cls, value: str | float) -> float:
        return float(value)


class SearchResponse(RootModel[list[PlacePayload]]):
    @property
    def best(self) -> PlacePayload | None:
        return self.root[0] if self.root else None
