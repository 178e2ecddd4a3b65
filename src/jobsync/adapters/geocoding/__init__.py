"""Public interface for the geocoding adapter."""

from __future__ import annotations

from .client import GeocodingError, NominatimGeocoder
from .schema import PlacePayload, SearchResponse

__all__ = ["GeocodingError", "NominatimGeocoder", "PlacePayload", "SearchResponse"]
