"""Geocoding of job addresses through a Nominatim-compatible search API."""

from __future__ import annotations

from dataclasses import dataclass, field
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from pydantic import ValidationError

from jobsync.adapters.http_resilience import ResilientClient
from jobsync.config.geocoding import DEFAULT_NOMINATIM_BASE_URL, get_geocoding_config
from jobsync.domain.model import Address, GeoPoint
from jobsync.domain.ports import Geocoder

from .schema import SearchResponse

if TYPE_CHECKING:
    from collections.abc import Callable

    from jobsync.config.geocoding import GeocodingConfig
    from jobsync.config.http_resilience import ResilienceConfig

log = getLogger(__name__)

SEARCH_PATH = "/search"


class GeocodingError(RuntimeError):
    """Raised when the geocoder answers with an unusable payload."""


def _default_client_factory(config: ResilienceConfig) -> ResilientClient:
    return ResilientClient(config)


@dataclass(slots=True)
class NominatimGeocoder:
    config: GeocodingConfig = field(default_factory=get_geocoding_config)
    client_factory: Callable[[ResilienceConfig], ResilientClient] = field(
        default=_default_client_factory
    )

    async def __call__(self, address: Address) -> GeoPoint | None:
        query = address.as_query()
        if not query:
            return None

        params: dict[str, str | int] = {"q": query, "format": "jsonv2", "limit": 1}
        if self.config.country_codes:
            params["countrycodes"] = self.config.country_codes

        async with self.client_factory(self.config.resilience) as client:
            response = await client.get(self._search_url(), params=httpx.QueryParams(params))
        response.raise_for_status()

        try:
            result = SearchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise GeocodingError(f"Unexpected geocoder payload for {query!r}") from exc

        place = result.best
        if place is None:
            log.info(f"No geocoding result for {query!r}")
            return None
        return GeoPoint(latitude=place.lat, longitude=place.lon)

    def _search_url(self) -> str:
        base_url = self.config.resilience.base_url or DEFAULT_NOMINATIM_BASE_URL
        return base_url.rstrip("/") + SEARCH_PATH


if TYPE_CHECKING:
    _geocoder_check: Geocoder = NominatimGeocoder()
