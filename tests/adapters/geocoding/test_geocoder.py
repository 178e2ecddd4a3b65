from __future__ import annotations

import asyncio
import json
from dataclasses import replace

import httpx
import pytest

from jobsync.adapters.geocoding import GeocodingError, NominatimGeocoder
from jobsync.adapters.http_resilience import ResilientClient
from jobsync.config import GeocodingConfig, ResilienceConfig, RetryPolicy
from jobsync.domain.model import Address, GeoPoint

ADDRESS = Address(street="12 Elm St", city="Springfield", state="IL", zip="62701")


def _config(country_codes: str | None = None) -> GeocodingConfig:
    return GeocodingConfig(
        resilience=ResilienceConfig(
            name="geocoder-test",
            base_url="https://geo.example.test",
            retry=RetryPolicy(total=0),
            cache=None,
            default_headers={"User-Agent": "jobsync (tests@example.com)"},
        ),
        country_codes=country_codes,
    )


def _geocoder(
    handler: httpx.MockTransport,
    *,
    country_codes: str | None = None,
) -> NominatimGeocoder:
    def factory(config: ResilienceConfig) -> ResilientClient:
        return ResilientClient(config, transport=handler)

    return NominatimGeocoder(config=_config(country_codes), client_factory=factory)


def test_geocoder_returns_best_place() -> None:
    requests: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        requests.append(request)
        body = [{"lat": "39.80", "lon": "-89.64", "display_name": "Springfield", "importance": 0.7}]
        return httpx.Response(200, json=body)

    geocoder = _geocoder(httpx.MockTransport(handler), country_codes="us")

    point = asyncio.run(geocoder(ADDRESS))

    assert point == GeoPoint(latitude=39.80, longitude=-89.64)
    request = requests[0]
    assert request.url.path == "/search"
    assert request.url.params["q"] == "12 Elm St, Springfield, IL, 62701"
    assert request.url.params["format"] == "jsonv2"
    assert request.url.params["countrycodes"] == "us"
    assert request.headers["User-Agent"] == "jobsync (tests@example.com)"


def test_geocoder_returns_none_without_results() -> None:
    geocoder = _geocoder(httpx.MockTransport(lambda _request: httpx.Response(200, json=[])))

    assert asyncio.run(geocoder(ADDRESS)) is None


def test_geocoder_skips_empty_addresses() -> None:
    def handler(_request: httpx.Request) -> httpx.Response:
        raise AssertionError("no request expected")

    geocoder = _geocoder(httpx.MockTransport(handler))

    assert asyncio.run(geocoder(Address(street="  "))) is None


def test_geocoder_rejects_malformed_payload() -> None:
    geocoder = _geocoder(
        httpx.MockTransport(lambda _request: httpx.Response(200, json={"error": "nope"}))
    )

    with pytest.raises(GeocodingError):
        asyncio.run(geocoder(ADDRESS))


def test_geocoder_surfaces_http_errors() -> None:
    geocoder = _geocoder(
        httpx.MockTransport(lambda _request: httpx.Response(403, content=json.dumps({}).encode()))
    )

    with pytest.raises(httpx.HTTPStatusError):
        asyncio.run(geocoder(ADDRESS))


def test_default_search_url_is_used_without_base_url() -> None:
    geocoder = _geocoder(httpx.MockTransport(lambda _request: httpx.Response(200, json=[])))
    geocoder.config = replace(
        geocoder.config, resilience=replace(geocoder.config.resilience, base_url=None)
    )

    assert geocoder._search_url() == "https://nominatim.openstreetmap.org/search"  # noqa: SLF001
