"""Geocoder configuration values."""

from __future__ import annotations

from dataclasses import dataclass

from .env import optional_env_str, require_env_vars
from .errors import InvalidConfigurationValueError
from .http_resilience import CacheConfig, RateLimit, ResilienceConfig, RetryPolicy

DEFAULT_NOMINATIM_BASE_URL = "https://nominatim.openstreetmap.org"
GEOCODER_TIMEOUT_SECONDS = 10.0
CACHE_MODES = ("sqlite", "memory", "off")


@dataclass(frozen=True, slots=True)
class GeocodingConfig:
    resilience: ResilienceConfig
    country_codes: str | None = None


def _cache_from_env() -> CacheConfig | None:
    mode = optional_env_str("JOBSYNC_GEOCODER_CACHE", "sqlite").lower()
    if mode == "off":
        return None
    if mode == "sqlite":
        return CacheConfig(backend="sqlite")
    if mode == "memory":
        return CacheConfig(backend="memory")
    raise InvalidConfigurationValueError("JOBSYNC_GEOCODER_CACHE", mode, " | ".join(CACHE_MODES))


def get_geocoding_config() -> GeocodingConfig:
    values = require_env_vars(("JOBSYNC_GEOCODER_CONTACT",))
    contact = values["JOBSYNC_GEOCODER_CONTACT"]
    base_url = optional_env_str("JOBSYNC_GEOCODER_URL", DEFAULT_NOMINATIM_BASE_URL)
    country_codes = optional_env_str("JOBSYNC_GEOCODER_COUNTRIES", "") or None

    resilience = ResilienceConfig(
        name="geocoder",
        base_url=base_url,
        timeout_seconds=GEOCODER_TIMEOUT_SECONDS,
        # Nominatim usage policy: at most one request per second
        ratelimit=RateLimit(max_calls=1, per_seconds=1.0),
        retry=RetryPolicy(total=3),
        cache=_cache_from_env(),
        default_headers={"User-Agent": f"jobsync ({contact})"},
    )
    return GeocodingConfig(resilience=resilience, country_codes=country_codes)
