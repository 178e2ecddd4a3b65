"""Shared async HTTP client for adapters that call third-party services."""

from __future__ import annotations

import json
from logging import getLogger
from typing import TYPE_CHECKING

import httpx
from aiolimiter import AsyncLimiter
from hishel import AsyncSqliteStorage, FilterPolicy
from hishel import Response as HishelCacheResponse
from hishel._policies import BaseFilter
from hishel.httpx import AsyncCacheClient
from httpx_retries import Retry, RetryTransport

from jobsync.config.storage import get_storage_config

if TYPE_CHECKING:
    from types import TracebackType

    from httpx._types import QueryParamTypes, URLTypes

    from jobsync.config.http_resilience import CacheConfig, ResilienceConfig, RetryPolicy

log = getLogger(__name__)


def build_retry(policy: RetryPolicy) -> Retry:
    return Retry(
        total=policy.total,
        backoff_factor=policy.backoff_factor,
        max_backoff_wait=policy.max_backoff_wait,
        respect_retry_after_header=policy.respect_retry_after_header,
        allowed_methods=("GET",),
        status_forcelist=tuple(policy.status_forcelist),
        retry_on_exceptions=policy.retry_on_exceptions,
    )


class _SkipEmptyResults(BaseFilter[HishelCacheResponse]):
    """Keep empty JSON documents (``[]``, ``{}``) out of the cache."""

    def needs_body(self) -> bool:
        return True

    def apply(self, item: HishelCacheResponse, body: bytes | None) -> bool:  # noqa: ARG002
        if body is None:
            return True
        try:
            document = json.loads(body.decode("utf-8"))
        except (UnicodeDecodeError, json.JSONDecodeError):
            return False
        return bool(document)


type CacheComponents = tuple[AsyncSqliteStorage, FilterPolicy | None]


def build_cache(config: CacheConfig | None) -> CacheComponents | None:
    if config is None:
        return None
    if config.backend == "sqlite":
        database_path = config.sqlite_path or str(get_storage_config().http_cache_path())
    elif config.backend == "memory":
        database_path = ":memory:"
    else:
        raise ValueError(f"Unsupported cache backend: {config.backend}")

    storage = AsyncSqliteStorage(
        database_path=database_path,
        default_ttl=config.ttl_seconds,
        refresh_ttl_on_access=False,
    )
    policy: FilterPolicy | None = None
    if not config.store_empty_results:
        policy = FilterPolicy(response_filters=[_SkipEmptyResults()])
    return storage, policy


class ResilientClient:
    """Rate-limited GET client with retries and an optional persistent response cache."""

    def __init__(
        self,
        config: ResilienceConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.config = config
        self._limiter = (
            AsyncLimiter(config.ratelimit.max_calls, config.ratelimit.per_seconds)
            if config.ratelimit
            else None
        )
        retry_transport = RetryTransport(transport=transport, retry=build_retry(config.retry))
        headers = dict(config.default_headers or {})

        cache = build_cache(config.cache)
        if cache is None:
            self._client = httpx.AsyncClient(
                timeout=config.timeout_seconds, transport=retry_transport, headers=headers
            )
        else:
            storage, policy = cache
            self._client = AsyncCacheClient(
                timeout=config.timeout_seconds,
                transport=retry_transport,
                headers=headers,
                storage=storage,
                policy=policy,
            )

    async def __aenter__(self) -> ResilientClient:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self._client.aclose()

    async def get(self, url: URLTypes, *, params: QueryParamTypes | None = None) -> httpx.Response:
        if self._limiter is None:
            response = await self._client.get(url, params=params)
        else:
            async with self._limiter:
                response = await self._client.get(url, params=params)
        log.debug(f"{self.config.name}: GET {response.url} -> {response.status_code}")
        return response
