"""
RequestExecutor - async HTTP client for the storefront backend.

Combines:
- ConnectivityProbe to fail fast (or serve cached data) while offline
- ResponseCache for GET responses with a freshness window
- TokenRefreshCoordinator for transparent, single-flight token refresh
- Bounded retry with exponential backoff for timeouts and 5xx responses
"""

import asyncio
from dataclasses import dataclass
from datetime import timedelta
from typing import Any, Awaitable, Callable, Generic, TypeVar

import httpx
from loguru import logger

from storefront.services.cache import ResponseCache
from storefront.services.connectivity import ConnectivityProbe, StaticConnectivityProbe
from storefront.services.errors import (
    AuthenticationError,
    ClientError,
    ConnectivityError,
    RequestTimeoutError,
    ResponseValidationError,
    ServerError,
    ServiceError,
)
from storefront.services.refresh import TokenRefreshCoordinator
from storefront.services.token_store import TokenStore

T = TypeVar("T")

Sleep = Callable[[float], Awaitable[None]]

REFRESH_ENDPOINT = "/auth/refresh"


@dataclass
class RequestResult(Generic[T]):
    """Result from an executed request."""

    data: T
    from_cache: str | None = None  # 'memory' | 'stale' | None
    is_stale: bool = False
    attempts: int = 0


class RequestExecutor:
    """
    Executes backend calls with caching, offline fallback, retry and refresh.

    Usage:
        engine, session_factory = await init_db()
        executor = RequestExecutor(
            base_url="http://192.168.1.235:8000/api",
            token_store=TokenStore(session_factory),
        )

        products = await executor.execute("/products", requires_auth=False)
        order = await executor.execute(
            "/orders", method="POST", body={"phone": "0900"}, use_cache=False
        )
    """

    def __init__(
        self,
        base_url: str,
        token_store: TokenStore,
        cache: ResponseCache | None = None,
        probe: ConnectivityProbe | None = None,
        timeout: float = 15.0,
        max_retries: int = 2,
        retry_base_delay: float = 1.0,
        client_type: str = "mobile",
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Sleep | None = None,
        debug: bool = False,
    ):
        self._base_url = base_url
        self._token_store = token_store
        self._cache = cache or ResponseCache(ttl=timedelta(minutes=5), debug=debug)
        self._probe = probe or StaticConnectivityProbe(online=True)
        self._timeout = timeout
        self._max_retries = max_retries
        self._retry_base_delay = retry_base_delay
        self._client_type = client_type
        self._transport = transport
        self._sleep = sleep or asyncio.sleep
        self._debug = debug

        self._coordinator = TokenRefreshCoordinator(
            token_store, self._call_refresh_endpoint, debug=debug
        )

        # HTTP client (lazy initialization)
        self._http_client: httpx.AsyncClient | None = None

    @property
    def cache(self) -> ResponseCache:
        return self._cache

    @property
    def token_store(self) -> TokenStore:
        return self._token_store

    @property
    def coordinator(self) -> TokenRefreshCoordinator:
        return self._coordinator

    async def _get_http_client(self) -> httpx.AsyncClient:
        """Get or create HTTP client."""
        if self._http_client is None:
            self._http_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=httpx.Timeout(self._timeout),
                transport=self._transport,
            )
        return self._http_client

    async def execute(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        requires_auth: bool = True,
        use_cache: bool = True,
        params: dict[str, Any] | None = None,
    ) -> Any:
        """Run a JSON request and return the unwrapped payload."""
        result = await self.request(
            endpoint,
            method=method,
            body=body,
            requires_auth=requires_auth,
            use_cache=use_cache,
            params=params,
        )
        return result.data

    async def request(
        self,
        endpoint: str,
        method: str = "GET",
        body: Any = None,
        requires_auth: bool = True,
        use_cache: bool = True,
        params: dict[str, Any] | None = None,
    ) -> RequestResult[Any]:
        """
        Make a JSON request with offline fallback, caching, retry and refresh.

        Args:
            endpoint: Path relative to the API base URL, e.g. "/products/3"
            method: HTTP method (GET, POST, PUT, DELETE)
            body: JSON body for non-GET requests
            requires_auth: Attach the bearer token and refresh it on 401
            use_cache: Serve and store GET responses through the cache
            params: Query parameters

        Returns:
            RequestResult with the unwrapped payload

        Raises:
            ConnectivityError: Offline with nothing cached
            RequestTimeoutError: Every attempt timed out
            AuthenticationError: 401 that a refresh could not fix
            ServerError: 5xx after all retries
            ClientError: Any other 4xx
            ResponseValidationError: Body is not valid JSON
        """
        method = method.upper()
        cacheable = use_cache and method == "GET"
        cache_key = self._cache.generate_key(method, endpoint, params)
        cached = None

        if not await self._probe.is_online():
            if cacheable:
                cached = await self._cache.get(cache_key)
                if cached is not None:
                    logger.warning(f"Offline, using cached data for {endpoint}")
                    is_stale = not self._cache.is_fresh(cached)
                    return RequestResult(
                        data=cached.payload,
                        from_cache="stale" if is_stale else "memory",
                        is_stale=is_stale,
                    )
            raise ConnectivityError(endpoint)

        if cacheable:
            cached = await self._cache.get(cache_key)
            if cached is not None and self._cache.is_fresh(cached):
                logger.debug(f"Using cached data for {endpoint}")
                return RequestResult(data=cached.payload, from_cache="memory")

        generation = self._cache.generation
        try:
            data, attempts = await self._send(
                method,
                endpoint,
                requires_auth=requires_auth,
                timeout=self._timeout,
                params=params,
                json_data=body if method != "GET" else None,
            )
        except ConnectivityError as e:
            if cached is not None:
                logger.warning(
                    f"Request to {endpoint} failed, returning stale data: {e}"
                )
                return RequestResult(
                    data=cached.payload, from_cache="stale", is_stale=True
                )
            raise

        if cacheable:
            await self._cache.put(cache_key, data, generation=generation)

        return RequestResult(data=data, attempts=attempts)

    async def upload(
        self,
        endpoint: str,
        fields: dict[str, str],
        files: dict[str, tuple[str, bytes, str]],
        method: str = "POST",
        requires_auth: bool = True,
    ) -> Any:
        """
        Send a multipart form request.

        Same refresh and retry rules as JSON requests, a doubled timeout and
        no client-side caching.
        """
        if not await self._probe.is_online():
            raise ConnectivityError(endpoint)

        data, _ = await self._send(
            method.upper(),
            endpoint,
            requires_auth=requires_auth,
            timeout=self._timeout * 2,
            form_data=fields,
            files=files,
        )
        return data

    async def _send(
        self,
        method: str,
        endpoint: str,
        requires_auth: bool,
        timeout: float,
        params: dict[str, Any] | None = None,
        json_data: Any = None,
        form_data: dict[str, str] | None = None,
        files: dict[str, tuple[str, bytes, str]] | None = None,
    ) -> tuple[Any, int]:
        """Attempt loop: at most max_retries retries plus one post-refresh retry."""
        client = await self._get_http_client()
        retries = 0
        attempts = 0
        refreshed_token: str | None = None

        while True:
            headers = self._build_headers(multipart=files is not None)
            token = None
            if requires_auth:
                token = refreshed_token or await self._token_store.get_access_token()
                if token:
                    headers["Authorization"] = f"Bearer {token}"

            attempts += 1
            logger.debug(f"Calling API: {method} {endpoint} (attempt {attempts})")
            try:
                response = await client.request(
                    method,
                    endpoint,
                    params=params,
                    json=json_data,
                    data=form_data,
                    files=files,
                    headers=headers,
                    timeout=timeout,
                )
            except httpx.TimeoutException as e:
                if retries < self._max_retries:
                    await self._backoff(retries, endpoint, "timed out")
                    retries += 1
                    continue
                raise RequestTimeoutError(endpoint, timeout) from e
            except httpx.TransportError as e:
                raise ConnectivityError(
                    endpoint, f"Connection to backend failed: {e}"
                ) from e
            except httpx.RequestError as e:
                raise self._wrap_request_error(e, endpoint) from e

            status = response.status_code
            # Without a sent token there is nothing to refresh
            if status == 401 and token and refreshed_token is None:
                refreshed_token = await self._coordinator.refresh(stale_token=token)
                continue

            if status >= 500 and retries < self._max_retries:
                await self._backoff(retries, endpoint, f"server error {status}")
                retries += 1
                continue

            return self._handle_response(response, endpoint), attempts

    async def _backoff(self, retry: int, endpoint: str, reason: str) -> None:
        delay = self._retry_base_delay * (2**retry)
        logger.warning(
            f"{endpoint} {reason}, retrying in {delay:.1f}s "
            f"({retry + 1}/{self._max_retries})"
        )
        await self._sleep(delay)

    async def _call_refresh_endpoint(self, refresh_token: str) -> dict[str, Any]:
        """Exchange the refresh token for new credentials (single attempt)."""
        client = await self._get_http_client()
        try:
            response = await client.post(
                REFRESH_ENDPOINT,
                json={"refreshToken": refresh_token},
                headers=self._build_headers(),
                timeout=self._timeout,
            )
        except httpx.TimeoutException as e:
            raise RequestTimeoutError(REFRESH_ENDPOINT, self._timeout) from e
        except httpx.TransportError as e:
            raise ConnectivityError(REFRESH_ENDPOINT, str(e)) from e
        except httpx.RequestError as e:
            raise self._wrap_request_error(e, REFRESH_ENDPOINT) from e

        return self._handle_response(response, REFRESH_ENDPOINT)

    @staticmethod
    def _wrap_request_error(error: httpx.RequestError, endpoint: str) -> ServiceError:
        """Map non-transport httpx failures (bad encoding, redirect loops)."""
        if isinstance(error, httpx.DecodingError):
            return ResponseValidationError(
                f"Could not decode response from '{endpoint}': {error}",
                endpoint=endpoint,
            )
        return ServiceError(
            f"Request to '{endpoint}' failed: {error}", endpoint=endpoint
        )

    def _build_headers(self, multipart: bool = False) -> dict[str, str]:
        headers = {
            "Accept": "application/json",
            "x-client-type": self._client_type,
        }
        # httpx sets the multipart boundary itself
        if not multipart:
            headers["Content-Type"] = "application/json"
        return headers

    def _handle_response(self, response: httpx.Response, endpoint: str) -> Any:
        """Decode the body, raise on error statuses and unwrap the envelope."""
        payload: Any = None
        if response.content:
            try:
                payload = response.json()
            except ValueError as e:
                if response.is_success:
                    raise ResponseValidationError(
                        f"Invalid JSON in response from '{endpoint}'",
                        endpoint=endpoint,
                        status_code=response.status_code,
                    ) from e

        if not response.is_success:
            status = response.status_code
            message = payload.get("message") if isinstance(payload, dict) else None
            message = message or f"API request failed with status {status}"
            if status == 401:
                raise AuthenticationError(message, endpoint=endpoint)
            if status >= 500:
                raise ServerError(message, endpoint=endpoint, status_code=status)
            raise ClientError(message, endpoint=endpoint, status_code=status)

        if isinstance(payload, dict) and "data" in payload:
            return payload["data"]
        return payload

    async def invalidate(self, prefix: str) -> int:
        """Drop cached responses for a resource after a write."""
        return await self._cache.invalidate(prefix)

    async def clear_cache(self) -> None:
        await self._cache.clear()

    def get_health_status(self) -> dict[str, Any]:
        """Get cache and refresh statistics."""
        return {
            "cache": self._cache.get_stats().to_dict(),
            "refresh": self._coordinator.get_stats().to_dict(),
            "refreshing": self._coordinator.is_refreshing,
        }

    async def close(self) -> None:
        """Close the HTTP client."""
        if self._http_client:
            await self._http_client.aclose()
            self._http_client = None
        logger.debug("RequestExecutor closed")

    async def __aenter__(self) -> "RequestExecutor":
        """Async context manager entry."""
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        """Async context manager exit."""
        await self.close()
