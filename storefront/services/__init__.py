"""
Service layer infrastructure - everything between the domain API and the backend.

Provides:
- ConnectivityProbe: Network reachability check before each request
- TokenStore: Persisted credentials and user profile
- ResponseCache: GET response cache with freshness window and offline fallback
- TokenRefreshCoordinator: Single-flight access token refresh
- RequestExecutor: HTTP client combining all of the above with retry/backoff
"""

from storefront.services.errors import (
    ServiceError,
    ConnectivityError,
    RequestTimeoutError,
    AuthenticationError,
    ServerError,
    ClientError,
    ResponseValidationError,
)
from storefront.services.cache import ResponseCache, CachedResponse, CacheStats
from storefront.services.connectivity import (
    ConnectivityProbe,
    SocketConnectivityProbe,
    StaticConnectivityProbe,
)
from storefront.services.token_store import Credentials, TokenStore
from storefront.services.refresh import TokenRefreshCoordinator
from storefront.services.client import RequestExecutor, RequestResult

__all__ = [
    # Errors
    "ServiceError",
    "ConnectivityError",
    "RequestTimeoutError",
    "AuthenticationError",
    "ServerError",
    "ClientError",
    "ResponseValidationError",
    # Cache
    "ResponseCache",
    "CachedResponse",
    "CacheStats",
    # Connectivity
    "ConnectivityProbe",
    "SocketConnectivityProbe",
    "StaticConnectivityProbe",
    # Token Store
    "Credentials",
    "TokenStore",
    # Refresh
    "TokenRefreshCoordinator",
    # Executor
    "RequestExecutor",
    "RequestResult",
]
