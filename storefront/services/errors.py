"""
Service layer exceptions.
"""


class ServiceError(Exception):
    """Base exception for API access layer errors."""

    def __init__(
        self,
        message: str,
        endpoint: str | None = None,
        status_code: int | None = None,
    ):
        self.endpoint = endpoint
        self.status_code = status_code
        super().__init__(message)


class ConnectivityError(ServiceError):
    """No network reachability, or the connection could not be established."""

    def __init__(self, endpoint: str | None = None, message: str | None = None):
        super().__init__(message or "No internet connection", endpoint=endpoint)


class RequestTimeoutError(ServiceError):
    """Request timed out."""

    def __init__(self, endpoint: str, timeout: float):
        self.timeout = timeout
        super().__init__(
            f"Request to '{endpoint}' timed out after {timeout}s",
            endpoint=endpoint,
        )


class AuthenticationError(ServiceError):
    """Credentials rejected and could not be refreshed."""

    def __init__(
        self,
        message: str = "Authentication required",
        endpoint: str | None = None,
        status_code: int | None = 401,
    ):
        super().__init__(message, endpoint=endpoint, status_code=status_code)


class ServerError(ServiceError):
    """Backend answered with a 5xx status after all retries."""

    pass


class ClientError(ServiceError):
    """Backend rejected the request with a 4xx status."""

    pass


class ResponseValidationError(ServiceError):
    """Response body could not be decoded as JSON."""

    pass
