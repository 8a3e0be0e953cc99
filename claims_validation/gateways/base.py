"""
Base Gateway for collaborator REST services.

Provides the shared plumbing used by the Claims Data, Provider Details and
Fee Scheme gateways:
- Lazily created httpx.AsyncClient guarded by an asyncio lock
- HTTP status to exception mapping
- Retry decorator with exponential backoff
"""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass
from functools import wraps
from typing import Any, Callable, Optional

import httpx

from claims_validation.utils.logging import get_logger

logger = get_logger(__name__)


class GatewayError(Exception):
    """Base exception for gateway errors."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        status_code: Optional[int] = None,
        original_error: Optional[Exception] = None,
    ):
        super().__init__(message)
        self.service = service
        self.status_code = status_code
        self.original_error = original_error


class ServiceUnavailableError(GatewayError):
    """Raised when a service cannot be reached or answers with a transient failure."""

    pass


class ServiceTimeoutError(GatewayError):
    """Raised when a service request times out."""

    pass


class ResourceNotFoundError(GatewayError):
    """Raised when the requested resource does not exist."""

    pass


class BadRequestError(GatewayError):
    """Raised when a service rejects the request."""

    pass


# Failures worth another attempt
TRANSIENT_ERRORS: tuple[type[GatewayError], ...] = (
    ServiceUnavailableError,
    ServiceTimeoutError,
)


@dataclass
class GatewayConfig:
    """Configuration for a gateway instance."""

    base_url: str
    timeout_seconds: float = 30.0
    access_token: Optional[str] = None
    retry_attempts: int = 3
    retry_delay_seconds: float = 0.5
    retry_backoff_factor: float = 2.0


def with_retry(
    max_attempts: int = 3,
    delay: float = 1.0,
    backoff_factor: float = 2.0,
    exceptions: tuple = (Exception,),
):
    """Decorator for retry logic with exponential backoff."""

    def decorator(func: Callable):
        @wraps(func)
        async def wrapper(*args, **kwargs):
            last_exception = None
            current_delay = delay

            for attempt in range(max_attempts):
                try:
                    return await func(*args, **kwargs)
                except exceptions as e:
                    last_exception = e
                    if attempt < max_attempts - 1:
                        logger.warning(
                            f"Attempt {attempt + 1}/{max_attempts} failed: {e}. "
                            f"Retrying in {current_delay:.1f}s..."
                        )
                        await asyncio.sleep(current_delay)
                        current_delay *= backoff_factor
                    else:
                        logger.error(
                            f"All {max_attempts} attempts failed. Last error: {e}"
                        )

            raise last_exception

        return wrapper

    return decorator


class BaseGateway(ABC):
    """
    Abstract base class for collaborator REST gateways.

    Subclasses call ``_request`` and receive either the httpx response
    (2xx) or a GatewayError subclass describing the failure.
    """

    def __init__(
        self,
        config: GatewayConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self._transport = transport
        self._client: Optional[httpx.AsyncClient] = None
        self._lock = asyncio.Lock()

    @property
    @abstractmethod
    def gateway_name(self) -> str:
        """Name of this gateway for logging."""
        pass

    def _default_headers(self) -> dict[str, str]:
        headers = {"Accept": "application/json"}
        if self.config.access_token:
            headers["Authorization"] = f"Bearer {self.config.access_token}"
        return headers

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the shared HTTP client."""
        if self._client is not None:
            return self._client
        async with self._lock:
            if self._client is None:
                self._client = httpx.AsyncClient(
                    base_url=self.config.base_url,
                    timeout=self.config.timeout_seconds,
                    headers=self._default_headers(),
                    transport=self._transport,
                )
                logger.info(f"{self.gateway_name} gateway initialized: {self.config.base_url}")
        return self._client

    async def _send(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """Send a request, translating transport failures into gateway errors."""
        client = await self._get_client()
        try:
            return await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise ServiceTimeoutError(
                f"{self.gateway_name}: {method} {path} timed out",
                service=self.gateway_name,
                original_error=e,
            ) from e
        except httpx.TransportError as e:
            raise ServiceUnavailableError(
                f"{self.gateway_name}: {method} {path} failed: {e}",
                service=self.gateway_name,
                original_error=e,
            ) from e

    async def _request(
        self,
        method: str,
        path: str,
        params: Optional[dict[str, Any]] = None,
        json: Optional[Any] = None,
    ) -> httpx.Response:
        """Send a request and raise for any non-2xx status."""
        response = await self._send(method, path, params=params, json=json)
        self._raise_for_status(method, path, response)
        return response

    def _raise_for_status(self, method: str, path: str, response: httpx.Response) -> None:
        status_code = response.status_code
        if 200 <= status_code < 300:
            return

        message = f"{self.gateway_name}: {method} {path} returned {status_code}"
        # 409 is returned while the upstream cache is loading
        if status_code >= 500 or status_code in (409, 429):
            raise ServiceUnavailableError(message, self.gateway_name, status_code)
        if status_code == 404:
            raise ResourceNotFoundError(message, self.gateway_name, status_code)
        raise BadRequestError(message, self.gateway_name, status_code)

    async def close(self) -> None:
        """Clean up gateway resources."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None
        logger.info(f"{self.gateway_name} gateway closed")

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.close()
