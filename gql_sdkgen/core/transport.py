"""Transports that deliver a GraphQL request body and return the raw reply.

A transport performs exactly one POST of a JSON body to a URL. The crawler
and the generated SDK both talk to the server through this protocol, so tests
and callers can swap in their own implementation.

Example:
    settings = TransportSettings(headers=bearer_headers(token), rate_limit=1.0)
    transport = HttpTransport(timeout=60.0)
    body = await transport.post(url, '{"query": "{ __typename }"}', settings.headers)
"""

import base64
from dataclasses import dataclass, field
from typing import Dict, Mapping, Protocol, runtime_checkable

import httpx

from .errors import TransportError

USER_AGENT = "gql-sdkgen"
DEFAULT_MAX_PARALLEL_REQUESTS = 8


@runtime_checkable
class Transport(Protocol):
    """Protocol for request transports.

    Example:
        class RecordingTransport:
            def __init__(self):
                self.bodies = []

            async def post(self, url, body, headers):
                self.bodies.append(body)
                return '{"data": {}}'
    """

    async def post(self, url: str, body: str, headers: Mapping[str, str]) -> str:
        """Send ``body`` to ``url`` and return the response body.

        Raises:
            TransportError: If the request could not be delivered
        """
        ...


@dataclass
class TransportSettings:
    """Caller-supplied request configuration.

    Attributes:
        headers: Extra HTTP headers for every request (e.g. authorization)
        rate_limit: Seconds to wait between crawl waves (0 disables throttling)
        max_parallel_requests: Upper bound on concurrent introspection requests
    """
    headers: Dict[str, str] = field(default_factory=dict)
    rate_limit: float = 0.0
    max_parallel_requests: int = DEFAULT_MAX_PARALLEL_REQUESTS

    def __post_init__(self):
        if self.max_parallel_requests < 1:
            raise ValueError("max_parallel_requests must be at least 1")
        if self.rate_limit < 0:
            raise ValueError("rate_limit must not be negative")


def bearer_headers(token: str) -> Dict[str, str]:
    """Headers for bearer token authentication."""
    return {"Authorization": f"Bearer {token}"}


def basic_auth_headers(username: str, password: str) -> Dict[str, str]:
    """Headers for HTTP basic authentication."""
    credentials = base64.b64encode(f"{username}:{password}".encode()).decode()
    return {"Authorization": f"Basic {credentials}"}


class HttpTransport:
    """Transport over HTTP using a shared ``httpx.AsyncClient``.

    The response body is returned whatever the status code; GraphQL servers
    often report failures as JSON ``errors`` with a 4xx status, and the
    caller decides what a body means.
    """

    def __init__(self, timeout: float = 30.0, client: httpx.AsyncClient | None = None):
        self.timeout = timeout
        self._client = client
        self._owns_client = client is None

    async def _get_client(self) -> httpx.AsyncClient:
        """Get or create the HTTP client."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                timeout=self.timeout,
                headers={"User-Agent": USER_AGENT},
            )
        return self._client

    async def post(self, url: str, body: str, headers: Mapping[str, str]) -> str:
        client = await self._get_client()
        request_headers = {"Content-Type": "application/json; charset=utf-8"}
        request_headers.update(headers)
        try:
            response = await client.post(url, content=body.encode("utf-8"), headers=request_headers)
        except httpx.HTTPError as e:
            raise TransportError(f"Request to {url} failed: {e}", url=url) from e
        return response.text

    async def close(self):
        """Close the HTTP client if this transport created it."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()
