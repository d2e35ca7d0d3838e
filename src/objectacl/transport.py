"""Transport collaborators for dispatching assembled requests.

The client only depends on the ``Transport`` protocol. ``HttpxTransport`` is
the stock implementation over ``httpx.AsyncClient``; it neither signs nor
retries requests, and its exceptions propagate unchanged.
"""

import logging
import urllib.parse
from collections.abc import Mapping
from typing import Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)


@runtime_checkable
class TransportResponse(Protocol):
    """What the client reads from a transport result."""

    status_code: int
    headers: Mapping[str, str]
    content: bytes


@runtime_checkable
class Transport(Protocol):
    """Sends one HTTP request and returns the response."""

    async def send_request(
        self,
        method: str,
        host: str,
        path: str,
        query: Mapping[str, str | None],
        headers: Mapping[str, str],
        body: bytes,
    ) -> TransportResponse: ...


def encode_query(query: Mapping[str, str | None]) -> str:
    """Render query parameters, writing value-less keys bare (``acl``).

    Keys keep their insertion order.
    """
    parts = []
    for key, value in query.items():
        name = urllib.parse.quote(key, safe="")
        if value is None:
            parts.append(name)
        else:
            parts.append(f"{name}={urllib.parse.quote(value, safe='')}")
    return "&".join(parts)


class HttpxTransport:
    """Transport backed by an ``httpx.AsyncClient``.

    Attributes:
        scheme: URL scheme, ``https`` or ``http``.
        port: Optional port appended to the request host.
    """

    def __init__(
        self,
        scheme: str = "https",
        port: int | None = None,
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.scheme = scheme
        self.port = port
        self._owns_client = client is None
        self._client = client if client is not None else httpx.AsyncClient(timeout=timeout)

    def build_url(self, host: str, path: str, query: Mapping[str, str | None]) -> str:
        netloc = f"{host}:{self.port}" if self.port else host
        url = f"{self.scheme}://{netloc}{path}"
        qs = encode_query(query)
        if qs:
            url = f"{url}?{qs}"
        return url

    async def send_request(
        self,
        method: str,
        host: str,
        path: str,
        query: Mapping[str, str | None],
        headers: Mapping[str, str],
        body: bytes,
    ) -> httpx.Response:
        url = self.build_url(host, path, query)
        logger.debug("%s %s (%d bytes)", method, url, len(body))
        return await self._client.request(
            method,
            url,
            headers=dict(headers),
            content=body,
        )

    async def aclose(self) -> None:
        """Close the underlying client if this transport created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpxTransport":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()
